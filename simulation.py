"""
simulation.py

Closed simulation/estimation loop. The SimulationStepper moves the true agent
and samples a noisy measurement, and step() feeds that measurement to the
belief filter. The driver holds a single SimulationState and replaces it
after every step.
"""

from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Sequence, Tuple
import numpy as np

from environment import LABELS, Environment, EnvironmentGenerator
from histogram_filter import BeliefFilter

GRID_SIZE = 16
DEFAULT_DENSITY = 92
DEFAULT_MOVEMENT_CERTAINTY = 0.9
DEFAULT_SENSOR_ACCURACY = 0.9

# matplotlib key names -> (dx, dy), y grows downwards
MOTIONS = {
    "left": (-1, 0),
    "up": (0, -1),
    "right": (1, 0),
    "down": (0, 1),
}


def move_position(position: Tuple[int, int], motion: Tuple[int, int], width: int, height: int) -> Tuple[int, int]:
    """Add motion to position and wrap the result back onto the grid."""
    return ((position[0] + motion[0]) % width, (position[1] + motion[1]) % height)


class StepOutcome(NamedTuple):
    position: Tuple[int, int]
    measurement: int
    correct: bool


class SimulationStepper:
    """Advances the true agent and simulates its sensor.

    Motion success and sensor correctness are two independent draws from
    rng.random() per step.
    """
    def __init__(self, rng: Optional[np.random.Generator] = None, labels: Sequence[int] = LABELS):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.labels = tuple(labels)

    def step(self,
             position: Tuple[int, int],
             environment: Environment,
             motion: Tuple[int, int],
             movement_certainty: float,
             sensor_accuracy: float) -> StepOutcome:
        """
        Move the agent and take one reading at the place it ends up.

        Args:
            position: true (x, y) position before the step
            environment: ground-truth label grid
            motion: commanded (dx, dy)
            movement_certainty: probability that the motion is carried out
            sensor_accuracy: probability that the reading is the true label

        Returns:
            StepOutcome: (new position, measurement, whether it was correct)
        """
        if self.rng.random() < movement_certainty:
            position = move_position(position, motion, environment.width, environment.height)
        else:
            position = (position[0] % environment.width, position[1] % environment.height)

        true_label = environment.get(*position)
        if self.rng.random() < sensor_accuracy:
            return StepOutcome(position, int(true_label), True)
        return StepOutcome(position, self._other_label(true_label), False)

    def _other_label(self, label) -> int:
        others = [other for other in self.labels if other != label]
        if not others:
            raise ValueError(f"No label other than {label} to report")
        if len(others) == 1:
            return others[0]
        # uniform over the remaining labels
        return others[min(int(self.rng.random() * len(others)), len(others) - 1)]


@dataclass(frozen=True)
class SimulationConfig:
    """Runtime parameters of the simulation."""
    width: int = GRID_SIZE
    height: int = GRID_SIZE
    density: int = DEFAULT_DENSITY
    movement_certainty: float = DEFAULT_MOVEMENT_CERTAINTY
    sensor_accuracy: float = DEFAULT_SENSOR_ACCURACY

    def position_count(self) -> int:
        return self.width * self.height

    def validate(self) -> "SimulationConfig":
        """Raise ValueError if any parameter is out of range, else return self."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.width}x{self.height}")
        for name in ("movement_certainty", "sensor_accuracy"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not 0 <= self.density <= self.position_count():
            raise ValueError(f"density must be in [0, {self.position_count()}], got {self.density}")
        return self

    def with_density(self, density: int) -> "SimulationConfig":
        return replace(self, density=density).validate()


class FilterDiverged(ZeroDivisionError):
    """The belief lost all its mass during a step."""
    def __init__(self, message: str, outcome: StepOutcome):
        super().__init__(message)
        self.outcome = outcome


class SimulationState(NamedTuple):
    environment: Environment
    belief: BeliefFilter
    position: Tuple[int, int]
    correct_measurement: bool = True


def initial_state(config: SimulationConfig,
                  generator: EnvironmentGenerator,
                  rng: Optional[np.random.Generator] = None) -> SimulationState:
    """Fresh environment, uniform belief and a uniformly random true position."""
    config.validate()
    rng = rng if rng is not None else np.random.default_rng()
    environment = generator.generate(None, config.density)
    position = (int(rng.integers(config.width)), int(rng.integers(config.height)))
    return SimulationState(environment, BeliefFilter.uniform(config.width, config.height), position)


def step(state: SimulationState,
         motion: Tuple[int, int],
         config: SimulationConfig,
         stepper: SimulationStepper) -> SimulationState:
    """
    Run one full simulation and filter pass for a commanded motion.

    Raises:
        FilterDiverged: if the belief loses all its mass. The true agent has
            still moved, the error carries the StepOutcome.
    """
    outcome = stepper.step(state.position, state.environment, motion,
                           config.movement_certainty, config.sensor_accuracy)
    try:
        belief = state.belief.update(motion, outcome.measurement, state.environment,
                                     config.movement_certainty, config.sensor_accuracy)
    except ZeroDivisionError as e:
        raise FilterDiverged(str(e), outcome) from e
    return SimulationState(state.environment, belief, outcome.position, outcome.correct)


def recover(state: SimulationState, error: FilterDiverged, config: SimulationConfig) -> SimulationState:
    """State after a diverged step: the agent keeps its new position, the belief restarts uniform."""
    return SimulationState(state.environment, BeliefFilter.uniform(config.width, config.height),
                           error.outcome.position, error.outcome.correct)


def regenerate(state: SimulationState, config: SimulationConfig, generator: EnvironmentGenerator) -> SimulationState:
    """Relabel the environment for config.density, keeping its rankings."""
    environment = generator.generate(state.environment, config.density)
    return state._replace(environment=environment)
