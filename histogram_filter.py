"""
histogram_filter.py

Discrete Bayes filter over the cells of a toroidal grid. Every operation
returns a new filter and leaves the receiver untouched.
"""

from typing import Tuple
import numpy as np

from toroidal_grid import ToroidalGrid


class BeliefFilter:
    """Belief over the agent position, one probability per grid cell."""
    def __init__(self, belief: ToroidalGrid):
        self.belief = belief

    @classmethod
    def uniform(cls, width: int, height: int) -> "BeliefFilter":
        """Filter with the same probability 1 / (width * height) in every cell."""
        return cls(ToroidalGrid(width, height, 1.0 / (width * height)))

    @property
    def width(self) -> int:
        return self.belief.width

    @property
    def height(self) -> int:
        return self.belief.height

    def motion_update(self, motion: Tuple[int, int], certainty: float) -> "BeliefFilter":
        """
        Account for a commanded motion that succeeds with probability certainty.

        The agent either moved exactly by motion or stayed where it was, so
        new(x, y) = certainty * old(x - dx, y - dy) + (1 - certainty) * old(x, y).
        Total mass is preserved.

        Args:
            motion: (dx, dy) integer displacement
            certainty: probability that the motion succeeded, in [0, 1]

        Returns:
            BeliefFilter: the predicted belief
        """
        dx, dy = motion
        moved = self.belief.shifted(dx, dy).to_array()
        stayed = self.belief.to_array()
        return BeliefFilter(ToroidalGrid.from_array(certainty * moved + (1 - certainty) * stayed))

    def sensor_update(self, measurement: int, environment: ToroidalGrid, accuracy: float) -> "BeliefFilter":
        """
        Weight every cell by the likelihood of measurement being read there.

        Cells whose label equals measurement are multiplied by accuracy, the
        others by 1 - accuracy. The result is not normalized.

        Args:
            measurement: label reported by the sensor
            environment: ground-truth label grid, same dimensions as the belief
            accuracy: probability that the sensor reports the true label

        Returns:
            BeliefFilter: the un-normalized posterior
        """
        matches = environment.to_array() == measurement
        likelihood = np.where(matches, accuracy, 1 - accuracy)
        return BeliefFilter(ToroidalGrid.from_array(self.belief.to_array() * likelihood))

    def normalize(self, total: float = 1.0) -> "BeliefFilter":
        return BeliefFilter(self.belief.normalize(total))

    def update(self,
               motion: Tuple[int, int],
               measurement: int,
               environment: ToroidalGrid,
               movement_certainty: float,
               sensor_accuracy: float) -> "BeliefFilter":
        """Run one full predict/correct cycle: motion, sensor, normalize."""
        predicted = self.motion_update(motion, movement_certainty)
        return predicted.sensor_update(measurement, environment, sensor_accuracy).normalize(1.0)

    def probability_at(self, x: int, y: int) -> float:
        return float(self.belief.get(x, y))

    def most_likely_position(self) -> Tuple[int, int]:
        """(x, y) of the most probable cell, the first one in row-major order on ties."""
        index = int(np.argmax(self.belief.to_array()))
        return index % self.width, index // self.width

    def total(self) -> float:
        return self.belief.total()

    def __repr__(self) -> str:
        return f"BeliefFilter(width={self.width}, height={self.height}, total={self.total():.4f})"
