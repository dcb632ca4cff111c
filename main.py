#!/usr/bin/env python3
"""
Histogram localization visualizer entrypoint.

Run this file to open a small interactive window that:
- draws the environment (two terrain labels) with the true agent position,
  black when the last measurement was correct and red when it was not,
- draws the filter belief, one colour per cell,
- moves the agent with the arrow keys, press 'q' to quit,
- exposes sliders for the environment density, the movement certainty and the
  sensor accuracy.

With --headless N no window is opened: the agent does a random walk of N steps
and the localization metrics are printed.
"""

import sys
import argparse
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.widgets import Slider

from environment import EnvironmentGenerator
from metrics import Metrics
from simulation import (
    DEFAULT_DENSITY,
    DEFAULT_MOVEMENT_CERTAINTY,
    DEFAULT_SENSOR_ACCURACY,
    GRID_SIZE,
    FilterDiverged,
    MOTIONS,
    SimulationConfig,
    SimulationStepper,
    initial_state,
    recover,
    regenerate,
    step,
)

LABEL_COLORS = ['#ffffaa', '#aaffaa']
MARKER_SIZE = 0.5

# --- Visualizer class -------------------------------------------------------

class Visualizer:
    def __init__(self, config, rng):
        self.config = config
        self.generator = EnvironmentGenerator(config.width, config.height, rng)
        self.stepper = SimulationStepper(rng)
        self.state = initial_state(config, self.generator, rng)

        # matplotlib setup, arrow keys are ours
        for keymap in ('keymap.back', 'keymap.forward'):
            plt.rcParams[keymap] = [k for k in plt.rcParams[keymap] if k not in MOTIONS]
        self.fig, (self.env_ax, self.belief_ax) = plt.subplots(1, 2, figsize=(10, 5.5))
        self.fig.subplots_adjust(bottom=0.25)
        for ax, title in ((self.env_ax, 'environment'), (self.belief_ax, 'belief')):
            ax.set_title(title)
            ax.set_xticks([])
            ax.set_yticks([])
        self._init_draw()
        self._init_sliders()
        # connect events
        self.fig.canvas.mpl_connect('key_press_event', self._on_key)

    def _init_draw(self):
        self.env_image = self.env_ax.imshow(self.state.environment.to_array(),
                                            cmap=ListedColormap(LABEL_COLORS), vmin=0, vmax=1)
        self.belief_image = self.belief_ax.imshow(self.state.belief.belief.to_array(),
                                                  cmap='viridis', vmin=0.0)
        self.marker = plt.Rectangle((0, 0), MARKER_SIZE, MARKER_SIZE, zorder=3)
        self.env_ax.add_patch(self.marker)

    def _init_sliders(self):
        config = self.config
        density_ax = self.fig.add_axes([0.2, 0.13, 0.6, 0.03])
        movement_ax = self.fig.add_axes([0.2, 0.08, 0.6, 0.03])
        sensor_ax = self.fig.add_axes([0.2, 0.03, 0.6, 0.03])
        self.density_slider = Slider(density_ax, 'density', 0, config.position_count(),
                                     valinit=config.density, valstep=1)
        self.movement_slider = Slider(movement_ax, 'movement %', 0, 100,
                                      valinit=config.movement_certainty * 100, valstep=1)
        self.sensor_slider = Slider(sensor_ax, 'sensor %', 0, 100,
                                    valinit=config.sensor_accuracy * 100, valstep=1)
        self.density_slider.on_changed(self._on_slider)
        self.movement_slider.on_changed(self._on_slider)
        self.sensor_slider.on_changed(self._on_slider)

    def _on_slider(self, _value):
        density = int(self.density_slider.val)
        self.config = SimulationConfig(
            width=self.config.width,
            height=self.config.height,
            density=density,
            movement_certainty=self.movement_slider.val / 100.0,
            sensor_accuracy=self.sensor_slider.val / 100.0,
        ).validate()
        if density != self.state.environment.density:
            self.state = regenerate(self.state, self.config, self.generator)
        self.update()

    def update(self):
        """Redraw everything (call after replacing self.state)."""
        self.env_image.set_data(self.state.environment.to_array())
        belief = self.state.belief.belief.to_array()
        self.belief_image.set_data(belief)
        self.belief_image.set_clim(0.0, max(belief.max(), 1e-12))
        x, y = self.state.position
        offset = (1 - MARKER_SIZE) / 2 - 0.5
        self.marker.set_xy((x + offset, y + offset))
        self.marker.set_color('black' if self.state.correct_measurement else 'red')
        self.fig.canvas.draw_idle()

    def step_simulation(self, motion):
        try:
            self.state = step(self.state, motion, self.config, self.stepper)
        except FilterDiverged as e:
            print("Filter diverged:", e)
            print("Resetting belief to uniform.")
            self.state = recover(self.state, e, self.config)

    # --- event handling -------------------------------------------------------
    def _on_key(self, event):
        motion = MOTIONS.get(event.key)
        if motion is not None:
            self.step_simulation(motion)
            self.update()
        elif event.key == 'q':
            plt.close(self.fig)

    def run(self):
        """Start visualizer main loop. Arrow keys move the agent, 'q' quits."""
        self.update()
        plt.show()

# --- Headless run -----------------------------------------------------------

def run_headless(config, rng, steps):
    """Random walk of the given number of steps. Returns the Metrics of the run."""
    generator = EnvironmentGenerator(config.width, config.height, rng)
    stepper = SimulationStepper(rng)
    state = initial_state(config, generator, rng)
    metrics = Metrics(config.width, config.height)
    motions = list(MOTIONS.values())
    for _ in range(steps):
        motion = motions[int(rng.integers(len(motions)))]
        state = step(state, motion, config, stepper)
        metrics.record(state.belief, state.position)
    return metrics

# --- Main -------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(description='Histogram Localization Visualizer')
    parser.add_argument('--size', '-s', type=int, help='Grid width and height', default=GRID_SIZE)
    parser.add_argument('--density', '-d', type=int, help='Number of cells with the first label', default=DEFAULT_DENSITY)
    parser.add_argument('--movement', '-m', type=float, help='Movement certainty in percent',
                        default=DEFAULT_MOVEMENT_CERTAINTY * 100)
    parser.add_argument('--sensor', '-e', type=float, help='Sensor accuracy in percent',
                        default=DEFAULT_SENSOR_ACCURACY * 100)
    parser.add_argument('--seed', type=int, help='Random seed', default=None)
    parser.add_argument('--headless', type=int, metavar='N', help='Run N random steps without a window', default=None)
    args = parser.parse_args()

    try:
        config = SimulationConfig(
            width=args.size,
            height=args.size,
            density=args.density,
            movement_certainty=args.movement / 100.0,
            sensor_accuracy=args.sensor / 100.0,
        ).validate()
    except ValueError as e:
        print("Invalid configuration:", e)
        sys.exit(2)

    rng = np.random.default_rng(args.seed)
    if args.headless is not None:
        metrics = run_headless(config, rng, args.headless)
        print(f"steps            : {len(metrics.records)}")
        print(f"mean p(true cell): {metrics.score():.3f}")
        print(f"mean error       : {metrics.mean_error():.2f}")
        print(f"hit rate         : {metrics.hit_rate():.2f}")
        return

    viz = Visualizer(config, rng)
    print("Visualizer controls: arrow keys=move, q=quit")
    viz.run()


if __name__ == '__main__':
    main()
