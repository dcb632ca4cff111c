"""
environment.py

Ground-truth terrain for the localization simulation. Every cell carries one of
two labels. Which label a cell gets is decided by a random ranking of the cells
that is drawn once and then reused, so changing the density only moves the
boundary between the two label populations.
"""

from typing import Optional
import numpy as np

from toroidal_grid import ToroidalGrid

# Label 0 is given to the lowest ranked cells, label 1 to the rest
LABELS = (0, 1)


class Environment(ToroidalGrid):
    """Label grid with the rank permutation it was derived from.

    Attributes:
        rankings: read-only int array, rankings[i] is the rank of the cell with
            row-major index i
        density: number of cells labelled LABELS[0]
    """
    def __init__(self, width: int, height: int, rankings: np.ndarray, density: int):
        super().__init__(width, height, LABELS[1], dtype=int)
        rankings = np.array(rankings, dtype=int, copy=True)
        if rankings.shape != (self.position_count(),):
            raise ValueError(f"Expected {self.position_count()} rankings, got {rankings.shape}")
        rankings.flags.writeable = False
        self.rankings = rankings
        self.density = density
        labels = np.where(rankings < density, LABELS[0], LABELS[1])
        self._cells[...] = labels.reshape(self.shape)

    def rank(self, x: int, y: int) -> int:
        return int(self.rankings[self.index_of(x, y)])

    def label(self, x: int, y: int) -> int:
        return int(self.get(x, y))

    def clone(self) -> "Environment":
        copy = Environment(self.width, self.height, self.rankings, self.density)
        copy._cells[...] = self._cells
        return copy

    def __repr__(self) -> str:
        return f"Environment(width={self.width}, height={self.height}, density={self.density})"


class EnvironmentGenerator:
    """Builds environments from a density threshold.

    The generator only draws randomness when no previous environment is
    available, so regenerating from a previous environment is deterministic.
    """
    def __init__(self, width: int, height: int, rng: Optional[np.random.Generator] = None):
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else np.random.default_rng()

    def generate(self, previous: Optional[ToroidalGrid] = None, density: int = 0) -> Environment:
        """
        Label every cell from the rank permutation and the density threshold.

        Args:
            previous: environment to derive from. Its rankings are reused verbatim
                when it has them, otherwise a fresh permutation is drawn.
            density: cells with rank < density get LABELS[0], the rest LABELS[1]

        Returns:
            Environment: a new environment, previous is left untouched
        """
        if previous is not None:
            width, height = previous.width, previous.height
        else:
            width, height = self.width, self.height

        rankings = getattr(previous, "rankings", None)
        if rankings is None:
            rankings = self.rng.permutation(width * height)
        return Environment(width, height, rankings, density)
