"""
toroidal_grid.py

Fixed-size 2D container whose edges wrap around. Every coordinate is reduced
with a true modulo before access, so indexing never fails for any integer.
"""

from numbers import Number
from typing import Any, Callable, Iterator, Tuple
import numpy as np


class ToroidalGrid:
    """A width x height grid with wraparound indexing.

    Cells are stored in a numpy array of shape (height, width). The row-major
    index of (x, y) is y * width + x. x wraps by width and y wraps by height.

    Attributes:
        width: number of columns
        height: number of rows
    """
    def __init__(self, width: int, height: int, initial_value: Any = 0.0, dtype=None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._cells = np.full((self.height, self.width), initial_value, dtype=dtype)

    @classmethod
    def from_array(cls, array) -> "ToroidalGrid":
        """Build a grid from a 2D array of shape (height, width). The data is copied."""
        array = np.array(array, copy=True)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2D array, got shape {array.shape}")
        grid = ToroidalGrid(array.shape[1], array.shape[0], dtype=array.dtype)
        grid._cells[...] = array
        return grid

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    def position_count(self) -> int:
        return self.width * self.height

    def index_of(self, x: int, y: int) -> int:
        """Row-major index of the wrapped coordinate (x, y)."""
        return (y % self.height) * self.width + (x % self.width)

    def get(self, x: int, y: int):
        return self._cells[y % self.height, x % self.width]

    def set(self, x: int, y: int, value) -> "ToroidalGrid":
        self._cells[y % self.height, x % self.width] = value
        return self

    def clone(self) -> "ToroidalGrid":
        return ToroidalGrid.from_array(self._cells)

    def map(self, func: Callable[[Any], Any]) -> "ToroidalGrid":
        """
        Apply func to every cell and return the results as a new grid.

        Args:
            func: element-wise transform, called once per cell in row-major order
                (callers must not rely on the order)

        Returns:
            ToroidalGrid of the same dimensions holding func(cell) values
        """
        values = [func(value) for value in self._cells.ravel().tolist()]
        if all(isinstance(value, (Number, np.number)) for value in values):
            mapped = np.array(values)
        else:
            # anything else stays an opaque object, one per cell
            mapped = np.empty(self.position_count(), dtype=object)
            for i, value in enumerate(values):
                mapped[i] = value
        return ToroidalGrid.from_array(mapped.reshape(self.shape))

    def total(self) -> float:
        return float(self._cells.sum())

    def normalize(self, total: float = 1.0) -> "ToroidalGrid":
        """
        Rescale the cells so that they sum to total.

        Args:
            total: target sum of all cells

        Returns:
            ToroidalGrid of floats summing to total

        Raises:
            ZeroDivisionError: if the cells sum to zero
        """
        mass = self.total()
        if mass == 0:
            raise ZeroDivisionError("Cannot normalize a grid with zero total mass")
        divisor = mass / total
        return ToroidalGrid.from_array(self._cells / divisor)

    def shifted(self, dx: int, dy: int) -> "ToroidalGrid":
        """Translate the grid so that new(x, y) == old(x - dx, y - dy)."""
        return ToroidalGrid.from_array(np.roll(self._cells, shift=(dy, dx), axis=(0, 1)))

    def to_array(self) -> np.ndarray:
        """Copy of the cells as a (height, width) array."""
        return self._cells.copy()

    def cells(self) -> Iterator[Tuple[int, int, Any]]:
        """Yield (x, y, value) for every cell in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self._cells[y, x]

    def __len__(self) -> int:
        return self.position_count()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ToroidalGrid):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._cells, other._cells))

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(width={self.width}, height={self.height})"
