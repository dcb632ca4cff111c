import pytest
import numpy as np

from toroidal_grid import ToroidalGrid

@pytest.fixture
def grid():
    # 4 wide, 3 high, values are the row-major index
    return ToroidalGrid.from_array(np.arange(12, dtype=float).reshape(3, 4))

@pytest.mark.parametrize("width,height", [(0, 4), (4, 0), (-1, 3)])
def test_rejects_non_positive_dimensions(width, height):
    with pytest.raises(ValueError):
        ToroidalGrid(width, height)

def test_uniform_fill():
    g = ToroidalGrid(5, 2, 0.1)
    assert g.position_count() == 10
    assert len(g) == 10
    assert g.shape == (2, 5)
    assert np.allclose(g.to_array(), 0.1)

@pytest.mark.parametrize("k", [-3, -1, 0, 1, 7])
def test_wrap_x_by_width(grid, k):
    for x in range(grid.width):
        for y in range(grid.height):
            assert grid.get(x + k * grid.width, y) == grid.get(x, y)

@pytest.mark.parametrize("k", [-3, -1, 0, 1, 7])
def test_wrap_y_by_height(grid, k):
    for x in range(grid.width):
        for y in range(grid.height):
            assert grid.get(x, y + k * grid.height) == grid.get(x, y)

def test_row_major_layout(grid):
    assert grid.get(1, 0) == 1
    assert grid.get(0, 1) == 4
    assert grid.get(-1, -1) == 11
    assert grid.index_of(-1, 1) == 7

def test_set_wraps_and_returns_self(grid):
    assert grid.set(-1, 3, 42.0) is grid
    assert grid.get(3, 0) == 42.0

def test_clone_is_independent(grid):
    copy = grid.clone()
    assert copy == grid
    copy.set(0, 0, -5.0)
    assert grid.get(0, 0) == 0.0
    assert copy != grid

def test_map_returns_new_grid(grid):
    doubled = grid.map(lambda v: v * 2)
    assert doubled is not grid
    assert doubled.get(3, 2) == 22
    assert grid.get(3, 2) == 11

def test_map_can_change_type(grid):
    labels = grid.map(lambda v: 'even' if v % 2 == 0 else 'odd')
    assert labels.get(0, 0) == 'even'
    assert labels.get(1, 0) == 'odd'

def test_map_keeps_sequences_as_cells():
    g = ToroidalGrid(2, 2, 1)
    pairs = g.map(lambda v: (v, v))
    assert pairs.shape == (2, 2)
    assert pairs.get(1, 1) == (1, 1)

def test_normalize(grid):
    normalized = grid.normalize(1.0)
    assert normalized.total() == pytest.approx(1.0)
    assert np.all(normalized.to_array() >= 0)
    assert np.allclose(normalized.normalize(1.0).to_array(), normalized.to_array())

def test_normalize_to_other_total(grid):
    assert grid.normalize(3.0).total() == pytest.approx(3.0)

def test_normalize_zero_mass_fails():
    with pytest.raises(ZeroDivisionError):
        ToroidalGrid(3, 3, 0.0).normalize(1.0)

def test_shifted_translates_with_wrap(grid):
    moved = grid.shifted(1, 0)
    for x in range(grid.width):
        for y in range(grid.height):
            assert moved.get(x, y) == grid.get(x - 1, y)
    moved = grid.shifted(0, -2)
    for x in range(grid.width):
        for y in range(grid.height):
            assert moved.get(x, y) == grid.get(x, y + 2)

def test_cells_iterates_row_major(grid):
    cells = list(grid.cells())
    assert cells[0] == (0, 0, 0.0)
    assert cells[5] == (1, 1, 5.0)
    assert len(cells) == grid.position_count()

def test_map_keeps_mixed_results_as_they_are():
    g = ToroidalGrid(2, 1, 0.0).set(1, 0, 1.5)
    mixed = g.map(lambda v: 'zero' if v == 0 else v)
    assert mixed.get(0, 0) == 'zero'
    assert mixed.get(1, 0) == 1.5
    assert isinstance(mixed.get(1, 0), float)

def test_map_accepts_sequences_of_different_lengths():
    g = ToroidalGrid.from_array([[1, 2]])
    ranges = g.map(lambda v: tuple(range(v)))
    assert ranges.get(0, 0) == (0,)
    assert ranges.get(1, 0) == (0, 1)

def test_map_numeric_results_stay_numeric(grid):
    halves = grid.map(lambda v: v / 2)
    assert halves.to_array().dtype.kind == 'f'
    assert halves.total() == pytest.approx(grid.total() / 2)
