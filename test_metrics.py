import pytest
import numpy as np

import main
from histogram_filter import BeliefFilter
from metrics import Metrics
from simulation import SimulationConfig
from toroidal_grid import ToroidalGrid

@pytest.fixture
def metrics():
    return Metrics(8, 8)

def test_empty_metrics(metrics):
    assert metrics.score() == 0.0
    assert metrics.mean_error() == 0.0
    assert metrics.hit_rate() == 0.0

@pytest.mark.parametrize("a,b,expected", [
    ((0, 0), (0, 0), 0),
    ((0, 0), (7, 0), 1),
    ((1, 1), (6, 5), 7),
    ((2, 0), (2, 4), 4),
])
def test_toroidal_distance(metrics, a, b, expected):
    assert metrics._toroidal_distance(a, b) == expected

def test_record(metrics):
    belief = BeliefFilter(ToroidalGrid(8, 8, 0.0).set(7, 7, 0.75).set(0, 0, 0.25))
    entry = metrics.record(belief, (0, 0))
    assert entry['estimate'] == (7, 7)
    assert entry['probability'] == pytest.approx(0.25)
    assert entry['error'] == 2
    metrics.record(belief, (7, 7))
    assert metrics.score() == pytest.approx(0.5)
    assert metrics.mean_error() == pytest.approx(1.0)
    assert metrics.hit_rate() == pytest.approx(0.5)

def test_headless_run_localizes():
    config = SimulationConfig(width=8, height=8, density=24, movement_certainty=0.95, sensor_accuracy=0.95)
    metrics = main.run_headless(config, np.random.default_rng(4), 60)
    assert len(metrics.records) == 60
    # a uniform belief would put 1/64 on the true cell
    assert metrics.score() > 1.0 / 64
