"""
Pytest fixtures for the APSF test suite.
"""

import numpy as np
import pytest
from app import create_app

from apsf.histogram import Histogram
from apsf.model import FittedModel


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


def _metadata(**overrides):
    """Run metadata shared by the synthetic histograms."""
    meta = {
        "press": 1013.25,
        "res": 1.0,
        "ext": 0.1,
        "snsznt": 0.0,
        "snsfov": 0.0,
        "snspos": [0.0, 0.0, 1.0],
    }
    meta.update(overrides)
    return meta


@pytest.fixture
def make_metadata():
    """Factory for run metadata with selected keys overridden."""
    return _metadata


@pytest.fixture
def uniform_histogram():
    """10 uniform bins of weight 0.1 over radii 0..10."""
    brks = np.arange(0.0, 11.0)
    return Histogram(brks, brks[:-1] + 0.5, np.full(10, 0.1), _metadata())


@pytest.fixture
def decay_model():
    """A physically valid model: positive amplitudes, negative rates."""
    return FittedModel(
        coefficients={"c1": 1.0, "c2": 0.3, "c3": -1.5, "c4": 0.6,
                      "c5": -0.4, "c6": -0.05},
        mare=0.0, rmse=0.0, mare_seq=[0.0], convergence=0,
    )


@pytest.fixture
def pressure_model():
    """A pressure-dependent model fitted between 700 and 1013.25 mbar."""
    return FittedModel(
        coefficients={"c1": 1.0, "c2": 0.4, "c3": -1.4, "c4": 0.7,
                      "c5": -0.3, "c6": -0.05},
        mare=0.0, rmse=0.0, mare_seq=[0.0], convergence=0,
        press_dep=True, press_rng=(700.0, 1013.25),
    )
