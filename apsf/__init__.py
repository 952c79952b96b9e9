"""
APSF: closed-form surrogate for Monte-Carlo atmospheric point spread functions.

Fits an exponential decomposition to the cumulative annular PSF of a
simulation set (optionally pressure dependent) and evaluates the fitted
model as cumulative field, areal density, or PSF per annulus.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from apsf.errors import (
    ApsfError,
    ConfigurationError,
    MissingParameterError,
    UnsupportedKindError,
    UnsupportedGeometryError,
)
from apsf.histogram import Histogram
from apsf.model import FittedModel
from apsf.fit import fit_annular
from apsf.predict import predict_annular, predict_annular_traced, register_geometry

__version__ = "0.1.0"
