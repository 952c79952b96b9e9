"""
Exception taxonomy for the APSF engine.

All errors derive from ValueError so that the HTTP layer maps them to
400 responses the same way it maps plain validation errors.
"""


class ApsfError(ValueError):
    """Base class for fatal APSF fit and prediction errors."""


class ConfigurationError(ApsfError):
    """Simulation set cannot be fitted together (e.g. differing geometry)."""


class MissingParameterError(ApsfError):
    """A parameter required by the fitted model was not supplied."""


class UnsupportedKindError(ApsfError):
    """Requested prediction kind is not cumulative, density or psf."""


class UnsupportedGeometryError(ApsfError):
    """Fitted model is tagged with a geometry that has no registered evaluator."""
