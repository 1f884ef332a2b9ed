"""Exception hierarchy for Atomica.

Only programming and configuration mistakes raise. Ordinary game outcomes
such as a blocked move or a rejected placement are returned as results.
"""


class AtomicaError(Exception):
    """Base exception for the engine."""


class ConfigurationError(AtomicaError):
    """Raised when game settings or levels violate their constraints."""


class SituationFormatError(AtomicaError):
    """Raised when a saved game situation cannot be decoded."""
