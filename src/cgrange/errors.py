"""Provides exception types raised by the package."""


class ConfigurationError(ValueError):
    """Raised when the interaction model cannot be sampled as configured.

    Examples are unknown class subtypes, missing parameter files, or asking for
    dihedrals in a system that is not 3 dimensional. These are detected before
    any output file is written and are not recovered from.
    """
