"""
Exception types raised across the library.

- ConfigurationError: malformed static data detected while building an
  object (conventions, curves, parametrizations, SIMM tables). Raised at
  construction time, the offending object is never created.
- UnsupportedFeatureError: a pricing request the engine cannot handle.
  Raised at calculate time, no partial results are returned.

Both derive from ValueError so callers catching argument errors keep
working.
"""


class ConfigurationError(ValueError):
    """Invalid or inconsistent configuration data."""


class UnsupportedFeatureError(ValueError):
    """Requested feature is not supported by the engine."""


__all__ = [
    "ConfigurationError",
    "UnsupportedFeatureError",
]
