"""Resolution errors."""


class CobResolveError(ValueError):
    """A constant or scene macro could not be resolved."""
