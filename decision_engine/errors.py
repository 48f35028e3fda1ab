"""Exception types raised by the decision engine."""


class ConfigurationError(ValueError):
    """The engine was invoked with inputs it cannot analyze (e.g. no options)."""


class DocumentError(ValueError):
    """A persisted decision document failed schema validation."""
