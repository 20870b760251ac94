"""Agent-level exceptions."""


class ConfigurationError(ValueError):
    """Invalid instruction or configuration, detected before any model call."""


class UnknownActionError(LookupError):
    """The model asked for an action outside the tool catalogue."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class InvalidArgumentsError(ValueError):
    """Arguments of a known action are undecodable or violate its advertised schema."""

    def __init__(self, name: str, details: str) -> None:
        super().__init__(f"invalid arguments for {name}: {details}")
        self.name = name
        self.details = details
