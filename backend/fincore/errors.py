"""Exceptions raised by the analytics engine."""


class EngineError(Exception):
    """Base class for analytics engine errors."""


class MalformedInputError(EngineError, ValueError):
    """A record carries a value the engine cannot interpret."""


class MalformedDateError(MalformedInputError):
    """A date-bearing value could not be bucketed into a UTC day."""

    def __init__(self, value: object, detail: str = ""):
        self.value = value
        message = f"Unparseable date: {value!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class UnsortedSeriesError(EngineError, ValueError):
    """A price series was not in ascending date order."""
