"""Custom exception hierarchy for the cake-day calculator."""


class CakeDayError(Exception):
    """Base exception for all cake-day errors."""


# --- Configuration ---
class ConfigError(CakeDayError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(CakeDayError):
    """Input data error."""


class MalformedRecordError(DataError):
    """A source line could not be parsed into a Person."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Error on line {line_number}: {reason}")


# --- Storage ---
class StorageError(CakeDayError):
    """Intermediate storage error."""


class SpillStoreIOError(StorageError):
    """The spill store could not be created, written or read."""


# --- Engine ---
class EngineError(CakeDayError):
    """Rule engine error."""


class EngineNonConvergence(EngineError):
    """The rule engine hit its round ceiling without reaching a fixed point."""

    def __init__(self, rounds: int):
        self.rounds = rounds
        super().__init__(
            f"Cake day rules did not stabilise after {rounds} rounds"
        )
