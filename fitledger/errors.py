"""Domain errors surfaced to callers with a human-readable message."""


class FitLedgerError(Exception):
    """Base class for every error this package raises on purpose."""

    message = "Unexpected data error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class EmptyStore(FitLedgerError):
    message = "No data to export"


class MalformedDocument(FitLedgerError):
    message = "The selected file is not in valid JSON format"


class NotARecognizedExport(FitLedgerError):
    message = "The selected file doesn't appear to be a valid FitLedger export file"


class InvalidWorkout(FitLedgerError):
    """A candidate workout failed structural validation (exercise or set counts)."""

    message = "Generated workout failed validation"


class ExerciseInUse(FitLedgerError):
    """An exercise is still referenced by a workout, record or 1RM history entry."""

    message = "Exercise is still referenced and cannot be deleted"


class NotFound(FitLedgerError):
    message = "Not found"
