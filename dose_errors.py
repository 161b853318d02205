"""Error taxonomy for the dosage engine."""


class DosageError(Exception):
    """Base class for every error raised by the engine."""


class StorageError(DosageError):
    """A data file is missing, unreadable or unwritable."""


class ParseError(DosageError):
    """A data file or one of its records does not have the expected shape."""


class ValidationError(DosageError):
    """A treatment edit or entry was rejected before touching any store.

    Attributes:
        field: Name of the offending input (``name``, ``unit``, ``dosage``,
            ``cycle``, ``duration``) so the editor can highlight it.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ReconciliationWarning(UserWarning):
    """A history change referenced a treatment that no longer exists."""
