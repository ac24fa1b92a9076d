"""Error hierarchy for the admission core."""

from __future__ import annotations


class AdmissionError(Exception):
    """Base class for every error surfaced by the admission core."""


class AdmissionValidationError(AdmissionError, ValueError):
    """Rejected input: colliding keys, unknown codes, malformed settings."""


class DuplicateEmailError(AdmissionValidationError):
    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email!r}")
        self.email = email


class InvalidPositionError(AdmissionValidationError):
    def __init__(self, code: str):
        super().__init__(f"Unknown or unpublished position: {code!r}")
        self.code = code


class DuplicateCodeError(AdmissionValidationError):
    def __init__(self, collection: str, code: str):
        super().__init__(f"{collection} code already exists: {code!r}")
        self.collection = collection
        self.code = code


class InvalidCapacityError(AdmissionValidationError):
    """Raised when a score configuration fails validation at save time."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid score configuration")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Invalid score configuration: {self.errors}"


class InvalidDraftError(AdmissionValidationError):
    """Raised when dossier fields fail validation on submit or edit."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid dossier")
        self.errors = errors

    def __str__(self) -> str:
        return f"Invalid dossier: {self.errors}"


class InvalidPatchError(AdmissionValidationError):
    def __init__(self, fields: list[str]):
        super().__init__(f"Fields cannot be edited: {', '.join(fields)}")
        self.fields = fields


class TemporalError(AdmissionError):
    """The write window governed by the deadline is closed."""


class EditingClosedError(TemporalError):
    def __init__(self, applicant_id: str):
        super().__init__(f"Profile editing is closed for applicant {applicant_id!r}")
        self.applicant_id = applicant_id


class SubmissionClosedError(TemporalError):
    def __init__(self) -> None:
        super().__init__("Submissions are closed")


class NotFoundError(AdmissionError, LookupError):
    """A referenced record does not exist."""


class ApplicantNotFoundError(NotFoundError):
    def __init__(self, applicant_id: str):
        super().__init__(f"Unknown applicant: {applicant_id!r}")
        self.applicant_id = applicant_id


class PositionNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__(f"Unknown position: {code!r}")
        self.code = code


class ListItemNotFoundError(NotFoundError):
    def __init__(self, catalog: str, value: str):
        super().__init__(f"Unknown {catalog} entry: {value!r}")
        self.catalog = catalog
        self.value = value


__all__ = [
    "AdmissionError",
    "AdmissionValidationError",
    "DuplicateEmailError",
    "InvalidPositionError",
    "DuplicateCodeError",
    "InvalidCapacityError",
    "InvalidDraftError",
    "InvalidPatchError",
    "TemporalError",
    "EditingClosedError",
    "SubmissionClosedError",
    "NotFoundError",
    "ApplicantNotFoundError",
    "PositionNotFoundError",
    "ListItemNotFoundError",
]
