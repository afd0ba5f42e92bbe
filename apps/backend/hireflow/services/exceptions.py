"""Error taxonomy for the hiring services.

Every error carries the HTTP status the API layer reports it with, and a
single user-facing message (``str(error)``).
"""


class HireflowError(Exception):
    """Base class for all service errors."""

    status_code: int = 500


class ValidationError(HireflowError):
    """Schema definition or submitted answers failed validation."""

    status_code = 422


class EmptyLabelError(ValidationError):
    pass


class DuplicateFieldNameError(ValidationError):
    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Duplicate field name: '{field_name}'")


class MissingRequiredFieldError(ValidationError):
    def __init__(self, field_name: str, field_label: str):
        self.field_name = field_name
        self.field_label = field_label
        super().__init__(f"Please fill in the required field: {field_label}")


class UploadInProgressError(HireflowError):
    """Submission attempted while a file field is still uploading."""

    status_code = 409

    def __init__(self, field_names: list[str]):
        self.field_names = field_names
        super().__init__(
            "Please wait for file uploads to finish: " + ", ".join(field_names)
        )


class DuplicateApplicationError(HireflowError):
    status_code = 409

    def __init__(self, job_id, applicant_id: str):
        self.job_id = job_id
        self.applicant_id = applicant_id
        super().__init__("You have already applied for this position")


class NotFoundError(HireflowError):
    status_code = 404


class RemoteWriteError(HireflowError):
    """The persistence layer rejected an insert, update or delete."""

    status_code = 500


class RemoteReadError(HireflowError):
    """A schema or list fetch failed."""

    status_code = 503


class StorageError(HireflowError):
    """The object store rejected an upload or signed-URL request."""

    status_code = 502


class AuthenticationError(HireflowError):
    status_code = 401


class PermissionDeniedError(HireflowError):
    status_code = 403
