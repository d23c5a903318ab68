"""Error taxonomy for the lifecycle engine."""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError


class LifecycleError(Exception):
    """Base class for every error raised by the engine."""

    retryable: bool = False


class ApplicationValidationError(LifecycleError):
    """Input rejected before any mutation was applied."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, operation: str, exc: ValidationError) -> "ApplicationValidationError":
        errors = exc.errors(include_url=False)
        fields = ", ".join(".".join(str(part) for part in err["loc"]) or "<root>" for err in errors)
        return cls(f"{operation}: invalid input ({fields})", errors=errors)


class ApplicationNotFoundError(LifecycleError):
    """The targeted application does not exist."""

    def __init__(self, application_id: str):
        super().__init__(f"Application {application_id!r} not found")
        self.application_id = application_id


class ApplicationConflictError(LifecycleError):
    """Another writer updated the aggregate first."""

    retryable = True

    def __init__(self, application_id: str, expected_version: int, actual_version: Optional[int] = None):
        super().__init__(
            f"Application {application_id!r} changed concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
        self.application_id = application_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class DuplicateApplicationError(ApplicationConflictError):
    """The volunteer already applied to this opportunity."""

    retryable = False

    def __init__(self, opportunity_id: str, volunteer_id: str, existing_id: str):
        LifecycleError.__init__(
            self,
            f"Volunteer {volunteer_id!r} already applied to opportunity {opportunity_id!r} "
            f"(application {existing_id!r})"
        )
        self.application_id = existing_id
        self.expected_version = 0
        self.actual_version = None
        self.opportunity_id = opportunity_id
        self.volunteer_id = volunteer_id


class StorageOperationError(LifecycleError):
    """A storage collaborator failed while an operation was in progress."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"{operation} failed in storage: {type(cause).__name__}: {cause}")
        self.operation = operation
        self.cause = cause
