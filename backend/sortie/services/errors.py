from typing import Dict, Optional

from pydantic import ValidationError


class ServiceError(Exception):
    code = "service_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ServiceError):
    """Input rejected before anything was written."""

    code = "validation_error"

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        errors = {}
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "__all__"
            errors.setdefault(field, err["msg"])
        summary = ", ".join(f"{field}: {msg}" for field, msg in errors.items())
        return cls(f"Please fix the following fields: {summary}", errors)


class PersistenceError(ServiceError):
    """The store refused a read or write; message is the backend's."""

    code = "persistence_error"


class NotFound(ServiceError):
    code = "not_found"
