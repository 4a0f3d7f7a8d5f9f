"""Domain-specific exceptions"""

from typing import List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    status_code = 500


class ValidationError(DomainException):
    """Request payload failed schema validation.

    Carries every field-level message, not just the first one.
    """

    status_code = 400

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConflictError(DomainException):
    """A user with this email is already registered"""

    status_code = 400


class ConfigurationError(DomainException):
    """A required configuration value is missing"""

    pass


class RemoteServiceError(DomainException):
    """Payments provider returned an error or is unavailable"""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class PersistenceError(DomainException):
    """Local database write failed"""

    def __init__(self, message: str, orphaned_account_id: Optional[str] = None):
        self.orphaned_account_id = orphaned_account_id
        super().__init__(message)
