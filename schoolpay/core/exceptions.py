class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidAmountError(ValidationError):
    """Raised when an amount edit cannot be parsed as a number."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Amount must be a number, got {value!r}")


class NotFoundError(DomainError):
    """Raised when a payroll, payslip or staff record does not exist."""


class PersistenceError(DomainError):
    """Raised when the document store rejects a read or write."""
