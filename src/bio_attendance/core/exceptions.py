class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ParseError(DomainError):
    """Raised when a single export line cannot be turned into a scan event."""

    def __init__(self, line_no: int, reason: str):
        super().__init__(f"line {line_no}: {reason}")
        self.line_no = line_no
        self.reason = reason


class UnresolvedIdentityError(DomainError):
    """Raised when a name token matches nobody or stays ambiguous."""

    def __init__(self, token: str, reason: str):
        super().__init__(f"unresolved name {token!r}: {reason}")
        self.token = token
        self.reason = reason


class NoActiveScheduleError(DomainError):
    """Raised when a resolved employee has no active schedule for the shift window."""

    def __init__(self, employee_id: int, detail: str = ""):
        message = f"employee {employee_id} has no active schedule"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.employee_id = employee_id


class BatchReadError(DomainError):
    """Raised when the export file itself cannot be read. Fatal for the batch."""
