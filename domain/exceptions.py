"""Domain Exceptions

Only invariant violations and forbidden state transitions are raised.
Business-rule failures are reported through ValidationResult instead.
"""


class DomainError(Exception):
    """Base class for errors raised by domain entities"""


class InvariantViolationError(DomainError, ValueError):
    """Constructor or mutation arguments break an entity invariant"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class InvalidOperationError(DomainError):
    """The requested state transition is not permitted"""


class DuplicateEntityError(DomainError):
    """An entity with the same natural key already exists"""
