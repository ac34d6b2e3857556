"""Application-layer exceptions for use case error handling.

These exceptions represent failures that can occur while running an alert
cycle or managing rules. Cycle errors are logged and retried on the next
tick; rule management errors are mapped to HTTP responses by the
presentation layer.
"""


class ApplicationError(Exception):
    """Base class for all application-layer exceptions."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class UpstreamError(ApplicationError):
    """Raised when the price source is unreachable or returns an invalid answer."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message=message, code="UPSTREAM_ERROR")
        self.status_code = status_code


class StoreError(ApplicationError):
    """Raised when the rule store cannot complete an operation."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            message=f"Rule store failed during {operation}: {reason}",
            code="STORE_ERROR"
        )
        self.operation = operation


class CacheUnavailableError(ApplicationError):
    """Raised when the price cache backend cannot be reached."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message=f"Price cache unavailable: {reason}",
            code="CACHE_UNAVAILABLE"
        )


class RuleNotFoundError(ApplicationError):
    """Raised when a requested rule does not exist."""

    def __init__(self, rule_id: int) -> None:
        super().__init__(
            message=f"Rule with ID {rule_id} not found",
            code="RULE_NOT_FOUND"
        )
        self.rule_id = rule_id


class InvalidRuleError(ApplicationError):
    """Raised when a rule submission fails domain validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message=f"Invalid rule: {reason}",
            code="INVALID_RULE"
        )
        self.reason = reason
