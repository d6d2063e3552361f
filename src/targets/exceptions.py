"""Errors raised by the target & performance engine."""


class TargetEngineError(Exception):
    """Base class for engine errors."""


class InvalidPeriodFormat(TargetEngineError, ValueError):
    """A period token is malformed or outside the supported calendar range.

    Always propagated: a silently defaulted window would corrupt every
    downstream figure.
    """

    def __init__(self, period, period_type, reason=""):
        self.period = period
        self.period_type = str(period_type)
        self.reason = reason
        message = f"Invalid {self.period_type} period {period!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ScopeNotFound(TargetEngineError):
    """The requested zone or user does not exist or is inactive."""

    def __init__(self, kind, scope_id):
        self.kind = kind
        self.scope_id = scope_id
        super().__init__(f"{kind} {scope_id} not found")


class AggregationQueryFailure(TargetEngineError):
    """The data store failed while aggregating one scope."""
