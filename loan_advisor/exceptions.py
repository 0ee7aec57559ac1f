"""
Error taxonomy for the loan advisor core.

Contract violations (InvalidArgument) are raised to the caller. Rejected user
answers (InvalidInput and subclasses) are recovered inside the intake flow by
re-prompting. ProviderUnavailable is recovered by the advice service, which
substitutes the fallback table.
"""


class LoanAdvisorError(Exception):
    """Base class for all loan advisor errors."""


class InvalidArgument(LoanAdvisorError, ValueError):
    """A core utility was called with out-of-domain values."""


class InvalidInput(LoanAdvisorError, ValueError):
    """A user answer could not be accepted for the current question."""


class InvalidNumericInput(InvalidInput):
    """The answer did not parse to an acceptable number."""


class InvalidChoiceInput(InvalidInput):
    """The answer did not match any of the allowed options."""


class ProviderUnavailable(LoanAdvisorError):
    """The external advice provider is not configured or failed."""
