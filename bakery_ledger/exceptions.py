"""Custom exceptions for the bakery ledger."""


class LedgerError(Exception):
    """Base exception for all ledger errors."""
    def __init__(self, message="An internal error occurred", payload=None):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(LedgerError):
    """Raised for invalid user input, before any store or backend call."""


class EmptyBatchError(ValidationError):
    """Raised when a submission is requested but no draft has a positive subtotal."""
    def __init__(self, message="No draft orders to submit. Add products for at least one customer."):
        super().__init__(message)


class SubmissionInProgressError(LedgerError):
    """Raised when drafts are edited or resubmitted while a batch is being submitted."""
    def __init__(self, message="A batch submission is in progress; drafts are read-only."):
        super().__init__(message)
