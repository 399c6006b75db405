"""Error kinds raised by the reconciliation engine and the record store."""


class WalletbookError(Exception):
    """Base class for engine and store errors."""


class ValidationError(WalletbookError):
    """A required field is missing or unusable; nothing was written."""


class NotFoundError(WalletbookError):
    """A referenced wallet, theme or transaction does not exist."""


class StoreError(WalletbookError):
    """A read or write against the record store failed."""


class PartialReconciliationError(WalletbookError):
    """Some steps of a reconciliation committed and a later one failed.

    The wallet, theme and transaction rows may disagree with each other
    afterwards. ``committed`` lists the steps that were applied in order,
    ``failed`` names the step that raised and ``pending`` the steps that
    were never attempted.
    """

    def __init__(self, operation: str, committed: list[str], failed: str, pending: list[str], cause: Exception):
        self.operation = operation
        self.committed = list(committed)
        self.failed = failed
        self.pending = list(pending)
        self.cause = cause
        super().__init__(
            f"{operation} partially applied: failed at '{failed}' after {len(self.committed)} "
            f"committed step(s): {cause}"
        )

    def to_dict(self) -> dict:
        return {
            "detail": str(self),
            "operation": self.operation,
            "committed": self.committed,
            "failed": self.failed,
            "pending": self.pending,
        }
