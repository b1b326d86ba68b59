"""
Domain errors raised by the ledger, udaar and goal logic.

Routes let these propagate; ``wallet_api.main`` maps them to JSON responses.
"""
from typing import Any, Dict, Optional


class LedgerError(Exception):
    """Base class for every business-rule failure"""

    status_code = 400

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, **self.extra}


class ValidationError(LedgerError):
    """Rejected input: non-positive amount, bad distribution, percentage out of range"""


class InsufficientFundsError(LedgerError):
    def __init__(self, shortfall: float, detail: Optional[str] = None):
        self.shortfall = round(shortfall, 2)
        super().__init__(
            detail or f"Insufficient funds: short by {self.shortfall:.2f}",
            {"shortfall": self.shortfall},
        )


class InvalidTransitionError(LedgerError):
    status_code = 409


class NotFoundError(LedgerError):
    status_code = 404
