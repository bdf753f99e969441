"""
Domain enums (minimal set used for clarity in services).
"""

from enum import Enum


class EventKind(str, Enum):
    """Event topics emitted by the payment_processor module."""

    PAYMENT_COMPLETED = "PaymentCompleted"
    ADMIN_FEE_WITHDRAWN = "AdminFeeWithdrawn"


class FundsMovement(str, Enum):
    """What a caller may assume about funds after an error."""

    NOT_MOVED = "not_moved"    # safe to retry immediately
    UNKNOWN = "unknown"        # re-query holdings before any retry
    REJECTED = "rejected"      # rejected on-chain; retry with corrected input
    NONE = "none"              # read path, nothing was being moved
