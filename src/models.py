from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow
from enum import Enum
from typing import Optional

# Amounts carry at most 29 integer and 28 fractional digits, so sums over a
# u32 count of transactions fit in 80 digits. Rounding raises instead of
# silently dropping digits.
BALANCE_PRECISION = 80
BALANCE_CONTEXT = Context(prec=BALANCE_PRECISION, traps=[InvalidOperation, Inexact, Overflow])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def requires_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class DepositRecord:
    client_id: int
    amount: Decimal
    dispute_state: DisputeState = DisputeState.UNDISPUTED


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return BALANCE_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.debit(amount)
        self.held = BALANCE_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.remove_held(amount)
        self.credit(amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Counters for tracking processing statistics over one run."""

    def __init__(self):
        self.processed = 0
        self.rejected = 0
        self.skipped = 0

    def record_success(self):
        self.processed += 1

    def record_rejection(self):
        self.rejected += 1

    def record_skipped(self):
        self.skipped += 1

    def __repr__(self) -> str:
        return f"ProcessingStats(processed={self.processed}, rejected={self.rejected}, skipped={self.skipped})"
