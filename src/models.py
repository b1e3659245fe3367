from dataclasses import dataclass
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow, Rounded, localcontext
from enum import Enum
from typing import Optional

# Ingested amounts carry at most AMOUNT_DIGITS digits and AMOUNT_SCALE decimal places.
# Amounts and balances never exceed MAX_AMOUNT in magnitude.
AMOUNT_DIGITS = 28
AMOUNT_SCALE = 28
MAX_AMOUNT = Decimal(2**96 - 1)

# Wide enough to hold the exact sum or difference of any two in-range values.
# Anything that would still need rounding raises instead.
LEDGER_CONTEXT = Context(
    prec=64,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact, Rounded],
)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DepositState(Enum):
    OK = "ok"
    DISPUTE = "dispute"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FATAL = "fatal"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class Account:
    total: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def available(self) -> Decimal:
        with localcontext(LEDGER_CONTEXT):
            return self.total - self.held


@dataclass
class Deposit:
    """A deposit that may later be disputed. Only `state` changes after creation."""

    client_id: int
    amount: Decimal
    state: DepositState = DepositState.OK


@dataclass
class ProcessingStats:
    """Counters for a single run."""

    processed: int = 0
    skipped: int = 0
    rejected: int = 0
    fatal: int = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.SUCCESS:
            self.processed += 1
        elif result == ProcessingResult.SKIPPED:
            self.skipped += 1
        elif result == ProcessingResult.FATAL:
            self.fatal += 1

    def record_rejected(self) -> None:
        self.rejected += 1
