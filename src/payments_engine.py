import csv
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Tuple

from ledger import LedgerEngine
from models import AMOUNT_DIGITS, AMOUNT_SCALE, MAX_AMOUNT, Account, Transaction, TransactionType, ProcessingResult, ProcessingStats
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 0xFFFF
MAX_TRANSACTION_ID = 0xFFFFFFFF

AMOUNT_REQUIRED = {TransactionType.DEPOSIT, TransactionType.WITHDRAWAL}


@dataclass
class RunReport:
    accounts: List[Tuple[int, Account]]
    succeeded: bool
    stats: ProcessingStats = field(default_factory=ProcessingStats)


class PaymentsEngine:
    """
    Replays a CSV transaction stream against a ledger, one row at a time in file order.
    Stops at the first fatal failure; the accounts as they stand at that point are still reported.
    """

    def __init__(self):
        self._ledger = LedgerEngine()
        self._processor = TransactionProcessor(self._ledger)
        self._stats = ProcessingStats()

    def process_file(self, filepath: str) -> RunReport:
        """Process CSV file and return final account states."""
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            return self.process_lines(f)

    def process_lines(self, lines: Iterable[str]) -> RunReport:
        """Process CSV text (header included) and return final account states."""
        succeeded = True

        for row in csv.DictReader(lines):
            transaction = parse_csv_row(row)
            if transaction is None:
                self._stats.record_rejected()
                continue

            result = self._processor.process_transaction(transaction)
            self._stats.record(result)

            if result == ProcessingResult.FATAL:
                succeeded = False
                break

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Skipped: {self._stats.skipped}, "
            f"Rejected: {self._stats.rejected}, "
            f"Fatal: {self._stats.fatal}"
        )

        return RunReport(accounts=self._ledger.accounts(), succeeded=succeeded, stats=self._stats)


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None (and logs why) for rows that must not reach the ledger."""
    try:
        # Short rows leave missing columns as None; long rows collect extras under the None key.
        normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = _parse_id(normalized["client"], MAX_CLIENT_ID, "client")
        transaction_id = _parse_id(normalized["tx"], MAX_TRANSACTION_ID, "tx")

        amount = None
        amount_str = normalized.get("amount", "")
        if transaction_type in AMOUNT_REQUIRED:
            if not amount_str:
                raise ValueError(f"{transaction_type.value} requires an amount")
            amount = _parse_amount(amount_str)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e!r}")
        return None


def _parse_id(value: str, maximum: int, name: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{name} {value!r} is not an unsigned integer")
    parsed = int(value)
    if parsed > maximum:
        raise ValueError(f"{name} {parsed} out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    amount = Decimal(value)
    if not amount.is_finite():
        raise ValueError(f"amount {value} is not a finite number")
    if amount < 0:
        raise ValueError(f"amount {value} is negative")

    _, digits, exponent = amount.as_tuple()
    if len(digits) > AMOUNT_DIGITS or -exponent > AMOUNT_SCALE or amount > MAX_AMOUNT:
        raise ValueError(
            f"amount {value} out of range (at most {AMOUNT_DIGITS} digits, {AMOUNT_SCALE} decimal places, {MAX_AMOUNT})"
        )
    return amount
