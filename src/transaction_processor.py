import logging

from errors import LedgerError
from ledger import LedgerEngine
from models import Transaction, ProcessingResult

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the ledger and classifies failures.
    The ledger only reports what went wrong; deciding whether the run can continue happens here.
    """

    def __init__(self, ledger: LedgerEngine):
        self._ledger = ledger

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the ledger
            SKIPPED: Rejected by the ledger, the next transaction may still be processed
            FATAL: Rejected in a way that invalidates the whole stream (client mismatch, duplicate deposit id)
        """
        try:
            self._ledger.apply(transaction)
        except LedgerError as e:
            if e.fatal:
                logger.error(f"{transaction}: {e}. Stopping.")
                return ProcessingResult.FATAL
            logger.warning(f"{transaction}: {e}. Skipping.")
            return ProcessingResult.SKIPPED

        logger.debug(f"{transaction}: applied")
        return ProcessingResult.SUCCESS
