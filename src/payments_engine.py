import logging
from typing import Dict, Iterable

from account_book import AccountBook
from csv_io import read_transactions
from ledger import Ledger
from models import Transaction, ClientAccount, ProcessingResult, ProcessingStats

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Applies a transaction stream to one ledger and one account book, strictly in order.
    Single-threaded: each record is fully applied before the next is read.
    """

    def __init__(self):
        self._ledger = Ledger()
        self._book = AccountBook(self._ledger)
        self._stats = ProcessingStats()

    @property
    def book(self) -> AccountBook:
        return self._book

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        return self.process(read_transactions(filepath, self._stats))

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            result = self._book.apply(transaction)
            if result == ProcessingResult.SUCCESS:
                self._stats.record_success()
            else:
                self._stats.record_rejection()

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Rejected: {self._stats.rejected}, "
            f"Skipped: {self._stats.skipped}"
        )
        return {account.client_id: account for account in self._book.accounts()}
