import logging
from typing import Dict, Iterator, Optional

from errors import LedgerError, UnknownTransaction
from ledger import Ledger
from models import Transaction, TransactionType, ClientAccount, ProcessingResult

logger = logging.getLogger(__name__)


class AccountBook:
    """
    Client balances keyed by client id, updated one transaction at a time.
    Deposits and dispute-family transactions consult and update the ledger.
    Rejected transactions leave every balance untouched and are never raised to the caller.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()
        self._accounts: Dict[int, ClientAccount] = {}

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def accounts(self) -> Iterator[ClientAccount]:
        """Yield every account in client id order."""
        for client_id in sorted(self._accounts):
            yield self._accounts[client_id]

    def __len__(self) -> int:
        return len(self._accounts)

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction.

        Returns:
            SUCCESS: balances (and possibly the ledger) were updated
            REJECTED: the transaction was dropped, nothing changed
        """
        account = self.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)
            case _:
                return ProcessingResult.REJECTED

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None or transaction.amount <= 0:
            logger.warning(f"Deposit tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.REJECTED

        if account.locked:
            logger.warning(f"Deposit tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.REJECTED

        try:
            self._ledger.record_deposit(transaction.transaction_id, account.client_id, transaction.amount)
        except LedgerError as e:
            logger.warning(f"Deposit rejected: {e}")
            return ProcessingResult.REJECTED

        account.credit(transaction.amount)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None or transaction.amount <= 0:
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.REJECTED

        if account.locked:
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.REJECTED

        if account.available < transaction.amount:
            logger.warning(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return ProcessingResult.REJECTED

        account.debit(transaction.amount)
        return ProcessingResult.SUCCESS

    # Dispute-family transactions are checked against the ledger only; a locked
    # account still honours them.

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        try:
            deposit = self._ledger.mark_disputed(transaction.transaction_id, account.client_id)
        except LedgerError as e:
            self._log_ledger_rejection("Dispute", e)
            return ProcessingResult.REJECTED

        # available may go negative if the deposit was partly withdrawn
        account.hold(deposit.amount)
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        try:
            deposit = self._ledger.mark_resolved(transaction.transaction_id, account.client_id)
        except LedgerError as e:
            self._log_ledger_rejection("Resolve", e)
            return ProcessingResult.REJECTED

        account.release_hold(deposit.amount)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        try:
            deposit = self._ledger.mark_charged_back(transaction.transaction_id, account.client_id)
        except LedgerError as e:
            self._log_ledger_rejection("Chargeback", e)
            return ProcessingResult.REJECTED

        account.remove_held(deposit.amount)
        account.lock()
        return ProcessingResult.SUCCESS

    @staticmethod
    def _log_ledger_rejection(kind: str, error: LedgerError) -> None:
        # unknown ids also cover disputes of withdrawals, which the ledger never records
        if isinstance(error, UnknownTransaction):
            logger.info(f"{kind} rejected: {error}")
        else:
            logger.warning(f"{kind} rejected: {error}")
