from decimal import Decimal
from typing import Dict, Optional

from errors import ClientMismatch, DuplicateTransaction, InvalidState, UnknownTransaction
from models import DepositRecord, DisputeState


class Ledger:
    """
    Deposit history keyed by transaction id, with the dispute state of each deposit.
    Withdrawals are never recorded here, so they can never be disputed.
    Entries are never removed.
    """

    def __init__(self):
        self._deposits: Dict[int, DepositRecord] = {}

    def record_deposit(self, transaction_id: int, client_id: int, amount: Decimal) -> DepositRecord:
        """Store a new undisputed deposit. Raises DuplicateTransaction if the id is taken."""
        if transaction_id in self._deposits:
            raise DuplicateTransaction(transaction_id)
        record = DepositRecord(client_id=client_id, amount=amount)
        self._deposits[transaction_id] = record
        return record

    def mark_disputed(self, transaction_id: int, client_id: int) -> DepositRecord:
        return self._transition(
            transaction_id, client_id, DisputeState.UNDISPUTED, DisputeState.DISPUTED, "dispute"
        )

    def mark_resolved(self, transaction_id: int, client_id: int) -> DepositRecord:
        return self._transition(
            transaction_id, client_id, DisputeState.DISPUTED, DisputeState.UNDISPUTED, "resolve"
        )

    def mark_charged_back(self, transaction_id: int, client_id: int) -> DepositRecord:
        return self._transition(
            transaction_id, client_id, DisputeState.DISPUTED, DisputeState.CHARGED_BACK, "charge back"
        )

    def get(self, transaction_id: int) -> Optional[DepositRecord]:
        return self._deposits.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._deposits

    def __len__(self) -> int:
        return len(self._deposits)

    def _transition(
        self,
        transaction_id: int,
        client_id: int,
        required: DisputeState,
        target: DisputeState,
        action: str,
    ) -> DepositRecord:
        record = self._deposits.get(transaction_id)
        if record is None:
            raise UnknownTransaction(transaction_id)
        if record.client_id != client_id:
            raise ClientMismatch(transaction_id, record.client_id, client_id)
        if record.dispute_state is not required:
            raise InvalidState(transaction_id, record.dispute_state, action)
        record.dispute_state = target
        return record
