class LedgerError(Exception):
    """Base class for transaction-level errors raised by the ledger."""

    def __init__(self, transaction_id: int, message: str):
        super().__init__(f"tx {transaction_id}: {message}")
        self.transaction_id = transaction_id


class DuplicateTransaction(LedgerError):
    def __init__(self, transaction_id: int):
        super().__init__(transaction_id, "transaction id already recorded")


class UnknownTransaction(LedgerError):
    def __init__(self, transaction_id: int):
        super().__init__(transaction_id, "no deposit recorded under this id")


class ClientMismatch(LedgerError):
    def __init__(self, transaction_id: int, expected_client_id: int, client_id: int):
        super().__init__(
            transaction_id,
            f"client mismatch (expected {expected_client_id}, got {client_id})",
        )
        self.expected_client_id = expected_client_id
        self.client_id = client_id


class InvalidState(LedgerError):
    def __init__(self, transaction_id: int, state, action: str):
        super().__init__(transaction_id, f"cannot {action} a deposit in state {state.value}")
        self.state = state
        self.action = action


class MalformedRow(ValueError):
    """Raised when an input row cannot be turned into a transaction."""
