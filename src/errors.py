from decimal import Decimal


class LedgerError(Exception):
    """
    Base class for every way a ledger operation can fail.
    A failed operation leaves balances and deposit records untouched.

    `fatal` tells the caller whether the rest of the stream may still be processed.
    """

    fatal = False


class LockedError(LedgerError):
    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"account locked: {client_id}")


class InsufficientFundsError(LedgerError):
    def __init__(self, client_id: int, available: Decimal, requested: Decimal):
        self.client_id = client_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"insufficient funds (client: {client_id}, available: {available}, requested: {requested})"
        )


class AmountOutOfRangeError(LedgerError):
    def __init__(self, client_id: int, balance: Decimal, change: Decimal):
        self.client_id = client_id
        self.balance = balance
        self.change = change
        super().__init__(
            f"amount out of range (client: {client_id}, balance: {balance}, change: {change})"
        )


class DuplicateTransactionIdError(LedgerError):
    fatal = True

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"duplicate transaction ID: {transaction_id}")


class TransactionNotFoundError(LedgerError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"transaction not found: {transaction_id}")


class ClientMismatchError(LedgerError):
    fatal = True

    def __init__(self, transaction_id: int, expected: int, found: int):
        self.transaction_id = transaction_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"client does not match (tx: {transaction_id}, expected: {expected}, found: {found})"
        )


class AlreadyDisputedError(LedgerError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"transaction already disputed: {transaction_id}")


class NotDisputedError(LedgerError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"transaction not disputed: {transaction_id}")
