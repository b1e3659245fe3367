from dataclasses import replace
from decimal import Decimal, Inexact, Overflow, Rounded, localcontext
from typing import Dict, List, Tuple

from errors import (
    AlreadyDisputedError,
    AmountOutOfRangeError,
    ClientMismatchError,
    DuplicateTransactionIdError,
    InsufficientFundsError,
    LockedError,
    NotDisputedError,
    TransactionNotFoundError,
)
from models import LEDGER_CONTEXT, MAX_AMOUNT, Account, Deposit, DepositState, Transaction, TransactionType


class LedgerEngine:
    """
    Owns every client account and every deposit that can still be disputed.

    Operations are applied in the order they are called and either fully apply
    or raise a LedgerError without touching balances. Not thread-safe.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._deposits: Dict[int, Deposit] = {}

    def get_or_create_account(self, client_id: int) -> Account:
        """Get existing account or create an empty one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = Account()
        return self._accounts[client_id]

    def accounts(self) -> List[Tuple[int, Account]]:
        """Return copies of all accounts, ordered by client id."""
        return [(client_id, replace(self._accounts[client_id])) for client_id in sorted(self._accounts)]

    def apply(self, transaction: Transaction) -> None:
        """Dispatch a decoded transaction to the matching operation."""
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self.deposit(transaction.client_id, transaction.transaction_id, self._require_amount(transaction))
            case TransactionType.WITHDRAWAL:
                self.withdraw(transaction.client_id, transaction.transaction_id, self._require_amount(transaction))
            case TransactionType.DISPUTE:
                self.dispute(transaction.client_id, transaction.transaction_id)
            case TransactionType.RESOLVE:
                self.resolve(transaction.client_id, transaction.transaction_id)
            case TransactionType.CHARGEBACK:
                self.chargeback(transaction.client_id, transaction.transaction_id)

    def deposit(self, client_id: int, transaction_id: int, amount: Decimal) -> None:
        account = self.get_or_create_account(client_id)

        if account.locked:
            raise LockedError(client_id)

        if transaction_id in self._deposits:
            raise DuplicateTransactionIdError(transaction_id)

        total = _checked_add(client_id, account.total, amount)

        self._deposits[transaction_id] = Deposit(client_id=client_id, amount=amount)
        account.total = total

    def withdraw(self, client_id: int, transaction_id: int, amount: Decimal) -> None:
        # Withdrawals are never recorded, so transaction_id is not checked or stored.
        account = self.get_or_create_account(client_id)

        if account.locked:
            raise LockedError(client_id)

        if account.available < amount:
            raise InsufficientFundsError(client_id, account.available, amount)

        account.total = _checked_add(client_id, account.total, amount.copy_negate())

    def dispute(self, client_id: int, transaction_id: int) -> None:
        account = self.get_or_create_account(client_id)
        deposit = self._get_owned_deposit(client_id, transaction_id)

        if deposit.state != DepositState.OK:
            raise AlreadyDisputedError(transaction_id)

        held = _checked_add(client_id, account.held, deposit.amount)

        deposit.state = DepositState.DISPUTE
        account.held = held

    def resolve(self, client_id: int, transaction_id: int) -> None:
        account = self.get_or_create_account(client_id)
        deposit = self._get_owned_deposit(client_id, transaction_id)

        if deposit.state != DepositState.DISPUTE:
            raise NotDisputedError(transaction_id)

        held = _checked_add(client_id, account.held, deposit.amount.copy_negate())

        deposit.state = DepositState.OK
        account.held = held

    def chargeback(self, client_id: int, transaction_id: int) -> None:
        # No clamping: total may go negative if funds were withdrawn before the dispute.
        account = self.get_or_create_account(client_id)
        deposit = self._get_owned_deposit(client_id, transaction_id)

        if deposit.state != DepositState.DISPUTE:
            raise NotDisputedError(transaction_id)

        held = _checked_add(client_id, account.held, deposit.amount.copy_negate())
        total = _checked_add(client_id, account.total, deposit.amount.copy_negate())

        deposit.state = DepositState.CHARGEBACK
        account.held = held
        account.total = total
        account.locked = True

    def _get_owned_deposit(self, client_id: int, transaction_id: int) -> Deposit:
        deposit = self._deposits.get(transaction_id)

        if deposit is None:
            raise TransactionNotFoundError(transaction_id)

        if deposit.client_id != client_id:
            raise ClientMismatchError(transaction_id, expected=client_id, found=deposit.client_id)

        return deposit

    @staticmethod
    def _require_amount(transaction: Transaction) -> Decimal:
        if transaction.amount is None:
            raise ValueError(f"{transaction.transaction_type.value} tx {transaction.transaction_id} has no amount")
        return transaction.amount


def _checked_add(client_id: int, balance: Decimal, change: Decimal) -> Decimal:
    """Add exactly, or raise AmountOutOfRangeError if the result would be rounded or out of range."""
    try:
        with localcontext(LEDGER_CONTEXT):
            result = balance + change
    except (Inexact, Rounded, Overflow) as e:
        raise AmountOutOfRangeError(client_id, balance, change) from e

    if result.copy_abs() > MAX_AMOUNT:
        raise AmountOutOfRangeError(client_id, balance, change)
    return result
