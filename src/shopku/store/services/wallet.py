"""ShopKu Pay wallet ledger.

The balance check and the debit are a single conditional UPDATE, so two
concurrent checkouts for the same user can never both spend the same
funds. The database additionally rejects negative balances.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import F

from ..conf import get_wallet_method
from ..exceptions import InsufficientFunds, InvalidArgument, NotFound, StorageError

logger = logging.getLogger(__name__)


class WalletDebit(NamedTuple):
    """Outcome of a wallet debit attempt."""

    applied: bool
    amount: Decimal
    balance: Decimal | None


NOT_APPLICABLE = WalletDebit(applied=False, amount=Decimal("0"), balance=None)


def debit(user_id, amount: Decimal) -> WalletDebit:
    """Atomically take ``amount`` from the user's balance.

    Raises:
        InvalidArgument: amount is negative
        NotFound: User does not exist
        InsufficientFunds: Balance is lower than amount
        StorageError: Database failure
    """
    if amount < 0:
        raise InvalidArgument("Debit amount must not be negative")

    User = get_user_model()
    try:
        updated = User.objects.filter(pk=user_id, balance__gte=amount).update(
            balance=F("balance") - amount,
        )
        if not updated:
            if not User.objects.filter(pk=user_id).exists():
                raise NotFound("User not found")
            raise InsufficientFunds(
                "Insufficient ShopKu Pay balance",
                {"required": str(amount)},
            )
        balance = User.objects.values_list("balance", flat=True).get(pk=user_id)
    except DatabaseError as e:
        logger.exception("Wallet debit failed for user %s", user_id)
        raise StorageError("Could not update wallet balance") from e

    logger.info(
        "Debited wallet",
        extra={"user_id": str(user_id), "amount": str(amount), "balance": str(balance)},
    )
    return WalletDebit(applied=True, amount=amount, balance=balance)


def debit_if_applicable(user_id, payment_method: str, total: Decimal) -> WalletDebit:
    """Debit the wallet when the order is paid with ShopKu Pay.

    Args:
        user_id: Paying user
        payment_method: Normalized payment method label
        total: Order total

    Returns:
        WalletDebit; ``applied`` is False for any other payment method
    """
    if payment_method != get_wallet_method():
        return NOT_APPLICABLE
    return debit(user_id, total)
