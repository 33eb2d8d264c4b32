"""Store configuration."""

from django.conf import settings


def get_config():
    """Get store configuration from settings."""
    defaults = {
        # Payment method label that debits the internal wallet
        "WALLET_PAYMENT_METHOD": "SHOPKUPAY",
        "UNSELECTED_PAYMENT_METHOD": "UNSELECTED",

        # Monetary precision (decimal places, banker's rounding)
        "MONEY_PLACES": 2,

        # Order history pagination
        "ORDER_PAGE_DEFAULT": 50,
        "ORDER_PAGE_MAX": 200,

        # Attempts for deleting an order header whose lines failed to insert
        "COMPENSATION_RETRIES": 3,
    }

    user_config = getattr(settings, "SHOPKU", {})
    return {**defaults, **user_config}


def get_setting(name, default=None):
    """Get a specific store setting."""
    config = get_config()
    return config.get(name, default)


def get_wallet_method():
    """Get the normalized payment method that pays from the wallet."""
    return get_setting("WALLET_PAYMENT_METHOD", "SHOPKUPAY")


def get_unselected_method():
    """Get the sentinel stored when no payment method was chosen."""
    return get_setting("UNSELECTED_PAYMENT_METHOD", "UNSELECTED")
