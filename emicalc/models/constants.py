"""Currency display constants.

Names cover the currencies users pick most often; any other code is shown as
the code itself.
"""

from typing import Dict, Tuple

DEFAULT_BASE_CURRENCY = "USD"

# Listed ahead of the rest in currency pickers
POPULAR_CURRENCIES: Tuple[str, ...] = (
    "USD",
    "EUR",
    "GBP",
    "JPY",
    "AUD",
    "CAD",
    "CHF",
    "CNY",
    "INR",
)

CURRENCY_NAMES: Dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "AUD": "Australian Dollar",
    "CAD": "Canadian Dollar",
    "CHF": "Swiss Franc",
    "CNY": "Chinese Yuan",
    "INR": "Indian Rupee",
    "SGD": "Singapore Dollar",
    "MYR": "Malaysian Ringgit",
    "NZD": "New Zealand Dollar",
    "HKD": "Hong Kong Dollar",
    "SEK": "Swedish Krona",
    "ZAR": "South African Rand",
}


def currency_name(code: str) -> str:
    return CURRENCY_NAMES.get(code, code)

# Longest loan term accepted, in years
MAX_TERM_YEARS = 100
