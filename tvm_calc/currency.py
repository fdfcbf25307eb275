"""Static currency reference data and display formatting.

The calculation engine is currency-agnostic; amounts are only dressed up with
a symbol and the right number of decimals here, when they are shown. Exchange
rates are fixed reference values relative to the US dollar and are never
fetched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .settings import DEFAULT_CURRENCY


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    symbol: str
    decimals: int
    exchange_rate: float  # units per US dollar
    symbol_first: bool = True


CURRENCIES: Dict[str, Currency] = {
    c.code: c
    for c in (
        Currency("USD", "US Dollar", "$", 2, 1.0),
        Currency("EUR", "Euro", "€", 2, 0.85),
        Currency("GBP", "British Pound", "£", 2, 0.73),
        Currency("IQD", "Iraqi Dinar", "د.ع", 0, 1310.0, symbol_first=False),
        Currency("SAR", "Saudi Riyal", "ر.س", 2, 3.75, symbol_first=False),
        Currency("AED", "UAE Dirham", "د.إ", 2, 3.67, symbol_first=False),
        Currency("KWD", "Kuwaiti Dinar", "د.ك", 3, 0.30, symbol_first=False),
        Currency("BHD", "Bahraini Dinar", "د.ب", 3, 0.38, symbol_first=False),
        Currency("QAR", "Qatari Riyal", "ر.ق", 2, 3.64, symbol_first=False),
        Currency("OMR", "Omani Rial", "ر.ع", 3, 0.38, symbol_first=False),
        Currency("JOD", "Jordanian Dinar", "د.أ", 3, 0.71, symbol_first=False),
        Currency("EGP", "Egyptian Pound", "ج.م", 2, 30.90, symbol_first=False),
        Currency("LBP", "Lebanese Pound", "ل.ل", 0, 89500.0, symbol_first=False),
        Currency("TRY", "Turkish Lira", "₺", 2, 27.50, symbol_first=False),
        Currency("JPY", "Japanese Yen", "¥", 0, 149.0),
        Currency("CNY", "Chinese Yuan", "¥", 2, 7.24),
        Currency("INR", "Indian Rupee", "₹", 2, 83.12),
        Currency("CAD", "Canadian Dollar", "C$", 2, 1.36),
        Currency("AUD", "Australian Dollar", "A$", 2, 1.53),
        Currency("CHF", "Swiss Franc", "CHF", 2, 0.88),
    )
}


def get_currency(code: str) -> Currency:
    """Return the currency for ``code``, falling back to the US dollar."""
    return CURRENCIES.get(code.upper(), CURRENCIES["USD"])


def is_supported(code: str) -> bool:
    return code.upper() in CURRENCIES


def format_currency(amount: float, code: str = DEFAULT_CURRENCY) -> str:
    """Format ``amount`` with the currency's symbol and decimal places.

    Arabic-script currencies and the Turkish lira put the symbol after the
    amount, as in ``1,250.000 د.ك``.
    Negative amounts put the sign in front, as in ``-$1,234.00``.
    """
    currency = get_currency(code)
    sign = "-" if round(amount, currency.decimals) < 0 else ""
    number = f"{abs(amount):,.{currency.decimals}f}"
    if currency.symbol_first:
        return f"{sign}{currency.symbol}{number}"
    if currency.code == "TRY":
        return f"{sign}{number}{currency.symbol}"
    return f"{sign}{number} {currency.symbol}"


def convert_currency(amount: float, from_code: str, to_code: str) -> float:
    """Convert between currencies through the static US dollar rates."""
    if not is_supported(from_code) or not is_supported(to_code):
        raise ValueError(f"Unsupported currency: {from_code} -> {to_code}")
    if from_code.upper() == to_code.upper():
        return amount
    usd = amount / CURRENCIES[from_code.upper()].exchange_rate
    return usd * CURRENCIES[to_code.upper()].exchange_rate


def currency_options() -> List[Tuple[str, str]]:
    """``(code, label)`` pairs for menus and ``--help`` listings."""
    return [(c.code, f"{c.name} ({c.symbol})") for c in CURRENCIES.values()]
