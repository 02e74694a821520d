"""Currency -- ISO 4217 registry and precision used for cost display."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest displayable unit, for Decimal.quantize()."""
        return Decimal(1).scaleb(-self.decimal_places)


def _build(*groups: tuple[int, tuple[tuple[str, str], ...]]) -> dict[str, CurrencyInfo]:
    table: dict[str, CurrencyInfo] = {}
    for places, entries in groups:
        for code, name in entries:
            table[code] = CurrencyInfo(code, places, name)
    return table


class CurrencyRegistry:
    """Registry of ISO 4217 currencies with their minor-unit precision."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = _build(
        (0, (
            ("CLP", "Chilean Peso"),
            ("ISK", "Icelandic Krona"),
            ("JPY", "Japanese Yen"),
            ("KRW", "South Korean Won"),
            ("PYG", "Paraguayan Guarani"),
            ("UGX", "Ugandan Shilling"),
            ("VND", "Vietnamese Dong"),
            ("XAF", "Central African CFA Franc"),
            ("XOF", "West African CFA Franc"),
        )),
        (2, (
            ("AED", "UAE Dirham"),
            ("AUD", "Australian Dollar"),
            ("BGN", "Bulgarian Lev"),
            ("BRL", "Brazilian Real"),
            ("CAD", "Canadian Dollar"),
            ("CHF", "Swiss Franc"),
            ("CNY", "Chinese Yuan"),
            ("CZK", "Czech Koruna"),
            ("DKK", "Danish Krone"),
            ("EUR", "Euro"),
            ("GBP", "Pound Sterling"),
            ("HKD", "Hong Kong Dollar"),
            ("HUF", "Hungarian Forint"),
            ("IDR", "Indonesian Rupiah"),
            ("ILS", "Israeli New Shekel"),
            ("INR", "Indian Rupee"),
            ("MXN", "Mexican Peso"),
            ("NOK", "Norwegian Krone"),
            ("NZD", "New Zealand Dollar"),
            ("PLN", "Polish Zloty"),
            ("RON", "Romanian Leu"),
            ("RUB", "Russian Ruble"),
            ("SEK", "Swedish Krona"),
            ("SGD", "Singapore Dollar"),
            ("THB", "Thai Baht"),
            ("TRY", "Turkish Lira"),
            ("UAH", "Ukrainian Hryvnia"),
            ("USD", "US Dollar"),
            ("ZAR", "South African Rand"),
        )),
        (3, (
            ("BHD", "Bahraini Dinar"),
            ("JOD", "Jordanian Dinar"),
            ("KWD", "Kuwaiti Dinar"),
            ("OMR", "Omani Rial"),
            ("TND", "Tunisian Dinar"),
        )),
    )

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def is_valid(cls, code: str) -> bool:
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
