"""
VAT rate model for tax-inclusive retail prices.

Prices in the catalog are gross (VAT included). The net part is
`gross / (1 + rate / 100)` rounded ROUND_HALF_UP to the cent, and the VAT
part is whatever remains, so `net + vat == gross` holds exactly for
every amount. Rounding happens once per amount; callers pass line totals
(unit price x quantity), never unit prices that are multiplied later.

Usage:
    from apps.sales.tax import TaxRate

    rate = TaxRate.of("21")
    rate.split(Decimal("121.00"))  # (Decimal("100.00"), Decimal("21.00"))
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .exceptions import ValidationError, to_decimal

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ROUNDING = ROUND_HALF_UP


def quantize_money(amount) -> Decimal:
    """Round an amount to the cent using the engine-wide rounding mode."""
    return to_decimal(amount).quantize(CENT, rounding=ROUNDING)


@dataclass(frozen=True)
class TaxRate:
    """
    A VAT rate expressed as a percentage.

    Immutable value object; equal percentages compare and hash equal
    regardless of how they were written ("21", "21.0", 21).
    """

    percent: Decimal

    def __post_init__(self) -> None:
        percent = to_decimal(self.percent, field="VAT rate")
        if percent < 0:
            raise ValidationError(f"VAT rate cannot be negative: {percent}")
        object.__setattr__(self, "percent", percent.quantize(CENT, rounding=ROUNDING))

    @classmethod
    def of(cls, value) -> TaxRate:
        if isinstance(value, TaxRate):
            return value
        return cls(value)

    @property
    def key(self) -> str:
        """Normalised breakdown key, e.g. "21.00"."""
        return f"{self.percent:.2f}"

    @property
    def multiplier(self) -> Decimal:
        return 1 + self.percent / HUNDRED

    def to_net(self, gross) -> Decimal:
        gross = _gross(gross)
        if not self.percent:
            return gross
        return quantize_money(gross / self.multiplier)

    def vat_portion(self, gross) -> Decimal:
        gross = _gross(gross)
        return gross - self.to_net(gross)

    def split(self, gross) -> tuple[Decimal, Decimal]:
        """Return (net, vat) for a gross amount."""
        gross = _gross(gross)
        net = self.to_net(gross)
        return net, gross - net

    def __str__(self) -> str:
        return f"{self.percent.normalize():f}%"


def _gross(amount) -> Decimal:
    gross = quantize_money(amount)
    if gross < 0:
        raise ValidationError(f"Gross amount cannot be negative: {gross}")
    return gross


def to_net(gross, vat_rate_percent) -> Decimal:
    """Net price for a gross price at the given VAT percentage."""
    return TaxRate.of(vat_rate_percent).to_net(gross)


def vat_portion(gross, vat_rate_percent) -> Decimal:
    """VAT contained in a gross price at the given VAT percentage."""
    return TaxRate.of(vat_rate_percent).vat_portion(gross)
