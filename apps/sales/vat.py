"""
VAT breakdown of a cart or sale, grouped by rate.

Each line's gross total is split once with the line's TaxRate and the
results are summed per rate. Totals are sums of the rounded per-line
values, so `net_total + vat_total == gross_total` holds exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from .tax import TaxRate

ZERO = Decimal("0.00")


@dataclass
class VatGroup:
    rate: TaxRate
    net: Decimal = ZERO
    vat: Decimal = ZERO

    @property
    def gross(self) -> Decimal:
        return self.net + self.vat

    def as_dict(self):
        return {"net": str(self.net), "vat": str(self.vat)}


@dataclass
class VatBreakdown:
    groups: dict[str, VatGroup] = field(default_factory=dict)

    def add(self, rate, gross):
        rate = TaxRate.of(rate)
        net, vat = rate.split(gross)
        group = self.groups.setdefault(rate.key, VatGroup(rate=rate))
        group.net += net
        group.vat += vat
        return group

    @property
    def net_total(self) -> Decimal:
        return sum((group.net for group in self.groups.values()), ZERO)

    @property
    def vat_total(self) -> Decimal:
        return sum((group.vat for group in self.groups.values()), ZERO)

    @property
    def gross_total(self) -> Decimal:
        return self.net_total + self.vat_total

    def __getitem__(self, key):
        return self.groups[TaxRate.of(key).key]

    def __contains__(self, key):
        return TaxRate.of(key).key in self.groups

    def __len__(self):
        return len(self.groups)

    def as_dict(self):
        return {
            "groups": {key: group.as_dict() for key, group in sorted(self.groups.items())},
            "net_total": str(self.net_total),
            "vat_total": str(self.vat_total),
            "gross_total": str(self.gross_total),
        }


def decompose(lines) -> VatBreakdown:
    """
    Build the breakdown for an iterable of cart lines or sale items.

    Anything exposing `tax_rate` (or `vat_rate`) and `line_total` works.
    An empty iterable yields an empty breakdown with zero totals.
    """
    breakdown = VatBreakdown()
    for line in lines:
        rate = getattr(line, "tax_rate", None)
        if rate is None:
            rate = line.vat_rate
        breakdown.add(rate, line.line_total)
    return breakdown
