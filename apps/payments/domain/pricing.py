"""
Checkout price split.

The platform keeps a percentage plus a fixed fee; what remains is split
between venue and coach by the session's cut percentages. Each share is
rounded half-up to a whole cent on its own, so the shares may differ
from the net by a cent.
"""

from dataclasses import dataclass

from shared.domain.value_objects import Money


@dataclass(frozen=True)
class PaymentSplit:
    total: Money
    platform: Money
    venue: Money
    coach: Money

    @property
    def net(self) -> Money:
        return self.total - self.platform

    def as_dict(self) -> dict:
        return {
            "total": self.total.cents,
            "platform": self.platform.cents,
            "venue": self.venue.cents,
            "coach": self.coach.cents,
        }


def split_payment(
    total: Money,
    venue_cut_percent: int,
    coach_cut_percent: int,
    platform_fee_percent: int = 5,
    platform_fee_fixed_cents: int = 30,
) -> PaymentSplit:
    """
    >>> split_payment(Money(2000), 20, 80).as_dict()
    {'total': 2000, 'platform': 130, 'venue': 374, 'coach': 1496}
    """
    for percent in (venue_cut_percent, coach_cut_percent, platform_fee_percent):
        if not 0 <= percent <= 100:
            raise ValueError(f"Percentage out of range: {percent}")

    fee_cents = total.percent(platform_fee_percent).cents + platform_fee_fixed_cents
    platform = Money(min(fee_cents, total.cents), total.currency)
    net = total - platform
    return PaymentSplit(
        total=total,
        platform=platform,
        venue=net.percent(venue_cut_percent),
        coach=net.percent(coach_cut_percent),
    )
