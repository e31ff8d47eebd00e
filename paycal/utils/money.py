from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def split_evenly(total: Decimal, parts: int) -> list[Decimal]:
    """Split ``total`` into ``parts`` cent amounts that add back up to it.

    Every share is rounded down to the cent; whatever is left over goes
    onto the last share.
    """
    if parts <= 0:
        raise ValueError("parts must be positive")

    total = to_cents(total)
    share = (total / parts).quantize(CENT, rounding=ROUND_DOWN)
    shares = [share] * parts
    shares[-1] = total - share * (parts - 1)
    return shares
