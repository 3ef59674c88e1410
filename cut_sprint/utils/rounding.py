import math


def round_half_up(x: float) -> int:
    """Integer rounding with .5 going up, unlike round() which goes to even."""
    return int(math.floor(x + 0.5))


def round2(x: float) -> float:
    return math.floor(x * 100 + 0.5) / 100
