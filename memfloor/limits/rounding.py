"""Rounding of limit values to a reporting unit."""

# Largest limit the resource module can hand to setrlimit(2).
LIMIT_MAX = 2**63 - 1


def is_power_of_two(n: int) -> bool:
    """Return True if n is a positive power of two."""
    return n > 0 and n & (n - 1) == 0


def round_up(value: int, unit: int, maximum: int = LIMIT_MAX) -> int:
    """Round value up to the nearest multiple of unit.

    Saturates to maximum when the rounded value is not representable, so an
    overflow never turns into a silently small limit.

    Args:
        value: Positive limit value.
        unit: Positive power of two.
        maximum: Largest representable limit.

    Returns:
        Smallest multiple of unit that is >= value, or maximum.

    Raises:
        ValueError: If value is not positive or unit is not a power of two.
    """
    if value <= 0:
        raise ValueError(f"value must be positive, got {value}")
    if not is_power_of_two(unit):
        raise ValueError(f"unit must be a power of two, got {unit}")

    rounded = ((value - 1) | (unit - 1)) + 1
    if rounded > maximum:
        return maximum
    return rounded
