"""Limit arithmetic and search bounds."""

from memfloor.limits.bounds import (
    ProbeRange,
    address_space_resource,
    initial_range,
    page_size,
    search_granularity,
)
from memfloor.limits.rounding import LIMIT_MAX, round_up

__all__ = [
    "LIMIT_MAX",
    "ProbeRange",
    "address_space_resource",
    "initial_range",
    "page_size",
    "round_up",
    "search_granularity",
]
