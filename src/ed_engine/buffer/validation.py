"""Address validation helpers shared across buffer services."""

from __future__ import annotations

from typing import Tuple

from ed_engine.errors import AddressOutOfRange


def ensure_address(addr: int, last: int, *, allow_zero: bool = True) -> int:
    lowest = 0 if allow_zero else 1
    if addr < lowest or addr > last:
        raise AddressOutOfRange()
    return addr


def ensure_range(first: int, second: int, last: int) -> Tuple[int, int]:
    if first < 1 or first > second or second > last:
        raise AddressOutOfRange()
    return first, second


__all__ = ["ensure_address", "ensure_range"]
