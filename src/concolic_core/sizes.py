"""Size bounds: validation and constraint issuance.

Bounds are ``(min_size, max_size)`` with a tri-state ``max_size``:

* ``max_size < 0``  fixed size, not tracked
* ``max_size == 0`` only ``size >= min_size`` is enforced
* ``max_size > 0``  ``min_size <= size <= max_size``
"""
from __future__ import annotations

from dataclasses import dataclass

from .gateway import EngineGateway, Predicate
from .protocol import SIZE_UNTRACKED


@dataclass(frozen=True)
class SizeBounds:
    min_size: int = 0
    max_size: int = SIZE_UNTRACKED

    @property
    def tracked(self) -> bool:
        return self.max_size >= 0


def check_size(size: int, max_size: int, min_size: int) -> bool:
    if max_size < 0:
        return True
    if min_size < 0:
        raise ValueError("min_size cannot be negative")
    if max_size == 0:
        return size >= min_size
    return min_size <= size <= max_size


def constrain_size(gateway: EngineGateway, identifier: str,
                   max_size: int, min_size: int) -> None:
    """Issue the size assumptions for a marked size variable."""
    if max_size < 0:
        return
    gateway.assume(Predicate(identifier, ">=", min_size))
    if max_size > 0:
        gateway.assume(Predicate(identifier, "<=", max_size))
