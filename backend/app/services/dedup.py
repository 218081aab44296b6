from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar


class Identified(Protocol):
    id: int


T = TypeVar("T", bound=Identified)


def dedupe_targets(*sources: Iterable[T]) -> list[T]:
    """Union target lists fetched through different paths.

    Identity is the target's own id: two distinct targets for the same
    account and period are both kept, the same target fetched twice is kept
    once (first occurrence wins).
    """
    seen: set[int] = set()
    rows: list[T] = []
    for source in sources:
        for target in source:
            if target.id in seen:
                continue
            seen.add(target.id)
            rows.append(target)
    return rows
