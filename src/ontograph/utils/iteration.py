from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def cartesian_product(lists: Sequence[Sequence[T]]) -> Iterator[List[T]]:
    """
    Lazily yield one element from each list, counting in mixed radix
    with the last list varying fastest.

    Yields nothing when ``lists`` is empty or any list is empty. Each
    call returns a fresh generator over the full product.
    """
    if not lists or any(len(items) == 0 for items in lists):
        return

    indices = [0] * len(lists)

    while True:
        yield [lists[i][idx] for i, idx in enumerate(indices)]

        position = len(lists) - 1
        while position >= 0:
            indices[position] += 1
            if indices[position] < len(lists[position]):
                break
            indices[position] = 0
            position -= 1

        if position < 0:
            return


def take(iterable: Iterable[T], n: int) -> Iterator[T]:
    """
    Yield at most the first ``n`` items without buffering the source.
    """
    if n <= 0:
        return

    for i, item in enumerate(iterable, start=1):
        yield item
        if i >= n:
            return
