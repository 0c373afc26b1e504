"""
Ordered fan-out for independent units of work

Each pipeline stage is a pure map from one input unit to one output slot.
Results always come back in submission order, whether the map ran on a
thread pool or serially.
"""

from concurrent.futures import Executor
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def ordered_map(
    func: Callable[[T], R],
    items: Iterable[T],
    executor: Optional[Executor] = None,
) -> List[R]:
    """
    Apply func to every item, preserving input order

    Args:
        func: Pure function of a single unit
        items: Units of work
        executor: Pool to run on; None runs in the calling thread

    Returns:
        One result per item, in the order the items were given
    """
    if executor is None:
        return [func(item) for item in items]
    return list(executor.map(func, items))


def ordered_flat_map(
    func: Callable[[T], Iterable[R]],
    items: Iterable[T],
    executor: Optional[Executor] = None,
) -> List[R]:
    """Like ordered_map, concatenating the per-item result sequences"""
    results: List[R] = []
    for chunk in ordered_map(func, items, executor):
        results.extend(chunk)
    return results


def ordered_filter_map(
    func: Callable[[T], Optional[R]],
    items: Iterable[T],
    executor: Optional[Executor] = None,
) -> List[R]:
    """Like ordered_map, dropping units that produced None"""
    return [result for result in ordered_map(func, items, executor) if result is not None]
