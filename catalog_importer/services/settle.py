"""
Partial-failure aggregation over independent calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, List, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Settled(Generic[T, R]):
    """Outcome of attempt_all: successes in input order, failures with their error."""

    successes: List[R] = field(default_factory=list)
    failures: List[Tuple[T, Exception]] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return not self.successes and bool(self.failures)


def attempt_all(func: Callable[[T], R], items: Iterable[T], label: str = "item") -> Settled:
    """
    Call `func` on every item, collecting successes and ignoring failures.

    One item failing never prevents the others from being attempted.

    Args:
        func: Operation applied to each item
        items: Inputs
        label: Noun used in log lines

    Returns:
        Settled results
    """
    settled: Settled[Any, Any] = Settled()
    for item in items:
        try:
            settled.successes.append(func(item))
        except Exception as e:
            logger.warning(f"Skipping {label} {item!r}: {getattr(e, 'message', e)}")
            settled.failures.append((item, e))
    return settled
