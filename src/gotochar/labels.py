"""Jump label generation, assignment and prefix narrowing.

Labels are fixed-length strings over the configured alphabet. The length is
the smallest that gives every candidate its own label, so labels are
prefix-free by construction.
"""
from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator, Mapping

from gotochar.config import DEFAULT_CHARSET
from gotochar.types import Candidate, InvalidCountError, Range, View

log = logging.getLogger(__name__)


def _check_alphabet(alphabet: str) -> None:
    if len(set(alphabet)) != len(alphabet) or len(alphabet) < 2:
        raise ValueError(
            f"Label alphabet needs at least 2 distinct symbols, got {alphabet!r}"
        )


def label_length(num_candidates: int, alphabet: str = DEFAULT_CHARSET) -> int:
    """Smallest L >= 1 with ``len(alphabet) ** L >= num_candidates``.

    Raises:
        InvalidCountError: ``num_candidates`` is below 1.
    """
    if num_candidates < 1:
        raise InvalidCountError(num_candidates)
    _check_alphabet(alphabet)
    length = 1
    capacity = len(alphabet)
    while capacity < num_candidates:
        length += 1
        capacity *= len(alphabet)
    return length


def generate_labels(length: int, alphabet: str = DEFAULT_CHARSET) -> Iterator[str]:
    """Yield every ``length``-symbol string over ``alphabet`` exactly once.

    The first symbol varies fastest (``aa, ba, ca, ... zz``). Each call
    returns a fresh iterator starting from the first label.
    """
    if length < 0:
        raise ValueError(f"Label length must be non-negative, got {length}")
    _check_alphabet(alphabet)
    for digits in itertools.product(alphabet, repeat=length):
        yield "".join(reversed(digits))


def assign_labels(
    matches: Mapping[View, tuple[Range, ...]],
    alphabet: str = DEFAULT_CHARSET,
) -> list[Candidate]:
    """Label every match in iteration order (view order, then range order).

    Raises:
        InvalidCountError: ``matches`` holds no ranges at all.
    """
    total = sum(len(ranges) for ranges in matches.values())
    labels = generate_labels(label_length(total, alphabet), alphabet)
    candidates = [
        Candidate(next(labels), view, rng)
        for view, ranges in matches.items()
        for rng in ranges
    ]
    log.debug("assigned %d labels of length %d", len(candidates), len(candidates[0].label))
    return candidates


def narrow_candidates(
    candidates: list[Candidate], typed: str,
) -> list[tuple[Candidate, str]]:
    """Candidates whose label starts with ``typed``, with the untyped suffix."""
    return [
        (candidate, candidate.label[len(typed):])
        for candidate in candidates
        if candidate.label.startswith(typed)
    ]
