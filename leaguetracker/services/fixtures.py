"""
Fixture Generator - derives the round-robin match list from a pair count.

Two interchangeable algorithms:
- COMBINATORIAL: every unordered pair (i, j), i < j, in lexicographic order
- CIRCLE_METHOD: the same pairs grouped into rounds by rotating all seats
  around a fixed anchor. An odd pair count gets a bye seat; pairings with
  the bye are dropped, so one pair sits out each round.

Both produce the same "{min}-{max}" match key for a pair, so persisted
completion state survives switching algorithms or regenerating.

Results are memoized: the generator is called on every view and every
reconciliation, and is a pure function of its arguments.
"""

from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from cachetools import LRUCache, cached

from ..models import Match, MatchRound


# Placeholder seat used by the circle method for odd pair counts
BYE = 0


class FixtureAlgorithm(str, Enum):
    """Fixture generation strategy, selected once per deployment."""

    COMBINATORIAL = "combinatorial"
    CIRCLE_METHOD = "circle"

    @classmethod
    def from_name(cls, name: str) -> "FixtureAlgorithm":
        """
        Parse an algorithm name from configuration.

        Raises:
            ValueError: If the name is unknown
        """
        normalized = name.strip().lower().replace('-', '_')
        if normalized in ('circle', 'circle_method', 'round_robin'):
            return cls.CIRCLE_METHOD
        if normalized in ('combinatorial', 'pairs'):
            return cls.COMBINATORIAL
        raise ValueError(
            f"Unknown fixture algorithm: {name}. "
            f"Valid options: combinatorial, circle"
        )


def match_key(a: int, b: int) -> str:
    """Stable identifier for the unordered pair {a, b}."""
    return f"{min(a, b)}-{max(a, b)}"


def _make_match(a: int, b: int, round_index: Optional[int] = None) -> Match:
    return Match(id=match_key(a, b), pair_a=min(a, b), pair_b=max(a, b), round=round_index)


def combinatorial_matches(pair_count: int) -> Tuple[Match, ...]:
    """All unordered pairs among 1..pair_count, lexicographic by pair."""
    matches: List[Match] = []
    for i in range(1, pair_count + 1):
        for j in range(i + 1, pair_count + 1):
            matches.append(_make_match(i, j))
    return tuple(matches)


@cached(cache=LRUCache(maxsize=128))
def circle_method_rounds(pair_count: int) -> Tuple[MatchRound, ...]:
    """
    Schedule all pairs into rounds using the circle method.

    Args:
        pair_count: Number of pairs (values below 2 yield no rounds)

    Returns:
        pair_count - 1 rounds for an even count, pair_count rounds for an odd one
    """
    if pair_count < 2:
        return ()

    seats = list(range(1, pair_count + 1))
    if pair_count % 2 == 1:
        seats.append(BYE)
    size = len(seats)

    rounds: List[MatchRound] = []
    for round_index in range(size - 1):
        matches: List[Match] = []
        bye: Optional[int] = None
        for i in range(size // 2):
            a, b = seats[i], seats[size - 1 - i]
            if a == BYE or b == BYE:
                bye = b if a == BYE else a
                continue
            matches.append(_make_match(a, b, round_index))
        rounds.append(MatchRound(index=round_index, matches=tuple(matches), bye=bye))

        # Seat 0 stays, the last seat moves to the front of the rest
        seats = [seats[0], seats[-1]] + seats[1:-1]

    return tuple(rounds)


@cached(cache=LRUCache(maxsize=256))
def generate_matches(
    pair_count: int,
    algorithm: FixtureAlgorithm = FixtureAlgorithm.COMBINATORIAL
) -> Tuple[Match, ...]:
    """
    Ordered list of every match required for a full round-robin.

    Args:
        pair_count: Number of pairs, already clamped by the caller
        algorithm: Generation strategy

    Returns:
        Tuple of matches; empty when pair_count < 2
    """
    if pair_count < 2:
        return ()
    if algorithm == FixtureAlgorithm.CIRCLE_METHOD:
        return tuple(m for r in circle_method_rounds(pair_count) for m in r.matches)
    return combinatorial_matches(pair_count)


@cached(cache=LRUCache(maxsize=256))
def valid_match_keys(
    pair_count: int,
    algorithm: FixtureAlgorithm = FixtureAlgorithm.COMBINATORIAL
) -> FrozenSet[str]:
    """Allow-list of match keys for the given pair count."""
    return frozenset(m.id for m in generate_matches(pair_count, algorithm))


def round_count(pair_count: int, algorithm: FixtureAlgorithm) -> int:
    """Number of rounds; the combinatorial variant has none."""
    if algorithm == FixtureAlgorithm.CIRCLE_METHOD:
        return len(circle_method_rounds(pair_count))
    return 0


# CLI entry point for testing
if __name__ == '__main__':
    import sys

    count = int(sys.argv[1]) if len(sys.argv) > 1 else 4
    algo = FixtureAlgorithm.from_name(sys.argv[2]) if len(sys.argv) > 2 else FixtureAlgorithm.CIRCLE_METHOD

    print(f"=== {count} pairs, {algo.value} ===")
    if algo == FixtureAlgorithm.CIRCLE_METHOD:
        for r in circle_method_rounds(count):
            keys = ", ".join(m.id for m in r.matches)
            suffix = f" (bye: {r.bye})" if r.bye else ""
            print(f"  Round {r.index + 1}: {keys}{suffix}")
    else:
        for number, m in enumerate(generate_matches(count, algo), start=1):
            print(f"  {number}. {m.get_title()}")
