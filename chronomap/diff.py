"""Enter/leave deltas between two visible-id snapshots."""

from collections.abc import Set

from chronomap.models import MarkerDiff


def diff_markers(previous: Set[str], current: Set[str]) -> MarkerDiff:
    """Compute the entering and leaving identities.

    Identities in both sets are left alone. Nothing is carried over from
    earlier calls, so seeking backwards works the same as forwards.
    """
    previous = frozenset(previous)
    current = frozenset(current)
    return MarkerDiff(entering=current - previous, leaving=previous - current)


def apply_diff(base: Set[str], diff: MarkerDiff) -> frozenset[str]:
    return (frozenset(base) - diff.leaving) | diff.entering
