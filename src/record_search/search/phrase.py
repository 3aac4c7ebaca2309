"""Positional phrase matching.

A phrase matches a document when its tokens occur at consecutive positions
of the document's analyzed title+content stream.
"""

from __future__ import annotations

from collections.abc import Sequence


def has_consecutive_positions(position_lists: Sequence[Sequence[int]]) -> bool:
    """Return True when some start ``p`` has ``p + i`` in the i-th position list.

    Args:
        position_lists: Sorted positions for each phrase token, in phrase order.
    """
    if not position_lists:
        return False
    if len(position_lists) == 1:
        return bool(position_lists[0])

    followers = [set(positions) for positions in position_lists[1:]]
    for start in position_lists[0]:
        if all(start + offset in positions for offset, positions in enumerate(followers, start=1)):
            return True
    return False
