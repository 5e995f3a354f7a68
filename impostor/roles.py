# impostor/roles.py
"""
Impostor selection.

The number of impostors grows with the room size, drawn from a fixed
table of cumulative percentages per size bucket.
"""
import random
from typing import List, Optional, Sequence, Tuple

# (max players in bucket, cumulative percentage thresholds). A draw in [0, 100)
# below the i-th threshold gives i + 1 impostors; past the last one gives len + 1.
IMPOSTOR_TABLE: List[Tuple[Optional[int], Tuple[int, ...]]] = [
    (3, ()),
    (5, (70,)),
    (8, (50, 80)),
    (12, (50, 75, 90)),
    (None, (50, 70, 85, 95)),
]


def calculate_impostor_count(player_count: int, rng: Optional[random.Random] = None) -> int:
    """Draw how many impostors a room of `player_count` players gets."""
    rng = rng or random
    draw = rng.random() * 100

    for max_players, thresholds in IMPOSTOR_TABLE:
        if max_players is not None and player_count > max_players:
            continue
        for index, threshold in enumerate(thresholds):
            if draw < threshold:
                return index + 1
        return len(thresholds) + 1

    raise AssertionError("unreachable: last bucket is open ended")


def assign_impostors(players: Sequence, rng: Optional[random.Random] = None) -> int:
    """
    Flag a random subset of `players` as impostors and clear everybody else.

    Works on anything with an `is_impostor` attribute (ORM rows or in-memory
    players). Rooms with fewer than two players are left untouched and 0 is
    returned.
    """
    if len(players) < 2:
        return 0

    rng = rng or random
    impostor_count = calculate_impostor_count(len(players), rng)

    shuffled = list(players)
    rng.shuffle(shuffled)
    impostors = {id(p) for p in shuffled[:impostor_count]}

    for player in players:
        player.is_impostor = id(player) in impostors

    return impostor_count
