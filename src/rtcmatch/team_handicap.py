"""Doubles team handicap calculator.

Implements the IRTPA standard: the team plays off the better player's
handicap plus an adjustment that grows with the gap between the partners.

Handicaps use the internal signed convention: a negative value is a "plus"
(elite) player, so the better player is always the ``min`` of the two.
"""

import math
from typing import Optional

from rtcmatch.models import Participant, TeamHandicapResult

# Key: absolute difference between the partners' handicaps
# Value: adjustment added to the better player's handicap
ADJUSTMENT_TABLE = {
    1: 0.5, 2: 1.0, 3: 1.4, 4: 1.8, 5: 2.1, 6: 2.4, 7: 2.6, 8: 2.8, 9: 3.0, 10: 3.2,
    11: 3.4, 12: 3.6, 13: 3.8, 14: 4.0, 15: 4.2, 16: 4.4, 17: 4.6, 18: 4.8, 19: 5.0, 20: 5.2,
    21: 5.4, 22: 5.6, 23: 5.8, 24: 6.0, 25: 6.2, 26: 6.4, 27: 6.6, 28: 6.8, 29: 7.0, 30: 7.2,
    31: 7.4, 32: 7.6, 33: 7.8, 34: 8.0, 35: 8.2, 36: 8.4, 37: 8.6, 38: 8.8, 39: 9.0, 40: 9.2,
    41: 9.4, 42: 9.6, 43: 9.8, 44: 10.0, 45: 10.2, 46: 10.4, 47: 10.6, 48: 10.8, 49: 10.9, 50: 11.0,
    51: 11.1, 52: 11.2, 53: 11.3, 54: 11.4, 55: 11.5, 56: 11.6, 57: 11.7, 58: 11.8, 59: 11.9, 60: 12.0,
}

MAX_ADJUSTMENT = 12.0


class MissingHandicapError(Exception):
    """Raised when a handicap is needed but none is known."""

    code = "missing_handicap"


def get_adjustment_factor(difference: float) -> float:
    """Adjustment for a handicap difference.

    Fractional differences are floored to the table key below them.

    Examples:
        >>> get_adjustment_factor(13)
        3.8
        >>> get_adjustment_factor(0)
        0
        >>> get_adjustment_factor(75)
        12.0
    """
    difference = abs(difference)
    if difference >= 60:
        return MAX_ADJUSTMENT
    key = math.floor(difference)
    if key == 0:
        return 0
    return ADJUSTMENT_TABLE[key]


def effective_handicap(singles: Optional[float], doubles: Optional[float]) -> float:
    """Better (lower) of a player's singles and doubles handicaps.

    Raises:
        MissingHandicapError: If neither handicap is known
    """
    if singles is not None and doubles is not None:
        return min(singles, doubles)
    if singles is not None:
        return singles
    if doubles is not None:
        return doubles
    raise MissingHandicapError("No singles or doubles handicap available")


def calculate_team_handicap(handicap_a: float, handicap_b: float) -> TeamHandicapResult:
    """Team handicap for two partners.

    Algorithm:
    1. difference = |A - B|
    2. adjustment = table lookup on the difference (0 for 0, capped at 12.0)
    3. team handicap = min(A, B) + adjustment

    Examples:
        >>> calculate_team_handicap(32, 45).team_handicap
        35.8
    """
    difference = abs(handicap_a - handicap_b)
    adjustment = get_adjustment_factor(difference)
    better = min(handicap_a, handicap_b)

    return TeamHandicapResult(
        success=True,
        team_handicap=better + adjustment,
        difference=difference,
        adjustment=adjustment,
        better_handicap=better,
        player_a_handicap=handicap_a,
        player_b_handicap=handicap_b,
    )


def calculate_pair_handicap(player_a: Participant, player_b: Participant) -> TeamHandicapResult:
    """Team handicap for two participants, using each one's effective handicap.

    A missing handicap is reported in the result (``success=False``) rather
    than raised.
    """
    handicaps = []
    for player in (player_a, player_b):
        try:
            handicaps.append(effective_handicap(player.singles_handicap, player.doubles_handicap))
        except MissingHandicapError:
            handicaps.append(None)

    if None in handicaps:
        return TeamHandicapResult(
            success=False,
            player_a_handicap=handicaps[0],
            player_b_handicap=handicaps[1],
            error="Missing handicap data for one or both players",
            error_code=MissingHandicapError.code,
        )

    return calculate_team_handicap(handicaps[0], handicaps[1])


def validate_algorithm() -> tuple[bool, str]:
    """Check the calculator against the IRTPA worked example (32 & 45 -> 35.8).

    Returns:
        Tuple of (is_valid, message)
    """
    result = calculate_team_handicap(32, 45)
    is_valid = (
        result.difference == 13
        and result.adjustment == 3.8
        and math.isclose(result.team_handicap, 35.8)
    )
    if is_valid:
        return True, "Algorithm validation passed"
    return False, (
        f"Algorithm validation FAILED: expected 13 / 3.8 / 35.8, got "
        f"{result.difference} / {result.adjustment} / {result.team_handicap}"
    )
