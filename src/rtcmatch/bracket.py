"""Knockout bracket generator (Round 1 only).

Later rounds are filled in by hand from the results, so the bracket built
here always holds a single round.
"""

import logging
import math
from typing import Any, Optional, Sequence

from rtcmatch.models import (
    ALLOWED_BRACKET_SIZES,
    Bracket,
    BracketResult,
    Match,
    Participant,
    Round,
    create_bye,
)
from rtcmatch.placement import (
    EmptyInputError,
    InvalidSizeError,
    PlacementError,
    check_bracket_size,
)

logger = logging.getLogger(__name__)


def next_power_of_2(n: int) -> int:
    """Return the next power of 2 >= n.

    Examples:
        >>> next_power_of_2(5)
        8
        >>> next_power_of_2(8)
        8
        >>> next_power_of_2(15)
        16
    """
    if n <= 0:
        return 1
    return 2 ** math.ceil(math.log2(n))


def bracket_size_for(participant_count: int) -> int:
    """Smallest supported bracket size that holds ``participant_count`` entrants.

    Examples:
        >>> bracket_size_for(3)
        8
        >>> bracket_size_for(73)
        128

    Raises:
        EmptyInputError: If there are no participants
        InvalidSizeError: If the field is larger than the biggest bracket
    """
    if participant_count <= 0:
        raise EmptyInputError("No participants to place")
    size = max(ALLOWED_BRACKET_SIZES[0], next_power_of_2(participant_count))
    if size not in ALLOWED_BRACKET_SIZES:
        raise InvalidSizeError(
            f"{participant_count} participants exceed the largest bracket "
            f"({ALLOWED_BRACKET_SIZES[-1]})"
        )
    return size


def build_round1(slots: Sequence[Optional[Participant]]) -> Round:
    """Pair slot 2i with slot 2i+1 into match i+1.

    A match with exactly one BYE is decided on the spot: the other side is
    set as winner. BYE vs BYE matches are left without a winner.

    Args:
        slots: Slot array from placement (even length)

    Returns:
        Round 1 with ``len(slots) / 2`` matches
    """
    if len(slots) % 2:
        raise ValueError(f"Slot array must have an even length, got {len(slots)}")

    matches = []
    for i in range(len(slots) // 2):
        player1 = slots[i * 2]
        player2 = slots[i * 2 + 1]

        match = Match(match_number=i + 1, player1=player1, player2=player2)

        # Auto-advance against a BYE
        if player1 and player2 and player2.is_bye and not player1.is_bye:
            match.winner = player1
        elif player1 and player2 and player1.is_bye and not player2.is_bye:
            match.winner = player2

        matches.append(match)

    return Round(round_number=1, round_name=get_round_name(1), matches=matches)


def get_round_name(round_number: int) -> str:
    return f"Round {round_number}"


def assign_byes(slots: Sequence[Optional[Participant]], bracket_size: int) -> list[Participant]:
    """Return the slot array sized to ``bracket_size`` with gaps filled by BYEs.

    Slot positions are preserved; a well-formed placement passes through
    unchanged.
    """
    result: list[Participant] = []
    for i in range(bracket_size):
        slot = slots[i] if i < len(slots) else None
        if slot is None:
            logger.warning("Slot %d is empty, filling with BYE", i + 1)
            slot = create_bye()
        result.append(slot)
    return result


def generate_bracket(slots: Sequence[Optional[Participant]], bracket_size: int) -> BracketResult:
    """Build the bracket structure from a placed slot array.

    Errors (bad size, no participants) are returned in the result instead
    of being raised.
    """
    try:
        check_bracket_size(bracket_size)
        if not slots or all(s is None or s.is_bye for s in slots):
            raise EmptyInputError("No participants provided")
        if len(slots) > bracket_size:
            raise InvalidSizeError(
                f"{len(slots)} slots do not fit in a bracket of {bracket_size}"
            )
    except PlacementError as e:
        return BracketResult(success=False, error=str(e), error_code=e.code)

    filled = assign_byes(slots, bracket_size)
    bracket = Bracket(
        bracket_size=bracket_size,
        participant_count=sum(1 for p in filled if not p.is_bye),
        rounds=[build_round1(filled)],
    )
    return BracketResult(
        success=True,
        bracket=bracket,
        bye_count=sum(1 for p in filled if p.is_bye),
    )


def get_flat_match_list(bracket: Bracket) -> list[dict[str, Any]]:
    """Flatten all rounds into one list of matches, tagged with their round."""
    matches = []
    for round_ in bracket.rounds:
        for match in round_.matches:
            matches.append(
                {
                    "round_number": round_.round_number,
                    "round_name": round_.round_name,
                    "match": match,
                }
            )
    return matches


def validate_bracket(bracket: Bracket) -> tuple[bool, list[str]]:
    """Check the bracket holds a well-formed Round 1.

    Returns:
        Tuple of (is_valid, errors)
    """
    errors = []

    if len(bracket.rounds) != 1:
        errors.append(f"Expected 1 round (Round 1 only), found {len(bracket.rounds)}")

    round1 = bracket.round1
    if round1 is not None:
        expected = bracket.bracket_size // 2
        if len(round1.matches) != expected:
            errors.append(f"Round 1: Expected {expected} matches, found {len(round1.matches)}")

        empty = sum(1 for m in round1.matches if m.player1 is None and m.player2 is None)
        if empty:
            errors.append(f"Round 1: Found {empty} empty matches")

    return len(errors) == 0, errors


def get_bracket_stats(bracket: Bracket) -> dict[str, int]:
    """Summary figures for Round 1."""
    matches = bracket.round1.matches if bracket.round1 else []
    completed = sum(1 for m in matches if m.winner is not None)

    return {
        "bracket_size": bracket.bracket_size,
        "participant_count": bracket.participant_count,
        "total_rounds": 1,
        "total_matches": len(matches),
        "completed_matches": completed,
        "remaining_matches": len(matches) - completed,
        "play_in_matches": sum(1 for m in matches if m.is_play_in),
        "bye_matches": sum(1 for m in matches if m.is_bye_match),
        "current_round": 1,
    }
