"""Bracket placement engine.

Places a variable number of participants into a fixed-size first round.

Partial brackets use the play-in rule: with ``n`` participants in a bracket
of ``size``, ``max(0, n - size/2)`` first-round matches are real contests
("play-ins") and every other participant gets a bye straight into round 2.
Which match numbers host play-ins is drawn at random, so play-ins are
spread over the bracket instead of stacked at one end.

When any participant carries Day/Night availability, Day players are drawn
into the top half and Night players into the bottom half. A group too big
for its half stays contiguous and spills across the half line next to its
own section.
"""

import logging
import random
from typing import Optional, Sequence

from rtcmatch.models import (
    ALLOWED_BRACKET_SIZES,
    Availability,
    Participant,
    PlacementResult,
    PlacementStats,
    create_bye,
)
from rtcmatch.shuffle import make_rng, shuffle

logger = logging.getLogger(__name__)

# Round-1 match kinds
PLAY_IN = "play_in"
BYE_MATCH = "bye"
EMPTY_MATCH = "empty"


class PlacementError(Exception):
    """Base class for placement failures."""

    code = "placement_error"


class InvalidSizeError(PlacementError):
    """Bracket size not allowed, or too small for the field."""

    code = "invalid_size"


class EmptyInputError(PlacementError):
    """No participants to place."""

    code = "empty_input"


class ImbalancedAllocationError(PlacementError):
    """Play-in allocation does not add up. Indicates a logic defect."""

    code = "imbalanced_allocation"


def check_bracket_size(bracket_size: int) -> None:
    """Raise InvalidSizeError unless ``bracket_size`` is 8, 16, 32, 64 or 128."""
    if isinstance(bracket_size, bool) or not isinstance(bracket_size, int) or (
        bracket_size not in ALLOWED_BRACKET_SIZES
    ):
        raise InvalidSizeError(
            f"Invalid bracket size {bracket_size!r}. Must be 8, 16, 32, 64, or 128"
        )


def play_in_match_count(participant_count: int, bracket_size: int) -> int:
    """Number of round-1 matches that must be played between two real participants.

    Examples:
        >>> play_in_match_count(73, 128)
        9
        >>> play_in_match_count(40, 128)
        0
    """
    return max(0, participant_count - bracket_size // 2)


def allocate_play_ins(
    total: int, day_count: int, night_count: int, matches_per_half: int
) -> tuple[int, int]:
    """Split ``total`` play-in matches between the Day and Night groups.

    The ideal split is proportional to group size (rounded half up). Each
    side is then clamped to what its members can supply (two per play-in)
    with the shortfall pushed to the other side. Finally play-ins are shifted
    towards a group that would otherwise need more matches than its half has.

    Returns:
        Tuple of (day_play_ins, night_play_ins), always summing to ``total``

    Raises:
        ImbalancedAllocationError: If the groups cannot supply ``total`` play-ins
    """
    group_total = day_count + night_count
    if total <= 0:
        return 0, 0
    if group_total == 0:
        raise ImbalancedAllocationError(f"No participants to supply {total} play-in matches")

    day_cap = day_count // 2
    night_cap = night_count // 2

    ideal_day = int(total * day_count / group_total + 0.5)
    day_play_ins = min(ideal_day, day_cap)
    night_play_ins = min(total - day_play_ins, night_cap)
    day_play_ins = min(total - night_play_ins, day_cap)

    if day_play_ins + night_play_ins != total:
        raise ImbalancedAllocationError(
            f"Cannot allocate {total} play-in matches between {day_count} Day "
            f"and {night_count} Night participants"
        )

    # Keep each group inside its own half where the split allows it
    while (
        day_count - day_play_ins > matches_per_half
        and night_play_ins > 0
        and day_play_ins < day_cap
    ):
        day_play_ins += 1
        night_play_ins -= 1
    while (
        night_count - night_play_ins > matches_per_half
        and day_play_ins > 0
        and night_play_ins < night_cap
    ):
        night_play_ins += 1
        day_play_ins -= 1

    return day_play_ins, night_play_ins


def place_participants(
    participants: Sequence[Participant],
    bracket_size: int,
    rng: Optional[random.Random] = None,
) -> tuple[list[Participant], PlacementStats]:
    """Place participants into a first-round slot array.

    Args:
        participants: Real participants (BYEs and None entries are ignored)
        bracket_size: 8, 16, 32, 64 or 128
        rng: Random generator for the draw (a fresh unseeded one if omitted)

    Returns:
        Tuple of (slots, stats). ``slots`` has ``bracket_size`` entries, each a
        seeded copy of a participant (seed = slot index + 1) or a BYE.

    Raises:
        InvalidSizeError: Bracket size not allowed or smaller than the field
        EmptyInputError: No participants
    """
    check_bracket_size(bracket_size)
    players = [p for p in (participants or []) if p is not None and not p.is_bye]
    if not players:
        raise EmptyInputError("No participants to place")
    if len(players) > bracket_size:
        raise InvalidSizeError(
            f"{len(players)} participants do not fit in a bracket of {bracket_size}"
        )

    if rng is None:
        rng = make_rng()

    day = [p for p in players if p.availability == Availability.DAY]
    night = [p for p in players if p.availability == Availability.NIGHT]
    flexible = [p for p in players if p.availability not in (Availability.DAY, Availability.NIGHT)]

    if not day and not night:
        slots, stats = _place_random(players, bracket_size, rng)
    else:
        for player in shuffle(flexible, rng):
            # Untagged players join whichever session is lighter
            if len(day) <= len(night):
                day.append(player)
            else:
                night.append(player)
        if len(players) == bracket_size:
            slots, stats = _place_full_by_availability(day, night, bracket_size, rng)
        else:
            slots, stats = _place_play_in_by_availability(day, night, bracket_size, rng)
        stats.flexible_players = len(flexible)

    _fill_empty_slots(slots)

    logger.debug(
        "Placed %d participants in bracket of %d: %d play-in matches, %d byes to round 2",
        stats.participant_count,
        bracket_size,
        stats.play_in_match_count,
        stats.bye_to_round2_count,
    )
    return slots, stats


def seed_participants(
    participants: Sequence[Participant],
    bracket_size: int,
    random_seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> PlacementResult:
    """Place participants and report the outcome as a result object.

    Placement errors are returned (``success=False`` with ``error`` and
    ``error_code``) rather than raised.
    """
    if rng is None:
        rng = make_rng(random_seed)
    try:
        slots, stats = place_participants(participants, bracket_size, rng)
    except PlacementError as e:
        logger.info("Placement failed: %s", e)
        return PlacementResult(success=False, error=str(e), error_code=e.code)
    return PlacementResult(success=True, slots=slots, stats=stats)


# ============================================================================
# Placement strategies
# ============================================================================


def _base_stats(participant_count: int, bracket_size: int) -> PlacementStats:
    play_ins = play_in_match_count(participant_count, bracket_size)
    return PlacementStats(
        participant_count=participant_count,
        bracket_size=bracket_size,
        round2_slots=bracket_size // 2,
        play_in_match_count=play_ins,
        play_in_participant_count=play_ins * 2,
        bye_to_round2_count=participant_count - play_ins * 2,
        bye_count=bracket_size - participant_count,
    )


def _place_random(
    players: list[Participant], bracket_size: int, rng: random.Random
) -> tuple[list[Optional[Participant]], PlacementStats]:
    """No availability data: shuffle everyone and draw play-ins across the whole bracket."""
    stats = _base_stats(len(players), bracket_size)
    stats.random_placement = True

    slots: list[Optional[Participant]] = [None] * bracket_size
    _fill_region(
        slots,
        range(bracket_size // 2),
        shuffle(players, rng),
        stats.play_in_match_count,
        rng,
    )
    return slots, stats


def _place_play_in_by_availability(
    day: list[Participant],
    night: list[Participant],
    bracket_size: int,
    rng: random.Random,
) -> tuple[list[Optional[Participant]], PlacementStats]:
    """Partial bracket: Day region at the top, Night region at the bottom."""
    stats = _base_stats(len(day) + len(night), bracket_size)
    match_count = bracket_size // 2
    half_matches = match_count // 2

    day_play_ins, night_play_ins = allocate_play_ins(
        stats.play_in_match_count, len(day), len(night), half_matches
    )
    day_region, night_region = _group_regions(
        len(day) - day_play_ins, len(night) - night_play_ins, match_count
    )

    slots: list[Optional[Participant]] = [None] * bracket_size
    day_indices = _fill_region(slots, day_region, shuffle(day, rng), day_play_ins, rng)
    night_indices = _fill_region(slots, night_region, shuffle(night, rng), night_play_ins, rng)

    half = bracket_size // 2
    stats.day_players = len(day)
    stats.night_players = len(night)
    stats.day_play_in_matches = day_play_ins
    stats.night_play_in_matches = night_play_ins
    stats.day_overflow = sum(1 for i in day_indices if i >= half)
    stats.night_overflow = sum(1 for i in night_indices if i < half)
    stats.night_section_start = night_region.start * 2
    return slots, stats


def _place_full_by_availability(
    day: list[Participant],
    night: list[Participant],
    bracket_size: int,
    rng: random.Random,
) -> tuple[list[Optional[Participant]], PlacementStats]:
    """Full bracket: Day fills from the top, Night from the bottom, no byes.

    The larger group crosses the half line, so its overflow sits directly
    against its own block.
    """
    stats = _base_stats(len(day) + len(night), bracket_size)
    slots: list[Optional[Participant]] = [None] * bracket_size

    for index, player in enumerate(shuffle(day, rng)):
        slots[index] = player.with_seed(index + 1)

    night_start = bracket_size - len(night)
    for offset, player in enumerate(shuffle(night, rng)):
        index = night_start + offset
        slots[index] = player.with_seed(index + 1)

    half = bracket_size // 2
    stats.day_players = len(day)
    stats.night_players = len(night)
    stats.day_play_in_matches = len(day) // 2
    stats.night_play_in_matches = len(night) // 2
    stats.mixed_play_in_matches = len(day) % 2
    stats.day_overflow = max(0, len(day) - half)
    stats.night_overflow = max(0, len(night) - half)
    stats.night_section_start = night_start
    return slots, stats


# ============================================================================
# Helpers
# ============================================================================


def _group_regions(day_matches: int, night_matches: int, match_count: int) -> tuple[range, range]:
    """Match-index ranges for the Day and Night groups.

    Normally the halves; a group needing more than half the matches keeps
    its block contiguous and the other group takes what is left.
    """
    half = match_count // 2
    if day_matches > half:
        return range(0, day_matches), range(day_matches, match_count)
    if night_matches > half:
        night_start = match_count - night_matches
        return range(0, night_start), range(night_start, match_count)
    return range(0, half), range(half, match_count)


def _fill_region(
    slots: list[Optional[Participant]],
    region: range,
    players: list[Participant],
    play_ins: int,
    rng: random.Random,
) -> list[int]:
    """Seat ``players`` (already shuffled) in the matches of ``region``.

    ``play_ins`` matches get two players, one match per remaining player gets
    a player and a BYE, and any matches left over are BYE vs BYE. Which match
    gets which kind is drawn at random.

    Returns:
        Slot indices that received a real participant
    """
    bye_matches = len(players) - 2 * play_ins
    empty_matches = len(region) - play_ins - bye_matches
    if play_ins < 0 or bye_matches < 0 or empty_matches < 0:
        raise ImbalancedAllocationError(
            f"{len(players)} participants with {play_ins} play-ins do not fit "
            f"in {len(region)} matches"
        )

    kinds = shuffle(
        [PLAY_IN] * play_ins + [BYE_MATCH] * bye_matches + [EMPTY_MATCH] * empty_matches,
        rng,
    )
    queue = iter(players)
    placed = []
    for match_index, kind in zip(region, kinds):
        top = match_index * 2
        if kind == EMPTY_MATCH:
            slots[top] = create_bye()
            slots[top + 1] = create_bye()
            continue

        slots[top] = next(queue).with_seed(top + 1)
        placed.append(top)
        if kind == PLAY_IN:
            slots[top + 1] = next(queue).with_seed(top + 2)
            placed.append(top + 1)
        else:
            slots[top + 1] = create_bye()
    return placed


def _fill_empty_slots(slots: list[Optional[Participant]]) -> None:
    """Replace any slot left unset with a BYE."""
    missing = [i for i, slot in enumerate(slots) if slot is None]
    if missing:
        logger.warning("Filling %d unset slots with BYEs: %s", len(missing), missing)
        for i in missing:
            slots[i] = create_bye()
