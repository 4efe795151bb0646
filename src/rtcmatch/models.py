"""Data models for rtcmatch.

Domain model hierarchy:
- Entry is one row of an event's entry list (player, partner, handicaps)
- Participant is what the draw works with (an entry, or a BYE)
- Bracket contains Rounds (only Round 1 is generated)
- Round contains Matches
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

# Bracket sizes the draw templates exist for
ALLOWED_BRACKET_SIZES = (8, 16, 32, 64, 128)

BYE_NAME = "BYE"


class Availability(str, Enum):
    """Session a participant can play in."""

    DAY = "D"
    NIGHT = "N"


class EventType(str, Enum):
    """Event format."""

    SINGLES = "singles"
    DOUBLES = "doubles"


# ============================================================================
# Participants
# ============================================================================


@dataclass(frozen=True)
class Participant:
    """A bracket entrant (player or doubles pair), or the BYE sentinel.

    Participants are never mutated once placed. ``with_seed`` returns a copy
    carrying the slot-derived seed.
    """

    name: str
    is_bye: bool = False
    seed: Optional[int] = None  # slot index + 1, assigned at placement
    availability: Optional[Availability] = None
    singles_handicap: Optional[float] = None
    doubles_handicap: Optional[float] = None

    def with_seed(self, seed: int) -> "Participant":
        """Return a copy of this participant seeded at ``seed``."""
        return replace(self, seed=seed)

    @property
    def handicap(self) -> Optional[float]:
        """Handicap shown next to the name (singles first, then doubles)."""
        if self.singles_handicap is not None:
            return self.singles_handicap
        return self.doubles_handicap

    def __str__(self) -> str:
        """String representation."""
        if self.is_bye:
            return BYE_NAME
        seed_str = f"[{self.seed}] " if self.seed else ""
        return f"{seed_str}{self.name}"


def create_bye() -> Participant:
    """Create a BYE sentinel. BYEs carry no identity and may be repeated."""
    return Participant(name=BYE_NAME, is_bye=True, seed=None)


@dataclass
class Entry:
    """One entry from an event entry list, before it becomes a participant."""

    player_name: str
    event_name: str = ""
    event_type: EventType = EventType.SINGLES
    handicap: Optional[float] = None
    partner_name: Optional[str] = None
    partner_handicap: Optional[float] = None
    availability: Optional[Availability] = None
    finals_night_available: Optional[bool] = None

    @property
    def display_name(self) -> str:
        """Player name, with the partner appended for doubles."""
        if self.partner_name:
            return f"{self.player_name} & {self.partner_name}"
        return self.player_name

    def to_participant(self) -> Participant:
        """Convert the entry to a draw participant."""
        is_doubles = self.event_type == EventType.DOUBLES
        return Participant(
            name=self.display_name,
            availability=self.availability,
            singles_handicap=None if is_doubles else self.handicap,
            doubles_handicap=self.handicap if is_doubles else None,
        )


@dataclass
class Event:
    """Tournament event definition (e.g. "3rd Class Doubles")."""

    name: str
    sport: str = "court-tennis"

    @property
    def is_doubles(self) -> bool:
        return "doubles" in self.name.lower()

    @property
    def is_singles(self) -> bool:
        return "singles" in self.name.lower()


# ============================================================================
# Bracket Structure Models
# ============================================================================


@dataclass
class Match:
    """A first-round match.

    ``winner`` is set when exactly one side is a BYE; every other match is
    decided outside the draw.
    """

    match_number: int  # 1-based, contiguous
    player1: Optional[Participant] = None
    player2: Optional[Participant] = None
    winner: Optional[Participant] = None

    @property
    def is_play_in(self) -> bool:
        """Both sides are real participants."""
        return (
            self.player1 is not None
            and self.player2 is not None
            and not self.player1.is_bye
            and not self.player2.is_bye
        )

    @property
    def is_bye_match(self) -> bool:
        """Exactly one side is a BYE."""
        if self.player1 is None or self.player2 is None:
            return False
        return self.player1.is_bye != self.player2.is_bye

    @property
    def is_empty(self) -> bool:
        """Neither side holds a real participant."""
        return all(p is None or p.is_bye for p in (self.player1, self.player2))

    def __str__(self) -> str:
        """String representation."""
        return f"Match {self.match_number}: {self.player1} vs {self.player2}"


@dataclass
class Round:
    """A bracket round."""

    round_number: int
    round_name: str
    matches: list[Match] = field(default_factory=list)


@dataclass
class Bracket:
    """Knockout bracket. Only Round 1 is generated; later rounds are filled by hand."""

    bracket_size: int
    participant_count: int
    rounds: list[Round] = field(default_factory=list)

    @property
    def round1(self) -> Optional[Round]:
        return self.rounds[0] if self.rounds else None

    def __str__(self) -> str:
        """String representation."""
        return f"Bracket of {self.bracket_size} ({self.participant_count} participants)"


# ============================================================================
# Result Models
# ============================================================================


@dataclass
class PlacementStats:
    """Figures describing how a draw was laid out."""

    participant_count: int
    bracket_size: int
    round2_slots: int
    play_in_match_count: int
    play_in_participant_count: int
    bye_to_round2_count: int
    bye_count: int
    random_placement: bool = False
    day_players: int = 0
    night_players: int = 0
    flexible_players: int = 0  # untagged players merged into Day/Night
    day_play_in_matches: int = 0
    night_play_in_matches: int = 0
    mixed_play_in_matches: int = 0  # Day vs Night match at the session boundary
    day_overflow: int = 0  # Day players placed in the bottom half
    night_overflow: int = 0  # Night players placed in the top half
    night_section_start: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class PlacementResult:
    """Outcome of a placement request."""

    success: bool
    slots: list[Participant] = field(default_factory=list)
    stats: Optional[PlacementStats] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class BracketResult:
    """Outcome of a bracket generation request."""

    success: bool
    bracket: Optional[Bracket] = None
    bye_count: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class TeamHandicapResult:
    """IRTPA doubles team handicap calculation."""

    success: bool
    team_handicap: Optional[float] = None
    difference: Optional[float] = None
    adjustment: Optional[float] = None
    better_handicap: Optional[float] = None
    player_a_handicap: Optional[float] = None
    player_b_handicap: Optional[float] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
