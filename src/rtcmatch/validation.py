"""Entry validation rules.

This module implements the club's entry rules for handicap events:
- At most 4 entries per player
- No re-entering a draw the player has already won
- Handicap must be within the class range
- Doubles teams in "120" events must not exceed the team handicap limit
- Players must be available for finals night
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from rtcmatch.models import Entry, Event
from rtcmatch.team_handicap import calculate_team_handicap

DEFAULT_MAX_ENTRIES = 4
DEFAULT_TEAM_HANDICAP_LIMIT = 120.0


class ValidationError(Exception):
    """Raised when entries fail validation and the caller asked for strictness."""

    pass


@dataclass
class EntryProblem:
    """Errors found for one entry (or one player across entries)."""

    player_name: str
    errors: list[str]
    entry_index: Optional[int] = None


@dataclass
class ValidationReport:
    """Outcome of validating an event's entries."""

    total_entries: int
    errors: list[EntryProblem] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def valid_entries(self) -> int:
        flagged = {p.entry_index for p in self.errors if p.entry_index is not None}
        return self.total_entries - len(flagged)


# Court tennis class ranges: (marker in event name, low, high, label)
COURT_TENNIS_RANGES = [
    ("first class", 0, 10, "First Class (0-10)"),
    ("class 1", 10, 20, "Class 1 (10-20)"),
    ("class 2", 20, 30, "Class 2 (20-30)"),
    ("class 3", 30, 40, "Class 3 (30-40)"),
    ("class 4", 40, 50, "Class 4 (40-50)"),
    ("class 5", 50, None, "Class 5 (50+)"),
]

RACQUETS_RANGES = [
    ("championship", 0, 15, "Championship (0-15)"),
    ("class 1", 15, 30, "Class 1 (15-30)"),
    ("class 2", 30, 45, "Class 2 (30-45)"),
    ("class 3", 45, None, "Class 3 (45+)"),
]


def validate_handicap_range(handicap: float, event_name: str) -> tuple[bool, str]:
    """Validate a handicap against the class range named in the event.

    Events without a recognised class (squash, age events, open draws) have
    no range.

    Args:
        handicap: Player handicap (negative = plus player)
        event_name: Event name, e.g. "Court Tennis Class 3 Singles"

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_handicap_range(35, "Court Tennis Class 3 Singles")
        (True, '')
        >>> validate_handicap_range(25, "Court Tennis Class 3 Singles")
        (False, 'Handicap 25 out of range for Class 3 (30-40)')
    """
    name = event_name.lower()

    if "court tennis" in name:
        ranges = COURT_TENNIS_RANGES
    elif "racquets" in name:
        ranges = RACQUETS_RANGES
    else:
        return True, ""

    for marker, low, high, label in ranges:
        if marker not in name:
            continue
        if handicap < low or (high is not None and handicap > high):
            return False, f"Handicap {handicap:g} out of range for {label}"
        return True, ""

    return True, ""


def validate_entry(
    entry: Entry, event: Event, previous_winners: Sequence[str] = ()
) -> list[str]:
    """Validate a single entry.

    Returns:
        List of error messages (empty if the entry is valid)
    """
    errors = []
    player_name = (entry.player_name or "").strip()

    if not player_name:
        errors.append("Missing player name")

    # Squash and racquets do not use handicaps for entry
    if event.sport == "court-tennis" and (event.is_singles or event.is_doubles):
        if entry.handicap is None:
            errors.append("Missing handicap data")
        else:
            is_valid, message = validate_handicap_range(entry.handicap, event.name)
            if not is_valid:
                errors.append(message)

    if player_name and previous_winners:
        normalized = player_name.lower()
        if any(w.lower().strip() == normalized for w in previous_winners):
            errors.append("Player has previously won this draw and cannot re-enter")

    if entry.finals_night_available is False:
        errors.append("Player marked as unavailable for finals night")

    return errors


def count_entries_per_player(entries: Sequence[Entry]) -> dict[str, int]:
    """Count entries by normalised player name (entries without a name are skipped)."""
    counts: dict[str, int] = {}
    for entry in entries:
        name = (entry.player_name or "").lower().strip()
        if not name:
            continue
        counts[name] = counts.get(name, 0) + 1
    return counts


def validate_doubles_teams(
    entries: Sequence[Entry], limit: float = DEFAULT_TEAM_HANDICAP_LIMIT
) -> list[EntryProblem]:
    """Check IRTPA team handicaps for "120" doubles events.

    Each doubles entry carries both partners' handicaps after enrichment.
    """
    problems = []
    for index, entry in enumerate(entries):
        if not entry.partner_name or not entry.player_name:
            continue
        if "120" not in (entry.event_name or ""):
            continue
        if entry.handicap is None or entry.partner_handicap is None:
            continue

        result = calculate_team_handicap(entry.handicap, entry.partner_handicap)
        if result.team_handicap > limit:
            problems.append(
                EntryProblem(
                    player_name=entry.player_name.lower().strip(),
                    entry_index=index,
                    errors=[f"Team handicap {result.team_handicap:.1f} exceeds {limit:g} limit"],
                )
            )
    return problems


def validate_entries(
    entries: Sequence[Entry],
    event: Event,
    previous_winners: Sequence[str] = (),
    max_entries: int = DEFAULT_MAX_ENTRIES,
    team_handicap_limit: float = DEFAULT_TEAM_HANDICAP_LIMIT,
) -> ValidationReport:
    """Validate all entries for an event.

    Args:
        entries: Entries for the event
        event: Event definition
        previous_winners: Names of players who have won this draw before
        max_entries: Maximum entries allowed per player
        team_handicap_limit: Team handicap ceiling for "120" doubles events

    Returns:
        ValidationReport with per-entry and cross-entry problems
    """
    report = ValidationReport(total_entries=len(entries))

    for index, entry in enumerate(entries):
        errors = validate_entry(entry, event, previous_winners)
        if errors:
            report.errors.append(
                EntryProblem(player_name=entry.player_name, entry_index=index, errors=errors)
            )

    for name, count in count_entries_per_player(entries).items():
        if count > max_entries:
            report.errors.append(
                EntryProblem(
                    player_name=name,
                    errors=[f"Player has {count} entries (maximum {max_entries} allowed)"],
                )
            )

    if event.is_doubles:
        report.errors.extend(validate_doubles_teams(entries, team_handicap_limit))

    unavailable = sum(1 for e in entries if e.availability is None)
    if unavailable and unavailable < len(entries):
        report.warnings.append(
            f"{unavailable} entries have no Day/Night availability and will be placed where there is room"
        )

    return report


def ensure_valid(report: ValidationReport) -> None:
    """Raise ValidationError if the report holds any errors."""
    if not report.valid:
        raise ValidationError(
            f"{len(report.errors)} validation problem(s) in {report.total_entries} entries"
        )


def generate_validation_report(report: ValidationReport) -> str:
    """Format a validation report for display."""
    lines = [
        "Validation Report",
        "=================",
        "",
        f"Total Entries: {report.total_entries}",
        f"Valid Entries: {report.valid_entries}",
        f"Errors: {len(report.errors)}",
        f"Warnings: {len(report.warnings)}",
        "",
    ]

    if report.errors:
        lines.append("ERRORS:")
        for i, problem in enumerate(report.errors, start=1):
            lines.append("")
            lines.append(f"{i}. {problem.player_name}")
            for error in problem.errors:
                lines.append(f"   - {error}")

    if report.warnings:
        lines.append("")
        lines.append("WARNINGS:")
        for i, warning in enumerate(report.warnings, start=1):
            lines.append(f"{i}. {warning}")

    if report.valid:
        lines.append("")
        lines.append("All entries are valid")

    return "\n".join(lines) + "\n"
