"""CSV import/export utilities."""

import csv
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from rtcmatch.exports import frame_name
from rtcmatch.handicap_rounding import process_handicap_for_display
from rtcmatch.models import Availability, Bracket, Entry, EventType, Participant

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"name"}

_AVAILABILITY_VALUES = {
    "D": Availability.DAY,
    "DAY": Availability.DAY,
    "N": Availability.NIGHT,
    "NIGHT": Availability.NIGHT,
}
_TRUE_VALUES = {"yes", "y", "true", "1"}
_FALSE_VALUES = {"no", "n", "false", "0"}


class CSVImportError(Exception):
    """Error during CSV import."""
    pass


def parse_handicap(value: Union[str, float, int, None]) -> Optional[float]:
    """Parse a handicap as written on entry forms.

    A leading "+" marks a plus player, stored as a negative number.

    Examples:
        >>> parse_handicap("+5")
        -5.0
        >>> parse_handicap("32")
        32.0
        >>> parse_handicap("") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if not text:
        return None

    try:
        if text.startswith("+"):
            return -float(text[1:])
        return float(text)
    except ValueError:
        return None


def parse_availability(value: Optional[str]) -> Optional[Availability]:
    """Map "D"/"Day"/"N"/"Night" (any case) to an Availability; anything else is untagged."""
    if not value:
        return None
    return _AVAILABILITY_VALUES.get(value.strip().upper())


def validate_entry_row(row: dict, row_num: int) -> dict:
    """Validate an entry row from CSV.

    Args:
        row: Dictionary with CSV columns
        row_num: Row number for error messages

    Returns:
        Validated dictionary with cleaned data

    Raises:
        CSVImportError: If validation fails
    """
    name = (row.get("name") or "").strip()
    if not name:
        raise CSVImportError(f"Row {row_num}: Missing required field 'name'")

    validated = {
        "player_name": name,
        "event_name": (row.get("event") or "").strip(),
        "partner_name": (row.get("partner_name") or "").strip() or None,
    }

    for column, key in (("handicap", "handicap"), ("partner_handicap", "partner_handicap")):
        raw = (row.get(column) or "").strip()
        value = parse_handicap(raw)
        if raw and value is None:
            raise CSVImportError(f"Row {row_num}: '{column}' must be a number, got '{raw}'")
        validated[key] = value

    raw_availability = (row.get("availability") or "").strip()
    validated["availability"] = parse_availability(raw_availability)
    if raw_availability and validated["availability"] is None:
        logger.warning(
            "Row %d: availability '%s' not recognised, treating as untagged", row_num, raw_availability
        )

    finals = (row.get("finals_night") or "").strip().lower()
    if not finals:
        validated["finals_night_available"] = None
    elif finals in _TRUE_VALUES:
        validated["finals_night_available"] = True
    elif finals in _FALSE_VALUES:
        validated["finals_night_available"] = False
    else:
        raise CSVImportError(
            f"Row {row_num}: 'finals_night' must be yes or no, got '{row.get('finals_night')}'"
        )

    return validated


def import_entries_csv(
    csv_path: Union[str, Path],
    event_filter: Optional[str] = None,
    skip_duplicates: bool = True,
) -> list[Entry]:
    """Import event entries from a CSV file.

    CSV format:
        name,event,partner_name,handicap,partner_handicap,availability,finals_night
        Jane Smith,3rd Class Doubles,John Brown,32,+2,D,yes

    Only ``name`` is required. Entries with a partner are doubles entries.

    Args:
        csv_path: Path to CSV file
        event_filter: Only import entries for this event (case-insensitive, None = all).
            Rows with a blank event are always kept.
        skip_duplicates: Skip rows repeating an earlier (name, partner, event)

    Returns:
        List of Entry objects

    Raises:
        CSVImportError: If file not found or validation fails
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise CSVImportError(f"CSV file not found: {csv_path}")

    entries = []
    seen = set()
    skipped_count = 0

    with open(csv_file, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)

        fieldnames = {(name or "").strip().lower() for name in (reader.fieldnames or [])}
        if not REQUIRED_COLUMNS.issubset(fieldnames):
            missing = REQUIRED_COLUMNS - fieldnames
            raise CSVImportError(f"CSV missing required columns: {missing}")

        for row_num, raw_row in enumerate(reader, start=2):  # Row 1 is the header
            row = {(k or "").strip().lower(): v for k, v in raw_row.items()}
            validated = validate_entry_row(row, row_num)

            # Rows without an event belong to whichever event is being imported
            event_name = validated["event_name"]
            if event_filter and event_name and event_name.lower() != event_filter.lower():
                skipped_count += 1
                continue

            key = (
                validated["player_name"].lower(),
                (validated["partner_name"] or "").lower(),
                validated["event_name"].lower(),
            )
            if skip_duplicates and key in seen:
                logger.warning("Row %d: Duplicate entry for %s, skipping", row_num, validated["player_name"])
                skipped_count += 1
                continue
            seen.add(key)

            event_type = EventType.DOUBLES if validated["partner_name"] else EventType.SINGLES
            entries.append(Entry(event_type=event_type, **validated))

    logger.info("Validated %d entries from %s", len(entries), csv_file.name)
    if skipped_count > 0:
        logger.info("Skipped %d rows (event filter or duplicates)", skipped_count)

    return entries


def export_slots_csv(slots: Sequence[Participant], path: Union[str, Path], event_name: str = "") -> None:
    """Export the placed slot array to CSV.

    Args:
        slots: Slot array from placement
        path: Output CSV path
        event_name: Event name, used to round displayed handicaps
    """
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Slot", "Frame", "Seed", "Name", "Handicap", "Availability", "Is_BYE"])

        for index, slot in enumerate(slots):
            match_number, player_number = index // 2 + 1, index % 2 + 1
            writer.writerow([
                index + 1,
                frame_name(1, match_number, player_number),
                slot.seed or "",
                slot.name,
                "" if slot.is_bye else process_handicap_for_display(slot.handicap, event_name),
                slot.availability.value if slot.availability else "",
                "YES" if slot.is_bye else "NO",
            ])


def export_round1_csv(bracket: Bracket, path: Union[str, Path], event_name: str = "") -> None:
    """Export Round 1 matches to CSV, one row per match.

    Args:
        bracket: Bracket from generate_bracket
        path: Output CSV path
        event_name: Event name, used to round displayed handicaps
    """
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "Match", "Player1", "Handicap1", "Seed1", "Player2", "Handicap2", "Seed2", "Winner",
        ])

        for match in bracket.round1.matches:
            row = [match.match_number]
            for player in (match.player1, match.player2):
                if player is None:
                    row.extend(["", "", ""])
                    continue
                handicap = "" if player.is_bye else process_handicap_for_display(player.handicap, event_name)
                row.extend([player.name, handicap, player.seed or ""])
            row.append(match.winner.name if match.winner else "")
            writer.writerow(row)
