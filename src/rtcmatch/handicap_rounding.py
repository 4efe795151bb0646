"""Handicap rounding for class events.

Keeps a displayed handicap inside the bounds of the event's class, so a 45
entered in a 3rd Class draw is shown as 39.
"""

from typing import NamedTuple, Optional, Union

Number = Union[int, float]


class ClassBounds(NamedTuple):
    """Lowest and highest handicap allowed in a class (None = open)."""

    min: Optional[float]
    max: Optional[float]


# Checked in order against the lower-cased event name
CLASS_BOUNDS: dict[str, Optional[ClassBounds]] = {
    "4th class": ClassBounds(40.0, 49.0),
    "4th": ClassBounds(40.0, 49.0),
    "3rd class": ClassBounds(30.0, 39.0),
    "3rd": ClassBounds(30.0, 39.0),
    "2nd class": ClassBounds(20.0, 29.0),
    "2nd": ClassBounds(20.0, 29.0),
    "1st class": ClassBounds(None, 19.0),
    "1st": ClassBounds(None, 19.0),
}

# Events that are never rounded
OPEN_EVENT_MARKERS = ("club", "championship", "champ")

# At or below this a handicap is never rounded (already 1st Class)
NEVER_ROUND_AT_OR_BELOW = 19


def get_event_class_bounds(event_name: Optional[str]) -> Optional[ClassBounds]:
    """Class bounds for an event, or None when the event is not rounded.

    Examples:
        >>> get_event_class_bounds("3rd Class Singles")
        ClassBounds(min=30.0, max=39.0)
        >>> get_event_class_bounds("Club Championship") is None
        True
    """
    if not event_name:
        return None

    lower_name = event_name.lower()
    if any(marker in lower_name for marker in OPEN_EVENT_MARKERS):
        return None

    for key, bounds in CLASS_BOUNDS.items():
        if bounds and key in lower_name:
            return bounds

    return None


def round_handicap_for_class(handicap: Number, bounds: Optional[ClassBounds]) -> Number:
    """Clamp a handicap into class bounds.

    Plus players (negative values) and handicaps of 19 or better are never
    rounded.
    """
    if bounds is None:
        return handicap
    if handicap < 0 or handicap <= NEVER_ROUND_AT_OR_BELOW:
        return handicap

    rounded = handicap
    if bounds.max is not None and rounded > bounds.max:
        rounded = bounds.max
    if bounds.min is not None and rounded < bounds.min:
        rounded = bounds.min
    return rounded


def round_handicap(handicap: Number, event_name: Optional[str]) -> Number:
    """Round a handicap for the class of ``event_name``.

    Examples:
        >>> round_handicap(45, "3rd Class")
        39.0
        >>> round_handicap(15, "3rd Class")
        15
    """
    return round_handicap_for_class(handicap, get_event_class_bounds(event_name))


def format_handicap_for_display(handicap: Optional[Number]) -> str:
    """Render a handicap the way it is printed on the draw.

    Internal -5 is shown as "+5"; whole numbers drop the trailing ".0".
    """
    if handicap is None:
        return ""
    if handicap < 0:
        return f"+{_format_number(abs(handicap))}"
    return _format_number(handicap)


def process_handicap_for_display(handicap: Optional[Number], event_name: Optional[str]) -> str:
    """Round for the event class, then format for display."""
    if handicap is None:
        return ""
    return format_handicap_for_display(round_handicap(handicap, event_name))


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
