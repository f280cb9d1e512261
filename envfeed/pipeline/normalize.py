from typing import Any, Dict, List, Optional, Sequence
import math
import re

from envfeed.schemas.event import (
    ArrivalCheck,
    FeedSummary,
    NormalizedEvent,
    SelectionPolicy,
    ValueRange,
)

# Upstream marks hidden rows with this literal note text.
HIDDEN_NOTE_SENTINEL = "null"

# ----------------------------
# Lenient number parsing
# ----------------------------

# Leading numeric prefix, so "12abc" -> 12 and "3.5 C" -> 3.5
INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def to_int(value: Any) -> Optional[int]:
    """Best-effort conversion to int. Returns None if conversion fails."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = INT_PREFIX_RE.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def to_float(value: Any) -> Optional[float]:
    """Best-effort conversion to a finite float. Returns None if conversion fails."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        out = float(value)
    else:
        m = FLOAT_PREFIX_RE.match(str(value))
        if not m:
            return None
        out = float(m.group(1))
    return out if math.isfinite(out) else None


def to_text(value: Any) -> str:
    """String form as JSON clients print it: true/false, 1 not 1.0."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def word_count(text: Optional[str]) -> int:
    s = (text or "").strip()
    if not s:
        return 0
    return len(s.split())


# ----------------------------
# Record normalization
# ----------------------------

def _reading(value: Any, strict_numeric: bool) -> Optional[float]:
    out = to_float(value)
    if out is None and not strict_numeric:
        return 0.0
    return out


def _temp_c(raw: Dict[str, Any]) -> Optional[float]:
    celsius = to_float(raw.get("temp_c"))
    if celsius is not None:
        return celsius
    fahrenheit = to_float(raw.get("temp_f"))
    if fahrenheit is not None:
        return (fahrenheit - 32.0) * 5.0 / 9.0
    return None


def normalize(raw: Dict[str, Any], strict_numeric: bool = False) -> NormalizedEvent:
    """Turn one untrusted feed row into a NormalizedEvent.

    Never raises on bad field values: ids default to 0, readings to 0.0
    (or None when ``strict_numeric`` is set), text fields to "".
    """
    if not isinstance(raw, dict):
        raw = {}

    temp_c = _temp_c(raw)
    if temp_c is None and not strict_numeric:
        temp_c = 0.0

    note = to_text(raw.get("note"))
    event_id = to_int(raw.get("event_id"))

    return NormalizedEvent(
        created_at=to_text(raw.get("created_at")),
        event_id=event_id if event_id is not None else 0,
        temp_c=temp_c,
        humidity_pct=_reading(raw.get("humidity_pct"), strict_numeric),
        sound_loudness=_reading(raw.get("sound_loudness"), strict_numeric),
        note=note,
        note_word_count=word_count(note),
        photo_url=to_text(raw.get("photo_url")),
    )


def ingest(raw_list: Any, strict_numeric: bool = False) -> List[NormalizedEvent]:
    """Normalize, drop sentinel-note rows and order by event_id.

    The sort is stable, so rows sharing an id keep their feed order.
    """
    if not isinstance(raw_list, list):
        return []

    events = [normalize(raw, strict_numeric=strict_numeric) for raw in raw_list]
    visible = [e for e in events if e.note != HIDDEN_NOTE_SENTINEL]
    return sorted(visible, key=lambda e: e.event_id)


# ----------------------------
# Arrival detection / selection
# ----------------------------

def max_event_id(events: Sequence[NormalizedEvent]) -> int:
    return max([0] + [e.event_id for e in events])


def detect_new_arrival(previous_max_id: int, new_set: Sequence[NormalizedEvent]) -> ArrivalCheck:
    # previous_max_id == 0 means nothing has been loaded yet: that load is the baseline
    max_id = max_event_id(new_set)
    return ArrivalCheck(
        max_id=max_id,
        is_new_arrival=max_id > previous_max_id and previous_max_id != 0,
    )


def clamp_index(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return min(max(index, 0), length - 1)


def resolve_selection(
    previous_selected_id: Optional[int],
    new_set: Sequence[NormalizedEvent],
    policy: SelectionPolicy = SelectionPolicy.PRESERVE,
    previous_index: int = 0,
    previous_length: int = 0,
) -> int:
    """Pick the index to show after the record set was replaced."""
    n = len(new_set)
    if n == 0:
        return 0
    if policy == SelectionPolicy.JUMP_TO_LATEST:
        return n - 1
    if policy == SelectionPolicy.JUMP_TO_LATEST_ON_GROWTH and n > previous_length:
        return n - 1

    if previous_selected_id is not None:
        for i, e in enumerate(new_set):
            if e.event_id == previous_selected_id:
                return i

    return clamp_index(previous_index, n)


# ----------------------------
# Value ranges (chart scaling)
# ----------------------------

def _range(values: List[Optional[float]]) -> ValueRange:
    present = [v for v in values if v is not None]
    if not present:
        return ValueRange()
    return ValueRange(min=min(present), max=max(present))


def summarize(events: Sequence[NormalizedEvent]) -> FeedSummary:
    return FeedSummary(
        count=len(events),
        max_id=max_event_id(events),
        temp_c=_range([e.temp_c for e in events]),
        humidity_pct=_range([e.humidity_pct for e in events]),
        sound_loudness=_range([e.sound_loudness for e in events]),
    )
