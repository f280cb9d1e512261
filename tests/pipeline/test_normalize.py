from __future__ import annotations

import pytest

from envfeed.pipeline.normalize import (
    detect_new_arrival,
    ingest,
    normalize,
    resolve_selection,
    summarize,
    to_float,
    to_int,
    to_text,
    word_count,
)
from envfeed.schemas.event import SelectionPolicy


def _ids(events) -> list[int]:
    return [e.event_id for e in events]


def _set(*ids: int):
    return ingest([{"event_id": i, "note": f"row {i}"} for i in ids])


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("  hello   world\n", 2),
        ("", 0),
        ("one", 1),
        ("\t\n  ", 0),
        ("a\tb\nc  d", 4),
        (None, 0),
    ],
)
def test_word_count(text, expected) -> None:
    assert word_count(text) == expected


def test_to_int_is_lenient() -> None:
    assert to_int("42") == 42
    assert to_int(" 7 ") == 7
    assert to_int("12abc") == 12
    assert to_int("3.9") == 3
    assert to_int(3.9) == 3
    assert to_int("-4") == -4
    assert to_int("abc") is None
    assert to_int(None) is None
    assert to_int(True) is None
    assert to_int(float("nan")) is None


def test_to_float_is_lenient() -> None:
    assert to_float("21.5") == 21.5
    assert to_float("3.5 C") == 3.5
    assert to_float(".5") == 0.5
    assert to_float("1e3") == 1000.0
    assert to_float(8) == 8.0
    assert to_float("n/a") is None
    assert to_float("") is None
    assert to_float(float("inf")) is None
    assert to_float("1e999") is None


def test_normalize_defaults_missing_fields() -> None:
    e = normalize({})
    assert e.created_at == ""
    assert e.event_id == 0
    assert e.temp_c == 0.0
    assert e.humidity_pct == 0.0
    assert e.sound_loudness == 0.0
    assert e.note == ""
    assert e.note_word_count == 0
    assert e.photo_url == ""


def test_normalize_coerces_values() -> None:
    e = normalize(
        {
            "created_at": "2025-12-12T07:52:10",
            "event_id": "5",
            "temp_c": "21.2",
            "humidity_pct": "bad",
            "sound_loudness": 8,
            "note": None,
            "photo_url": None,
        }
    )
    assert e.event_id == 5
    assert e.temp_c == pytest.approx(21.2)
    assert e.humidity_pct == 0.0
    assert e.sound_loudness == 8.0
    assert e.note == ""


def test_normalize_non_object_row_becomes_empty_record() -> None:
    assert normalize("garbage").event_id == 0  # type: ignore[arg-type]


def test_normalize_strict_numeric_keeps_missing_readings_as_none() -> None:
    e = normalize({"event_id": 1, "humidity_pct": "n/a", "sound_loudness": 0}, strict_numeric=True)
    assert e.humidity_pct is None
    assert e.temp_c is None
    # a genuine zero stays zero
    assert e.sound_loudness == 0.0


def test_normalize_falls_back_to_fahrenheit() -> None:
    e = normalize({"event_id": 1, "temp_f": 50})
    assert e.temp_c == pytest.approx(10.0)

    both = normalize({"event_id": 1, "temp_c": 3, "temp_f": 50})
    assert both.temp_c == 3.0


def test_normalized_event_is_immutable() -> None:
    e = normalize({"event_id": 1})
    with pytest.raises(Exception):
        e.note = "changed"  # type: ignore[misc]


def test_ingest_drops_sentinel_note_and_keeps_empty_note() -> None:
    out = ingest(
        [
            {"event_id": "2", "note": "null"},
            {"event_id": 1, "note": ""},
            {"event_id": 3, "note": "hi there"},
        ]
    )
    assert [(e.event_id, e.note, e.note_word_count) for e in out] == [
        (1, "", 0),
        (3, "hi there", 2),
    ]


def test_ingest_sentinel_is_exact_match_only() -> None:
    out = ingest(
        [
            {"event_id": 1, "note": "NULL"},
            {"event_id": 2, "note": " null"},
            {"event_id": 3},
            {"event_id": 4, "note": None},
        ]
    )
    assert _ids(out) == [1, 2, 3, 4]


def test_ingest_sorts_by_id_and_is_stable() -> None:
    assert _ids(_set(3, 1, 2)) == [1, 2, 3]

    out = ingest(
        [
            {"event_id": 2, "note": "A"},
            {"event_id": 2, "note": "B"},
            {"event_id": 1, "note": "C"},
        ]
    )
    assert [e.note for e in out] == ["C", "A", "B"]


def test_ingest_non_list_is_empty() -> None:
    assert ingest({"events": []}) == []
    assert ingest(None) == []


def test_detect_new_arrival_first_load_is_baseline() -> None:
    first = detect_new_arrival(0, _set(1, 5))
    assert first.max_id == 5
    assert first.is_new_arrival is False

    later = detect_new_arrival(5, _set(1, 5, 7))
    assert later.max_id == 7
    assert later.is_new_arrival is True

    same = detect_new_arrival(7, _set(1, 5, 7))
    assert same.is_new_arrival is False

    assert detect_new_arrival(3, []).max_id == 0


def test_resolve_selection_follows_record_across_reorder() -> None:
    new_set = _set(3, 5, 7, 9)
    idx = resolve_selection(7, new_set, SelectionPolicy.PRESERVE, previous_index=0, previous_length=2)
    assert idx == 2
    assert new_set[idx].event_id == 7


def test_resolve_selection_policies() -> None:
    new_set = _set(1, 2, 3)

    assert resolve_selection(1, [], SelectionPolicy.JUMP_TO_LATEST) == 0
    assert resolve_selection(1, new_set, SelectionPolicy.JUMP_TO_LATEST) == 2

    # grew from 2 to 3 rows
    assert resolve_selection(1, new_set, SelectionPolicy.JUMP_TO_LATEST_ON_GROWTH, previous_length=2) == 2
    # did not grow: keep following id 1
    assert resolve_selection(1, new_set, SelectionPolicy.JUMP_TO_LATEST_ON_GROWTH, previous_length=3) == 0


def test_resolve_selection_clamps_when_record_is_gone() -> None:
    new_set = _set(1, 2)
    assert resolve_selection(99, new_set, previous_index=5) == 1
    assert resolve_selection(None, new_set, previous_index=-3) == 0
    assert resolve_selection(None, new_set, previous_index=1) == 1


def test_summarize_ranges() -> None:
    events = ingest(
        [
            {"event_id": 1, "temp_c": -5.8, "humidity_pct": 54, "sound_loudness": 19},
            {"event_id": 4, "temp_c": 24.6, "humidity_pct": 13, "sound_loudness": 91},
        ]
    )
    s = summarize(events)
    assert s.count == 2
    assert s.max_id == 4
    assert (s.temp_c.min, s.temp_c.max) == (-5.8, 24.6)
    assert (s.humidity_pct.min, s.humidity_pct.max) == (13.0, 54.0)
    assert (s.sound_loudness.min, s.sound_loudness.max) == (19.0, 91.0)

    empty = summarize([])
    assert empty.temp_c.min is None
    assert empty.max_id == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (1.0, "1"),
        (-3.0, "-3"),
        (1.5, "1.5"),
        (7, "7"),
        (float("nan"), "NaN"),
        (float("inf"), "Infinity"),
        ("null", "null"),
    ],
)
def test_to_text_matches_json_client_rendering(value, expected) -> None:
    assert to_text(value) == expected


def test_normalize_non_string_note() -> None:
    e = normalize({"event_id": 1, "note": True})
    assert e.note == "true"
    assert e.note_word_count == 1
    assert normalize({"note": 2.0}).note == "2"
