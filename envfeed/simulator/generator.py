import random
from datetime import datetime
from typing import Dict, List

# Built-in demo set. Row 2 has an empty note (must stay visible),
# row 9 carries the hidden-note sentinel (must be filtered out).
MOCK_EVENTS: List[Dict] = [
    {"created_at": "2025-12-12T07:52:10", "event_id": 1, "temp_c": 21.2, "humidity_pct": 18.0,
     "sound_loudness": 8, "note": "Quiet indoor morning. Heater running.", "photo_url": ""},
    {"created_at": "2025-12-12T08:15:42", "event_id": 2, "temp_c": 20.1, "humidity_pct": 23.0,
     "sound_loudness": 14, "note": "", "photo_url": ""},
    {"created_at": "2025-12-12T09:03:11", "event_id": 3, "temp_c": 3.4, "humidity_pct": 68.0,
     "sound_loudness": 22, "note": "Outside walk. Windy and damp. Light traffic.", "photo_url": ""},
    {"created_at": "2025-12-12T09:55:09", "event_id": 4, "temp_c": -5.8, "humidity_pct": 54.0,
     "sound_loudness": 19, "note": "Cold street. Crunchy steps. Few cars.", "photo_url": ""},
    {"created_at": "2025-12-12T10:40:50", "event_id": 5, "temp_c": 24.6, "humidity_pct": 13.0,
     "sound_loudness": 11, "note": "Very dry indoor air. Felt static on clothes.", "photo_url": ""},
    {"created_at": "2025-12-12T12:18:33", "event_id": 6, "temp_c": 17.2, "humidity_pct": 42.0,
     "sound_loudness": 47, "note": "Café/lobby chatter. Espresso machine bursts.", "photo_url": ""},
    {"created_at": "2025-12-12T14:06:27", "event_id": 7, "temp_c": 1.1, "humidity_pct": 79.0,
     "sound_loudness": 28, "note": "Snowy sidewalk. Quiet, occasional bus rumble.", "photo_url": ""},
    {"created_at": "2025-12-12T16:02:40", "event_id": 8, "temp_c": 7.9, "humidity_pct": 61.0,
     "sound_loudness": 74, "note": "Busy intersection. Siren spike + crosswalk beeps.", "photo_url": ""},
    {"created_at": "2025-12-12T18:30:05", "event_id": 9, "temp_c": 19.8, "humidity_pct": 31.0,
     "sound_loudness": 16, "note": "null", "photo_url": ""},
    {"created_at": "2025-12-12T21:12:18", "event_id": 10, "temp_c": 22.9, "humidity_pct": 36.0,
     "sound_loudness": 91, "note": "Crowded indoor room. Music + overlapping voices.", "photo_url": ""},
]

NOTES = [
    "Quiet room. Fridge hum.",
    "Rain on the window.",
    "Train platform, announcements.",
    "",
    "Park bench, birds and distant traffic.",
    "Kitchen, kettle boiling.",
]


def _local_iso() -> str:
    return datetime.now().replace(microsecond=0).isoformat()


def make_mock_event(event_id: int) -> Dict:
    """A plausible raw feed row with random readings."""
    indoor = random.random() < 0.6
    return {
        "created_at": _local_iso(),
        "event_id": event_id,
        "temp_c": round(random.uniform(17.0, 25.0) if indoor else random.uniform(-8.0, 15.0), 1),
        "humidity_pct": round(random.uniform(12.0, 45.0) if indoor else random.uniform(40.0, 85.0), 1),
        "sound_loudness": random.randint(5, 95),
        "note": random.choice(NOTES),
        "photo_url": "",
    }
