from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NormalizedEvent(BaseModel):
    """One cleaned environmental reading. Built only by `normalize()`."""

    model_config = ConfigDict(frozen=True)

    # ----------------------------
    # Identity / time
    # ----------------------------
    created_at: str = ""                 # free-form, not parsed
    event_id: int = 0

    # ----------------------------
    # Readings
    # ----------------------------
    # None only appears when strict numeric parsing is enabled
    temp_c: Optional[float] = 0.0
    humidity_pct: Optional[float] = 0.0
    sound_loudness: Optional[float] = 0.0

    # ----------------------------
    # Note / media
    # ----------------------------
    note: str = ""
    note_word_count: int = Field(default=0, ge=0)
    photo_url: str = ""


class SelectionPolicy(str, Enum):
    PRESERVE = "preserve"
    JUMP_TO_LATEST = "jump_to_latest"
    JUMP_TO_LATEST_ON_GROWTH = "jump_to_latest_on_growth"


class FetchStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    SKIPPED = "skipped"


class BurstState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


class BurstStopReason(str, Enum):
    NEW_ARRIVAL = "new_arrival"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class ArrivalCheck(BaseModel):
    max_id: int
    is_new_arrival: bool


class IngestOutcome(BaseModel):
    status: FetchStatus
    count: int = 0
    max_id: int = 0
    is_new_arrival: bool = False
    error: Optional[str] = None


class ValueRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class FeedSummary(BaseModel):
    count: int = 0
    max_id: int = 0
    temp_c: ValueRange = Field(default_factory=ValueRange)
    humidity_pct: ValueRange = Field(default_factory=ValueRange)
    sound_loudness: ValueRange = Field(default_factory=ValueRange)
