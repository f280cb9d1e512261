from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from envfeed.api.feed import get_store
from envfeed.pipeline.feed_client import MockFeedSource
from envfeed.simulator.generator import make_mock_event
from envfeed.services.feed_store import EventFeedStore

router = APIRouter(tags=["sim"])


def _mock_source(store: EventFeedStore) -> MockFeedSource:
    if not isinstance(store.source, MockFeedSource):
        raise HTTPException(status_code=409, detail="feed is not in mock mode")
    return store.source


@router.get("/sim/mock-feed")
def mock_feed(store: EventFeedStore = Depends(get_store)) -> list:
    """Raw mock rows, shaped exactly like the remote feed's response."""
    return _mock_source(store).records


@router.post("/sim/append")
def append_event(note: Optional[str] = None, store: EventFeedStore = Depends(get_store)):
    """Add one random row to the mock feed (next id after the current max)."""
    source = _mock_source(store)
    ids = [r.get("event_id") for r in source.records]
    next_id = max([0] + [i for i in ids if isinstance(i, int) and not isinstance(i, bool)]) + 1

    record = make_mock_event(next_id)
    if note is not None:
        record["note"] = note
    source.append(record)
    return {"status": "ok", "record": record}
