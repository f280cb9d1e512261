from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from envfeed.services.feed_store import EventFeedStore

router = APIRouter(tags=["feed"])


def get_store(request: Request) -> EventFeedStore:
    return request.app.state.store


def _selection(store: EventFeedStore) -> Dict[str, Any]:
    selected = store.get_selected_event()
    return {
        "index": store.get_selected_index(),
        "event": selected.model_dump(mode="json") if selected else None,
    }


@router.get("/events")
def get_events(latest_first: bool = False, store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    items = [e.model_dump(mode="json") for e in store.get_display_list()]
    if latest_first:
        items.reverse()
    return {"items": items, "count": len(items)}


@router.get("/status")
def get_status(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    return {
        "message": store.get_status_message(),
        "fetching": store.is_fetching,
        "last_max_id": store.last_max_id,
        "count": len(store.get_display_list()),
        "burst": store.burst_info(),
    }


@router.get("/summary")
def get_summary(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    return store.summary().model_dump(mode="json")


class SelectionUpdate(BaseModel):
    index: int


@router.get("/selection")
def get_selection(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    return _selection(store)


@router.put("/selection")
def put_selection(payload: SelectionUpdate, store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    store.set_selected_index(payload.index)
    return _selection(store)


@router.post("/refresh")
async def refresh(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    """Manual reload; keeps the current selection on its record."""
    outcome = await store.refresh()
    return {
        "outcome": outcome.model_dump(mode="json"),
        "message": store.get_status_message(),
        "selection": _selection(store),
    }


@router.post("/burst")
async def start_burst(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    """Poll quickly for a short window to catch a freshly submitted entry."""
    store.start_burst()
    return {"status": "started", "burst": store.burst_info()}


@router.post("/burst/stop")
async def stop_burst(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    if store.cancel_burst():
        return {"status": "stopping", "burst": store.burst_info()}
    return {"status": "not_running", "burst": store.burst_info()}


@router.get("/burst")
def burst_status(store: EventFeedStore = Depends(get_store)) -> Dict[str, Any]:
    return store.burst_info()
