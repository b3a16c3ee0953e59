"""
Pure state transitions for a journal entry's video.

Each function looks at the entry's current fields plus freshly fetched
platform data and returns the columns that should change (an empty dict
when nothing should). They never touch the database, so running one twice,
or from two processes at once, converges to the same row.

    uploading -> processing -> ready
        |            |
        +------------+-> error

`ready` and `error` are terminal.
"""
import logging
from typing import Any, Dict, Optional

from videodiary.mux.client import thumbnail_url
from videodiary.mux.schemas import MuxAsset

logger = logging.getLogger(__name__)

UPLOADING = "uploading"
PROCESSING = "processing"
READY = "ready"
ERROR = "error"

TERMINAL_STATUSES = frozenset({READY, ERROR})

# Target status -> statuses it may be entered from
ALLOWED_FROM = {
    PROCESSING: (UPLOADING,),
    READY: (UPLOADING, PROCESSING),
    ERROR: (UPLOADING, PROCESSING),
}

ASSET_READY = "ready"
ASSET_ERRORED = "errored"


def is_terminal(status: Optional[str]) -> bool:
    return status in TERMINAL_STATUSES


def link_asset(entry, asset_id: Optional[str]) -> Dict[str, Any]:
    """Records the asset created from the entry's upload. The link is write-once."""
    if not asset_id:
        return {}
    if entry.mux_asset_id:
        if entry.mux_asset_id != asset_id:
            logger.warning(
                "Entry %s already linked to asset %s, ignoring asset %s",
                entry.id, entry.mux_asset_id, asset_id,
            )
        return {}

    changes: Dict[str, Any] = {"mux_asset_id": asset_id}
    if entry.video_status == UPLOADING:
        changes["video_status"] = PROCESSING
    return changes


def apply_asset_state(entry, asset: MuxAsset) -> Dict[str, Any]:
    """Moves a non-terminal entry to `ready` or `error` according to the asset's status."""
    if is_terminal(entry.video_status):
        return {}

    if asset.status == ASSET_READY:
        playback_id = asset.first_playback_id
        return {
            "mux_playback_id": playback_id,
            "thumbnail_url": thumbnail_url(playback_id),
            "duration": asset.rounded_duration,
            "video_status": READY,
        }

    if asset.status == ASSET_ERRORED:
        return {"video_status": ERROR}

    return {}


def apply_error(entry) -> Dict[str, Any]:
    if is_terminal(entry.video_status):
        return {}
    return {"video_status": ERROR}


def apply_transcript(entry, track_id: str, text: str) -> Dict[str, Any]:
    """Stores a caption transcript. Independent of `video_status`."""
    transcript = (text or "").strip()
    if entry.transcript == transcript and entry.mux_track_id == track_id:
        return {}
    return {"mux_track_id": track_id, "transcript": transcript}
