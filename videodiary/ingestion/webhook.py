import json
import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from videodiary.ingestion import transitions
from videodiary.ingestion.service import store_asset_transcript, store_generated_transcript
from videodiary.journals.db import apply_entry_changes, get_entry_by_asset_id, get_entry_by_upload_id
from videodiary.journals.models import JournalEntry
from videodiary.mux.client import MuxClient, MuxError
from videodiary.mux.schemas import MuxAsset, MuxTrack, MuxWebhookEvent

logger = logging.getLogger(__name__)

UPLOAD_ASSET_CREATED = "video.upload.asset_created"
ASSET_READY = "video.asset.ready"
ASSET_TRACK_READY = "video.asset.track.ready"
ASSET_ERRORED = "video.asset.errored"


def _find_by_asset(db: Session, asset_id: Optional[str], upload_id: Optional[str] = None) -> Optional[JournalEntry]:
    """
    Entry for an asset event. When the asset link is not recorded yet but the
    event names its upload, the link is made first so the event still applies.
    """
    entry = get_entry_by_asset_id(db, asset_id) if asset_id else None
    if entry is not None or not upload_id:
        return entry

    entry = get_entry_by_upload_id(db, upload_id)
    if entry is not None and not entry.mux_asset_id:
        logger.info("Asset %s arrived before its link, linking via upload %s", asset_id, upload_id)
        apply_entry_changes(db, entry, transitions.link_asset(entry, asset_id))
    if entry is not None and entry.mux_asset_id != asset_id:
        return None
    return entry


def handle_upload_asset_created(db: Session, mux: MuxClient, data: Dict[str, Any]) -> None:
    upload_id, asset_id = data.get("id"), data.get("asset_id")
    entry = get_entry_by_upload_id(db, upload_id) if upload_id else None
    if entry is None:
        logger.warning("No entry for upload %s (asset %s)", upload_id, asset_id)
        return

    apply_entry_changes(db, entry, transitions.link_asset(entry, asset_id))
    logger.info("Upload %s linked to asset %s, entry %s is %s", upload_id, asset_id, entry.id, entry.video_status)


def handle_asset_ready(db: Session, mux: MuxClient, data: Dict[str, Any]) -> None:
    asset = MuxAsset.model_validate(data)
    entry = _find_by_asset(db, asset.id, asset.upload_id)
    if entry is None:
        logger.warning("No entry for ready asset %s", asset.id)
        return

    apply_entry_changes(db, entry, transitions.apply_asset_state(entry, asset))
    store_asset_transcript(db, mux, entry, asset)
    logger.info(
        "Asset ready: %s playback=%s duration=%s (entry %s)",
        asset.id, entry.mux_playback_id, entry.duration, entry.id,
    )


def handle_track_ready(db: Session, mux: MuxClient, data: Dict[str, Any]) -> None:
    track = MuxTrack.model_validate(data)
    if not track.is_generated_text:
        logger.info("Ignoring track %s (type=%s, source=%s)", track.id, track.type, track.text_source)
        return

    entry = get_entry_by_asset_id(db, track.asset_id) if track.asset_id else None
    if entry is None:
        logger.warning("No entry for track %s of asset %s", track.id, track.asset_id)
        return

    playback_id = entry.mux_playback_id
    if not playback_id:
        # Captions can finish before the asset-ready event is processed
        try:
            playback_id = mux.get_asset(track.asset_id).first_playback_id
        except MuxError as e:
            logger.error("Could not resolve playback id for asset %s: %s", track.asset_id, e)
            return

    store_generated_transcript(db, mux, entry, track, playback_id=playback_id)


def handle_asset_errored(db: Session, mux: MuxClient, data: Dict[str, Any]) -> None:
    asset_id = data.get("id")
    logger.error("Asset errored: %s %s", asset_id, data.get("errors"))
    entry = _find_by_asset(db, asset_id, data.get("upload_id"))
    if entry is None:
        logger.warning("No entry for errored asset %s", asset_id)
        return

    apply_entry_changes(db, entry, transitions.apply_error(entry))


EVENT_HANDLERS: Dict[str, Callable[[Session, MuxClient, Dict[str, Any]], None]] = {
    UPLOAD_ASSET_CREATED: handle_upload_asset_created,
    ASSET_READY: handle_asset_ready,
    ASSET_TRACK_READY: handle_track_ready,
    ASSET_ERRORED: handle_asset_errored,
}


def handle_event(db: Session, mux: MuxClient, raw_body: bytes) -> Optional[str]:
    """
    Applies one authenticated webhook delivery.

    Never raises: unparsable payloads, unknown event types, unmatched entries
    and persistence failures are logged, since the platform redelivers on
    any non-2xx answer. Returns the event type when one was recognised.
    """
    try:
        event = MuxWebhookEvent.model_validate(json.loads(raw_body))
    except (ValueError, ValidationError) as e:
        logger.error("Unparsable webhook payload: %s", e)
        return None

    logger.info("Mux webhook received: %s", event.type)
    handler = EVENT_HANDLERS.get(event.type)
    if handler is None:
        logger.debug("Ignoring webhook event type %s", event.type)
        return None

    try:
        handler(db, mux, event.data)
    except Exception as e:
        db.rollback()
        logger.exception("Error handling %s event: %s", event.type, e)
    return event.type
