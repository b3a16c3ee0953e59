import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from videodiary.client.api import DiaryApiError, DiaryClient

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 30
POLL_INTERVAL_SECONDS = 2.0
INITIAL_DELAY_SECONDS = 3.0


class PollOutcome(str, Enum):
    READY = "ready"
    FAILED = "failed"
    STILL_PROCESSING = "still_processing"  # saved, converges later via webhooks


@dataclass
class PollResult:
    outcome: PollOutcome
    status: Optional[str]
    attempts: int
    entry_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


def poll_until_settled(
    client: DiaryClient,
    entry_id: str,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    interval: float = POLL_INTERVAL_SECONDS,
    initial_delay: float = INITIAL_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """
    Repeatedly reconciles an entry until its video is ready or failed.

    A failed status request counts as an attempt. Running out of attempts is
    not an error: the entry is persisted and keeps converging server-side.
    """
    sleep(initial_delay)
    last: Dict[str, Any] = {}

    for attempt in range(1, max_attempts + 1):
        try:
            last = client.check_status(entry_id)
        except DiaryApiError as e:
            logger.warning("Status check %s/%s for entry %s failed: %s", attempt, max_attempts, entry_id, e)
        else:
            status = last.get("status")
            logger.debug("Entry %s status after attempt %s: %s", entry_id, attempt, status)
            if status == "ready":
                return PollResult(PollOutcome.READY, status, attempt, entry_id, last)
            if status == "error":
                return PollResult(PollOutcome.FAILED, status, attempt, entry_id, last)

        if attempt < max_attempts:
            sleep(interval)

    logger.info("Entry %s saved, still processing after %s attempts", entry_id, max_attempts)
    return PollResult(PollOutcome.STILL_PROCESSING, last.get("status"), max_attempts, entry_id, last)


def record_entry(
    client: DiaryClient,
    mood: str,
    payload: bytes,
    date: Optional[str] = None,
    *,
    content_type: str = "video/webm",
    **poll_kwargs: Any,
) -> PollResult:
    """
    Full foreground flow for one recording: create the entry, upload the
    bytes, then poll. Raises UploadInitiationFailed or BlobUploadError for
    the first two stages; the caller keeps its local copy for a retry.
    """
    upload = client.create_upload(mood, date)
    client.upload_video(upload["uploadUrl"], payload, content_type=content_type)
    return poll_until_settled(client, upload["entryId"], **poll_kwargs)
