import datetime
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class DiaryApiError(Exception):
    """A call to the diary backend failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UploadInitiationFailed(DiaryApiError):
    """The backend could not create an upload target or entry."""


class BlobUploadError(Exception):
    """The direct upload of the recording was not accepted. Not retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DiaryClient:
    """
    Client for a foreground recording session: starts an upload, pushes the
    recording to the platform and asks the backend to reconcile its status.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Authorization": f"Bearer {access_token}"}

    def _post(self, path: str, **kwargs: Any) -> requests.Response:
        return self.session.post(
            f"{self.base_url}{path}", headers=self.headers, timeout=self.timeout, **kwargs
        )

    def create_upload(self, mood: str, date: Optional[str] = None) -> Dict[str, Any]:
        """
        Returns `{uploadUrl, uploadId, entryId}` for a new entry. The date
        defaults to today on this machine, so entries follow the user's calendar.
        """
        body = {"mood": mood, "date": date or datetime.date.today().isoformat()}
        try:
            resp = self._post("/videos/uploads", json=body)
        except requests.RequestException as e:
            raise UploadInitiationFailed(f"Upload initiation failed: {e}") from e

        if not resp.ok:
            logger.error("Upload initiation failed: %s %s", resp.status_code, resp.text)
            raise UploadInitiationFailed(f"Upload failed: {resp.status_code}", status_code=resp.status_code)

        data = resp.json()
        if not data.get("uploadUrl"):
            raise UploadInitiationFailed("Invalid response from server")
        return data

    def upload_video(self, upload_url: str, payload: bytes, content_type: str = "video/webm") -> None:
        """Single PUT of the raw recording to the upload target; any non-2xx is fatal."""
        logger.info("Uploading video, size: %s bytes", len(payload))
        try:
            resp = self.session.put(
                upload_url, data=payload, headers={"Content-Type": content_type}, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise BlobUploadError(f"Failed to upload video: {e}") from e

        if not resp.ok:
            logger.error("Video upload failed: %s %s", resp.status_code, resp.text)
            raise BlobUploadError("Failed to upload video", status_code=resp.status_code)

    def check_status(self, entry_id: str) -> Dict[str, Any]:
        """Returns `{status, playbackId, thumbnailUrl, duration}` after reconciliation."""
        try:
            resp = self._post(f"/videos/{entry_id}/status")
        except requests.RequestException as e:
            raise DiaryApiError(f"Failed to check video status: {e}") from e

        if not resp.ok:
            logger.error("Status check failed: %s %s", resp.status_code, resp.text)
            raise DiaryApiError("Failed to check video status", status_code=resp.status_code)
        return resp.json()
