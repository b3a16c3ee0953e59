import logging
from typing import Any, Dict, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from videodiary.core.config import MUX_API_URL, MUX_HTTP_TIMEOUT
from videodiary.mux.schemas import MuxAsset, MuxUpload

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

MUX_STREAM_URL = "https://stream.mux.com"
MUX_IMAGE_URL = "https://image.mux.com"

CAPTION_LANGUAGE_CODE = "en"
CAPTION_NAME = "English CC"


class MuxError(Exception):
    """A call to the video platform failed, returned non-2xx or an unreadable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def thumbnail_url(playback_id: Optional[str], time: int = 1) -> Optional[str]:
    if not playback_id:
        return None
    return f"{MUX_IMAGE_URL}/{playback_id}/thumbnail.jpg?time={time}"


def transcript_url(playback_id: str, track_id: str) -> str:
    return f"{MUX_STREAM_URL}/{playback_id}/text/{track_id}.txt"


class MuxClient:
    """
    Thin wrapper over the Mux Video REST API.

    One instance is built per process with credentials read at start-up and
    injected into request handlers. Every call carries a timeout.
    """

    def __init__(
        self,
        token_id: str,
        token_secret: str,
        *,
        base_url: str = MUX_API_URL,
        timeout: float = MUX_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.auth = (token_id, token_secret)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, auth=self.auth, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("Mux %s %s failed: %s", method, path, e)
            raise MuxError(f"Mux request failed: {e}") from e

        if not resp.ok:
            logger.error("Mux API error %s on %s %s: %s", resp.status_code, method, path, resp.text)
            raise MuxError(f"Mux API error: {resp.status_code}", status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("Mux returned a non-JSON body on %s %s: %s", method, path, e)
            raise MuxError("Mux API returned an unreadable response") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else {}

    def _request_as(self, schema: Type[SchemaT], method: str, path: str, **kwargs: Any) -> SchemaT:
        data = self._request(method, path, **kwargs)
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.error("Unexpected Mux payload on %s %s: %s", method, path, e)
            raise MuxError(f"Unexpected Mux payload for {schema.__name__}") from e

    def create_upload(self, cors_origin: str = "*") -> MuxUpload:
        """
        Requests a single-use direct upload URL. The resulting asset is publicly
        playable and gets auto-generated English captions.
        """
        body = {
            "cors_origin": cors_origin,
            "new_asset_settings": {
                "playback_policy": ["public"],
                "encoding_tier": "baseline",
                "input": [
                    {
                        "generated_subtitles": [
                            {"language_code": CAPTION_LANGUAGE_CODE, "name": CAPTION_NAME},
                        ],
                    },
                ],
            },
        }
        upload = self._request_as(MuxUpload, "POST", "/video/v1/uploads", json=body)
        logger.info("Mux upload created: %s", upload.id)
        return upload

    def get_upload(self, upload_id: str) -> MuxUpload:
        return self._request_as(MuxUpload, "GET", f"/video/v1/uploads/{upload_id}")

    def get_asset(self, asset_id: str) -> MuxAsset:
        return self._request_as(MuxAsset, "GET", f"/video/v1/assets/{asset_id}")

    def fetch_transcript(self, playback_id: str, track_id: str) -> str:
        """Plain-text transcript of a ready caption track. Public URL, no credentials sent."""
        url = transcript_url(playback_id, track_id)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Transcript fetch failed for track %s: %s", track_id, e)
            raise MuxError(f"Transcript fetch failed: {e}") from e

        if not resp.ok:
            logger.error("Transcript fetch for track %s returned %s", track_id, resp.status_code)
            raise MuxError(f"Transcript fetch failed: {resp.status_code}", status_code=resp.status_code)

        return resp.text
