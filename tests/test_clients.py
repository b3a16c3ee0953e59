import datetime
from unittest.mock import MagicMock

import pytest
import requests

from videodiary.client.api import BlobUploadError, DiaryApiError, DiaryClient, UploadInitiationFailed
from videodiary.mux.client import MuxClient, MuxError, thumbnail_url, transcript_url


def response(status_code=200, json_data=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = json_data or {}
    resp.text = text
    return resp


class TestMuxClient:
    def make_client(self, session):
        return MuxClient("token-id", "token-secret", base_url="https://api.mux.test", timeout=5, session=session)

    def test_create_upload_requests_public_captioned_asset(self):
        session = MagicMock()
        session.request.return_value = response(201, {"data": {"id": "up-1", "url": "https://put.here", "status": "waiting"}})

        upload = self.make_client(session).create_upload()

        assert upload.id == "up-1"
        assert upload.url == "https://put.here"
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert (method, url) == ("POST", "https://api.mux.test/video/v1/uploads")
        assert kwargs["auth"] == ("token-id", "token-secret")
        assert kwargs["timeout"] == 5
        settings = kwargs["json"]["new_asset_settings"]
        assert settings["playback_policy"] == ["public"]
        assert settings["input"][0]["generated_subtitles"] == [{"language_code": "en", "name": "English CC"}]

    def test_get_asset_parses_playback_and_duration(self):
        session = MagicMock()
        session.request.return_value = response(200, {"data": {
            "id": "asset-1", "status": "ready", "duration": 9.5,
            "playback_ids": [{"id": "pb-1", "policy": "public"}], "upload_id": "up-1",
        }})

        asset = self.make_client(session).get_asset("asset-1")

        assert asset.first_playback_id == "pb-1"
        assert asset.rounded_duration == 10
        assert session.request.call_args.args == ("GET", "https://api.mux.test/video/v1/assets/asset-1")

    def test_get_upload_without_asset(self):
        session = MagicMock()
        session.request.return_value = response(200, {"data": {"id": "up-1", "status": "waiting"}})

        assert self.make_client(session).get_upload("up-1").asset_id is None

    def test_non_2xx_raises_mux_error(self):
        session = MagicMock()
        session.request.return_value = response(401, text="unauthorized")

        with pytest.raises(MuxError) as exc:
            self.make_client(session).get_upload("up-1")
        assert exc.value.status_code == 401

    def test_non_json_body_raises_mux_error(self):
        session = MagicMock()
        resp = response(200)
        resp.json.side_effect = ValueError("Expecting value")
        session.request.return_value = resp

        with pytest.raises(MuxError):
            self.make_client(session).get_upload("up-1")

    def test_payload_without_id_raises_mux_error(self):
        session = MagicMock()
        session.request.return_value = response(200, {"data": {"status": "ready"}})

        with pytest.raises(MuxError):
            self.make_client(session).get_asset("asset-1")

    def test_transport_error_raises_mux_error(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(MuxError):
            self.make_client(session).get_asset("asset-1")

    def test_fetch_transcript_uses_public_url_without_credentials(self):
        session = MagicMock()
        session.get.return_value = response(200, text="hello\n")

        text = self.make_client(session).fetch_transcript("pb-1", "track-1")

        assert text == "hello\n"
        session.get.assert_called_once_with("https://stream.mux.com/pb-1/text/track-1.txt", timeout=5)

    def test_fetch_transcript_failure_raises(self):
        session = MagicMock()
        session.get.return_value = response(404)

        with pytest.raises(MuxError):
            self.make_client(session).fetch_transcript("pb-1", "track-1")


def test_url_templates():
    assert thumbnail_url("pb-1") == "https://image.mux.com/pb-1/thumbnail.jpg?time=1"
    assert thumbnail_url(None) is None
    assert transcript_url("pb-1", "tr-1") == "https://stream.mux.com/pb-1/text/tr-1.txt"


class TestDiaryClient:
    def make_client(self, session):
        return DiaryClient("https://api.diary.test/", "jwt-token", timeout=3, session=session)

    def test_create_upload_sends_mood_and_date(self):
        session = MagicMock()
        session.post.return_value = response(200, {"uploadUrl": "https://up", "uploadId": "u1", "entryId": "e1"})

        data = self.make_client(session).create_upload("calm", "2024-05-01")

        assert data["entryId"] == "e1"
        session.post.assert_called_once_with(
            "https://api.diary.test/videos/uploads",
            headers={"Authorization": "Bearer jwt-token"},
            timeout=3,
            json={"mood": "calm", "date": "2024-05-01"},
        )

    def test_create_upload_defaults_to_local_date(self):
        session = MagicMock()
        session.post.return_value = response(200, {"uploadUrl": "https://up", "uploadId": "u1", "entryId": "e1"})

        self.make_client(session).create_upload("calm")

        assert session.post.call_args.kwargs["json"] == {"mood": "calm", "date": datetime.date.today().isoformat()}

    def test_create_upload_failure_is_distinct(self):
        session = MagicMock()
        session.post.return_value = response(502, text="Failed to initiate video upload")

        with pytest.raises(UploadInitiationFailed) as exc:
            self.make_client(session).create_upload("calm")
        assert exc.value.status_code == 502

    def test_upload_video_puts_raw_bytes(self):
        session = MagicMock()
        session.put.return_value = response(200)

        self.make_client(session).upload_video("https://up", b"\x00\x01")

        session.put.assert_called_once_with(
            "https://up", data=b"\x00\x01", headers={"Content-Type": "video/webm"}, timeout=3,
        )

    def test_upload_video_non_2xx_is_fatal(self):
        session = MagicMock()
        session.put.return_value = response(403, text="expired")

        with pytest.raises(BlobUploadError) as exc:
            self.make_client(session).upload_video("https://up", b"data")
        assert exc.value.status_code == 403
        assert session.put.call_count == 1

    def test_check_status_failure_raises_api_error(self):
        session = MagicMock()
        session.post.return_value = response(500)

        with pytest.raises(DiaryApiError):
            self.make_client(session).check_status("e1")
