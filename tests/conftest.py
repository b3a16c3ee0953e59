import json
import os
import time
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["MUX_TOKEN_ID"] = "test-token-id"
os.environ["MUX_TOKEN_SECRET"] = "test-token-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from videodiary.auth.service import create_token
from videodiary.core.database import Base, get_db
from videodiary.core.dependency import get_mux_client, get_webhook_secret
from videodiary.ingestion.signature import build_signature_header
from videodiary.journals.db import create_entry
from videodiary.main import app
from videodiary.mux.client import MuxError
from videodiary.mux.schemas import MuxAsset, MuxUpload

WEBHOOK_SECRET = "whsec-test"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


class FakeMux:
    """In-memory stand-in for MuxClient with the same method surface."""

    def __init__(self):
        self.uploads: Dict[str, Dict[str, Any]] = {}
        self.assets: Dict[str, Dict[str, Any]] = {}
        self.transcripts: Dict[tuple, str] = {}
        self.fail_create = False
        self.fail_lookups = False
        self.fail_transcripts = False
        self.calls = []
        self._counter = 0

    def create_upload(self, cors_origin: str = "*") -> MuxUpload:
        self.calls.append(("create_upload",))
        if self.fail_create:
            raise MuxError("Mux API error: 500", status_code=500)
        self._counter += 1
        upload_id = f"upload-{self._counter}"
        self.uploads[upload_id] = {"id": upload_id, "status": "waiting", "url": f"https://storage.example/{upload_id}"}
        return MuxUpload.model_validate(self.uploads[upload_id])

    def get_upload(self, upload_id: str) -> MuxUpload:
        self.calls.append(("get_upload", upload_id))
        if self.fail_lookups:
            raise MuxError("Mux API error: 503", status_code=503)
        return MuxUpload.model_validate(self.uploads.get(upload_id, {"id": upload_id, "status": "waiting"}))

    def get_asset(self, asset_id: str) -> MuxAsset:
        self.calls.append(("get_asset", asset_id))
        if self.fail_lookups or asset_id not in self.assets:
            raise MuxError("Mux API error: 404", status_code=404)
        return MuxAsset.model_validate(self.assets[asset_id])

    def fetch_transcript(self, playback_id: str, track_id: str) -> str:
        self.calls.append(("fetch_transcript", playback_id, track_id))
        if self.fail_transcripts or (playback_id, track_id) not in self.transcripts:
            raise MuxError("Transcript fetch failed: 404", status_code=404)
        return self.transcripts[(playback_id, track_id)]

    # Platform-side progress helpers
    def finish_upload(self, upload_id: str, asset_id: str) -> None:
        self.uploads.setdefault(upload_id, {"id": upload_id})
        self.uploads[upload_id].update({"status": "asset_created", "asset_id": asset_id})
        self.assets.setdefault(asset_id, {"id": asset_id, "status": "preparing", "upload_id": upload_id})

    def make_ready(self, asset_id: str, playback_id: str, duration: float = 12.6, tracks=None) -> None:
        self.assets[asset_id].update({
            "status": "ready",
            "playback_ids": [{"id": playback_id, "policy": "public"}],
            "duration": duration,
            "tracks": tracks or [],
        })

    def make_errored(self, asset_id: str) -> None:
        self.assets[asset_id].update({"status": "errored", "errors": {"type": "invalid_input"}})


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mux():
    return FakeMux()


@pytest.fixture
def webhook_secret():
    return {"value": WEBHOOK_SECRET}


@pytest.fixture
def client(db, mux, webhook_secret):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_mux_client] = lambda: mux
    app.dependency_overrides[get_webhook_secret] = lambda: webhook_secret["value"]
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_user_id() -> UUID:
    return uuid4()


def auth_headers(user_id: UUID) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_token(user_id)}"}


@pytest.fixture
def make_entry(db, mux, user_id):
    def _make(owner: Optional[UUID] = None, mood: str = "calm", date: str = "2024-05-01"):
        upload = mux.create_upload()
        return create_entry(db, owner or user_id, mood, upload.id, date)
    return _make


def event_body(event_type: str, data: Dict[str, Any]) -> bytes:
    return json.dumps({"type": event_type, "id": str(uuid4()), "data": data}).encode()


def post_event(
    client: TestClient,
    event_type: str,
    data: Dict[str, Any],
    secret: str = WEBHOOK_SECRET,
    timestamp: Optional[int] = None,
):
    body = event_body(event_type, data)
    header = build_signature_header(secret, body, timestamp if timestamp is not None else int(time.time()))
    return client.post(
        "/webhooks/mux",
        content=body,
        headers={"mux-signature": header, "Content-Type": "application/json"},
    )
