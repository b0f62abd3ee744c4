import io

import pytest

from app import create_app
from config import TestingConfig
from services.coach_service import CoachService
from services.gemini_service import GeminiService
from services.scratch_storage import ScratchStorage
from tests.fakes import FakeGeminiClient


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def storage(tmp_path):
    return ScratchStorage(str(tmp_path / "uploads"), str(tmp_path / "staging"))


@pytest.fixture
def gemini(fake_client):
    return GeminiService(client=fake_client, poll_interval=0, max_poll_attempts=5, poll_timeout=5)


@pytest.fixture
def app(tmp_path, storage, gemini):
    class Cfg(TestingConfig):
        UPLOAD_FOLDER = storage.upload_dir
        STAGING_FOLDER = storage.staging_dir

    return create_app(Cfg, coach_service=CoachService(gemini, storage))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def uploaded_path(client):
    response = client.post(
        "/upload",
        data={"video": (io.BytesIO(b"fake video bytes"), "sparring.mp4")},
        content_type="multipart/form-data",
    )
    return response.get_json()["path"]
