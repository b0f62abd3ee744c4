import io
import os

from app import create_app
from config import TestingConfig


def test_health_reports_configured_client(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy", "gemini_configured": True}


def test_upload_without_file_is_rejected(client):
    response = client.post("/upload", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert "no video" in response.get_json()["message"].lower()


def test_upload_with_empty_filename_is_rejected(client):
    response = client.post(
        "/upload",
        data={"video": (io.BytesIO(b""), "")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 400


def test_upload_saves_file(client, storage):
    response = client.post(
        "/upload",
        data={"video": (io.BytesIO(b"jab cross hook"), "round 1.mp4")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    path = body["path"]
    assert os.path.isfile(path)
    assert os.path.dirname(path) == storage.upload_dir
    assert os.path.basename(path).endswith("-round_1.mp4")
    with open(path, "rb") as fh:
        assert fh.read() == b"jab cross hook"


def test_analyze_requires_path(client):
    response = client.post("/analyze", json={"perspective": "left"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "No video path provided"


def test_analyze_requires_perspective(client, uploaded_path):
    response = client.post("/analyze", json={"path": uploaded_path})
    assert response.status_code == 400
    assert response.get_json()["message"] == "No perspective provided"


def test_analyze_with_non_json_body(client):
    response = client.post("/analyze", data="not json", content_type="text/plain")
    assert response.status_code == 400
    assert response.get_json()["message"] == "No video path provided"


def test_analyze_rejects_path_outside_upload_dir(client, tmp_path):
    outside = tmp_path / "elsewhere.mp4"
    outside.write_bytes(b"x")
    response = client.post("/analyze", json={"path": str(outside), "perspective": "left"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid video path"
    assert outside.exists()


def test_analyze_returns_feedback(client, fake_client, uploaded_path):
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": "left"})
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "feedback": "Keep your guard up."}

    prompt = fake_client.models.calls[0]["contents"][0].parts[1].text
    assert "LEFT side" in prompt
    # original upload is removed after a successful analysis
    assert not os.path.exists(uploaded_path)


def test_analyze_unknown_perspective_uses_empty_clause(client, fake_client, uploaded_path):
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": "center"})
    assert response.status_code == 200
    prompt = fake_client.models.calls[0]["contents"][0].parts[1].text
    assert "You are a professional boxing coach." in prompt
    assert "The user is" not in prompt


def test_analyze_upload_failure_returns_generic_500(client, fake_client, uploaded_path):
    fake_client.files.upload_error = RuntimeError("connection reset")
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": "right"})
    assert response.status_code == 500
    assert response.get_json() == {"message": "Analysis failed"}
    # kept so the caller can retry
    assert os.path.exists(uploaded_path)


def test_analyze_poll_failure_returns_500(client, fake_client, uploaded_path):
    fake_client.files._states = ["PROCESSING"]
    fake_client.files.get_error = RuntimeError("503")
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": "alone"})
    assert response.status_code == 500
    assert response.get_json() == {"message": "Analysis failed"}


def test_analyze_generation_failure_returns_500(client, fake_client, uploaded_path):
    fake_client.models.error = RuntimeError("quota exceeded")
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": "alone"})
    assert response.status_code == 500
    assert "quota" not in response.get_data(as_text=True)


def test_analyze_missing_file_returns_500(client, storage):
    missing = os.path.join(storage.upload_dir, "123-gone.mp4")
    response = client.post("/analyze", json={"path": missing, "perspective": "left"})
    assert response.status_code == 500
    assert response.get_json() == {"message": "Analysis failed"}


def test_analyze_without_api_key(tmp_path):
    class NoKeyConfig(TestingConfig):
        GEMINI_API_KEY = None
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        STAGING_FOLDER = str(tmp_path / "staging")

    app = create_app(NoKeyConfig)
    client = app.test_client()
    upload = client.post(
        "/upload",
        data={"video": (io.BytesIO(b"v"), "a.mp4")},
        content_type="multipart/form-data",
    )
    path = upload.get_json()["path"]

    response = client.post("/analyze", json={"path": path, "perspective": "left"})
    assert response.status_code == 500
    assert response.get_json()["message"] == "Gemini API key not configured"
    assert client.get("/health").get_json()["gemini_configured"] is False


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_purge_scratch_command(app, storage, uploaded_path):
    os.utime(uploaded_path, (0, 0))
    result = app.test_cli_runner().invoke(args=["purge-scratch", "--max-age-hours", "1"])
    assert result.exit_code == 0
    assert "Removed 1 scratch file(s)" in result.output
    assert not os.path.exists(uploaded_path)


def test_upload_with_non_ascii_filename_keeps_extension(client):
    response = client.post(
        "/upload",
        data={"video": (io.BytesIO(b"v"), "раунд.mp4")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    path = response.get_json()["path"]
    assert os.path.basename(path).endswith("-video.mp4")
    assert os.path.isfile(path)


def test_analyze_non_string_perspective_uses_empty_clause(client, fake_client, uploaded_path):
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": 1})
    assert response.status_code == 200
    prompt = fake_client.models.calls[0]["contents"][0].parts[1].text
    assert "The user is" not in prompt


def test_analyze_null_perspective_is_missing(client, uploaded_path):
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": None})
    assert response.status_code == 400
    assert response.get_json()["message"] == "No perspective provided"


def test_analyze_empty_model_reply_returns_500(client, fake_client, uploaded_path):
    fake_client.models.text = ""
    response = client.post("/analyze", json={"path": uploaded_path, "perspective": "left"})
    assert response.status_code == 500
    assert response.get_json() == {"message": "Analysis failed"}
    assert os.path.exists(uploaded_path)


def test_rate_limit_returns_json_and_health_is_exempt(tmp_path):
    class LimitedConfig(TestingConfig):
        RATELIMIT_ENABLED = True
        RATELIMIT_DEFAULT = "2 per minute"
        RATELIMIT_STORAGE_URI = "memory://"
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        STAGING_FOLDER = str(tmp_path / "staging")

    client = create_app(LimitedConfig).test_client()

    statuses = [client.post("/analyze", json={}).status_code for _ in range(3)]
    assert statuses == [400, 400, 429]
    body = client.post("/analyze", json={}).get_json()
    assert body["error"] == "ratelimit exceeded"
    assert "2 per 1 minute" in body["message"]

    for _ in range(4):
        assert client.get("/health").status_code == 200


def test_cors_allows_any_origin(client):
    response = client.get("/health", headers={"Origin": "http://coach.example"})
    assert response.headers["Access-Control-Allow-Origin"] in ("*", "http://coach.example")
