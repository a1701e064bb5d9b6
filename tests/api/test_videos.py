"""
Test Video API Endpoints
"""
import uuid
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from vidvault.database import get_db
from vidvault.main import app
from vidvault.models import Video


def video_payload(**overrides):
    """Metadata as the client sends it after the media host upload"""
    payload = {
        "title": "Launch Demo",
        "description": "Product walkthrough",
        "publicId": "video/launch_demo_abc123",
        "videoUrl": "https://res.cloudinary.com/demo/video/upload/v1/video/launch_demo_abc123.mp4",
        "originalSize": "5242880",
        "compressedSize": "2097152",
        "duration": 42.5,
        "format": "mp4",
        "width": 1920,
        "height": 1080,
    }
    payload.update(overrides)
    return payload


def count_videos() -> int:
    gen = get_db()
    db = next(gen)
    try:
        return db.query(Video).count()
    finally:
        gen.close()


def test_save_video_metadata_success(client, auth_headers):
    """Test successful metadata save"""
    payload = video_payload()
    response = client.post("/api/video-upload", json=payload, headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True

    video = data["video"]
    assert uuid.UUID(video["id"])
    assert video["title"] == "Launch Demo"
    assert video["publicId"] == payload["publicId"]
    assert video["videoUrl"] == payload["videoUrl"]
    assert "createdAt" in video
    assert count_videos() == 1


def test_save_video_metadata_persists_fields(client, auth_headers):
    """Test the stored record as seen through the listing"""
    client.post("/api/video-upload", json=video_payload(), headers=auth_headers)

    videos = client.get("/api/videos").json()
    assert len(videos) == 1
    assert videos[0]["description"] == "Product walkthrough"
    assert videos[0]["originalSize"] == "5242880"
    assert videos[0]["compressedSize"] == "2097152"
    assert videos[0]["duration"] == 42.5


@pytest.mark.parametrize("field", ["title", "publicId", "videoUrl"])
def test_save_video_metadata_missing_field(client, auth_headers, field):
    """Test each required field is enforced"""
    payload = video_payload()
    del payload[field]

    response = client.post("/api/video-upload", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert "Missing required fields" in response.json()["error"]
    assert field in response.json()["error"]
    assert count_videos() == 0


def test_save_video_metadata_blank_fields_named(client, auth_headers):
    """Test blank values count as missing and all are reported"""
    payload = video_payload(title="   ", videoUrl="")

    response = client.post("/api/video-upload", json=payload, headers=auth_headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert "title" in error
    assert "videoUrl" in error
    assert "publicId" not in error
    assert count_videos() == 0


def test_save_video_metadata_malformed_json(client, auth_headers):
    """Test malformed body returns 400"""
    response = client.post(
        "/api/video-upload",
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Failed to parse JSON data"
    assert "details" in response.json()


def test_save_video_metadata_non_object_json(client, auth_headers):
    """Test a JSON array is rejected"""
    response = client.post("/api/video-upload", json=[video_payload()], headers=auth_headers)

    assert response.status_code == 400
    assert count_videos() == 0


@pytest.mark.parametrize("duration,expected", [
    (None, 0.0),
    ("abc", 0.0),
    ("12.5", 12.5),
    (-3, 0.0),
    (7, 7.0),
])
def test_save_video_metadata_duration_coercion(client, auth_headers, duration, expected):
    """Test duration falls back to 0 when absent or non-numeric"""
    payload = video_payload(duration=duration)
    response = client.post("/api/video-upload", json=payload, headers=auth_headers)

    assert response.status_code == 201
    assert client.get("/api/videos").json()[0]["duration"] == expected


def test_save_video_metadata_without_duration_key(client, auth_headers):
    """Test a payload with no duration key at all"""
    payload = video_payload()
    del payload["duration"]
    del payload["compressedSize"]

    response = client.post("/api/video-upload", json=payload, headers=auth_headers)

    assert response.status_code == 201
    video = client.get("/api/videos").json()[0]
    assert video["duration"] == 0.0
    assert video["compressedSize"] == "0"


def test_save_video_metadata_duplicate_public_id(client, auth_headers):
    """Test second save with the same publicId is a conflict"""
    first = client.post("/api/video-upload", json=video_payload(), headers=auth_headers)
    second = client.post(
        "/api/video-upload",
        json=video_payload(title="Another title"),
        headers=auth_headers,
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert "already exists" in second.json()["error"]
    assert count_videos() == 1


def test_save_video_metadata_database_failure(client, auth_headers):
    """Test other persistence failures return 500 with details"""
    failing_session = MagicMock()
    failing_session.commit.side_effect = OperationalError(
        "INSERT INTO videos", {}, Exception("database is locked")
    )
    app.dependency_overrides[get_db] = lambda: failing_session

    response = client.post("/api/video-upload", json=video_payload(), headers=auth_headers)

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Failed to save video metadata"
    assert "database is locked" in data["details"]
    failing_session.rollback.assert_called_once()


def test_save_video_metadata_requires_authentication(client):
    """Test unauthenticated save is rejected by the gate"""
    response = client.post("/api/video-upload", json=video_payload(), follow_redirects=False)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert count_videos() == 0


def test_list_videos_empty(client):
    """Test listing videos when none exist"""
    response = client.get("/api/videos")

    assert response.status_code == 200
    assert response.json() == []


def test_list_videos_newest_first(client):
    """Test listing order is created_at descending"""
    base = datetime(2024, 1, 1, 12, 0, 0)
    gen = get_db()
    db = next(gen)
    try:
        for i, offset in enumerate([2, 0, 1]):
            db.add(Video(
                title=f"video-{offset}",
                public_id=f"video/pid-{i}",
                created_at=base + timedelta(minutes=offset),
            ))
        db.commit()
    finally:
        gen.close()

    response = client.get("/api/videos")

    assert response.status_code == 200
    titles = [v["title"] for v in response.json()]
    assert titles == ["video-2", "video-1", "video-0"]


def test_get_video_by_id(client, auth_headers):
    """Test getting video by ID"""
    saved = client.post("/api/video-upload", json=video_payload(), headers=auth_headers)
    video_id = saved.json()["video"]["id"]

    response = client.get(f"/api/videos/{video_id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["id"] == video_id
    assert response.json()["publicId"] == "video/launch_demo_abc123"


def test_get_video_not_found(client, auth_headers):
    """Test getting non-existent video"""
    response = client.get(f"/api/videos/{uuid.uuid4()}", headers=auth_headers)

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


@pytest.mark.parametrize("raw_width", [b"1e400", b"-1e400", b"NaN", b"Infinity"])
def test_save_video_metadata_non_finite_dimensions(client, auth_headers, raw_width):
    """Test dimensions that cannot be integers are dropped instead of crashing"""
    body = (
        b'{"title":"t","publicId":"video/p1","videoUrl":"https://x/p1.mp4","width":'
        + raw_width + b',"duration":1e400}'
    )
    response = client.post(
        "/api/video-upload",
        content=body,
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 201
    assert client.get("/api/videos").json()[0]["duration"] == 0.0


def test_save_video_metadata_huge_integer_duration(client, auth_headers):
    payload = video_payload(duration=10 ** 400)
    response = client.post(
        "/api/video-upload",
        json=payload,
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert client.get("/api/videos").json()[0]["duration"] == 0.0
