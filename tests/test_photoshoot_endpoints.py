"""Tests for photoshoot HTTP endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient

from babyshoot.api.app import create_app
from babyshoot.domain.models import AuthenticatedUser
from babyshoot.domain.themes import Theme
from tests.conftest import (
    FakeAstriaClient,
    InMemoryCreditRepository,
    InMemoryImageRepository,
    InMemorySessionRepository,
)

CHILD_PAYLOAD = {
    "sessionType": "child",
    "child": {
        "name": "Mia",
        "ageInMonths": 9,
        "gender": "girl",
        "hairColor": "brown",
        "eyeColor": "hazel",
        "skinTone": "medium",
    },
    "photoUrls": ["https://cdn.example/1.jpg", "https://cdn.example/2.jpg"],
}


def test_requires_authentication(container) -> None:
    client = TestClient(create_app(container))

    missing = client.post("/api/photoshoot/create", json={})
    invalid = client.get(
        f"/api/photoshoot/{uuid4()}", headers={"Authorization": "Bearer wrong"}
    )

    assert missing.status_code == 401
    assert invalid.status_code == 401


def test_create_with_two_photos_returns_400(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    theme: Theme,
    credit_repository: InMemoryCreditRepository,
) -> None:
    credit_repository.balances[user.id] = 2
    client = TestClient(create_app(container))

    response = client.post(
        "/api/photoshoot/create",
        json={**CHILD_PAYLOAD, "themeId": str(theme.id)},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "At least 3 photos are required"


def test_create_without_credits_returns_402(
    container, auth_headers: dict[str, str], theme: Theme
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/photoshoot/create",
        json={**CHILD_PAYLOAD, "themeId": str(theme.id)},
        headers=auth_headers,
    )

    assert response.status_code == 402
    body = response.json()
    assert body["error"] == "Insufficient credits"
    assert body["current_balance"] == 0


def test_create_starts_training(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    theme: Theme,
    credit_repository: InMemoryCreditRepository,
    astria_client: FakeAstriaClient,
) -> None:
    credit_repository.balances[user.id] = 1
    client = TestClient(create_app(container))
    payload = {
        **CHILD_PAYLOAD,
        "themeId": str(theme.id),
        "existingPhotos": ["https://cdn.example/3.jpg"],
    }

    response = client.post("/api/photoshoot/create", json=payload, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "training"
    assert body["model_reused"] is False
    assert len(astria_client.created_tunes) == 1


def test_invalid_body_returns_400(container, auth_headers: dict[str, str]) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/photoshoot/create", json={"sessionType": "child"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_get_session_detail_and_not_found(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    theme: Theme,
    session_repository: InMemorySessionRepository,
    image_repository: InMemoryImageRepository,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(
        user_id=user.id, status="completed", selected_theme_id=theme.id
    )
    image_repository.add(session.id, status="completed", image_url="https://x/1.jpg")
    foreign = session_repository.add(status="completed")

    response = client.get(f"/api/photoshoot/{session.id}", headers=auth_headers)
    missing = client.get(f"/api/photoshoot/{foreign.id}", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["session"]["id"] == str(session.id)
    assert body["theme"]["name"] == theme.name
    assert body["images"][0]["image_url"] == "https://x/1.jpg"
    assert missing.status_code == 404
    assert missing.json() == {"error": "Session not found"}


def test_generate_endpoint(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    theme: Theme,
    session_repository: InMemorySessionRepository,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(
        user_id=user.id,
        status="ready",
        model_id="11",
        selected_theme_id=theme.id,
        base_prompt="a baby",
    )

    response = client.post(
        f"/api/photoshoot/{session.id}/generate", headers=auth_headers
    )
    again = client.post(f"/api/photoshoot/{session.id}/generate", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["images_requested"] == 2
    assert again.status_code == 400
    assert again.json()["error"] == "Session is not ready for generation"


def test_manual_status_check(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
    astria_client: FakeAstriaClient,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(
        user_id=user.id, status="training", training_job_id="77"
    )
    no_job = session_repository.add(user_id=user.id, status="pending")
    astria_client.tunes["77"] = {"id": 77, "trained_at": "2024-05-01T10:00:00Z"}

    response = client.post(f"/api/photoshoot/{session.id}/status", headers=auth_headers)
    repeat = client.post(f"/api/photoshoot/{session.id}/status", headers=auth_headers)
    missing_job = client.post(
        f"/api/photoshoot/{no_job.id}/status", headers=auth_headers
    )

    assert response.json()["status"] == "ready"
    assert repeat.json()["message"] == "Training already completed"
    assert missing_job.status_code == 400


def test_manual_status_check_reports_malformed_tune(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
    astria_client: FakeAstriaClient,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(
        user_id=user.id, status="training", training_job_id="78"
    )
    astria_client.tunes["78"] = {"status": "training"}

    response = client.post(f"/api/photoshoot/{session.id}/status", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to check training status"
    assert session_repository.sessions[session.id].status == "training"


def test_check_generation_endpoint(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
    image_repository: InMemoryImageRepository,
    astria_client: FakeAstriaClient,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(user_id=user.id, status="generating", model_id="3")
    image = image_repository.add(session.id, astria_prompt_id="601")
    astria_client.prompts["601"] = {"id": 601, "images": ["https://mp.astria.ai/6.jpg"]}

    response = client.post(
        f"/api/photoshoot/{session.id}/check-generation", headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["completed_images"] == 1
    assert image_repository.images[image.id].status == "completed"
    assert session_repository.sessions[session.id].status == "completed"


def test_check_generation_without_images_completes(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(user_id=user.id, status="generating", model_id="4")

    response = client.post(
        f"/api/photoshoot/{session.id}/check-generation", headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["total_images"] == 0
    assert session_repository.sessions[session.id].status == "completed"


def test_check_generation_requires_model(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(user_id=user.id, status="training")

    response = client.post(
        f"/api/photoshoot/{session.id}/check-generation", headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json() == {"error": "No model ID found for this session"}


def test_auto_update_returns_fresh_state(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
    image_repository: InMemoryImageRepository,
    astria_client: FakeAstriaClient,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(user_id=user.id, status="generating", model_id="3")
    image_repository.add(session.id, astria_prompt_id="501")
    astria_client.prompts["501"] = {"id": 501, "images": ["https://mp.astria.ai/1.jpg"]}

    response = client.post(
        f"/api/photoshoot/{session.id}/auto-update", headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["check"]["updated"] is True
    assert body["session"]["status"] == "completed"
    assert body["images"][0]["status"] == "completed"


def test_delete_session_endpoint(
    container,
    auth_headers: dict[str, str],
    user: AuthenticatedUser,
    session_repository: InMemorySessionRepository,
) -> None:
    client = TestClient(create_app(container))
    session = session_repository.add(user_id=user.id, status="failed")

    response = client.delete(f"/api/photoshoot/{session.id}", headers=auth_headers)

    assert response.status_code == 200
    assert session.id not in session_repository.sessions
