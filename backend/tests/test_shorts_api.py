"""
Tests for the shorts API.

The pipeline dependency is overridden with one whose AIService is mocked.
"""

from contextlib import contextmanager
from unittest.mock import AsyncMock, Mock

import pytest

import routers.shorts
from main import app
from models import ShortStatus
from pipeline.error_handler import APIError
from pipeline.shorts_pipeline import ShortsPipeline
from services.model_registry import ModelTask


def text_responses(script_text, prompts_text):
    def generate_text(prompt, system=None, task=ModelTask.SCRIPT_GENERATION, model_name=None, temperature=None):
        return prompts_text if task == ModelTask.PROMPT_ENGINEERING else script_text

    return generate_text


def fake_image(prompt, **kwargs):
    return {"url": "https://cdn.example.com/scene.png", "width": 576, "height": 1024}


@pytest.fixture
def ai_service(script_json, prompts_json):
    service = Mock()
    service.generate_text = AsyncMock(side_effect=text_responses(script_json(3), prompts_json(3)))
    service.generate_image = AsyncMock(side_effect=fake_image)
    return service


@pytest.fixture
def pipeline(db_session, ai_service):
    return ShortsPipeline(db_session, ai_service=ai_service, batch_size=2)


@pytest.fixture
def api(client, pipeline):
    """Test client whose shorts pipeline uses the mocked AI service"""
    app.dependency_overrides[routers.shorts.get_pipeline] = lambda: pipeline
    return client


@pytest.fixture
def short_body(make_climate, make_style):
    return {
        "premise": "Why octopuses have three hearts",
        "climate_id": make_climate().id,
        "style_id": make_style().id,
        "format": "SHORT",
    }


@pytest.fixture
def short_id(api, user_headers, short_body):
    return api.post("/api/shorts", headers=user_headers, json=short_body).json()["id"]


@pytest.fixture
def edited_short(api, user_headers, short_body):
    """Short with three hand-written scenes"""
    body = dict(short_body, scenes=[
        {"narration": f"Narration {i}", "visual_desc": f"Visual {i}", "duration": 5} for i in range(3)
    ])
    return api.post("/api/shorts", headers=user_headers, json=body).json()


class TestSceneParams:
    """Test cases for GET /api/shorts/scene-params"""

    def test_short_fast(self, client):
        data = client.get("/api/shorts/scene-params?format=SHORT&pressure=FAST").json()

        assert data["max_scenes"] == 6
        assert data["overrides_valid"] is True
        assert data["limits"]["scenes"]["max"] == 10

    def test_override_out_of_range(self, client):
        data = client.get("/api/shorts/scene-params?format=SHORT&max_scenes=11").json()

        assert data["overrides_valid"] is False
        assert len(data["warnings"]) == 1

    def test_unknown_format(self, client):
        assert client.get("/api/shorts/scene-params?format=TIKTOK").status_code == 400


class TestShortCrud:
    """Test cases for creating, listing, reading and deleting shorts"""

    def test_create(self, api, user_headers, short_body):
        response = api.post("/api/shorts", headers=user_headers, json=short_body)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "DRAFT"
        assert data["user_id"] == "user-1"
        assert data["scenes"] == []

    def test_create_with_scenes(self, edited_short):
        assert [s["order"] for s in edited_short["scenes"]] == [0, 1, 2]

    def test_create_invalid_format(self, api, user_headers, short_body):
        response = api.post("/api/shorts", headers=user_headers, json=dict(short_body, format="TIKTOK"))

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"
        assert response.json()["details"]["field"] == "format"

    def test_create_with_foreign_climate(self, api, user_headers, other_user_headers, short_body):
        foreign = api.post(
            "/api/climates",
            headers=other_user_headers,
            json={"name": "Private", "emotional_state": "THREAT", "prompt_fragment": "secret"},
        ).json()

        response = api.post("/api/shorts", headers=user_headers, json=dict(short_body, climate_id=foreign["id"]))

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"
        assert response.json()["details"] == {"climate_id": foreign["id"]}
        assert api.get("/api/shorts", headers=user_headers).json()["total"] == 0

    def test_create_with_foreign_style(self, api, user_headers, short_body, make_style):
        foreign = make_style(user_id="user-2")

        response = api.post("/api/shorts", headers=user_headers, json=dict(short_body, style_id=foreign.id))

        assert response.status_code == 404
        assert response.json()["details"] == {"style_id": foreign.id}

    def test_create_with_system_climate(self, api, user_headers, short_body, make_climate):
        system = make_climate(is_system=True, user_id=None)

        response = api.post("/api/shorts", headers=user_headers, json=dict(short_body, climate_id=system.id))

        assert response.status_code == 201
        assert response.json()["climate_id"] == system.id

    def test_create_requires_user(self, api, short_body):
        assert api.post("/api/shorts", json=short_body).status_code == 401

    def test_list_only_own_shorts(self, api, user_headers, short_id, pipeline):
        pipeline.create_short("user-2", "Someone else's short")

        data = api.get("/api/shorts", headers=user_headers).json()

        assert data["total"] == 1
        assert [s["id"] for s in data["shorts"]] == [short_id]
        assert "scenes" not in data["shorts"][0]

    def test_list_status_filter(self, api, user_headers, short_id, edited_short):
        api.post(f"/api/shorts/{edited_short['id']}/approve-script", headers=user_headers)

        data = api.get("/api/shorts?status=SCRIPT_APPROVED", headers=user_headers).json()

        assert [s["id"] for s in data["shorts"]] == [edited_short["id"]]

    def test_get_foreign_short(self, api, user_headers, pipeline):
        foreign = pipeline.create_short("user-2", "Not yours")

        response = api.get(f"/api/shorts/{foreign.id}", headers=user_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_delete(self, api, user_headers, edited_short):
        short_id = edited_short["id"]

        assert api.delete(f"/api/shorts/{short_id}", headers=user_headers).status_code == 204
        assert api.get(f"/api/shorts/{short_id}", headers=user_headers).status_code == 404


class TestScriptEndpoints:
    """Test cases for script generation and approval"""

    def test_generate_script(self, api, user_headers, short_id, ai_service):
        response = api.post(f"/api/shorts/{short_id}/generate-script", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "SCRIPT_READY"
        assert data["title"] == "Why octopuses have three hearts"
        assert data["hook"] == "What needs three hearts to survive?"
        assert len(data["scenes"]) == 3
        assert ai_service.generate_text.await_args.kwargs["task"] == ModelTask.SCRIPT_GENERATION

    def test_generate_script_provider_error(self, api, user_headers, short_id, ai_service):
        ai_service.generate_text.side_effect = APIError("openrouter", "upstream down", status_code=503)

        response = api.post(f"/api/shorts/{short_id}/generate-script", headers=user_headers)

        assert response.status_code == 502
        assert response.json()["error_code"] == "OPENROUTER_API_ERROR"
        short = api.get(f"/api/shorts/{short_id}", headers=user_headers).json()
        assert short["status"] == "FAILED"
        assert short["error_message"] == "upstream down"

    def test_generate_script_without_style(self, api, user_headers, make_climate):
        body = {"premise": "No style", "climate_id": make_climate().id}
        short_id = api.post("/api/shorts", headers=user_headers, json=body).json()["id"]

        response = api.post(f"/api/shorts/{short_id}/generate-script", headers=user_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_STYLE"

    def test_regenerate_script(self, api, user_headers, short_id):
        api.post(f"/api/shorts/{short_id}/generate-script", headers=user_headers)

        data = api.post(f"/api/shorts/{short_id}/regenerate-script", headers=user_headers).json()

        assert data["status"] == "SCRIPT_READY"
        assert data["script_version"] == 2

    def test_approve_without_scenes(self, api, user_headers, short_id):
        response = api.post(f"/api/shorts/{short_id}/approve-script", headers=user_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_STATE"

    def test_approve(self, api, user_headers, edited_short):
        data = api.post(f"/api/shorts/{edited_short['id']}/approve-script", headers=user_headers).json()

        assert data["status"] == "SCRIPT_APPROVED"
        assert data["script_approved_at"] is not None

    def test_generate_script_after_approval(self, api, user_headers, edited_short):
        api.post(f"/api/shorts/{edited_short['id']}/approve-script", headers=user_headers)

        response = api.post(f"/api/shorts/{edited_short['id']}/generate-script", headers=user_headers)

        assert response.status_code == 409

    def test_regenerate_script_after_approval(self, api, user_headers, edited_short):
        api.post(f"/api/shorts/{edited_short['id']}/approve-script", headers=user_headers)

        response = api.post(f"/api/shorts/{edited_short['id']}/regenerate-script", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "SCRIPT_READY"
        assert response.json()["script_version"] == 2


class TestMediaEndpoints:
    """Test cases for media generation and image regeneration"""

    def test_generate_media_requires_approval(self, api, user_headers, edited_short):
        response = api.post(f"/api/shorts/{edited_short['id']}/generate-media", headers=user_headers)
        assert response.status_code == 409

    def test_generate_media_queues_background_task(self, api, user_headers, edited_short, monkeypatch):
        runner = AsyncMock()
        monkeypatch.setattr(routers.shorts, "run_media_generation", runner)
        api.post(f"/api/shorts/{edited_short['id']}/approve-script", headers=user_headers)

        response = api.post(f"/api/shorts/{edited_short['id']}/generate-media", headers=user_headers)

        assert response.status_code == 202
        assert response.json()["short_id"] == edited_short["id"]
        assert response.json()["status"] == "SCRIPT_APPROVED"
        runner.assert_called_once_with(edited_short["id"])

    def test_regenerate_image_without_prompt(self, api, user_headers, edited_short):
        scene_id = edited_short["scenes"][0]["id"]

        response = api.post(
            f"/api/shorts/{edited_short['id']}/scenes/{scene_id}/regenerate-image",
            headers=user_headers,
            json={},
        )

        assert response.status_code == 400

    def test_regenerate_image(self, api, user_headers, edited_short, ai_service):
        scene_id = edited_short["scenes"][0]["id"]

        response = api.post(
            f"/api/shorts/{edited_short['id']}/scenes/{scene_id}/regenerate-image",
            headers=user_headers,
            json={"image_prompt": "octopus close-up, cinematic lighting"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["image_prompt"] == "octopus close-up, cinematic lighting"
        assert data["media_url"] == "https://cdn.example.com/scene.png"
        ai_service.generate_image.assert_awaited_once_with("octopus close-up, cinematic lighting", negative_prompt=None)

    def test_regenerate_image_sends_negative_prompt(self, api, user_headers, edited_short, ai_service):
        scene_id = edited_short["scenes"][0]["id"]

        response = api.post(
            f"/api/shorts/{edited_short['id']}/scenes/{scene_id}/regenerate-image",
            headers=user_headers,
            json={"image_prompt": "octopus close-up", "negative_prompt": "text, watermark"},
        )

        assert response.status_code == 200
        assert response.json()["negative_prompt"] == "text, watermark"
        ai_service.generate_image.assert_awaited_once_with("octopus close-up", negative_prompt="text, watermark")


class TestRunMediaGeneration:
    """Test cases for the background media task"""

    @pytest.fixture
    def task_env(self, db_session, ai_service, monkeypatch):
        @contextmanager
        def session_context():
            yield db_session

        monkeypatch.setattr(routers.shorts, "get_db_context", session_context)
        monkeypatch.setattr(routers.shorts, "get_ai_service", lambda: ai_service)

    @pytest.fixture
    def approved_id(self, pipeline, make_climate, make_style):
        short = pipeline.create_short(
            "user-1",
            "Octopus hearts",
            climate_id=make_climate().id,
            style_id=make_style().id,
            scenes=[{"narration": f"Narration {i}", "visual_desc": f"Visual {i}"} for i in range(3)],
        )
        return pipeline.approve_script(short.id).id

    @pytest.mark.asyncio
    async def test_completes_short(self, task_env, pipeline, approved_id):
        await routers.shorts.run_media_generation(approved_id)

        short = pipeline.get_short(approved_id)
        assert short.status == ShortStatus.COMPLETED
        assert all(scene.media_url for scene in short.scenes)

    @pytest.mark.asyncio
    async def test_failure_is_recorded_not_raised(self, task_env, pipeline, approved_id, ai_service):
        ai_service.generate_text.side_effect = APIError("openrouter", "prompt model down")

        await routers.shorts.run_media_generation(approved_id)

        short = pipeline.get_short(approved_id)
        assert short.status == ShortStatus.FAILED
        assert short.error_message == "prompt model down"


class TestSceneEndpoints:
    """Test cases for scene editing"""

    def test_list_scenes(self, api, user_headers, edited_short):
        scenes = api.get(f"/api/shorts/{edited_short['id']}/scenes", headers=user_headers).json()
        assert [s["narration"] for s in scenes] == ["Narration 0", "Narration 1", "Narration 2"]

    def test_add_scene(self, api, user_headers, edited_short):
        short_id = edited_short["id"]

        response = api.post(
            f"/api/shorts/{short_id}/scenes",
            headers=user_headers,
            json={"order": 1, "narration": "Inserted", "duration": 4},
        )

        assert response.status_code == 201
        assert response.json()["order"] == 1
        scenes = api.get(f"/api/shorts/{short_id}/scenes", headers=user_headers).json()
        assert [s["narration"] for s in scenes] == ["Narration 0", "Inserted", "Narration 1", "Narration 2"]
        assert [s["order"] for s in scenes] == [0, 1, 2, 3]

    def test_update_scene(self, api, user_headers, edited_short):
        scene_id = edited_short["scenes"][1]["id"]

        response = api.patch(
            f"/api/shorts/{edited_short['id']}/scenes/{scene_id}",
            headers=user_headers,
            json={"narration": "Rewritten", "duration": 7},
        )

        assert response.status_code == 200
        assert response.json()["narration"] == "Rewritten"
        assert response.json()["duration"] == 7
        assert response.json()["visual_desc"] == "Visual 1"

    def test_update_scene_of_other_short(self, api, user_headers, edited_short, short_id):
        scene_id = edited_short["scenes"][0]["id"]

        response = api.patch(
            f"/api/shorts/{short_id}/scenes/{scene_id}",
            headers=user_headers,
            json={"narration": "Wrong short"},
        )

        assert response.status_code == 404

    def test_remove_scene(self, api, user_headers, edited_short):
        short_id = edited_short["id"]
        scene_id = edited_short["scenes"][0]["id"]

        assert api.delete(f"/api/shorts/{short_id}/scenes/{scene_id}", headers=user_headers).status_code == 204

        scenes = api.get(f"/api/shorts/{short_id}/scenes", headers=user_headers).json()
        assert [(s["order"], s["narration"]) for s in scenes] == [(0, "Narration 1"), (1, "Narration 2")]

    def test_reorder_scenes(self, api, user_headers, edited_short):
        ids = [s["id"] for s in edited_short["scenes"]]

        response = api.post(
            f"/api/shorts/{edited_short['id']}/scenes/reorder",
            headers=user_headers,
            json={"scene_ids": list(reversed(ids))},
        )

        assert response.status_code == 200
        assert [s["narration"] for s in response.json()] == ["Narration 2", "Narration 1", "Narration 0"]

    def test_reorder_requires_every_scene(self, api, user_headers, edited_short):
        ids = [s["id"] for s in edited_short["scenes"]]

        response = api.post(
            f"/api/shorts/{edited_short['id']}/scenes/reorder",
            headers=user_headers,
            json={"scene_ids": ids[:2]},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"
