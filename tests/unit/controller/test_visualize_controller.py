"""HTTP-level tests for the visualize routes."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.config.settings import Settings
from src.controller.visualize_controller import router
from src.handlers.error_handler import (
    CONTENT_BLOCKED_MESSAGE,
    GENERIC_MESSAGE,
    QUOTA_MESSAGE,
    MapExceptions,
)
from src.models.visualize import ProviderResult
from src.services.visualize_service.main import VisualizeService
from src.services.visualize_service.providers import OpenAITextProvider
from src.services.visualize_service.visualizer import (
    EXHAUSTED_MESSAGE,
    MISSING_KEY_MESSAGE,
    Stage,
    Visualizer,
)

SETTINGS = Settings(gemini_api_key="test-key")


def create_test_app(visualizer: Visualizer) -> TestClient:
    app = FastAPI()
    MapExceptions.register_exception_handlers(app)
    app.include_router(router)
    app.dependency_overrides[VisualizeService.get_visualizer] = lambda: visualizer
    return TestClient(app)


def client_with_stages(stages, settings=SETTINGS) -> TestClient:
    return create_test_app(
        Visualizer(settings=settings, stage_builder=lambda s, ratio: stages)
    )


class TestVisualizeEndpoint:
    def test_image_success_body(self, fake_provider, png_b64):
        client = client_with_stages(
            [
                Stage("A", fake_provider("model-a", result=ProviderResult(image="QUJD"))),
                Stage("B", fake_provider("model-b")),
                Stage("C", fake_provider("model-c"), describe=True),
            ]
        )

        resp = client.post(
            "/api/visualize",
            json={"image": png_b64, "style": "garden", "mimeType": "image/png"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["resultImage"] == "QUJD"
        assert data["textDescription"] is None
        assert data["model"] == "model-a"
        assert data["message"]

    def test_text_only_success_body(self, fake_provider, png_b64):
        client = client_with_stages(
            [
                Stage("A", fake_provider("model-a", exc=RuntimeError("boom"))),
                Stage("B", fake_provider("model-b", exc=RuntimeError("boom"))),
                Stage(
                    "C",
                    fake_provider("model-c", result=ProviderResult(text="Soft glow")),
                    describe=True,
                ),
            ]
        )

        resp = client.post("/api/visualize", json={"image": png_b64, "style": "security"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["resultImage"] is None
        assert data["textDescription"] == "Soft glow"
        assert data["model"] == "model-c"

    def test_missing_image(self, fake_provider, calls):
        client = client_with_stages([Stage("A", fake_provider("model-a"))])

        resp = client.post("/api/visualize", json={"style": "garden"})

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "No image provided"}
        assert calls == []

    def test_invalid_style(self, png_b64):
        client = client_with_stages([])

        resp = client.post(
            "/api/visualize", json={"image": png_b64, "style": "not_a_real_style"}
        )

        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_missing_key(self, fake_provider, calls, png_b64):
        client = client_with_stages(
            [Stage("A", fake_provider("model-a"))], settings=Settings(gemini_api_key=None)
        )

        resp = client.post("/api/visualize", json={"image": png_b64, "style": "garden"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": MISSING_KEY_MESSAGE}
        assert calls == []

    def test_chain_exhaustion(self, fake_provider, calls, png_b64):
        client = client_with_stages(
            [
                Stage("A", fake_provider("model-a", exc=RuntimeError("quota"))),
                Stage("B", fake_provider("model-b", exc=RuntimeError("safety"))),
                Stage("C", fake_provider("model-c", result=ProviderResult()), describe=True),
            ]
        )

        resp = client.post("/api/visualize", json={"image": png_b64, "style": "garden"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": EXHAUSTED_MESSAGE}
        assert calls == ["model-a", "model-b", "model-c"]

    def test_mock_mode_round_trip(self, png_b64):
        client = create_test_app(
            Visualizer(settings=Settings(gemini_api_key="test-key", run_mode="mock"))
        )

        resp = client.post("/api/visualize", json={"image": png_b64, "style": "pathway"})

        assert resp.status_code == 200
        assert resp.json()["model"] == "mock-primary-image"
        assert resp.json()["resultImage"] == png_b64

    def test_openai_without_key_only_fails_description_stage(
        self, fake_provider, calls, png_b64
    ):
        client = client_with_stages(
            [
                Stage("A", fake_provider("model-a", exc=RuntimeError("boom"))),
                Stage("B", fake_provider("model-b", exc=RuntimeError("boom"))),
                Stage("C", OpenAITextProvider(None, "gpt-4o-mini"), describe=True),
            ]
        )

        resp = client.post("/api/visualize", json={"image": png_b64, "style": "garden"})

        assert resp.status_code == 500
        assert resp.json()["message"] == EXHAUSTED_MESSAGE
        assert calls == ["model-a", "model-b"]

    def test_openai_without_key_does_not_block_image_stages(self, fake_provider, png_b64):
        client = client_with_stages(
            [
                Stage("A", fake_provider("model-a", result=ProviderResult(image="QUJD"))),
                Stage("B", fake_provider("model-b")),
                Stage("C", OpenAITextProvider(None, "gpt-4o-mini"), describe=True),
            ]
        )

        resp = client.post("/api/visualize", json={"image": png_b64, "style": "garden"})

        assert resp.status_code == 200
        assert resp.json()["model"] == "model-a"


class TestMalformedBody:
    """Words inside a malformed body must never pick a provider error category."""

    def post(self, body):
        client = client_with_stages([])
        return client.post("/api/visualize", json=body)

    def test_wrong_type_mentioning_quota_is_generic(self):
        resp = self.post({"image": {"note": "quota"}, "style": "garden"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": GENERIC_MESSAGE}

    def test_wrong_type_mentioning_blocked_is_generic(self):
        resp = self.post({"image": ["blocked", "safety"], "style": "garden"})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": GENERIC_MESSAGE}

    def test_body_is_not_json(self):
        client = client_with_stages([])
        resp = client.post(
            "/api/visualize",
            content=b'{"image": "quota rate limit',
            headers={"Content-Type": "application/json"},
        )

        assert resp.status_code == 500
        assert resp.json()["message"] == GENERIC_MESSAGE


class TestEscapedErrorsAreClassified:
    def client_raising(self, exc):
        def builder(settings, ratio):
            raise exc

        return create_test_app(Visualizer(settings=SETTINGS, stage_builder=builder))

    def test_quota(self, png_b64):
        resp = self.client_raising(RuntimeError("You exceeded your QUOTA")).post(
            "/api/visualize", json={"image": png_b64, "style": "garden"}
        )
        assert resp.status_code == 429
        assert resp.json() == {"success": False, "message": QUOTA_MESSAGE}

    def test_safety(self, png_b64):
        resp = self.client_raising(RuntimeError("Safety settings blocked it")).post(
            "/api/visualize", json={"image": png_b64, "style": "garden"}
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == CONTENT_BLOCKED_MESSAGE

    def test_unknown(self, png_b64):
        resp = self.client_raising(RuntimeError("connection reset by peer")).post(
            "/api/visualize", json={"image": png_b64, "style": "garden"}
        )
        assert resp.status_code == 500
        assert resp.json()["message"] == GENERIC_MESSAGE


def test_styles_catalog():
    client = create_test_app(Visualizer(settings=SETTINGS))

    resp = client.get("/api/visualize/styles")

    assert resp.status_code == 200
    ids = [s["id"] for s in resp.json()["styles"]]
    assert ids == [
        "architectural",
        "pathway",
        "garden",
        "outdoor_living",
        "security",
        "combination",
    ]
