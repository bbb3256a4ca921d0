import base64

import pytest
from fastapi.testclient import TestClient

from venn_isomorphic.api.main import app
from venn_isomorphic.components.renderer.results import Fulfilled, Rejected, RenderOptions, RenderResult
from venn_isomorphic.components.renderer.venn_renderer import VennRenderer
from venn_isomorphic.core.exceptions import BrowserLaunchError, DiagramRenderError, PageSetupError, RendererError

AB = [{"sets": ["A"], "size": 3}, {"sets": ["B"], "size": 2}, {"sets": ["A", "B"], "size": 1}]


class StubRenderer:
    """Records render calls and returns canned outcomes instead of driving a browser."""

    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.calls = []
        self.closed = False

    async def __call__(self, diagrams, options=None):
        self.calls.append((diagrams, options))
        if self.error is not None:
            raise self.error
        return self.results

    async def aclose(self):
        self.closed = True


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def use_renderer(stub):
    app.state.venn_renderer = stub
    return stub


def test_read_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Welcome to the venn-isomorphic API"


def test_startup_creates_shared_renderer(client):
    assert isinstance(app.state.venn_renderer, VennRenderer)
    # Creating the renderer must not start a browser.
    assert app.state.venn_renderer.session.active == 0
    assert not app.state.venn_renderer.session.is_running


def test_render_returns_settled_results(client):
    stub = use_renderer(StubRenderer(results=[
        Fulfilled(value=RenderResult(id="venn-0", svg="<svg/>", width=1, height=0.5, screenshot=b"PNG")),
        Rejected(reason=DiagramRenderError("Error", "negative size", "Error: negative size")),
        Rejected(reason="thrown string"),
    ]))

    response = client.post("/api/v1/venn/render", json={
        "diagrams": [AB, [{"sets": ["A"], "size": -1}], AB],
        "options": {"screenshot": True, "vennConfig": {"fontFamily": "serif"}, "prefix": "venn"},
    })

    assert response.status_code == 200
    results = response.json()["results"]
    assert len(results) == 3
    assert results[0] == {
        "status": "fulfilled",
        "value": {
            "id": "venn-0",
            "svg": "<svg/>",
            "width": 1.0,
            "height": 0.5,
            "screenshot": base64.b64encode(b"PNG").decode("ascii"),
        },
    }
    assert results[1] == {
        "status": "rejected",
        "reason": {"name": "Error", "message": "negative size", "stack": "Error: negative size"},
    }
    assert results[2]["reason"]["message"] == "thrown string"

    diagrams, options = stub.calls[0]
    assert len(diagrams) == 3
    assert isinstance(options, RenderOptions)
    assert options.screenshot is True
    assert options.venn_config == {"fontFamily": "serif"}


def test_render_uses_default_options(client):
    stub = use_renderer(StubRenderer(results=[
        Fulfilled(value=RenderResult(id="venn-0", svg="<svg/>", width=1, height=1)),
    ]))

    response = client.post("/api/v1/venn/render", json={"diagrams": [AB]})

    assert response.status_code == 200
    assert response.json()["results"][0]["value"]["screenshot"] is None
    _, options = stub.calls[0]
    assert options == RenderOptions()
    # Left unset so the renderer applies its configured default prefix.
    assert "prefix" not in options.model_fields_set


@pytest.mark.parametrize("error", [
    BrowserLaunchError("Failed to initialize Playwright or launch browser chromium: Executable doesn't exist"),
    PageSetupError("Failed to prepare rendering page: net::ERR_NAME_NOT_RESOLVED"),
])
def test_render_setup_failure_is_503(client, error):
    use_renderer(StubRenderer(error=error))

    response = client.post("/api/v1/venn/render", json={"diagrams": [AB]})

    assert response.status_code == 503
    assert "playwright install" in response.json()["detail"]


def test_render_evaluation_failure_is_500(client):
    use_renderer(StubRenderer(error=RendererError("Batch evaluation failed: Target closed")))

    response = client.post("/api/v1/venn/render", json={"diagrams": [AB]})

    assert response.status_code == 500
    assert "Batch evaluation failed" in response.json()["detail"]


@pytest.mark.parametrize("payload", [
    {"diagrams": [AB], "options": {"prefix": "not valid"}},
    {"diagrams": [AB], "options": {"unknown": True}},
    {"diagrams": "not a list"},
    {},
])
def test_render_invalid_payload_is_422(client, payload):
    stub = use_renderer(StubRenderer())

    response = client.post("/api/v1/venn/render", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"] == "Request validation failed"
    assert stub.calls == []


def test_shutdown_waits_for_renderer_close():
    with TestClient(app):
        stub = use_renderer(StubRenderer())
    assert stub.closed
