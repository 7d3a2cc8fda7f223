from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from app.middleware import StreamAwareGZipMiddleware

BODY = "data: x\n\n" * 200


def body(request):
    return PlainTextResponse(BODY)


def build_client():
    app = Starlette(routes=[Route("/appointments/events", body), Route("/appointments/", body)])
    app.add_middleware(StreamAwareGZipMiddleware, minimum_size=100, skip_paths=["/appointments/events"])
    return TestClient(app)


def test_event_stream_path_is_not_compressed():
    r = build_client().get("/appointments/events", headers={"Accept-Encoding": "gzip"})
    assert "content-encoding" not in r.headers
    assert r.text == BODY


def test_other_paths_are_compressed():
    r = build_client().get("/appointments/", headers={"Accept-Encoding": "gzip"})
    assert r.headers["content-encoding"] == "gzip"
    assert r.text == BODY
