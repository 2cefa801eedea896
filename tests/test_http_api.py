"""Route tests through FastAPI's TestClient with a fake-backed gateway."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from app.api.http_api import create_app
from app.api.multimodal import file_input_manager
from app.api.multimodal.file_input_manager import normalize_filename, read_audio_upload
from app.core.errors import BILLING_URL, INTERNAL_MESSAGE, STREAM_GENERIC_MESSAGE, ErrorKind, GatewayError
from app.core.gateway import DEFAULT_CHAT_MESSAGE, DEFAULT_QUERY_MESSAGE, DEFAULT_STREAM_MESSAGE
from app.llm.errors import ProviderError, UpstreamHTTPError

from conftest import FakeChat, FakeTranscription, make_gateway


@pytest.fixture
def client(gateway):
    return TestClient(create_app(gateway))


def assert_error(response, status, code, message=None):
    body = response.json()
    assert response.status_code == status
    assert body["code"] == code
    assert set(body) == {"code", "message", "action", "timestamp", "path"}
    assert body["timestamp"].endswith("Z")
    if message is not None:
        assert body["message"] == message
    return body


# =========================================================
# CHAT
# =========================================================

def test_get_chat_uses_query_default(client):
    response = client.get("/api/chat")

    assert response.status_code == 200
    assert response.json() == {"message": DEFAULT_QUERY_MESSAGE, "response": "ok"}


def test_get_chat_empty_query_gets_route_default(client):
    empty = client.get("/api/chat", params={"message": ""})
    blank = client.get("/api/chat", params={"message": "   "})

    assert empty.json()["message"] == DEFAULT_QUERY_MESSAGE
    assert blank.json()["message"] == DEFAULT_CHAT_MESSAGE


def test_stream_empty_query_gets_stream_default():
    chat = FakeChat(fragments=["x"])
    client = TestClient(create_app(make_gateway(chat=chat)))

    response = client.get("/api/chat/stream", params={"message": ""})

    assert response.text == "data: x\n\n"
    assert chat.stream_calls[0][-1]["content"] == DEFAULT_STREAM_MESSAGE


def test_app_builds_with_registered_routes(client):
    paths = {getattr(route, "path", None) for route in client.app.routes}

    assert {"/api/chat", "/api/chat/stream", "/api/ai/features"} <= paths


def test_post_chat_blank_or_missing_body_falls_back(client):
    assert client.post("/api/chat", json={"message": "  "}).json()["message"] == DEFAULT_CHAT_MESSAGE
    assert client.post("/api/chat").json()["message"] == DEFAULT_CHAT_MESSAGE


def test_stream_emits_fragments_then_error():
    chat = FakeChat(fragments=["Sal", "om"], stream_error=UpstreamHTTPError(None, "reset"))
    client = TestClient(create_app(make_gateway(chat=chat)))

    response = client.get("/api/chat/stream", params={"message": "hi"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.text == f"data: Sal\n\ndata: om\n\ndata: {STREAM_GENERIC_MESSAGE}\n\n"


def test_structured_endpoint_returns_camel_case():
    reply = '{"title": "Plan", "steps": ["one"], "risk_level": "medium", "first_action": "read"}'
    client = TestClient(create_app(make_gateway(chat=FakeChat(replies=[{"content": reply}]))))

    body = client.post("/api/chat/structured", json={}).json()

    assert body == {"title": "Plan", "steps": ["one"], "riskLevel": "medium", "firstAction": "read"}


def test_memory_turn_and_clear(client):
    reply = client.post("/api/chat/memory/abc", json={"message": "salom"})
    cleared = client.delete("/api/chat/memory/abc")

    assert reply.json() == {"conversationId": "abc", "message": "salom", "response": "ok"}
    assert cleared.json() == {"conversationId": "abc", "status": "cleared"}


def test_memory_turn_requires_message(client):
    response = client.post("/api/chat/memory/abc", json={"message": ""})

    body = assert_error(response, 400, "REQUEST_ERROR", "message is required")
    assert body["path"] == "/api/chat/memory/abc"


def test_tool_endpoint(client):
    assert client.post("/api/chat/tool", json={"message": "hi"}).json() == {"message": "hi", "response": "ok"}


def test_tool_endpoint_survives_non_object_arguments():
    call = {"id": "c1", "type": "function", "function": {"name": "currentDateTime", "arguments": "[]"}}
    chat = FakeChat(replies=[
        {"role": "assistant", "content": None, "tool_calls": [call]},
        {"role": "assistant", "content": "done"},
    ])
    client = TestClient(create_app(make_gateway(chat=chat)))

    response = client.post("/api/chat/tool", json={"message": "soat nechchi?"})

    assert response.status_code == 200
    assert response.json()["response"] == "done"
    tool_message = chat.calls[1]["messages"][-1]
    assert tool_message["role"] == "tool"
    assert tool_message["content"] == "Error: tool arguments must be a JSON object"


# =========================================================
# ERROR MAPPING
# =========================================================

def test_quota_failure_is_429():
    chat = FakeChat(replies=[ProviderError("HTTP 429", status_code=429, error_code="insufficient_quota")])
    client = TestClient(create_app(make_gateway(chat=chat)))

    body = assert_error(client.post("/api/chat", json={"message": "x"}), 429, "INSUFFICIENT_QUOTA")
    assert body["action"] == BILLING_URL


def test_upstream_failure_is_502():
    chat = FakeChat(replies=[UpstreamHTTPError(503, "<html>")])
    client = TestClient(create_app(make_gateway(chat=chat)))

    assert_error(client.get("/api/chat"), 502, "UPSTREAM_HTTP_ERROR", "Upstream xizmat xatosi: HTTP 503")


def test_unexpected_failure_is_500_without_details():
    chat = FakeChat(replies=[RuntimeError("db password leaked")])
    client = TestClient(create_app(make_gateway(chat=chat)), raise_server_exceptions=False)

    assert_error(client.get("/api/chat"), 500, "INTERNAL_ERROR", INTERNAL_MESSAGE)


def test_malformed_json_and_wrong_types_are_request_errors(client):
    malformed = client.post("/api/chat", content="{bad", headers={"Content-Type": "application/json"})
    wrong_type = client.post("/api/ai/vector/search", json={"query": "q", "topK": "four"})

    assert_error(malformed, 400, "REQUEST_ERROR")
    assert_error(wrong_type, 400, "REQUEST_ERROR")


def test_unknown_route_uses_error_payload(client):
    assert_error(client.get("/api/nope"), 404, "REQUEST_ERROR")


# =========================================================
# MODEL ENDPOINTS
# =========================================================

def test_unconfigured_feature_is_501_before_validation():
    client = TestClient(create_app(make_gateway(full=False)))

    assert_error(client.post("/api/ai/embedding", json={}), 501, "REQUEST_ERROR",
                 "Embedding modeli bu konfiguratsiyada mavjud emas")
    assert_error(client.post("/api/ai/audio/transcription"), 501, "REQUEST_ERROR")
    assert client.get("/api/ai/features").json()["image"] is False


def test_embedding_endpoint(client):
    body = client.post("/api/ai/embedding", json={"text": "python"}).json()

    assert body == {"text": "python", "dimensions": 5, "preview": [0.0, 1.0, 0.0, 0.0, 0.01]}


def test_vector_index_search_and_rag(client):
    indexed = client.post("/api/ai/vector/index", json={"documents": [
        {"id": "doc-1", "text": "Spring AI overview", "metadata": {"source": "wiki"}},
        {"text": ""},
    ]})
    hits = client.post("/api/ai/vector/search", json={"query": "spring", "topK": 1, "similarityThreshold": 0.5})
    rag = client.post("/api/ai/rag/ask", json={"question": "spring?"})

    assert indexed.json() == {"indexed": 1, "ids": ["doc-1"]}
    assert [hit["id"] for hit in hits.json()] == ["doc-1"]
    assert hits.json()[0]["metadata"] == {"source": "wiki"}
    assert rag.json()["answer"] == "ok"
    assert rag.json()["sources"][0]["id"] == "doc-1"


def test_vector_index_requires_documents(client):
    assert_error(client.post("/api/ai/vector/index", json={"documents": []}), 400, "REQUEST_ERROR",
                 "documents list is required")


def test_image_and_moderation(client):
    image = client.post("/api/ai/image", json={"prompt": "cat", "quality": "hd"}).json()
    verdict = client.post("/api/ai/moderation", json={"text": "hello"}).json()

    assert image == {"prompt": "cat", "url": "https://img.example/1.png", "b64Json": None}
    assert verdict["flagged"] is False
    assert len(verdict["categories"]) == 6


def test_image_requires_prompt(client):
    assert_error(client.post("/api/ai/image", json={"prompt": " "}), 400, "REQUEST_ERROR", "prompt is required")


def test_speech_download_headers(client):
    response = client.post("/api/ai/audio/speech", json={"text": "salom", "format": "wav"})
    fallback = client.post("/api/ai/audio/speech", json={"text": "salom", "format": "ogg"})

    assert response.content == b"AUDIO"
    assert response.headers["content-type"] == "audio/wav"
    assert response.headers["content-disposition"] == 'attachment; filename="speech.wav"'
    assert fallback.headers["content-type"] == "audio/mpeg"


def test_transcription_upload():
    transcription = FakeTranscription(transcript="salom dunyo")
    client = TestClient(create_app(make_gateway(transcription=transcription)))

    response = client.post(
        "/api/ai/audio/transcription",
        files={"file": ("clip.mp3", b"\x00\x01", "audio/mpeg")},
        data={"language": "uz", "prompt": " "},
    )

    assert response.json() == {"filename": "clip.mp3", "transcript": "salom dunyo"}
    assert transcription.calls[0]["language"] == "uz"
    assert transcription.calls[0]["prompt"] is None


def test_transcription_rejects_missing_or_empty_upload(client):
    missing = client.post("/api/ai/audio/transcription", data={"language": "uz"})
    empty = client.post("/api/ai/audio/transcription", files={"file": ("a.mp3", b"", "audio/mpeg")})

    assert_error(missing, 400, "REQUEST_ERROR", "audio file is required")
    assert_error(empty, 400, "REQUEST_ERROR", "audio file is required")


class StubUpload:
    def __init__(self, payload=b"", size=None, error=None, filename="clip.mp3"):
        self.payload = payload
        self.size = size
        self.error = error
        self.filename = filename
        self.reads = 0

    async def read(self):
        self.reads += 1
        if self.error is not None:
            raise self.error
        return self.payload


def test_unreadable_upload_is_request_error():
    with pytest.raises(GatewayError) as excinfo:
        asyncio.run(read_audio_upload(StubUpload(error=OSError("disk gone"))))

    assert excinfo.value.kind is ErrorKind.REQUEST
    assert excinfo.value.kind.status_code == 400
    assert excinfo.value.message == "audio file cannot be read: disk gone"


def test_declared_oversize_is_rejected_without_reading():
    upload = StubUpload(payload=b"x", size=file_input_manager.MAX_FILE_SIZE_BYTES + 1)

    with pytest.raises(GatewayError) as excinfo:
        asyncio.run(read_audio_upload(upload))

    assert excinfo.value.message == "audio file exceeds max size limit"
    assert upload.reads == 0


def test_actual_oversize_is_rejected(monkeypatch):
    monkeypatch.setattr(file_input_manager, "MAX_FILE_SIZE_BYTES", 4)

    with pytest.raises(GatewayError) as excinfo:
        asyncio.run(read_audio_upload(StubUpload(payload=b"0123456789")))

    assert excinfo.value.message == "audio file exceeds max size limit"


def test_oversized_upload_route_is_400(client, monkeypatch):
    monkeypatch.setattr(file_input_manager, "MAX_FILE_SIZE_BYTES", 4)

    response = client.post("/api/ai/audio/transcription", files={"file": ("a.mp3", b"0123456789", "audio/mpeg")})

    assert_error(response, 400, "REQUEST_ERROR", "audio file exceeds max size limit")


@pytest.mark.parametrize("raw,expected", [
    (None, "audio.webm"),
    ("  ", "audio.webm"),
    ("../../etc/clip.mp3", "clip.mp3"),
    ("C:\\Users\\me\\voice.wav", "voice.wav"),
])
def test_upload_filename_is_normalized(raw, expected):
    assert normalize_filename(raw) == expected
