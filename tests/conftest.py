"""Shared fakes for gateway, route and CLI tests."""

import pytest

from app.core.gateway import ProviderGateway
from app.memory.chat_memory import ChatMemory
from app.retrieval.vector_store import InMemoryVectorStore


VOCABULARY = ("spring", "python", "faiss", "music")


class FakeChat:
    """Chat capability returning scripted assistant messages."""

    def __init__(self, replies=None, fragments=None, stream_error=None):
        self.replies = list(replies or [{"role": "assistant", "content": "ok"}])
        self.fragments = list(fragments or [])
        self.stream_error = stream_error
        self.calls = []
        self.stream_calls = []

    def chat(self, messages, tools=None, response_format=None):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "tools": tools,
            "response_format": response_format,
        })
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def chat_stream(self, messages):
        self.stream_calls.append(list(messages))
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error


class FakeEmbedding:
    """Bag-of-keywords embedding so similarity is predictable."""

    def __init__(self):
        self.calls = []

    def embed(self, texts):
        self.calls.append(list(texts))
        return [
            [float(word in text.lower()) for word in VOCABULARY] + [0.01]
            for text in texts
        ]


class FakeImage:
    def __init__(self):
        self.calls = []

    def generate_image(self, prompt, model=None, quality=None, style=None):
        self.calls.append({"prompt": prompt, "model": model, "quality": quality, "style": style})
        return {"url": "https://img.example/1.png", "b64_json": None}


class FakeModeration:
    def __init__(self, result=None):
        self.result = result

    def moderate(self, text):
        return self.result


class FakeSpeech:
    def __init__(self):
        self.calls = []

    def synthesize(self, text, response_format, model=None, voice=None, speed=None):
        self.calls.append({
            "text": text,
            "response_format": response_format,
            "model": model,
            "voice": voice,
            "speed": speed,
        })
        return b"AUDIO"


class FakeTranscription:
    def __init__(self, transcript="salom dunyo"):
        self.transcript = transcript
        self.calls = []

    def transcribe(self, filename, audio, language=None, prompt=None):
        self.calls.append({"filename": filename, "audio": audio, "language": language, "prompt": prompt})
        return self.transcript


def make_gateway(chat=None, full=True, **overrides):
    """Gateway over fakes; `full=False` leaves only chat configured."""
    chat = chat or FakeChat()
    if not full:
        return ProviderGateway(chat=chat, memory=overrides.get("memory"))

    embedding = overrides.get("embedding") or FakeEmbedding()
    return ProviderGateway(
        chat=chat,
        embedding=embedding,
        vector_store=overrides.get("vector_store") or InMemoryVectorStore(embedding),
        image=overrides.get("image") or FakeImage(),
        moderation=overrides.get("moderation") or FakeModeration(),
        speech=overrides.get("speech") or FakeSpeech(),
        transcription=overrides.get("transcription") or FakeTranscription(),
        memory=overrides.get("memory") or ChatMemory(max_messages=4),
        tool_max_rounds=overrides.get("tool_max_rounds", 5),
    )


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def gateway(fake_chat):
    return make_gateway(chat=fake_chat)
