"""Provider gateway: the single façade between HTTP adapters and provider capabilities.

Architectural role:
    Holds the always-enabled chat capability plus six optional capabilities
    (embedding, vector store, image, moderation, speech synthesis,
    transcription). A capability that was not constructed at startup is
    `None`; every operation depending on it fails fast with a 501-kind
    `GatewayError` before validation or any network call.

Control-flow model (per operation):
    1. Require the capability.
    2. Normalize inputs / reject missing required values.
    3. Delegate to the capability adapter (`app.llm.service`, `app.retrieval`,
       `app.image`, `app.safety`, `app.audio`).
    4. Return a DTO from `app.core.types`.

Error handling strategy:
    Provider exceptions propagate unchanged to the HTTP layer, which
    classifies them (`app.core.errors.classify_exception`). The chat stream is
    the exception: a failing stream ends with one friendly text fragment.

Side effects:
    - Chat memory is appended after successful memory turns.
    - The vector store is mutated by indexing.
"""

import logging
import uuid
from typing import Iterator

from app.audio.speech import AudioFormat, parse_audio_format, synthesize_speech
from app.audio.transcription import transcribe_audio
from app.core.errors import GatewayError, stream_error_message
from app.core.types import (
    DocumentInput,
    EmbeddingResult,
    ImageResult,
    IndexResult,
    ModerationVerdict,
    RagAnswer,
    SearchResult,
    StudyPlan,
    TranscriptionResult,
)
from app.core.validation import has_text, normalize_text, require_text, resolve_top_k
from app.image.service import generate_image
from app.llm import provider_config
from app.llm.base import (
    ChatModel,
    EmbeddingModel,
    ImageModel,
    ModerationModel,
    SpeechModel,
    TranscriptionModel,
)
from app.llm.client import OpenAIClient
from app.llm.service import generate_answer, generate_structured, generate_with_tools, stream_answer
from app.memory.chat_memory import DEFAULT_CONVERSATION_ID, ChatMemory
from app.prompting.prompt_builder import (
    TOOL_SYSTEM_PROMPT,
    build_structured_system_prompt,
    build_study_plan_prompt,
)
from app.retrieval.rag import answer_question
from app.retrieval.vector_store import Document, InMemoryVectorStore
from app.safety.moderation import moderate
from app.tools.executor import ToolExecutor


logger = logging.getLogger(__name__)


DEFAULT_CHAT_MESSAGE = "Salom"
DEFAULT_QUERY_MESSAGE = "Salom, Spring AI haqida qisqa yozing."
DEFAULT_STREAM_MESSAGE = "Spring AI stream javob bering."
DEFAULT_TOPIC = "Spring AI"
DEFAULT_TOOL_MESSAGE = "Hozirgi vaqtni ayt."
DEFAULT_AUDIO_FILENAME = "audio.webm"
EMBEDDING_PREVIEW_SIZE = 12


class ProviderGateway:
    """Capability set plus the operations exposed over HTTP."""

    def __init__(
        self,
        chat: ChatModel,
        embedding: EmbeddingModel | None = None,
        vector_store: InMemoryVectorStore | None = None,
        image: ImageModel | None = None,
        moderation: ModerationModel | None = None,
        speech: SpeechModel | None = None,
        transcription: TranscriptionModel | None = None,
        memory: ChatMemory | None = None,
        tool_executor: ToolExecutor | None = None,
        tool_max_rounds: int = provider_config.TOOL_MAX_ROUNDS,
    ):
        self._chat = chat
        self._embedding = embedding
        self._vector_store = vector_store
        self._image = image
        self._moderation = moderation
        self._speech = speech
        self._transcription = transcription
        self._memory = memory if memory is not None else ChatMemory()
        self._tool_executor = tool_executor if tool_executor is not None else ToolExecutor()
        self._tool_max_rounds = tool_max_rounds

    # =========================================================
    # FEATURE GATING
    # =========================================================

    def features(self) -> dict[str, bool]:
        return {
            "chat": True,
            "embedding": self._embedding is not None,
            "vectorStore": self._vector_store is not None,
            "image": self._image is not None,
            "moderation": self._moderation is not None,
            "textToSpeech": self._speech is not None,
            "transcription": self._transcription is not None,
        }

    @staticmethod
    def _require(capability, feature_name: str):
        if capability is None:
            raise GatewayError.feature_unavailable(feature_name)
        return capability

    # =========================================================
    # CHAT
    # =========================================================

    def chat(self, message: str | None) -> tuple[str, str]:
        """Plain chat turn; returns `(normalized message, response)`."""
        prompt = normalize_text(message, DEFAULT_CHAT_MESSAGE)
        return prompt, generate_answer(self._chat, prompt)

    def stream_chat(self, message: str | None) -> Iterator[str]:
        """Yield response fragments; a provider failure ends the stream with one error fragment."""
        prompt = normalize_text(message, DEFAULT_CHAT_MESSAGE)
        stream = stream_answer(self._chat, prompt)

        try:
            yield from stream
        except Exception as exc:
            logger.warning("Chat stream failed: %s", exc)
            yield stream_error_message(exc)
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()

    def structured_plan(self, topic: str | None) -> StudyPlan:
        topic = normalize_text(topic, DEFAULT_TOPIC)
        return generate_structured(
            self._chat,
            build_study_plan_prompt(topic),
            build_structured_system_prompt(StudyPlan.model_json_schema(by_alias=True)),
            StudyPlan,
        )

    def chat_with_memory(self, conversation_id: str | None, message: str | None) -> tuple[str, str, str]:
        """Memory-backed chat turn; returns `(conversation id, message, response)`.

        The exchange is stored only after the provider answered.
        """
        conversation_id = normalize_text(conversation_id, DEFAULT_CONVERSATION_ID)
        prompt = require_text(message, "message")

        history = self._memory.get(conversation_id)
        response = generate_answer(self._chat, prompt, history=history)

        self._memory.add(conversation_id, [
            {"role": "user", "content": prompt},
            {"role": "assistant", "content": response},
        ])
        return conversation_id, prompt, response

    def clear_memory(self, conversation_id: str | None) -> str:
        conversation_id = normalize_text(conversation_id, DEFAULT_CONVERSATION_ID)
        self._memory.clear(conversation_id)
        return conversation_id

    def memory_messages(self, conversation_id: str | None) -> list[dict]:
        return self._memory.get(normalize_text(conversation_id, DEFAULT_CONVERSATION_ID))

    def chat_with_tools(self, message: str | None) -> tuple[str, str]:
        prompt = normalize_text(message, DEFAULT_TOOL_MESSAGE)
        response = generate_with_tools(
            self._chat,
            prompt,
            TOOL_SYSTEM_PROMPT,
            self._tool_executor,
            self._tool_max_rounds,
        )
        return prompt, response

    # =========================================================
    # EMBEDDING / VECTOR STORE / RAG
    # =========================================================

    def embed(self, text: str | None) -> EmbeddingResult:
        model = self._require(self._embedding, "Embedding")
        text = require_text(text, "text")

        vector = model.embed([text])[0]
        return EmbeddingResult(
            text=text,
            dimensions=len(vector),
            preview=[float(value) for value in vector[:EMBEDDING_PREVIEW_SIZE]],
        )

    def index_documents(self, documents: list[DocumentInput] | None) -> IndexResult:
        """Index every entry with non-blank text; ids are generated when absent."""
        store = self._require(self._vector_store, "Vector store")

        if not documents:
            raise GatewayError.bad_request("documents list is required")

        prepared = [
            Document(
                id=entry.id.strip() if has_text(entry.id) else str(uuid.uuid4()),
                text=entry.text.strip(),
                metadata=dict(entry.metadata or {}),
            )
            for entry in documents
            if has_text(entry.text)
        ]

        if not prepared:
            raise GatewayError.bad_request("no valid document text provided")

        store.add(prepared)
        return IndexResult(indexed=len(prepared), ids=[doc.id for doc in prepared])

    def search(
        self,
        query: str | None,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
    ) -> list[SearchResult]:
        store = self._require(self._vector_store, "Vector store")
        query = require_text(query, "query")
        return store.similarity_search(query, top_k=resolve_top_k(top_k), threshold=similarity_threshold)

    def ask(self, question: str | None, top_k: int | None = None) -> RagAnswer:
        store = self._require(self._vector_store, "Vector store")
        question = require_text(question, "question")
        return answer_question(store, self._chat, question, resolve_top_k(top_k))

    # =========================================================
    # IMAGE / MODERATION
    # =========================================================

    def generate_image(
        self,
        prompt: str | None,
        model: str | None = None,
        quality: str | None = None,
        style: str | None = None,
    ) -> ImageResult:
        image_model = self._require(self._image, "Image")
        prompt = require_text(prompt, "prompt")
        return generate_image(image_model, prompt, model=model, quality=quality, style=style)

    def moderate(self, text: str | None) -> ModerationVerdict:
        moderation_model = self._require(self._moderation, "Moderation")
        text = require_text(text, "text")
        return moderate(moderation_model, text)

    # =========================================================
    # AUDIO
    # =========================================================

    def text_to_speech(
        self,
        text: str | None,
        audio_format: str | None = None,
        model: str | None = None,
        voice: str | None = None,
        speed: float | None = None,
    ) -> tuple[bytes, AudioFormat]:
        speech_model = self._require(self._speech, "Text-to-speech")
        text = require_text(text, "text")
        resolved_format = parse_audio_format(audio_format)

        audio = synthesize_speech(speech_model, text, resolved_format, model=model, voice=voice, speed=speed)
        return audio, resolved_format

    def require_transcription(self) -> TranscriptionModel:
        return self._require(self._transcription, "Transcription")

    def transcribe(
        self,
        filename: str | None,
        audio: bytes | None,
        language: str | None = None,
        prompt: str | None = None,
    ) -> TranscriptionResult:
        model = self.require_transcription()
        if not audio:
            raise GatewayError.bad_request("audio file is required")

        filename = normalize_text(filename, DEFAULT_AUDIO_FILENAME)
        return transcribe_audio(model, filename, audio, language=language, prompt=prompt)


def build_gateway() -> ProviderGateway:
    """Construct the gateway from `app.llm.provider_config`.

    Chat is always constructed. Without an API key no optional capability is
    constructed; each optional capability can also be switched off on its
    own. The vector store additionally requires the embedding capability.
    """
    api_key = provider_config.load_key(provider_config.OPENAI_KEY_FILE)
    client = OpenAIClient(api_key=api_key)

    if not api_key:
        logger.warning("No provider API key configured; only chat is enabled")
        gateway = ProviderGateway(chat=client)
    else:
        embedding = client if provider_config.EMBEDDING_ENABLED else None
        vector_store = None
        if embedding is not None and provider_config.VECTOR_STORE_ENABLED:
            vector_store = InMemoryVectorStore(embedding)

        gateway = ProviderGateway(
            chat=client,
            embedding=embedding,
            vector_store=vector_store,
            image=client if provider_config.IMAGE_ENABLED else None,
            moderation=client if provider_config.MODERATION_ENABLED else None,
            speech=client if provider_config.SPEECH_ENABLED else None,
            transcription=client if provider_config.TRANSCRIPTION_ENABLED else None,
        )

    enabled = [name for name, available in gateway.features().items() if available]
    logger.info("Provider gateway ready (%s): %s", client.name, ", ".join(enabled))
    return gateway
