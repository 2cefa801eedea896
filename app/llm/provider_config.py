"""Provider/runtime configuration for the gateway.

Architectural role:
    Centralizes provider endpoint, model selection, credential lookup and the
    per-capability switches consumed by `app.core.gateway.build_gateway` and
    `app.llm.client.OpenAIClient`.

Capability switches:
    Each optional capability (embedding, vector store, image, moderation,
    speech synthesis, transcription) can be disabled independently. A disabled
    capability is never constructed, so the gateway reports it as unavailable.
    Chat is always constructed.

Determinism:
    Deterministic for a fixed process environment and key files. Values are
    resolved at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None`; `build_gateway` then only
    constructs the chat capability.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = True) -> bool:
    """Parse a boolean switch from the environment (`1/true/yes/on`)."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Parse a positive integer from the environment, falling back to `default`."""
    try:
        value = int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# =========================================================
# PROVIDER ENDPOINT
# =========================================================

PROVIDER = os.getenv("PROVIDER", "openai")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")
OPENAI_KEY_FILE = "config/openai.key"

# Same per-call budget as a blocking chat completion request.
HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 120.0)


# =========================================================
# MODEL SELECTION
# =========================================================

CHAT_MODEL = os.getenv("CHAT_MODEL", "gpt-4o-mini")
CHAT_TEMPERATURE = _env_float("CHAT_TEMPERATURE", 0.7)
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "dall-e-3")
MODERATION_MODEL = os.getenv("MODERATION_MODEL", "omni-moderation-latest")
SPEECH_MODEL = os.getenv("SPEECH_MODEL", "tts-1")
SPEECH_VOICE = os.getenv("SPEECH_VOICE", "alloy")
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "whisper-1")


# =========================================================
# CAPABILITY SWITCHES
# =========================================================

EMBEDDING_ENABLED = _env_flag("AI_EMBEDDING_ENABLED")
VECTOR_STORE_ENABLED = _env_flag("AI_VECTOR_STORE_ENABLED")
IMAGE_ENABLED = _env_flag("AI_IMAGE_ENABLED")
MODERATION_ENABLED = _env_flag("AI_MODERATION_ENABLED")
SPEECH_ENABLED = _env_flag("AI_SPEECH_ENABLED")
TRANSCRIPTION_ENABLED = _env_flag("AI_TRANSCRIPTION_ENABLED")


# =========================================================
# LIMITS
# =========================================================

CHAT_MEMORY_MAX_MESSAGES = _env_int("CHAT_MEMORY_MAX_MESSAGES", 20)
TOOL_MAX_ROUNDS = _env_int("TOOL_MAX_ROUNDS", 5)
MAX_UPLOAD_SIZE_MB = _env_int("MAX_UPLOAD_SIZE_MB", 25)


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/openai.key` -> `OPENAI_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing or empty file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value and env_value.strip():
        return env_value.strip()
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read().strip() or None
