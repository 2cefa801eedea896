"""Error taxonomy of the gateway.

Architectural role:
    Every failure that reaches a client is expressed as one `ErrorKind`: a
    tagged variant carrying the wire code, HTTP status and remediation hint.
    `GatewayError` pairs a kind with a message. Provider exceptions are
    translated into a `GatewayError` by `classify_exception`, which the HTTP
    adapter and the streaming endpoint share.

Classification order for provider failures:
    1. Structured provider code (`error.code` / `error.type`) when present.
    2. Lowercase substring match on the provider error text.
    The substring fallback exists because providers do not always send
    structured codes; wording is not a stable contract.

Message hygiene:
    Provider text is cut to 200 characters before it is echoed. Unclassified
    failures never expose internal details.
"""

from enum import Enum

from app.llm.errors import ProviderError, UpstreamHTTPError


BILLING_URL = "https://platform.openai.com/settings/organization/billing"
MAX_PROVIDER_MESSAGE_LENGTH = 200

QUOTA_MARKERS = ("insufficient_quota", "current quota")
AUTH_MARKERS = ("invalid_api_key", "incorrect api key", "unauthorized")

QUOTA_CODES = {"insufficient_quota"}
AUTH_CODES = {"invalid_api_key", "invalid_authentication", "authentication_error"}


class ErrorKind(Enum):
    """Wire code, HTTP status and default action of each failure kind."""

    REQUEST = ("REQUEST_ERROR", 400, "So'rov parametrlarini tekshiring.")
    FEATURE_UNAVAILABLE = ("REQUEST_ERROR", 501, "So'rov parametrlarini tekshiring.")
    INSUFFICIENT_QUOTA = ("INSUFFICIENT_QUOTA", 429, BILLING_URL)
    AUTH = ("OPENAI_AUTH_ERROR", 401, "OPENAI_API_KEY ni tekshiring.")
    PROVIDER = ("AI_PROVIDER_ERROR", 502, "Model/API sozlamalarini tekshirib qayta urinib ko'ring.")
    UPSTREAM_HTTP = ("UPSTREAM_HTTP_ERROR", 502, "Keyinroq qayta urinib ko'ring.")
    INTERNAL = ("INTERNAL_ERROR", 500, "Loglarni tekshirib qayta urinib ko'ring.")

    def __init__(self, code: str, status_code: int, action: str):
        self.code = code
        self.status_code = status_code
        self.action = action


QUOTA_MESSAGE = "OpenAI quota tugagan. Billing va plan holatini tekshiring."
AUTH_MESSAGE = "OpenAI API key noto'g'ri yoki ruxsat yo'q."
INTERNAL_MESSAGE = "Kutilmagan server xatoligi"

STREAM_QUOTA_MESSAGE = "Xatolik: OpenAI quota tugagan. Billing/plan ni tekshiring."
STREAM_AUTH_MESSAGE = "Xatolik: API key noto'g'ri yoki ruxsat yo'q."
STREAM_GENERIC_MESSAGE = "Xatolik: Stream chaqiruvda muammo bo'ldi. Keyinroq qayta urinib ko'ring."


class GatewayError(Exception):
    """A classified failure ready to be rendered as an error payload."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    @classmethod
    def bad_request(cls, message: str) -> "GatewayError":
        return cls(ErrorKind.REQUEST, message)

    @classmethod
    def feature_unavailable(cls, feature_name: str) -> "GatewayError":
        return cls(ErrorKind.FEATURE_UNAVAILABLE, f"{feature_name} modeli bu konfiguratsiyada mavjud emas")


def is_insufficient_quota(text: str | None) -> bool:
    low = (text or "").lower()
    return any(marker in low for marker in QUOTA_MARKERS)


def is_auth_error(text: str | None) -> bool:
    low = (text or "").lower()
    return any(marker in low for marker in AUTH_MARKERS)


def shorten(message: str, limit: int = MAX_PROVIDER_MESSAGE_LENGTH) -> str:
    return message if len(message) <= limit else message[:limit] + "..."


def _provider_kind(exc: ProviderError) -> ErrorKind:
    code = (exc.error_code or "").lower()
    if code in QUOTA_CODES:
        return ErrorKind.INSUFFICIENT_QUOTA
    if code in AUTH_CODES:
        return ErrorKind.AUTH

    if is_insufficient_quota(exc.message):
        return ErrorKind.INSUFFICIENT_QUOTA
    if is_auth_error(exc.message):
        return ErrorKind.AUTH
    return ErrorKind.PROVIDER


def classify_exception(exc: BaseException) -> GatewayError:
    """Translate any exception into a `GatewayError`.

    Args:
        exc: Exception raised while serving a request.

    Returns:
        The exception itself when it already is a `GatewayError`, otherwise a
        new `GatewayError` whose kind follows the provider classification
        rules; unknown exceptions become `ErrorKind.INTERNAL`.
    """
    if isinstance(exc, GatewayError):
        return exc

    if isinstance(exc, ProviderError):
        kind = _provider_kind(exc)
        if kind is ErrorKind.INSUFFICIENT_QUOTA:
            return GatewayError(kind, QUOTA_MESSAGE)
        if kind is ErrorKind.AUTH:
            return GatewayError(kind, AUTH_MESSAGE)
        message = exc.message.strip() or "AI provider xatoligi"
        return GatewayError(kind, "AI provider javobida xatolik: " + shorten(message))

    if isinstance(exc, UpstreamHTTPError):
        if is_insufficient_quota(exc.body):
            return GatewayError(ErrorKind.INSUFFICIENT_QUOTA, QUOTA_MESSAGE)
        status = exc.status_code if exc.status_code is not None else 502
        return GatewayError(ErrorKind.UPSTREAM_HTTP, f"Upstream xizmat xatosi: HTTP {status}")

    return GatewayError(ErrorKind.INTERNAL, INTERNAL_MESSAGE)


def stream_error_message(exc: BaseException) -> str:
    """Final human-readable fragment emitted when a chat stream fails."""
    kind = classify_exception(exc).kind
    if kind is ErrorKind.INSUFFICIENT_QUOTA:
        return STREAM_QUOTA_MESSAGE
    if kind is ErrorKind.AUTH:
        return STREAM_AUTH_MESSAGE
    return STREAM_GENERIC_MESSAGE
