"""
Upload preprocessing utilities for the transcription endpoint.

Architectural role:
- Turn a multipart upload into `(filename, bytes)` ready for the gateway.
- Enforce presence, size and filename constraints before any provider call.
- Provide adapter-level preprocessing only (no endpoint registration).

Processing lifecycle:
1. Reject a missing upload.
2. Pre-validate the declared size (when the client sent one) before reading.
3. Read the payload; read failures become request errors wrapping the I/O failure.
4. Reject empty or oversized payloads.
5. Normalize the client filename to a bare basename (default `audio.webm`).

Error handling strategy:
- Every rejection raises `GatewayError` of kind `REQUEST` (HTTP 400).

Side effects:
- None. Uploads are held in memory only; no temporary files are written.
"""

import logging
import ntpath
import posixpath

from fastapi import UploadFile

from app.core.errors import GatewayError
from app.llm.provider_config import MAX_UPLOAD_SIZE_MB


logger = logging.getLogger(__name__)


# ============================================================
# CONFIG
# ============================================================

MAX_FILE_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
DEFAULT_FILENAME = "audio.webm"


# ============================================================
# PUBLIC ENTRYPOINT
# ============================================================

async def read_audio_upload(file: UploadFile | None) -> tuple[str, bytes]:
    """
    Read and validate one uploaded audio file.

    Returns:
    - `(filename, payload)` with a normalized filename.

    Raises:
    - `GatewayError` (REQUEST) for missing, empty, oversized or unreadable uploads.
    """
    if file is None:
        raise GatewayError.bad_request("audio file is required")

    declared_size = getattr(file, "size", None)
    if declared_size is not None and declared_size > MAX_FILE_SIZE_BYTES:
        raise GatewayError.bad_request("audio file exceeds max size limit")

    try:
        payload = await file.read()
    except OSError as err:
        logger.warning("Upload %r could not be read: %s", file.filename, err)
        raise GatewayError.bad_request(f"audio file cannot be read: {err}") from err

    if not payload:
        raise GatewayError.bad_request("audio file is required")

    if len(payload) > MAX_FILE_SIZE_BYTES:
        raise GatewayError.bad_request("audio file exceeds max size limit")

    return normalize_filename(file.filename), payload


# ============================================================
# VALIDATION
# ============================================================

def normalize_filename(filename: str | None) -> str:
    """Strip directory components (POSIX or Windows style); blank -> default name."""
    if not filename or not filename.strip():
        return DEFAULT_FILENAME

    name = ntpath.basename(posixpath.basename(filename.strip()))
    return name or DEFAULT_FILENAME
