"""
HTTP API adapter for the provider gateway.

Architectural role:
- Assemble the FastAPI application: routers, exception handlers, logging.
- Attach one `ProviderGateway` to `app.state` for the routers to use.
- Keep transport concerns here; all provider work lives in `app.core.gateway`.

Routers:
- `app.api.chat_routes`: `/api/chat/...` (chat, stream, structured, memory, tool).
- `app.api.model_routes`: `/api/ai/...` (embedding, vector store, RAG,
  image, moderation, speech, transcription, features).

Error handling strategy:
- Every failure is rendered by `app.api.errors` as
  `{code, message, action, timestamp, path}`.
- Streaming failures are reported in-band by the gateway (status stays 200).

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Configures root logging (DEBUG when `DEBUG == "true"`, INFO otherwise).
- Builds the module-level `app` with the configured gateway at import.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os

from fastapi import FastAPI

from app.api import chat_routes, model_routes
from app.api.errors import register_exception_handlers
from app.core.gateway import ProviderGateway, build_gateway

# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


# ============================================================
# Application factory
# ============================================================

def create_app(gateway: ProviderGateway | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters:
    - gateway: prebuilt gateway (tests pass fakes); `build_gateway()` otherwise.
    """
    application = FastAPI(title="AI Model Gateway", version="0.1.0")
    application.state.gateway = gateway if gateway is not None else build_gateway()

    application.include_router(chat_routes.router)
    application.include_router(model_routes.router)
    register_exception_handlers(application)

    logger.debug("Routes registered: %s", [getattr(route, "path", repr(route)) for route in application.routes])
    return application


app = create_app()
