"""API adapter package (HTTP and CLI).

Architectural role:
- Defines the external interaction boundary: FastAPI routers, exception
  handlers, upload preprocessing and the interactive terminal.
- Performs transport-level parsing and response shaping only.
- Delegates every operation to `app.core.gateway.ProviderGateway`.
"""
