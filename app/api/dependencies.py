"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from app.core.gateway import ProviderGateway


def get_gateway(request: Request) -> ProviderGateway:
    """Return the gateway attached to the application at startup."""
    return request.app.state.gateway
