"""HTTP API routers."""

from clinicdesk.api.router import api_router


__all__ = ["api_router"]
