"""Navigation module: the sidebar entries a user may see."""

from fastapi import APIRouter


router = APIRouter(prefix="/navigation", tags=["navigation"])

from clinicdesk.modules.navigation import routes  # noqa: F401, E402
