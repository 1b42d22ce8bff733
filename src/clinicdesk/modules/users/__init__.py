"""Users module: account administration and the role catalog."""

from fastapi import APIRouter


router = APIRouter(tags=["users"])

# Import routes to register them (must be after router is defined)
from clinicdesk.modules.users import routes  # noqa: F401, E402
