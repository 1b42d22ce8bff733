"""Navigation routes."""

from pydantic import BaseModel

from clinicdesk.core.auth.dependencies import CurrentUser
from clinicdesk.modules.navigation import router
from clinicdesk.modules.navigation.menu import visible_items


class NavigationItem(BaseModel):
    key: str
    label: str
    path: str


@router.get(
    "",
    response_model=list[NavigationItem],
    summary="Visible navigation",
    description="Sidebar entries the current user may open. Empty for inactive accounts.",
)
async def get_navigation(current_user: CurrentUser) -> list[NavigationItem]:
    return [
        NavigationItem(key=item.key, label=item.label, path=item.path)
        for item in visible_items(current_user)
    ]
