from datetime import datetime

from fastapi import APIRouter, Depends

from sweetswirls.dashboard import greeting
from sweetswirls.web.common import Page, get_page

router = APIRouter(tags=["Pages"])


@router.get("/dashboard")
async def dashboard(page: Page = Depends(get_page)):
    now = datetime.now().astimezone()
    data, err = await page.attempt(page.api.get_dashboard_data(now))
    return page.render(
        "dashboard.html",
        data=data,
        error="Failed to load dashboard data" if err else None,
        greeting=greeting(now),
        first_name=page.session.user.first_name,
    )
