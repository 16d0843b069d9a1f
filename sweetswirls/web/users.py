from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from sweetswirls.models.user import UserRole
from sweetswirls.permissions import Capability, capabilities_for
from sweetswirls.schemas.auth import CreateUserRequest
from sweetswirls.web.common import Page, form_values, get_page

router = APIRouter(tags=["Pages"])


async def _users_page(page: Page, values: dict | None = None, errors: dict | None = None, form_error: str | None = None, status_code: int = 200):
    users, err = await page.attempt(page.api.get_users())
    return page.render(
        "users.html",
        status_code=status_code,
        users=users or [],
        roles=list(UserRole),
        values=values or {"role": UserRole.TEAM_MEMBER.value},
        errors=errors or {},
        form_error=form_error,
        error="Failed to load users" if err else None,
    )


@router.get("/users")
async def users(page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_USERS)
    return await _users_page(page)


@router.post("/users")
async def create_user(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_USERS)
    values = await form_values(request)
    try:
        data = CreateUserRequest.model_validate(values)
    except ValidationError as e:
        errors = {str(err["loc"][-1]): err["msg"] for err in e.errors() if err["loc"]}
        return await _users_page(page, values, errors=errors, status_code=400)
    _, err = await page.attempt(page.api.create_user(data))
    if err:
        return await _users_page(
            page, values, errors=getattr(err, "field_errors", {}),
            form_error=f"Failed to create user: {err.message}", status_code=400,
        )
    return page.redirect("/users", toast="User created successfully")


@router.post("/users/{user_id}/role")
async def change_role(user_id: str, request: Request, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_USERS)
    values = await form_values(request)
    try:
        role = UserRole(values.get("role", ""))
    except ValueError:
        return page.redirect("/users", toast="Unknown role")
    _, err = await page.attempt(page.api.update_user_role(user_id, role))
    if err:
        return page.redirect("/users", toast=f"Failed to update role: {err.message}")
    return page.redirect("/users", toast="Role updated")


@router.post("/users/{user_id}/{action}")
async def toggle_user(user_id: str, action: str, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_USERS)
    if action == "deactivate":
        call, message = page.api.deactivate_user(user_id), "User deactivated"
    elif action == "activate":
        call, message = page.api.activate_user(user_id), "User activated"
    else:
        return page.redirect("/users", toast="Unknown action")
    _, err = await page.attempt(call)
    if err:
        return page.redirect("/users", toast=f"Failed to update user: {err.message}")
    return page.redirect("/users", toast=message)


@router.get("/settings")
async def settings_page(page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_USERS)
    locations, err = await page.attempt(page.api.get_locations())
    return page.render(
        "settings.html",
        locations=locations or [],
        role_capabilities={role: sorted(c.value for c in capabilities_for(role)) for role in UserRole},
        error="Failed to load locations" if err else None,
    )
