import re

import pytest
from playwright.sync_api import Page, expect

from pages import BasePage, DashboardPage, LoginPage


def test_admin_sees_every_section(page: Page, auth, app_url):
    user = auth.login_as("admin")
    dashboard = DashboardPage(page, app_url)
    expect(dashboard.welcome).to_contain_text("Admin")
    for link in ("dashboard", "inventory", "sessions", "production", "waste", "users", "settings"):
        expect(dashboard.nav_link(link)).to_be_visible()
    assert dashboard.user_name() == user["name"]


@pytest.mark.parametrize("role_key", ["production_lead", "shift_lead", "team_member"])
def test_non_admin_has_no_user_management(page: Page, auth, app_url, role_key):
    auth.login_as(role_key)
    base = BasePage(page, app_url)
    expect(base.nav_link("inventory")).to_be_visible()
    expect(base.nav_link("users")).to_have_count(0)
    expect(base.nav_link("settings")).to_have_count(0)


def test_invalid_login_stays_on_login(page: Page, auth, app_url):
    login = LoginPage(page, app_url).open()
    login.login("admin@sweetswirls.com", "wrong-password")
    expect(login.error).to_contain_text("Invalid email or password")
    expect(page).to_have_url(re.compile(r"/login$"))


def test_protected_page_redirects_to_login(page: Page, auth, app_url):
    page.goto(f"{app_url}/inventory")
    expect(page).to_have_url(f"{app_url}/login")


def test_logout(page: Page, auth, app_url):
    auth.login_as("shift_lead")
    auth.logout()
    page.goto(f"{app_url}/dashboard")
    expect(page).to_have_url(f"{app_url}/login")
