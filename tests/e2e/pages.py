"""Page objects wrapping the rendered UI by its data-testid hooks."""

from playwright.sync_api import Locator, Page


class BasePage:
    path = "/"

    def __init__(self, page: Page, base_url: str):
        self.page = page
        self.base_url = base_url

    def open(self) -> "BasePage":
        self.page.goto(f"{self.base_url}{self.path}")
        return self

    def by_testid(self, testid: str) -> Locator:
        return self.page.get_by_test_id(testid)

    def nav_link(self, name: str) -> Locator:
        return self.by_testid(f"nav-{name}")

    def navigate(self, name: str) -> None:
        self.nav_link(name).click()

    @property
    def toast(self) -> Locator:
        return self.by_testid("toast")

    def dismiss_toast(self) -> None:
        self.by_testid("toast-close").click()

    def open_user_menu(self) -> None:
        self.by_testid("user-menu-button").click()

    def user_name(self) -> str:
        self.open_user_menu()
        return self.by_testid("user-name").inner_text()

    def logout(self) -> None:
        self.open_user_menu()
        self.by_testid("logout-button").click()


class LoginPage(BasePage):
    path = "/login"

    def login(self, email: str, password: str) -> None:
        self.page.fill("#email", email)
        self.page.fill("#password", password)
        self.page.get_by_role("button", name="Sign in").click()

    @property
    def error(self) -> Locator:
        return self.page.get_by_role("alert")


class DashboardPage(BasePage):
    path = "/dashboard"

    @property
    def welcome(self) -> Locator:
        return self.by_testid("welcome-message")

    def count(self, widget: str) -> int:
        return int(self.by_testid(f"{widget}-count").inner_text().strip())


class InventoryPage(BasePage):
    path = "/inventory"

    @property
    def cards(self) -> Locator:
        return self.by_testid("inventory-item-card")

    def card(self, name: str) -> Locator:
        return self.cards.filter(has_text=name)

    def search(self, term: str) -> None:
        box = self.by_testid("inventory-search")
        box.fill(term)
        box.press("Enter")

    def create_item(self, name: str, category: str, unit: str, par_level: str, sku: str = "") -> None:
        self.by_testid("add-item-button").click()
        self.by_testid("item-name-input").fill(name)
        self.by_testid("item-category-select").select_option(category)
        self.by_testid("item-unit-input").fill(unit)
        self.by_testid("item-par-level-input").fill(par_level)
        if sku:
            self.by_testid("item-sku-input").fill(sku)
        self.by_testid("save-item-button").click()

    def delete_item(self, name: str) -> None:
        self.page.once("dialog", lambda dialog: dialog.accept())
        self.card(name).get_by_test_id("delete-item-button").click()


class SessionPage(BasePage):
    path = "/inventory/sessions"

    def start(self, location_name: str) -> None:
        self.by_testid("session-location-select").select_option(label=location_name)
        self.by_testid("start-session-button").click()

    def open_session(self, session_id: str) -> None:
        self.page.goto(f"{self.base_url}/inventory/sessions/{session_id}")

    @property
    def status(self) -> Locator:
        return self.by_testid("session-status")

    @property
    def lines(self) -> Locator:
        return self.by_testid("session-line")

    def add_line(self, item_name: str, count: str, unit: str) -> None:
        self.by_testid("add-line-button").click()
        self.by_testid("line-item-select").select_option(label=f"{item_name} ({unit})")
        self.by_testid("line-count-input").fill(count)
        self.by_testid("line-unit-input").fill(unit)
        self.by_testid("save-line-button").click()

    def submit(self) -> None:
        self.by_testid("submit-session-button").click()
        self.by_testid("confirm-submit-button").click()


class ProductionPage(BasePage):
    path = "/production"

    def column(self, name: str) -> Locator:
        return self.by_testid(f"{name}-column")

    def request_card(self, request_id: str) -> Locator:
        return self.by_testid(f"request-card-{request_id}")

    def advance(self, request_id: str, action: str) -> None:
        self.request_card(request_id).get_by_test_id(f"{action}-request-button").click()

    def record_batch(self, product_name: str, quantity: str, unit: str, location_name: str) -> None:
        self.by_testid("record-batch-button").click()
        self.by_testid("batch-product-select").select_option(label=product_name)
        self.by_testid("batch-quantity-input").fill(quantity)
        self.by_testid("batch-unit-input").fill(unit)
        self.by_testid("batch-location-select").select_option(label=location_name)
        self.by_testid("save-batch-button").click()
