"""
Page object for the Newtours demo login form.
"""

from __future__ import annotations

from ..core.locator import Locator
from ..core.page import PageObject


class LoginPage(PageObject):
    USERNAME = Locator.name("userName")
    PASSWORD = Locator.name("password")
    SUBMIT = Locator.name("submit")
    LOGIN_ERROR = Locator.xpath("//span[contains(text(),'Enter your userName and password correct')]")

    def go_to(self, url: str) -> "LoginPage":
        """Open the login page and wait until the username field is visible."""
        self.navigate(url)
        self.wait_for_visibility(self.USERNAME)
        return self

    def login(self, username: str, password: str) -> None:
        self.session.log_step(f"[ACTION] Login with username: '{username}' | password: '(hidden)'")
        self.type_text(self.USERNAME, username)
        self.type_text(self.PASSWORD, password)
        self.click(self.SUBMIT)

    def is_login_error_present(self) -> bool:
        return self.exists(self.LOGIN_ERROR)

    def read_login_error_text(self) -> str:
        return self.read_text(self.LOGIN_ERROR)
