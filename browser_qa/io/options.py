"""
Browser option builders.

Shared configuration (arguments, headless, proxy, download preferences,
Grid capabilities) is written once against the small OptionsBuilder
capability set; each browser family only knows how to apply those
primitives to its own Selenium options object and which preference keys
control its downloads.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Protocol

from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.common.options import ArgOptions
from selenium.webdriver.common.proxy import Proxy, ProxyType
from selenium.webdriver.edge.options import Options as EdgeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions

from ..core.settings import Settings, resolve_download_dir

DEFAULT_ARGUMENTS = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--ignore-certificate-errors",
    "--disable-gpu",
    "--disable-software-rasterizer",
    "--safebrowsing-disable-download-protection",
)


class OptionsBuilder(Protocol):
    headless_argument: str

    def add_argument(self, argument: str) -> None: ...
    def set_preference(self, name: str, value: Any) -> None: ...
    def add_additional_option(self, name: str, value: Any) -> None: ...
    def download_preferences(self, directory: str) -> dict[str, Any]: ...
    def build(self) -> ArgOptions: ...


class ChromiumOptionsBuilder:
    """Chrome and Edge: preferences live in the `prefs` experimental option."""

    headless_argument = "--headless=new"

    def __init__(self, options: ChromeOptions | EdgeOptions) -> None:
        self.options = options
        self._prefs: dict[str, Any] = {}

    def add_argument(self, argument: str) -> None:
        self.options.add_argument(argument)

    def set_preference(self, name: str, value: Any) -> None:
        self._prefs[name] = value

    def add_additional_option(self, name: str, value: Any) -> None:
        self.options.set_capability(name, value)

    def download_preferences(self, directory: str) -> dict[str, Any]:
        return {
            "download.default_directory": directory,
            "download.prompt_for_download": False,
            "download.open_pdf_in_system_reader": False,
            "plugins.always_open_pdf_externally": True,
            "credentials_enable_service": False,
            "profile.password_manager_enabled": False,
            "profile.default_content_setting_values.automatic_downloads": 1,
        }

    def build(self) -> ArgOptions:
        if self._prefs:
            self.options.add_experimental_option("prefs", dict(self._prefs))
        return self.options


class FirefoxOptionsBuilder:
    headless_argument = "-headless"

    def __init__(self, options: FirefoxOptions | None = None) -> None:
        self.options = options or FirefoxOptions()

    def add_argument(self, argument: str) -> None:
        self.options.add_argument(argument)

    def set_preference(self, name: str, value: Any) -> None:
        self.options.set_preference(name, value)

    def add_additional_option(self, name: str, value: Any) -> None:
        self.options.set_capability(name, value)

    def download_preferences(self, directory: str) -> dict[str, Any]:
        return {
            "browser.download.folderList": 2,
            "browser.download.dir": directory,
            "browser.helperApps.neverAsk.saveToDisk": "application/pdf",
            "pdfjs.disabled": True,
        }

    def build(self) -> ArgOptions:
        return self.options


def builder_for(browser: str) -> OptionsBuilder:
    if browser == "firefox":
        return FirefoxOptionsBuilder()
    if browser == "edge":
        return ChromiumOptionsBuilder(EdgeOptions())
    return ChromiumOptionsBuilder(ChromeOptions())


def browser_download_dir(settings: Settings, download_dir: Path) -> str:
    """
    Directory as seen by the browser process. When mounted, the worker
    subfolder of our side is repeated under the browser-side mount point.
    """
    if settings.topology == "remote_mounted" and settings.remote_download_dir:
        try:
            suffix = download_dir.relative_to(resolve_download_dir(settings))
        except ValueError:
            suffix = Path()
        return str(PurePosixPath(settings.remote_download_dir, *suffix.parts))
    return str(download_dir)


def configure_options(builder: OptionsBuilder, settings: Settings, download_dir: Path) -> ArgOptions:
    for argument in DEFAULT_ARGUMENTS:
        builder.add_argument(argument)
    if settings.headless:
        builder.add_argument(builder.headless_argument)
    if settings.use_proxy and settings.proxy_address:
        builder.add_argument(f"--proxy-server={settings.proxy_address}")
    prefs = builder.download_preferences(browser_download_dir(settings, download_dir))
    for name, value in prefs.items():
        builder.set_preference(name, value)
    if settings.remote:
        builder.add_additional_option("se:name", settings.suite_name)
        builder.add_additional_option("se:downloadsEnabled", True)
        builder.add_additional_option("platformName", "linux")
        builder.add_additional_option("goog:loggingPrefs", {"browser": "ALL"})
    options = builder.build()
    if settings.use_proxy and settings.proxy_address:
        options.proxy = Proxy(
            {
                "proxyType": ProxyType.MANUAL,
                "httpProxy": settings.proxy_address,
                "sslProxy": settings.proxy_address,
            }
        )
    return options
