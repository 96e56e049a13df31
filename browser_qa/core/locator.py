"""
Declarative element locators.

A Locator is a write-once (strategy, value) pair owned by a page definition.
It never holds a resolved element; every action resolves it again.
"""
# @file purpose: Define element locators.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class By(str, Enum):
    # values match Selenium's strategy names
    ID = "id"
    NAME = "name"
    CSS = "css selector"
    XPATH = "xpath"
    TAG = "tag name"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    CLASS_NAME = "class name"


# `Locator.parse` prefixes
_PREFIXES: dict[str, By] = {
    "id": By.ID,
    "name": By.NAME,
    "css": By.CSS,
    "xpath": By.XPATH,
    "tag": By.TAG,
    "link": By.LINK_TEXT,
    "partial_link": By.PARTIAL_LINK_TEXT,
    "class": By.CLASS_NAME,
}

_DESCRIBE: dict[By, str] = {
    By.ID: "By.id",
    By.NAME: "By.name",
    By.CSS: "By.cssSelector",
    By.XPATH: "By.xpath",
    By.TAG: "By.tagName",
    By.LINK_TEXT: "By.linkText",
    By.PARTIAL_LINK_TEXT: "By.partialLinkText",
    By.CLASS_NAME: "By.className",
}


@dataclass(frozen=True)
class Locator:
    by: By
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("locator value must not be empty")

    def __str__(self) -> str:
        return f"{_DESCRIBE[self.by]}: {self.value}"

    @classmethod
    def id(cls, value: str) -> "Locator":
        return cls(By.ID, value)

    @classmethod
    def name(cls, value: str) -> "Locator":
        return cls(By.NAME, value)

    @classmethod
    def css(cls, value: str) -> "Locator":
        return cls(By.CSS, value)

    @classmethod
    def xpath(cls, value: str) -> "Locator":
        return cls(By.XPATH, value)

    @classmethod
    def tag(cls, value: str) -> "Locator":
        return cls(By.TAG, value)

    @classmethod
    def link_text(cls, value: str) -> "Locator":
        return cls(By.LINK_TEXT, value)

    @classmethod
    def partial_link_text(cls, value: str) -> "Locator":
        return cls(By.PARTIAL_LINK_TEXT, value)

    @classmethod
    def class_name(cls, value: str) -> "Locator":
        return cls(By.CLASS_NAME, value)

    @classmethod
    def parse(cls, text: str) -> "Locator":
        """
        Parse the compact form used in scripts:
            "name=userName", "xpath=//h1", "css=#q", "#q" (CSS), "//h1" (XPath)
        """
        s = text.strip()
        if not s:
            raise ValueError("empty locator")
        prefix, sep, rest = s.partition("=")
        if sep and prefix in _PREFIXES and rest:
            return cls(_PREFIXES[prefix], rest)
        if s.startswith("/") or s.startswith("("):
            return cls(By.XPATH, s)
        return cls(By.CSS, s)
