import pytest

from browser_qa.core.errors import ElementTimeoutError
from browser_qa.core.legacy import LegacyHandleActions, describe_handle
from browser_qa.core.page import JS_CLICK, PageObject
from browser_qa.core.session import Session
from fakes import FakeClock, FakeDriver, FakeElement


def test_stale_handle_waits_for_the_full_timeout(session: Session, clock: FakeClock) -> None:
    legacy = LegacyHandleActions(PageObject(session))
    stale = FakeElement(stale=True)

    with pytest.warns(DeprecationWarning), pytest.raises(ElementTimeoutError) as exc:
        legacy.click(stale)

    assert clock.now == 2.0
    assert stale.clicks == 0
    assert "[STALE ELEMENT]" in str(exc.value)


def test_live_handle_is_used_directly(session: Session, clock: FakeClock) -> None:
    legacy = LegacyHandleActions(PageObject(session))
    el = FakeElement(text="ok", tag_name_value="input", attributes={"id": "q", "name": "q"})

    with pytest.warns(DeprecationWarning):
        legacy.type_text(el, "abc")
        legacy.click(el)
        assert legacy.read_text(el) == "ok"

    assert el.typed == ["abc"]
    assert el.clicks == 1
    assert clock.now == 0


def test_script_click_on_handle(session: Session, driver: FakeDriver) -> None:
    legacy = LegacyHandleActions(PageObject(session))
    el = FakeElement()
    with pytest.warns(DeprecationWarning, match="click_via_script"):
        legacy.click_via_script(el)
    assert driver.scripts == [(JS_CLICK, (el,))]


def test_describe_handle() -> None:
    el = FakeElement(text=" Sign in ", tag_name_value="button", attributes={"id": "go"})
    assert describe_handle(el) == "<button name='None' id='go' text='Sign in'>"
    assert describe_handle(FakeElement(stale=True)) == "[STALE ELEMENT]"
    assert describe_handle(None) == "[null element]"
