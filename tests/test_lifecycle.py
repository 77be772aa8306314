import pytest

from conftest import FakeDriver, FakeElement
from ui_actions.controller import ActionController, CloseSession
from ui_actions.exceptions import NoActiveSessionError, NoActiveWindowError, TransientProtocolError
from ui_actions.session import SessionState


def test_quit_ends_session(controller, driver, context):
    driver.elements["#submit"] = FakeElement()

    controller.quit(CloseSession.QUIT)

    assert driver.quit_called
    assert "worker-1" not in context
    with pytest.raises(NoActiveSessionError):
        controller.click("#submit")


def test_quit_defaults_to_full_teardown(controller, driver, context):
    controller.quit()

    assert driver.quit_called
    assert len(context) == 0


def test_quit_is_not_retried(controller, driver, context):
    driver.failures["quit"] = [TransientProtocolError("connection reset")]

    with pytest.raises(TransientProtocolError):
        controller.quit()

    assert driver.count("quit") == 1
    # The binding is released even when the browser refused to quit
    assert "worker-1" not in context


def test_close_with_other_windows_degrades_session(controller, driver, context):
    driver.open_window("window-2")
    driver.elements["#submit"] = FakeElement()

    controller.quit(CloseSession.CLOSE)

    session = context.get_session("worker-1")
    assert session.state == SessionState.DEGRADED
    assert not driver.quit_called
    with pytest.raises(NoActiveWindowError):
        controller.click("#submit")
    assert controller.get_number_of_opened_windows() == 1

    controller.switch_to_latest_window()

    assert session.state == SessionState.ACTIVE
    assert driver.current_window == "window-2"
    controller.click("#submit")


def test_close_last_window_ends_session(controller, driver, context):
    controller.quit(CloseSession.CLOSE)

    assert driver.quit_called
    assert "worker-1" not in context
    with pytest.raises(NoActiveSessionError):
        controller.get_page_source()


def test_no_active_window_is_a_no_active_session_error(controller, driver):
    driver.open_window("window-2")
    controller.quit(CloseSession.CLOSE)

    with pytest.raises(NoActiveSessionError):
        controller.get_page_source()


def test_rebinding_after_quit(controller, context, waits, files):
    controller.quit()
    fresh = FakeDriver()
    fresh.elements["#submit"] = FakeElement()

    context.bind_driver("worker-1", fresh, wait_strategy="fast")
    ActionController("worker-1", context=context, waits=waits, files=files).click("#submit")

    assert fresh.lookups["#submit"] == 1


def test_two_workers_do_not_share_state(context, waits, files):
    first, second = FakeDriver(), FakeDriver()
    first.elements["#name"] = FakeElement(text="first")
    second.elements["#name"] = FakeElement(text="second")
    context.bind_driver("w1", first, wait_strategy="fast")
    context.bind_driver("w2", second, wait_strategy="fast")
    one = ActionController("w1", context=context, waits=waits, files=files)
    two = ActionController("w2", context=context, waits=waits, files=files)

    assert one.get_text("#name") == "first"
    assert two.get_text("#name") == "second"

    one.quit()

    assert two.get_text("#name") == "second"
    assert context.get_web_element("w2") is second.elements["#name"]
