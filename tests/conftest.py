"""In-memory protocol fakes shared by the test suite."""

import io
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from PIL import Image

from ui_actions.controller import ActionController
from ui_actions.exceptions import FatalProtocolError, NoSuchElementError
from ui_actions.files import FileService
from ui_actions.locators import RawSelector
from ui_actions.protocol import Alert, BrowserDriver, Cookie, Dimension, LogEntry, Point, WebElement
from ui_actions.resolver import WaitResolver, WaitStrategyFactory
from ui_actions.session import SessionContext


class FakeElement(WebElement):
    def __init__(
        self,
        name: str = "element",
        *,
        text: str = "",
        tag: str = "div",
        displayed: bool = True,
        enabled: bool = True,
        editable: bool = True,
        selected: bool = False,
        obscured: bool = False,
        enabled_after: int = 0,
        location: Point = Point(0, 0),
        size: Dimension = Dimension(10, 10),
        attributes: Optional[Dict[str, str]] = None,
        children: Optional[Dict[str, List["FakeElement"]]] = None,
        value: Optional[str] = None,
        location_after_scroll: Optional[Point] = None,
    ) -> None:
        self.name = name
        self._text = text
        self.tag = tag
        self.displayed = displayed
        self.enabled = enabled
        self.editable = editable
        self.selected = selected
        self.obscured = obscured
        self.enabled_after = enabled_after
        self._location = location
        self._size = size
        self.attributes = attributes or {}
        self.children = children or {}
        self.value = value if value is not None else text
        self.location_after_scroll = location_after_scroll
        self.calls: List[tuple] = []
        self.failures: List[BaseException] = []
        self.enabled_checks = 0

    def _record(self, action: str, *args: Any) -> None:
        self.calls.append((action, *args))
        if self.failures:
            raise self.failures.pop(0)

    def click(self) -> None:
        self._record("click")

    def send_keys(self, text: str) -> None:
        self._record("send_keys", text)

    def upload(self, path: str) -> None:
        self._record("upload", path)

    @property
    def text(self) -> str:
        return self._text

    @property
    def tag_name(self) -> str:
        return self.tag

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    @property
    def location(self) -> Point:
        return self._location

    @property
    def size(self) -> Dimension:
        return self._size

    def is_displayed(self) -> bool:
        return self.displayed

    def is_enabled(self) -> bool:
        self.enabled_checks += 1
        return self.enabled and self.enabled_checks > self.enabled_after

    def is_editable(self) -> bool:
        return self.editable

    def is_selected(self) -> bool:
        return self.selected

    def is_obscured(self) -> bool:
        return self.obscured

    def scroll_into_view(self) -> None:
        self._record("scroll_into_view")
        if self.location_after_scroll is not None:
            self._location = self.location_after_scroll

    def find_elements(self, selector: RawSelector) -> List[WebElement]:
        return list(self.children.get(selector.value, []))

    def _options(self) -> List["FakeElement"]:
        return self.children.get("option", [])

    def select_by_value(self, value: str) -> None:
        self._record("select_by_value", value)
        for option in self._options():
            option.selected = option.value == value

    def select_by_visible_text(self, text: str) -> None:
        self._record("select_by_visible_text", text)
        for option in self._options():
            option.selected = option.text == text

    def deselect_by_value(self, value: str) -> None:
        self._record("deselect_by_value", value)
        for option in self._options():
            if option.value == value:
                option.selected = False

    def deselect_by_visible_text(self, text: str) -> None:
        self._record("deselect_by_visible_text", text)
        for option in self._options():
            if option.text == text:
                option.selected = False

    def __repr__(self) -> str:
        return f"FakeElement({self.name!r})"


class FakeAlert(Alert):
    def __init__(self, message: str) -> None:
        self.message = message
        self.outcome: Optional[str] = None

    @property
    def text(self) -> str:
        return self.message

    def accept(self) -> None:
        self.outcome = "accepted"

    def dismiss(self) -> None:
        self.outcome = "dismissed"


class FakeDriver(BrowserDriver):
    def __init__(self) -> None:
        self.elements: Dict[str, FakeElement] = {}
        # selector value -> number of lookups that miss before the element appears
        self.appear_after: Dict[str, int] = {}
        self.lookups: Dict[str, int] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[str, List[BaseException]] = {}
        self.history: List[str] = []
        self.source = "<html><body></body></html>"
        self.cookies: Dict[str, Cookie] = {}
        self.timeouts: Dict[str, float] = {}
        self.position = Point(0, 0)
        self.window_size = Dimension(1280, 720)
        self.windows: List[str] = ["window-1"]
        self.current_window: Optional[str] = "window-1"
        self.frame: Optional[str] = None
        self.log_entries: List[LogEntry] = []
        self.alerts: List[FakeAlert] = []
        self.dialog_response = "accept"
        self.screenshot = Image.new("RGB", (200, 100), "white")
        self.pixel_ratio = 1.0
        self.quit_called = False

    def _record(self, action: str, *args: Any) -> None:
        self.calls.append((action, *args))
        pending = self.failures.get(action)
        if pending:
            raise pending.pop(0)

    def count(self, action: str) -> int:
        return sum(1 for call in self.calls if call[0] == action)

    def navigate(self, url: str) -> None:
        self._record("navigate", url)
        self.history.append(url)

    def back(self) -> None:
        self._record("back")

    def forward(self) -> None:
        self._record("forward")

    def page_source(self) -> str:
        self._record("page_source")
        return self.source

    def find_element(self, selector: RawSelector) -> WebElement:
        if selector.value.startswith("!!"):
            raise FatalProtocolError(f"invalid selector: {selector.value}")
        seen = self.lookups.get(selector.value, 0) + 1
        self.lookups[selector.value] = seen
        element = self.elements.get(selector.value)
        if element is None or seen <= self.appear_after.get(selector.value, 0):
            raise NoSuchElementError(selector)
        return element

    def find_elements(self, selector: RawSelector) -> List[WebElement]:
        element = self.elements.get(selector.value)
        return [element] if element else []

    def execute_script(self, script: str, *args: Any) -> Any:
        self._record("execute_script", script, *args)
        return len(args)

    def get_screenshot_as_png(self) -> bytes:
        self._record("screenshot")
        buffer = io.BytesIO()
        self.screenshot.save(buffer, format="PNG")
        return buffer.getvalue()

    def device_pixel_ratio(self) -> float:
        return self.pixel_ratio

    def get_cookies(self) -> List[Cookie]:
        self._record("get_cookies")
        return list(self.cookies.values())

    def add_cookie(self, cookie: Cookie) -> None:
        self._record("add_cookie", cookie)
        self.cookies[cookie.name] = cookie

    def delete_cookie(self, name: str) -> None:
        self._record("delete_cookie", name)
        self.cookies.pop(name, None)

    def delete_all_cookies(self) -> None:
        self._record("delete_all_cookies")
        self.cookies.clear()

    def set_implicit_wait(self, seconds: float) -> None:
        self.timeouts["implicit"] = seconds

    def set_page_load_timeout(self, seconds: float) -> None:
        self.timeouts["page_load"] = seconds

    def set_script_timeout(self, seconds: float) -> None:
        self.timeouts["script"] = seconds

    def get_window_position(self) -> Point:
        return self.position

    def set_window_position(self, point: Point) -> None:
        self.position = point

    def get_window_size(self) -> Dimension:
        return self.window_size

    def set_window_size(self, dimension: Dimension) -> None:
        self.window_size = dimension

    def maximize_window(self) -> None:
        self._record("maximize_window")
        self.window_size = Dimension(1920, 1080)

    def window_handles(self) -> List[str]:
        return list(self.windows)

    def open_window(self, handle: str) -> None:
        self.windows.append(handle)

    def switch_to_window(self, handle: str) -> None:
        self._record("switch_to_window", handle)
        self.current_window = handle

    def switch_to_frame(self, frame_id: str) -> None:
        self._record("switch_to_frame", frame_id)
        self.frame = frame_id

    def close_window(self) -> None:
        self._record("close_window")
        self.windows.remove(self.current_window)
        self.current_window = None

    def get_log(self, log_type: str) -> List[LogEntry]:
        if log_type != "browser":
            raise FatalProtocolError(f"Unsupported log type {log_type}")
        entries, self.log_entries = self.log_entries, []
        return entries

    def get_alert(self) -> Optional[Alert]:
        return self.alerts[0] if self.alerts else None

    def set_dialog_response(self, response: str) -> None:
        self._record("set_dialog_response", response)
        self.dialog_response = response

    def quit(self) -> None:
        self._record("quit")
        self.quit_called = True


class RecordingFileService(FileService):
    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.created: List[Path] = []
        self.reported: List[Path] = []
        self.downloads: List[tuple] = []

    def create_screenshot_file(self) -> Path:
        path = self.directory / f"shot_{len(self.created) + 1}.png"
        path.touch()
        self.created.append(path)
        return path

    def report_screenshot(self, path: Path) -> None:
        self.reported.append(path)

    def download_file(self, url: str, prefix: str, extension: str) -> str:
        self.downloads.append((url, prefix, extension))
        return str(self.directory / f"{prefix}.{extension}")


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def context() -> SessionContext:
    return SessionContext()


@pytest.fixture
def waits() -> WaitStrategyFactory:
    factory = WaitStrategyFactory(timeout=0.3, poll_interval=0.02)
    factory.register("fast", lambda: WaitResolver(timeout=0.3, poll_interval=0.02))
    return factory


@pytest.fixture
def files(tmp_path: Path) -> RecordingFileService:
    return RecordingFileService(tmp_path)


@pytest.fixture
def controller(driver, context, waits, files) -> ActionController:
    context.bind_driver("worker-1", driver, wait_strategy="fast")
    return ActionController("worker-1", context=context, waits=waits, files=files)
