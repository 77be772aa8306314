"""
Protocol client backed by Playwright's sync API

Playwright errors are translated at this boundary: races such as detached
or not-yet-actionable elements become TransientProtocolError, everything
else FatalProtocolError. Playwright objects belong to the thread that
created them, which matches the one-driver-per-worker model.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from playwright.sync_api import Browser, BrowserContext, ElementHandle, Frame, Page, Playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import FatalProtocolError, NoSuchElementError, ProtocolError, TransientProtocolError
from .locators import LocatorKind, RawSelector, to_selector
from .protocol import Alert, BrowserDriver, Cookie, Dimension, LogEntry, Point, WebElement

logger = logging.getLogger(__name__)

# Lower-cased message fragments Playwright uses for interim element states
TRANSIENT_MARKERS = (
    "not attached to the dom",
    "element is not attached",
    "element is detached",
    "execution context was destroyed",
    "cannot find context with specified id",
    "frame was detached",
    "element is not visible",
    "element is not stable",
    "element is not enabled",
    "element is outside of the viewport",
    "intercepts pointer events",
)

# Selenium-style scripts: body of a function reading `arguments`
SCRIPT_WRAPPER = "args => (function() { %s }).apply(null, args)"

OBSCURED_SCRIPT = """el => {
    const rect = el.getBoundingClientRect();
    const top = el.ownerDocument.elementFromPoint(rect.left + rect.width / 2, rect.top + rect.height / 2);
    return !(top && (top === el || el.contains(top)));
}"""

DESELECT_SCRIPT = """(el, [key, wanted]) => {
    for (const option of el.options) {
        const current = key === 'value' ? option.value : option.text.trim();
        if (current === wanted) option.selected = false;
    }
    el.dispatchEvent(new Event('change', {bubbles: true}));
}"""

_CONSOLE_LEVELS = {"error": "SEVERE", "warning": "WARNING", "debug": "DEBUG"}


def classify_error(exc: PlaywrightError) -> ProtocolError:
    """Map a Playwright error to the transient/fatal split used by retries"""
    message = str(exc)
    lowered = message.lower()
    if isinstance(exc, PlaywrightTimeoutError) or any(marker in lowered for marker in TRANSIENT_MARKERS):
        return TransientProtocolError(message)
    return FatalProtocolError(message)


@contextmanager
def translate_errors():
    try:
        yield
    except PlaywrightError as e:
        raise classify_error(e) from e


class PlaywrightAlert(Alert):
    """A dialog seen by the page.

    Playwright requires a dialog to be answered while it is opening, so the
    driver answers it straight away with its `dialog_response`. `accept` and
    `dismiss` then confirm that answer and raise FatalProtocolError when the
    dialog was answered the other way. Set the response on the driver before
    the dialog opens to choose the answer.
    """

    def __init__(self, dialog_type: str, message: str, response: str):
        self.dialog_type = dialog_type
        self.message = message
        self.response = response

    @property
    def text(self) -> str:
        return self.message

    def accept(self):
        self._confirm("accept")

    def dismiss(self):
        self._confirm("dismiss")

    def _confirm(self, wanted: str):
        if wanted != self.response:
            raise FatalProtocolError(
                f"{self.dialog_type} dialog {self.message!r} was already answered with "
                f"{self.response}, cannot {wanted} it; set the dialog response before it opens"
            )


class PlaywrightElement(WebElement):
    """WebElement over a Playwright ElementHandle"""

    def __init__(self, handle: ElementHandle, action_timeout_ms: int = 30000):
        self.handle = handle
        self.action_timeout_ms = action_timeout_ms

    def click(self):
        with translate_errors():
            self.handle.click(timeout=self.action_timeout_ms)

    def send_keys(self, text: str):
        with translate_errors():
            self.handle.type(text, timeout=self.action_timeout_ms)

    def upload(self, path: str):
        with translate_errors():
            self.handle.set_input_files(path, timeout=self.action_timeout_ms)

    @property
    def text(self) -> str:
        with translate_errors():
            return self.handle.inner_text()

    @property
    def tag_name(self) -> str:
        with translate_errors():
            return self.handle.evaluate('el => el.tagName.toLowerCase()')

    def get_attribute(self, name: str) -> Optional[str]:
        with translate_errors():
            return self.handle.get_attribute(name)

    def _box(self) -> Dict[str, float]:
        with translate_errors():
            box = self.handle.bounding_box()
        return box or {'x': 0, 'y': 0, 'width': 0, 'height': 0}

    @property
    def location(self) -> Point:
        box = self._box()
        return Point(round(box['x']), round(box['y']))

    @property
    def size(self) -> Dimension:
        box = self._box()
        return Dimension(round(box['width']), round(box['height']))

    def is_displayed(self) -> bool:
        with translate_errors():
            return self.handle.is_visible()

    def is_enabled(self) -> bool:
        with translate_errors():
            return self.handle.is_enabled()

    def is_editable(self) -> bool:
        with translate_errors():
            return self.handle.is_editable()

    def is_selected(self) -> bool:
        with translate_errors():
            return self.handle.evaluate('el => !!(el.selected || el.checked)')

    def is_obscured(self) -> bool:
        with translate_errors():
            self.handle.scroll_into_view_if_needed(timeout=self.action_timeout_ms)
            return self.handle.evaluate(OBSCURED_SCRIPT)

    def scroll_into_view(self):
        with translate_errors():
            self.handle.scroll_into_view_if_needed(timeout=self.action_timeout_ms)

    def find_elements(self, selector: RawSelector) -> List[WebElement]:
        with translate_errors():
            handles = self.handle.query_selector_all(to_selector(selector))
        return [PlaywrightElement(h, self.action_timeout_ms) for h in handles]

    def select_by_value(self, value: str):
        with translate_errors():
            self.handle.select_option(value=value, timeout=self.action_timeout_ms)

    def select_by_visible_text(self, text: str):
        with translate_errors():
            self.handle.select_option(label=text, timeout=self.action_timeout_ms)

    def deselect_by_value(self, value: str):
        with translate_errors():
            self.handle.evaluate(DESELECT_SCRIPT, ['value', value])

    def deselect_by_visible_text(self, text: str):
        with translate_errors():
            self.handle.evaluate(DESELECT_SCRIPT, ['text', text])

    def __repr__(self):
        return f"PlaywrightElement({self.handle!r})"


class PlaywrightDriver(BrowserDriver):
    """BrowserDriver over one Playwright browser, context and its pages"""

    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext, page: Page,
                 action_timeout_ms: int = 30000, dialog_response: str = "accept"):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.action_timeout_ms = action_timeout_ms
        self.dialog_response = "accept"
        self.set_dialog_response(dialog_response)

        self.implicit_wait = 0.0
        self.script_timeout: Optional[float] = None
        self._handles: Dict[Page, str] = {}
        self._logs: List[LogEntry] = []
        # Only the most recent dialog; older ones were answered and can no longer be acted on
        self._alert: Optional[PlaywrightAlert] = None

        self._page: Optional[Page] = page
        self._frame: Optional[Frame] = page.main_frame
        self._attach(page)
        context.on("page", self._attach)

    # ------------------------------------------------------------------
    # Page bookkeeping
    # ------------------------------------------------------------------

    def _attach(self, page: Page):
        if page in self._handles:
            return
        self._handles[page] = uuid.uuid4().hex
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)
        page.on("dialog", self._on_dialog)

    def _on_console(self, message):
        level = _CONSOLE_LEVELS.get(message.type, "INFO")
        self._logs.append(LogEntry(level=level, timestamp=time.time() * 1000, message=message.text))

    def _on_page_error(self, error):
        self._logs.append(LogEntry(level="SEVERE", timestamp=time.time() * 1000, message=str(error)))

    def _on_dialog(self, dialog):
        if self._alert is not None:
            logger.debug("Dropping unhandled %s dialog %r", self._alert.dialog_type, self._alert.message)
        self._alert = PlaywrightAlert(dialog.type, dialog.message, self.dialog_response)
        logger.debug("Answering %s dialog %r with %s", dialog.type, dialog.message, self.dialog_response)
        if self.dialog_response == "accept":
            dialog.accept()
        else:
            dialog.dismiss()

    def _current_page(self) -> Page:
        if self._page is None or self._page.is_closed():
            raise FatalProtocolError("No current window; switch to an open window first")
        return self._page

    def _current_frame(self) -> Frame:
        page = self._current_page()
        if self._frame is None or self._frame.is_detached():
            self._frame = page.main_frame
        return self._frame

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _forget_dialog(self):
        self._alert = None

    def navigate(self, url: str):
        self._forget_dialog()
        with translate_errors():
            self._current_page().goto(url)
        self._frame = self._current_page().main_frame

    def back(self):
        self._forget_dialog()
        with translate_errors():
            self._current_page().go_back()
        self._frame = self._current_page().main_frame

    def forward(self):
        self._forget_dialog()
        with translate_errors():
            self._current_page().go_forward()
        self._frame = self._current_page().main_frame

    def page_source(self) -> str:
        with translate_errors():
            return self._current_frame().content()

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def find_element(self, selector: RawSelector) -> WebElement:
        frame = self._current_frame()
        target = to_selector(selector)
        with translate_errors():
            if self.implicit_wait > 0:
                try:
                    handle = frame.wait_for_selector(target, state="attached", timeout=self.implicit_wait * 1000)
                except PlaywrightTimeoutError:
                    handle = None
            else:
                handle = frame.query_selector(target)
        if handle is None:
            raise NoSuchElementError(selector)
        return PlaywrightElement(handle, self.action_timeout_ms)

    def find_elements(self, selector: RawSelector) -> List[WebElement]:
        with translate_errors():
            handles = self._current_frame().query_selector_all(to_selector(selector))
        return [PlaywrightElement(h, self.action_timeout_ms) for h in handles]

    def execute_script(self, script: str, *args: Any) -> Any:
        unwrapped = [a.handle if isinstance(a, PlaywrightElement) else a for a in args]
        with translate_errors():
            return self._current_frame().evaluate(SCRIPT_WRAPPER % script, unwrapped)

    # ------------------------------------------------------------------
    # Screenshots
    # ------------------------------------------------------------------

    def get_screenshot_as_png(self) -> bytes:
        with translate_errors():
            return self._current_page().screenshot(type="png")

    def device_pixel_ratio(self) -> float:
        with translate_errors():
            return float(self._current_page().evaluate("() => window.devicePixelRatio"))

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def get_cookies(self) -> List[Cookie]:
        with translate_errors():
            raw = self.context.cookies()
        return [
            Cookie(
                name=c['name'],
                value=c['value'],
                domain=c.get('domain'),
                path=c.get('path', '/'),
                expiry=c['expires'] if c.get('expires', -1) >= 0 else None,
                secure=c.get('secure', False),
                http_only=c.get('httpOnly', False),
                same_site=c.get('sameSite'),
            )
            for c in raw
        ]

    def add_cookie(self, cookie: Cookie):
        payload: Dict[str, Any] = {'name': cookie.name, 'value': cookie.value,
                                   'secure': cookie.secure, 'httpOnly': cookie.http_only}
        if cookie.domain:
            payload['domain'] = cookie.domain
            payload['path'] = cookie.path
        else:
            payload['url'] = self._current_page().url
        if cookie.expiry is not None:
            payload['expires'] = cookie.expiry
        if cookie.same_site:
            payload['sameSite'] = cookie.same_site
        with translate_errors():
            self.context.add_cookies([payload])

    def delete_cookie(self, name: str):
        with translate_errors():
            self.context.clear_cookies(name=name)

    def delete_all_cookies(self):
        with translate_errors():
            self.context.clear_cookies()

    # ------------------------------------------------------------------
    # Timeouts
    # ------------------------------------------------------------------

    def set_implicit_wait(self, seconds: float):
        self.implicit_wait = max(0.0, seconds)

    def set_page_load_timeout(self, seconds: float):
        with translate_errors():
            self.context.set_default_navigation_timeout(seconds * 1000)

    def set_script_timeout(self, seconds: float):
        # Playwright evaluations carry no timeout of their own
        self.script_timeout = seconds
        logger.debug("Script timeout recorded as %ss; Playwright does not bound evaluations", seconds)

    # ------------------------------------------------------------------
    # Windows
    # ------------------------------------------------------------------

    def _window_bounds(self):
        with translate_errors():
            try:
                cdp = self.context.new_cdp_session(self._current_page())
            except PlaywrightError as e:
                raise FatalProtocolError(f"Window geometry needs a Chromium browser: {e}") from e
            window = cdp.send("Browser.getWindowForTarget")
        return cdp, window['windowId'], window['bounds']

    def _set_bounds(self, bounds: Dict[str, Any]):
        cdp, window_id, _ = self._window_bounds()
        with translate_errors():
            cdp.send("Browser.setWindowBounds", {'windowId': window_id, 'bounds': bounds})

    def get_window_position(self) -> Point:
        _, _, bounds = self._window_bounds()
        return Point(bounds['left'], bounds['top'])

    def set_window_position(self, point: Point):
        self._set_bounds({'windowState': 'normal'})
        self._set_bounds({'left': point.x, 'top': point.y})

    def get_window_size(self) -> Dimension:
        _, _, bounds = self._window_bounds()
        return Dimension(bounds['width'], bounds['height'])

    def set_window_size(self, dimension: Dimension):
        self._set_bounds({'windowState': 'normal'})
        self._set_bounds({'width': dimension.width, 'height': dimension.height})

    def maximize_window(self):
        self._set_bounds({'windowState': 'maximized'})

    def window_handles(self) -> List[str]:
        return [self._handles[p] for p in self.context.pages if not p.is_closed() and p in self._handles]

    def switch_to_window(self, handle: str):
        for page, page_handle in self._handles.items():
            if page_handle == handle and not page.is_closed():
                with translate_errors():
                    page.bring_to_front()
                self._page = page
                self._frame = page.main_frame
                self._forget_dialog()
                return
        raise FatalProtocolError(f"No open window with handle {handle}")

    def switch_to_frame(self, frame_id: str):
        page = self._current_page()
        frame = page.frame(name=frame_id)
        if frame is None:
            with translate_errors():
                owner = self._current_frame().query_selector(to_selector(RawSelector(frame_id, LocatorKind.ID)))
                frame = owner.content_frame() if owner is not None else None
        if frame is None:
            raise NoSuchElementError(RawSelector(frame_id, LocatorKind.ID))
        self._frame = frame

    def close_window(self):
        page = self._current_page()
        with translate_errors():
            page.close()
        self._page = None
        self._frame = None
        self._forget_dialog()

    # ------------------------------------------------------------------
    # Logs, dialogs, teardown
    # ------------------------------------------------------------------

    def get_log(self, log_type: str) -> List[LogEntry]:
        """Entries collected since the last call; only the `browser` log exists"""
        if log_type != "browser":
            raise FatalProtocolError(f"Unsupported log type {log_type!r}; Playwright exposes only 'browser'")
        entries, self._logs = self._logs, []
        return entries

    def get_alert(self) -> Optional[Alert]:
        alert, self._alert = self._alert, None
        return alert

    def set_dialog_response(self, response: str):
        if response not in ("accept", "dismiss"):
            raise ValueError(f"Dialog response must be 'accept' or 'dismiss', got {response!r}")
        self.dialog_response = response

    def quit(self):
        try:
            with translate_errors():
                self.browser.close()
        finally:
            self._page = None
            self._frame = None
            self.playwright.stop()
