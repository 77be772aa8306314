"""
Action controller - the single entry point for UI test scripts

Every action runs through the same pipeline: the session for this
controller's identity is looked up, the action's declared wait condition is
resolved (which refreshes the session's current element), the one protocol
call is made, and the declared retry budget governs the whole sequence.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional

from .actions import action
from .base import TimingMixin, WaitCondition
from .exceptions import NoActiveSessionError, NoSuchElementError, WaitTimeoutError
from .files import FileService, LocalFileService
from .locators import RawSelector, as_locator
from .protocol import Cookie, Dimension, LogEntry, Point, WebElement
from .resolver import WaitStrategyFactory
from .screenshots import crop_to_element
from .session import Session, SessionContext, session_context

logger = logging.getLogger(__name__)

TABLE_ROWS = RawSelector("tbody tr")
TABLE_FIRST_ROW_CELLS = RawSelector("tbody tr:nth-child(1) td")
SELECT_OPTIONS = RawSelector("option")

CHANGE_STYLE_SCRIPT = "arguments[0].style[arguments[1]] = arguments[2];"


class CloseSession(Enum):
    """How `quit` ends a session"""
    QUIT = "quit"
    CLOSE = "close"


class ActionController(TimingMixin):
    """High-level UI actions bound to one test worker's session"""

    def __init__(self, identity: Hashable, context: Optional[SessionContext] = None,
                 waits: Optional[WaitStrategyFactory] = None, files: Optional[FileService] = None):
        super().__init__()
        self.identity = identity
        self.context = context if context is not None else session_context
        self.waits = waits if waits is not None else WaitStrategyFactory()
        self.files = files if files is not None else LocalFileService()

    # ------------------------------------------------------------------
    # Pipeline plumbing
    # ------------------------------------------------------------------

    def _session(self, require_window: bool = True) -> Session:
        session = self.context.get_session(self.identity)
        session.ensure_usable(require_window)
        return session

    def _driver(self):
        return self._session().driver

    def _element(self) -> WebElement:
        return self._session().get_web_element()

    def _resolve(self, session: Session, target: Any, condition: WaitCondition) -> Any:
        resolver = self.waits.get_wait_strategy(session.wait_strategy)
        locator = as_locator(target) if target is not None else None
        return resolver.resolve(session, locator, condition)

    def _holds(self, target: Any, condition: WaitCondition) -> bool:
        try:
            self._resolve(self._session(), target, condition)
        except WaitTimeoutError:
            return False
        return True

    @staticmethod
    def _selector(target: Any) -> RawSelector:
        locator = as_locator(target)
        if not isinstance(locator, RawSelector):
            raise TypeError(f"Expected a selector, got {target!r}")
        return locator

    @property
    def session(self) -> Session:
        """The live session; raises NoActiveSessionError once it is gone"""
        return self.context.get_session(self.identity)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @action(retries=1)
    def go_to_target_host(self, url: str):
        logger.info("Navigating to %s", url)
        self._driver().navigate(url)
        return self

    @action(retries=1)
    def go_back(self):
        self._driver().back()
        return self

    @action(retries=1)
    def go_forward(self):
        self._driver().forward()
        return self

    # ------------------------------------------------------------------
    # Element actions
    # ------------------------------------------------------------------

    @action(wait=WaitCondition.VISIBILITY)
    def find_element(self, locator) -> WebElement:
        return self._element()

    @action(wait=WaitCondition.CLICKABLE, retries=1)
    def click(self, locator):
        self._element().click()
        return self

    @action(wait=WaitCondition.VISIBILITY, retries=1)
    def type(self, locator, text: str):
        self._element().send_keys(text)
        return self

    @action(wait=WaitCondition.VISIBILITY)
    def change_style(self, locator, attribute: str, value: str):
        self._driver().execute_script(CHANGE_STYLE_SCRIPT, self._element(), attribute, value)
        return self

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def upload_file(self, locator, path):
        local_file = Path(path)
        if not local_file.is_file():
            raise FileNotFoundError(f"Upload source does not exist: {local_file}")
        self._element().upload(str(local_file.resolve()))
        return self

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def select_by_value(self, locator, value: str):
        self._element().select_by_value(value)
        return self

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def select_by_visible_text(self, locator, text: str):
        self._element().select_by_visible_text(text)
        return self

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def clear_selected_option_by_text(self, locator, text: str):
        self._element().deselect_by_visible_text(text)
        return self

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def clear_selected_option(self, locator, value: str):
        self._element().deselect_by_value(value)
        return self

    @action()
    def execute_js(self, script: str, *args: Any) -> Any:
        return self._driver().execute_script(script, *args)

    # ------------------------------------------------------------------
    # Screenshots
    # ------------------------------------------------------------------

    @action()
    def take_screenshot(self):
        png = self._driver().get_screenshot_as_png()
        self._persist_screenshot(png)
        return self

    @action(wait=WaitCondition.VISIBILITY)
    def take_screenshot_of_element(self, locator):
        driver = self._driver()
        element = self._element()
        # Crop coordinates are viewport-relative
        element.scroll_into_view()
        png = driver.get_screenshot_as_png()
        cropped = crop_to_element(png, element.location, element.size, driver.device_pixel_ratio())
        self._persist_screenshot(cropped)
        return self

    def _persist_screenshot(self, png: bytes) -> Path:
        path = Path(self.files.create_screenshot_file())
        path.write_bytes(png)
        self.files.report_screenshot(path)
        return path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_text(self, locator) -> str:
        return self._element().text

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_tag_name(self, locator) -> str:
        return self._element().tag_name

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_attribute(self, locator, name: str) -> Optional[str]:
        return self._element().get_attribute(name)

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_location(self, locator) -> Point:
        return self._element().location

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_element_dimensions(self, locator) -> Dimension:
        return self._element().size

    @action(retries=1)
    def get_page_source(self) -> str:
        return self._driver().page_source()

    @action(wait=WaitCondition.PRESENCE)
    def find_child_elements(self, parent, child) -> List[WebElement]:
        return self._element().find_elements(self._selector(child))

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_rows_table(self, locator) -> int:
        return len(self._element().find_elements(TABLE_ROWS))

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_columns_table(self, locator) -> int:
        return len(self._element().find_elements(TABLE_FIRST_ROW_CELLS))

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_first_selected_option_text(self, locator) -> str:
        for option in self._element().find_elements(SELECT_OPTIONS):
            if option.is_selected():
                return option.text
        raise NoSuchElementError(RawSelector("option:checked"))

    @action(wait=WaitCondition.PRESENCE, retries=1)
    def get_all_options_text(self, locator) -> List[str]:
        return [option.text for option in self._element().find_elements(SELECT_OPTIONS)]

    # ------------------------------------------------------------------
    # Verifications
    # ------------------------------------------------------------------

    @action()
    def is_web_element_present(self, locator) -> bool:
        return self._holds(locator, WaitCondition.PRESENCE)

    @action()
    def is_web_element_visible(self, locator) -> bool:
        return self._holds(locator, WaitCondition.VISIBILITY)

    @action()
    def is_text_present(self, text: str) -> bool:
        return text in self.get_page_source()

    @action(wait=WaitCondition.PRESENCE)
    def is_field_editable(self, locator) -> bool:
        return self._element().is_editable()

    @action(wait=WaitCondition.PRESENCE)
    def is_field_not_editable(self, locator) -> bool:
        return not self._element().is_editable()

    @action()
    def is_element_clickable(self, locator) -> bool:
        return self._holds(locator, WaitCondition.CLICKABLE)

    @action()
    def is_element_not_clickable(self, locator) -> bool:
        return not self._holds(locator, WaitCondition.CLICKABLE)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    @action(retries=1)
    def get_cookies(self) -> List[Cookie]:
        return self._driver().get_cookies()

    @action(retries=1)
    def get_cookie_named(self, name: str) -> Optional[Cookie]:
        for cookie in self._driver().get_cookies():
            if cookie.name == name:
                return cookie
        return None

    @action(retries=1)
    def add_cookie(self, cookie: Cookie):
        self._driver().add_cookie(cookie)
        return self

    @action(retries=1)
    def delete_cookie_by_name(self, name: str):
        self._driver().delete_cookie(name)
        return self

    @action(retries=1)
    def delete_cookie(self, cookie: Cookie):
        self._driver().delete_cookie(cookie.name)
        return self

    @action(retries=1)
    def delete_all_cookies(self):
        self._driver().delete_all_cookies()
        return self

    # ------------------------------------------------------------------
    # Timeouts, in seconds
    # ------------------------------------------------------------------

    @action(retries=1)
    def implicitly_wait(self, seconds: float):
        self._driver().set_implicit_wait(seconds)
        return self

    @action(retries=1)
    def page_load_timeout(self, seconds: float):
        self._driver().set_page_load_timeout(seconds)
        return self

    @action(retries=1)
    def script_load_timeout(self, seconds: float):
        self._driver().set_script_timeout(seconds)
        return self

    # ------------------------------------------------------------------
    # Windows, frames and dialogs
    # ------------------------------------------------------------------

    @action(retries=1)
    def set_window_position(self, point: Point):
        self._driver().set_window_position(point)
        return self

    @action(retries=1)
    def set_window_dimension(self, dimension: Dimension):
        self._driver().set_window_size(dimension)
        return self

    @action()
    def get_window_position(self) -> Point:
        return self._driver().get_window_position()

    @action(retries=1)
    def get_window_dimension(self) -> Dimension:
        return self._driver().get_window_size()

    @action(retries=1)
    def maximize_window(self):
        self._driver().maximize_window()
        return self

    @action(retries=1, require_window=False)
    def switch_to_latest_window(self):
        session = self._session(require_window=False)
        handles = session.driver.window_handles()
        if not handles:
            raise NoActiveSessionError(self.identity, "no open windows left")
        session.driver.switch_to_window(handles[-1])
        session.mark_active()
        return self

    @action(retries=1, require_window=False)
    def get_number_of_opened_windows(self) -> int:
        return len(self._session(require_window=False).driver.window_handles())

    @action(retries=1)
    def switch_to_frame(self, frame_id: str):
        self._driver().switch_to_frame(frame_id)
        return self

    @action(wait=WaitCondition.ALERT, retries=1)
    def accept_alert(self):
        session = self._session()
        try:
            session.current_alert.accept()
        finally:
            session.current_alert = None
        return self

    @action(wait=WaitCondition.ALERT, retries=1)
    def dismiss_alert(self):
        session = self._session()
        try:
            session.current_alert.dismiss()
        finally:
            session.current_alert = None
        return self

    @action(require_window=False)
    def set_alert_response(self, response: str):
        """Answer dialogs opened from now on with "accept" or "dismiss".

        Backends that must answer a dialog as it opens use this answer;
        `accept_alert` / `dismiss_alert` then fail if it does not match.
        """
        self._session(require_window=False).driver.set_dialog_response(response)
        return self

    @action(retries=1)
    def logs(self, log_type: str) -> List[LogEntry]:
        return self._driver().get_log(log_type)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(require_window=False)
    def quit(self, close_type: CloseSession = CloseSession.QUIT):
        """End the session, or close only the current window.

        CLOSE leaves the session bound but degraded while other windows are
        open; `switch_to_latest_window` makes it usable again. Closing the
        last window ends the session like QUIT.
        """
        session = self._session(require_window=False)
        if close_type == CloseSession.CLOSE:
            session.driver.close_window()
            remaining = session.driver.window_handles()
            if remaining:
                session.mark_degraded()
                logger.info("Closed current window of %r, %d window(s) remain", self.identity, len(remaining))
                return self
            logger.info("Closed last window of %r, ending session", self.identity)

        try:
            session.driver.quit()
        finally:
            self.context.unbind(self.identity)
        return self

    def download_file(self, url: str, filename_prefix: str, file_extension: str) -> str:
        return self.time_operation("download_file", self.files.download_file, url, filename_prefix, file_extension)

    def get_performance_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = {'actions': self.get_timing_summary()}
        try:
            alias = self.session.wait_strategy
        except NoActiveSessionError:
            return stats
        stats['waits'] = self.waits.get_wait_strategy(alias).get_performance_stats()
        return stats
