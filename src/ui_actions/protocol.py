"""
Protocol client interfaces consumed by the action layer

`BrowserDriver` is one live connection to one browser instance and
`WebElement` is a live handle to one element in it. The value objects below
mirror what the protocol hands back and are passed through unchanged.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from .locators import RawSelector


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Dimension:
    width: int
    height: int


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    domain: Optional[str] = None
    path: str = "/"
    expiry: Optional[float] = None
    secure: bool = False
    http_only: bool = False
    same_site: Optional[str] = None


@dataclass(frozen=True)
class LogEntry:
    level: str
    timestamp: float
    message: str


class Alert(ABC):
    """An open alert, confirm or prompt dialog"""

    @property
    @abstractmethod
    def text(self) -> str:
        pass

    @abstractmethod
    def accept(self):
        pass

    @abstractmethod
    def dismiss(self):
        pass


class WebElement(ABC):
    """Live element handle"""

    @abstractmethod
    def click(self):
        pass

    @abstractmethod
    def send_keys(self, text: str):
        pass

    @abstractmethod
    def upload(self, path: str):
        """Attach a local file to a file input"""
        pass

    @property
    @abstractmethod
    def text(self) -> str:
        pass

    @property
    @abstractmethod
    def tag_name(self) -> str:
        pass

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def location(self) -> Point:
        """Top-left corner in CSS pixels, relative to the viewport"""
        pass

    @property
    @abstractmethod
    def size(self) -> Dimension:
        pass

    @abstractmethod
    def is_displayed(self) -> bool:
        """Non-zero rendered size and no CSS-hidden ancestor"""
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    def is_editable(self) -> bool:
        pass

    @abstractmethod
    def is_selected(self) -> bool:
        pass

    @abstractmethod
    def is_obscured(self) -> bool:
        """True when another element covers this element's center point"""
        pass

    @abstractmethod
    def scroll_into_view(self):
        """Scroll the page until the element is inside the viewport"""
        pass

    @abstractmethod
    def find_elements(self, selector: RawSelector) -> List["WebElement"]:
        pass

    @abstractmethod
    def select_by_value(self, value: str):
        pass

    @abstractmethod
    def select_by_visible_text(self, text: str):
        pass

    @abstractmethod
    def deselect_by_value(self, value: str):
        pass

    @abstractmethod
    def deselect_by_visible_text(self, text: str):
        pass


class BrowserDriver(ABC):
    """One live connection to one browser instance"""

    # Navigation

    @abstractmethod
    def navigate(self, url: str):
        pass

    @abstractmethod
    def back(self):
        pass

    @abstractmethod
    def forward(self):
        pass

    @abstractmethod
    def page_source(self) -> str:
        pass

    # Elements

    @abstractmethod
    def find_element(self, selector: RawSelector) -> WebElement:
        """Return the first match or raise NoSuchElementError"""
        pass

    @abstractmethod
    def find_elements(self, selector: RawSelector) -> List[WebElement]:
        pass

    @abstractmethod
    def execute_script(self, script: str, *args: Any) -> Any:
        pass

    # Screenshots

    @abstractmethod
    def get_screenshot_as_png(self) -> bytes:
        """Capture the visible viewport in device pixels"""
        pass

    @abstractmethod
    def device_pixel_ratio(self) -> float:
        pass

    # Cookies

    @abstractmethod
    def get_cookies(self) -> List[Cookie]:
        pass

    @abstractmethod
    def add_cookie(self, cookie: Cookie):
        pass

    @abstractmethod
    def delete_cookie(self, name: str):
        pass

    @abstractmethod
    def delete_all_cookies(self):
        pass

    # Timeouts, in seconds

    @abstractmethod
    def set_implicit_wait(self, seconds: float):
        pass

    @abstractmethod
    def set_page_load_timeout(self, seconds: float):
        pass

    @abstractmethod
    def set_script_timeout(self, seconds: float):
        pass

    # Windows and frames

    @abstractmethod
    def get_window_position(self) -> Point:
        pass

    @abstractmethod
    def set_window_position(self, point: Point):
        pass

    @abstractmethod
    def get_window_size(self) -> Dimension:
        pass

    @abstractmethod
    def set_window_size(self, dimension: Dimension):
        pass

    @abstractmethod
    def maximize_window(self):
        pass

    @abstractmethod
    def window_handles(self) -> List[str]:
        """Handles of all open windows, oldest first"""
        pass

    @abstractmethod
    def switch_to_window(self, handle: str):
        pass

    @abstractmethod
    def switch_to_frame(self, frame_id: str):
        pass

    @abstractmethod
    def close_window(self):
        """Close the current window only"""
        pass

    # Logs and dialogs

    @abstractmethod
    def get_log(self, log_type: str) -> List[LogEntry]:
        pass

    @abstractmethod
    def get_alert(self) -> Optional[Alert]:
        """Return the open dialog, or None when no dialog is showing"""
        pass

    @abstractmethod
    def set_dialog_response(self, response: str):
        """Choose how dialogs opened from now on are answered: accept or dismiss"""
        pass

    @abstractmethod
    def quit(self):
        """End the browser process and connection"""
        pass
