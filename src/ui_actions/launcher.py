"""
Starting and stopping browser sessions for test workers
"""

import logging
from contextlib import contextmanager
from typing import Hashable, Iterator, Optional

from playwright.sync_api import sync_playwright

from .config import ActionConfig, load_config
from .controller import ActionController, CloseSession
from .exceptions import DuplicateSessionError, NoActiveSessionError
from .files import FileService, LocalFileService
from .playwright_driver import PlaywrightDriver
from .resolver import WaitStrategyFactory
from .session import SessionContext, session_context

logger = logging.getLogger(__name__)


def launch_session(identity: Hashable, config: Optional[ActionConfig] = None,
                   context: Optional[SessionContext] = None,
                   waits: Optional[WaitStrategyFactory] = None,
                   files: Optional[FileService] = None) -> ActionController:
    """
    Launch a browser, bind it to `identity` and return its controller.

    Args:
        identity: Key of the test worker that will own the session
        config: Launch and wait settings; loaded from file/env when omitted
        context: Session registry; the shared one when omitted

    Returns:
        ActionController bound to the new session
    """
    config = config or load_config()
    context = context if context is not None else session_context
    if identity in context:
        raise DuplicateSessionError(identity)

    playwright = sync_playwright().start()
    try:
        browser_type = getattr(playwright, config.browser)
        browser = browser_type.launch(headless=config.headless, slow_mo=config.slow_mo)
        # Headed windows size their own viewport so window geometry calls take effect
        browser_context = browser.new_context(no_viewport=not config.headless)
        page = browser_context.new_page()
        page.set_default_timeout(config.action_timeout_ms)
    except Exception:
        playwright.stop()
        raise

    driver = PlaywrightDriver(playwright, browser, browser_context, page,
                              action_timeout_ms=config.action_timeout_ms)
    try:
        context.bind_driver(identity, driver, config.wait_strategy)
    except DuplicateSessionError:
        driver.quit()
        raise

    logger.info("Launched %s (headless=%s) for %r", config.browser, config.headless, identity)
    return ActionController(
        identity,
        context=context,
        waits=waits or WaitStrategyFactory.from_config(config),
        files=files or LocalFileService.from_config(config),
    )


@contextmanager
def browser_session(identity: Hashable, config: Optional[ActionConfig] = None,
                    context: Optional[SessionContext] = None) -> Iterator[ActionController]:
    """Launch a session for the duration of a with-block"""
    controller = launch_session(identity, config=config, context=context)
    try:
        yield controller
    finally:
        try:
            controller.quit(CloseSession.QUIT)
        except NoActiveSessionError:
            # Already quit inside the block
            pass
