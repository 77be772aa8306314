"""
File and reporting collaborators used by the controller
"""

import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

import requests

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class FileService(ABC):
    """Creates, reports and downloads files on behalf of the controller"""

    @abstractmethod
    def create_screenshot_file(self) -> Path:
        pass

    @abstractmethod
    def report_screenshot(self, path: Path):
        pass

    @abstractmethod
    def download_file(self, url: str, prefix: str, extension: str) -> str:
        """Fetch `url` into a new file and return its absolute path"""
        pass


class LocalFileService(FileService):
    """Keeps screenshots and downloads in local directories"""

    def __init__(self, screenshot_dir: Union[str, Path] = "screenshots",
                 download_dir: Union[str, Path] = "downloads", timeout: float = 60.0):
        self.screenshot_dir = Path(screenshot_dir)
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self.reported: List[Path] = []
        self._counter = 0

    @classmethod
    def from_config(cls, config) -> "LocalFileService":
        return cls(screenshot_dir=config.screenshot_dir, download_dir=config.download_dir)

    def create_screenshot_file(self) -> Path:
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        self._counter += 1
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = self.screenshot_dir / f"screenshot_{timestamp}_{os.getpid()}_{self._counter:03d}.png"
        path.touch()
        return path

    def report_screenshot(self, path: Path):
        self.reported.append(Path(path))
        logger.info("Screenshot saved: %s", path)

    def download_file(self, url: str, prefix: str, extension: str) -> str:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        suffix = extension if extension.startswith(".") else f".{extension}"
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=self.download_dir)

        logger.info("Downloading %s -> %s", url, name)
        try:
            with os.fdopen(fd, "wb") as fh, requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    fh.write(chunk)
        except Exception:
            Path(name).unlink(missing_ok=True)
            raise
        return str(Path(name).resolve())
