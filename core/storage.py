# core/storage.py
import itertools
import os
import re
import threading
import time
from dataclasses import dataclass

from core.config import UPLOAD_DIR, UPLOAD_URL_PREFIX


@dataclass(frozen=True)
class UploadedFile:
    """A file submitted with a form. Zero bytes means the slot was left empty."""

    filename: str
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)


def is_empty_upload(file) -> bool:
    return file is None or file.size == 0


def safe_filename(filename: str) -> str:
    name = os.path.basename(filename or "").strip()
    return re.sub(r"\s+", "-", name) or "image"


class LocalImageStorage:
    """Stores uploaded images under a local directory served at `url_prefix`."""

    def __init__(self, upload_dir: str = UPLOAD_DIR, url_prefix: str = UPLOAD_URL_PREFIX):
        self.upload_dir = upload_dir
        self.url_prefix = "/" + url_prefix.strip("/")
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def _next_name(self, filename: str) -> str:
        with self._lock:
            seq = next(self._counter)
        return f"{int(time.time() * 1000)}-{seq}-{safe_filename(filename)}"

    def path_for(self, url: str):
        """Filesystem path for a URL produced by store(), or None for foreign URLs."""
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        name = os.path.basename(url[len(self.url_prefix) + 1:])
        if not name:
            return None
        return os.path.join(self.upload_dir, name)

    def store(self, file: UploadedFile) -> str:
        if is_empty_upload(file):
            raise ValueError("Empty image file.")

        os.makedirs(self.upload_dir, exist_ok=True)
        file_name = self._next_name(file.filename)
        with open(os.path.join(self.upload_dir, file_name), "wb") as fh:
            fh.write(file.content)
        return f"{self.url_prefix}/{file_name}"

    def delete(self, url: str):
        path = self.path_for(url)
        if path is None:
            return
        try:
            os.remove(path)
        except FileNotFoundError:
            # already gone
            pass
