"""
File Wrapper

A thin object around one existing file on disk.

The file must exist and be readable when the object is created;
otherwise FileError is raised with a short reason code.
"""

import os
from pathlib import Path
from typing import IO, Optional, Union


class FileError(Exception):
    """File missing or unusable."""

    def __init__(self, reason: str, path: Union[str, Path]):
        self.reason = reason
        self.path = str(path)
        super().__init__(f"File {reason}: {self.path}")


class File:
    """
    Existing file read in a given mode.

    The handle is opened on the first read() and stays open until
    close(); write() and add_string() open the path themselves.

    Attributes mirror the path parts:
    - path: path as given
    - parent: containing directory
    - root: resolved absolute path
    - ext: extension without the dot
    - name: path without the extension
    """

    def __init__(self, path: Union[str, Path], mode: str = "r"):
        self.path = str(path)
        self.mode = mode
        self.parent = os.path.dirname(self.path)
        self.root = os.path.realpath(self.path)
        self.ext = Path(self.path).suffix.lstrip(".")
        self.name = self.path[: -(len(self.ext) + 1)] if self.ext else self.path
        self.content = ""
        self._handler: Optional[IO] = None

        self.is_ready()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def is_ready(self) -> bool:
        if not self.exists():
            raise FileError("notfound", self.path)
        if not self.readable():
            raise FileError("unreadable", self.path)
        return True

    def open(self) -> None:
        """Open the handle in `mode` unless it is already open."""
        if self._handler is None and self.exists():
            self._handler = open(self.path, self.mode, encoding="utf-8")

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def readable(self) -> bool:
        return os.access(self.path, os.R_OK)

    def is_empty(self) -> bool:
        return self.exists() and os.path.getsize(self.path) == 0

    def read(self) -> str:
        """Read the whole file through the handle into `content` and return it."""
        if self.exists() and not self.is_empty():
            self.open()
            self._handler.seek(0)
            self.content = self._handler.read()
        return self.content

    def write(self, text: str) -> None:
        """Replace the file contents."""
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write(text)

    def add_string(self, text: str) -> None:
        with open(self.path, "a", encoding="utf-8") as fh:
            fh.write(text)

    def add_space(self) -> None:
        self.add_string(os.linesep)

    def close(self) -> None:
        if self._handler is not None:
            self._handler.close()
            self._handler = None

    def delete(self) -> bool:
        """Close and remove the file. Returns True once it is gone."""
        self.close()
        os.remove(self.path)
        return not self.exists()
