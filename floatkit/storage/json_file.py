"""
JSON File Wrapper

Reads a .json file on construction and decodes it on demand.
"""

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Union

from floatkit.storage.file import File


class JsonFile(File):
    """
    JSON document on disk.

    The path is given WITHOUT the extension; ".json" is appended.
    """

    EXT = ".json"

    def __init__(self, path: Union[str, Path], mode: str = "r"):
        super().__init__(f"{path}{self.EXT}", mode)
        self.vars: Any = None
        self.read()

    def parse(self) -> Any:
        """Decode content into dicts/lists. Empty files decode to None."""
        self.vars = self.decode(self.content)
        return self.vars

    def parse_object(self) -> Any:
        """Decode content with attribute access on objects."""
        self.vars = self.decode(self.content, as_object=True)
        return self.vars

    @staticmethod
    def decode(text: str, as_object: bool = False) -> Any:
        if not text:
            return None
        if as_object:
            return json.loads(text, object_hook=lambda d: SimpleNamespace(**d))
        return json.loads(text)

    @staticmethod
    def encode(data: Any) -> str:
        return json.dumps(data)

    @staticmethod
    def format(data: Any) -> str:
        """Pretty-print with unicode left as is."""
        return json.dumps(data, indent=4, ensure_ascii=False)
