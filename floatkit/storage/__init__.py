"""
Storage Package

File and JSON-file wrappers.
"""

from floatkit.storage.file import File, FileError
from floatkit.storage.json_file import JsonFile

__all__ = [
    "File",
    "FileError",
    "JsonFile",
]
