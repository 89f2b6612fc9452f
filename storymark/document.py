"""The document type: attributed content plus file reading and writing."""

from __future__ import annotations

import os
import tempfile
from typing import Optional

from .codec import decode, encode
from .constants import EditorConstants
from .model import AttributedText


class Document:
    """A storymark document. Always holds content, possibly empty."""

    def __init__(self, content: Optional[AttributedText] = None):
        self.content = content if content is not None else AttributedText()

    @classmethod
    def new(cls, welcome: bool = False) -> "Document":
        if welcome:
            return cls(AttributedText(EditorConstants.WELCOME_MESSAGE))
        return cls()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Document":
        return cls(decode(data))

    def to_bytes(self) -> bytes:
        return encode(self.content)

    @classmethod
    def read(cls, filename: str) -> "Document":
        """Load a document from disk.

        Raises:
            FileNotFoundError: if the file does not exist.
            CorruptDocument: if the file is not readable as a document or text.
        """
        with open(filename, 'rb') as f:
            return cls.from_bytes(f.read())

    def write(self, filename: str) -> None:
        """Save the document atomically.

        The data goes to a temporary file in the target directory which then
        replaces the target, so a failed save leaves the old file intact.

        Raises:
            OSError: if the file could not be written.
        """
        data = self.to_bytes()
        dir_name = os.path.dirname(filename) or '.'
        suffix = os.path.splitext(filename)[1] + EditorConstants.ATOMIC_SAVE_SUFFIX
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(mode='wb', dir=dir_name,
                                             prefix=EditorConstants.ATOMIC_SAVE_PREFIX,
                                             suffix=suffix, delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())  # Ensure data is written to disk
            os.replace(temp_filename, filename)
        except OSError:
            if temp_filename and os.path.exists(temp_filename):
                try:
                    os.remove(temp_filename)
                except OSError:
                    pass
            raise
