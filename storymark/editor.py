"""Editing session: one document, its selection, and the operations on it."""

import errno
from typing import Optional

from .codec import CorruptDocument
from .completion import (
    CompletionClient,
    CompletionController,
    CompletionState,
    CompletionStatus,
)
from .constants import EditorConstants
from .document import Document
from .formatting import toggle_bold, toggle_concept
from .model import AttributedText, Selection


class EditorSession:
    """Owns a document for the lifetime of an editing session.

    All mutations run synchronously on the caller's thread. The selection is
    re-clamped after every mutation so it always addresses valid positions.
    """

    def __init__(self, document: Optional[Document] = None,
                 completion_client: Optional[CompletionClient] = None):
        self.document = document or Document()
        self.selection = Selection()
        self._anchor = 0
        self.filename: Optional[str] = None
        self.modified = False
        self.status_message: Optional[str] = None
        self.error_message: Optional[str] = None
        self.completion: Optional[CompletionController] = None
        if completion_client is not None:
            self.completion = CompletionController(
                completion_client, listener=self._on_completion_state
            )

    @property
    def text(self) -> AttributedText:
        return self.document.content

    def _clamp_selection(self):
        self.selection = self.selection.clamped(self.text.character_count())

    # --- Selection ---

    def current_selection_range(self) -> Selection:
        """Return the selection, or a caret when nothing is selected."""
        self._clamp_selection()
        return Selection(self.selection.start, self.selection.end)

    def select(self, start: int, end: int):
        self.selection = Selection(start, end)
        self._clamp_selection()
        self._anchor = self.selection.start

    def move_caret(self, position: int):
        self.select(position, position)

    def move_left(self, extend: bool = False):
        """Move the caret one character left, or grow the selection leftwards."""
        if extend:
            self._extend(-1)
        elif not self.selection.is_caret:
            self.move_caret(self.selection.start)
        else:
            self.move_caret(self.selection.start - 1)

    def move_right(self, extend: bool = False):
        if extend:
            self._extend(1)
        elif not self.selection.is_caret:
            self.move_caret(self.selection.end)
        else:
            self.move_caret(self.selection.end + 1)

    def _extend(self, delta: int):
        """Move the free end of the selection; the anchor end stays put."""
        if self._anchor not in (self.selection.start, self.selection.end):
            self._anchor = self.selection.start
        if self.selection.start == self._anchor:
            head = self.selection.end
        else:
            head = self.selection.start
        anchor = self._anchor
        self.selection = Selection(anchor, head + delta).clamped(self.text.character_count())
        self._anchor = anchor

    # --- Editing ---

    def type_text(self, text: str):
        """Insert text at the caret, replacing any selected text."""
        if not text:
            return
        if not self.selection.is_caret:
            self.text.delete_range(self.selection.start, self.selection.end)
            self.move_caret(self.selection.start)
        position = self.selection.start
        self.text.insert(text, position)
        self.move_caret(position + len(text))
        self.modified = True

    def delete_backward(self):
        """Delete the selection, or the character before the caret."""
        if not self.selection.is_caret:
            self._delete_selection()
        elif self.selection.start > 0:
            position = self.selection.start
            self.text.delete_range(position - 1, position)
            self.move_caret(position - 1)
            self.modified = True

    def delete_forward(self):
        """Delete the selection, or the character after the caret."""
        if not self.selection.is_caret:
            self._delete_selection()
        elif self.selection.start < self.text.character_count():
            position = self.selection.start
            self.text.delete_range(position, position + 1)
            self.move_caret(position)
            self.modified = True

    def _delete_selection(self):
        start, end = self.selection.start, self.selection.end
        self.text.delete_range(start, end)
        self.selection = self.selection.after_delete(start, end)
        self._clamp_selection()
        self.modified = True

    def toggle_bold(self):
        self.selection = toggle_bold(self.text, self.current_selection_range())
        self.modified = True

    def toggle_concept(self):
        self.selection = toggle_concept(self.text, self.current_selection_range())
        self.modified = True

    # --- Completion ---

    def prompt_text(self) -> str:
        """Text from the start of the document up to the caret or selection end."""
        return self.text.text[:self.current_selection_range().end]

    def insert_completion(self, completion: str):
        """Insert completed text at the end of the current selection."""
        if not completion:
            return
        position = self.current_selection_range().end
        self.text.insert_attributed(AttributedText(completion), position)
        self.move_caret(position + len(completion))
        self.modified = True

    async def complete(self) -> bool:
        """Request a completion and insert it where the selection is when it arrives.

        Returns:
            True if text was inserted.
        """
        if self.completion is None:
            self.error_message = EditorConstants.MISSING_API_KEY_MESSAGE
            return False
        return await self.completion.request(self)

    @property
    def completion_in_flight(self) -> bool:
        return self.completion is not None and self.completion.in_flight

    def dismiss_error(self):
        self.error_message = None
        if self.completion is not None:
            self.completion.dismiss()

    def _on_completion_state(self, state: CompletionState):
        if state.status == CompletionStatus.FAILED:
            self.error_message = str(state.error) or "Completion failed"
        elif state.status == CompletionStatus.REQUESTING:
            self.error_message = None

    # --- Files ---

    def load_file(self, filename: str) -> bool:
        """Load a file into the session.

        A missing file starts a new empty document under that name. A file
        that is neither a document nor text leaves the session unchanged.

        Returns:
            True if the session now edits ``filename``.
        """
        try:
            document = Document.read(filename)
        except FileNotFoundError:
            document = Document()
        except CorruptDocument:
            self.status_message = EditorConstants.FILE_NOT_OPENED_MESSAGE
            return False
        except OSError as e:
            self.status_message = f"{EditorConstants.FILE_NOT_OPENED_MESSAGE}: {e.strerror}"
            return False
        if self.completion is not None:
            self.completion.cancel()
        self.document = document
        self.filename = filename
        self.move_caret(0)
        self.modified = False
        return True

    def save_file(self, filename: str) -> bool:
        """Save the document to a file atomically.

        Returns:
            True if save succeeded, False otherwise
        """
        try:
            self.document.write(filename)
        except PermissionError:
            self.status_message = f"Error: Permission denied saving {filename}"
            return False
        except OSError as e:
            if e.errno == errno.ENOSPC:  # No space left on device
                self.status_message = "Error: No space left on device"
            else:
                self.status_message = f"Error: Cannot save to {filename}"
            return False
        self.filename = filename
        self.modified = False
        self.status_message = f"Saved to {filename}"
        return True
