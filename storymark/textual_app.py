"""Textual front end for an editing session."""

from typing import Optional

from rich.style import Style
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from .attributes import AttributeKey
from .completion import CompletionClient
from .document import Document
from .editor import EditorSession
from .formatting import styled_segments
from .model import AttributedText, Selection


def rich_style(attributes: dict) -> Style:
    """Translate effective attributes into a Rich style."""
    font = attributes.get(AttributeKey.FONT)
    color = attributes.get(AttributeKey.FOREGROUND_COLOR)
    return Style(
        bold=True if font is not None and font.is_bold else None,
        color=color.hex if color is not None else None,
    )


def build_rich_text(text: AttributedText, selection: Optional[Selection] = None) -> Text:
    """Build the displayed text, marking the selection or caret."""
    result = Text()
    for characters, attributes in styled_segments(text):
        result.append(characters, style=rich_style(attributes))
    if selection is None:
        return result
    if not selection.is_caret:
        result.stylize("reverse", selection.start, selection.end)
    elif selection.start < len(text) and text.text[selection.start] != "\n":
        result.stylize("reverse", selection.start, selection.start + 1)
    else:
        # Caret at a line end: show it on a blank cell
        result = result[:selection.start] + Text(" ", style="reverse") + result[selection.start:]
    return result


class DocumentView(Static):
    """Displays the session's document."""

    def show(self, session: EditorSession) -> None:
        self.update(build_rich_text(session.text, session.current_selection_range()))


class StorymarkApp(App):
    """Textual app editing one document."""

    CSS = """
    DocumentView {
        background: $surface;
        padding: 1 4;
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+b", "toggle_bold", "Bold", priority=True),
        Binding("ctrl+k", "toggle_concept", "Concept", priority=True),
        Binding("ctrl+t", "complete", "Complete", priority=True),
        Binding("escape", "dismiss_error", "Dismiss", show=False),
    ]

    def __init__(self, filename: Optional[str] = None,
                 completion_client: Optional[CompletionClient] = None,
                 welcome: bool = True):
        super().__init__()
        self.filename = filename
        self.session = EditorSession(
            Document.new(welcome=welcome and filename is None),
            completion_client=completion_client,
        )
        self.document_view: Optional[DocumentView] = None

    def compose(self) -> ComposeResult:
        yield Header()
        self.document_view = DocumentView()
        yield self.document_view
        yield Footer()

    def on_mount(self) -> None:
        if self.filename:
            if self.session.load_file(self.filename):
                self.sub_title = f"Editing: {self.filename}"
            else:
                self.notify(self.session.status_message, severity="error")
        self.refresh_document()

    def refresh_document(self) -> None:
        if self.document_view is not None:
            self.document_view.show(self.session)

    def on_key(self, event) -> None:
        key = event.key
        handled = True
        if key == "backspace":
            self.session.delete_backward()
        elif key == "delete":
            self.session.delete_forward()
        elif key == "left":
            self.session.move_left()
        elif key == "right":
            self.session.move_right()
        elif key == "shift+left":
            self.session.move_left(extend=True)
        elif key == "shift+right":
            self.session.move_right(extend=True)
        elif key == "home":
            self.session.move_caret(0)
        elif key == "end":
            self.session.move_caret(self.session.text.character_count())
        elif key == "enter":
            self.session.type_text("\n")
        elif event.is_printable and event.character:
            self.session.type_text(event.character)
        else:
            handled = False
        if handled:
            event.stop()
            self.refresh_document()

    def action_toggle_bold(self) -> None:
        self.session.toggle_bold()
        self.refresh_document()

    def action_toggle_concept(self) -> None:
        self.session.toggle_concept()
        self.refresh_document()

    def action_complete(self) -> None:
        if self.session.completion_in_flight:
            self.notify("A completion is already running", severity="warning")
            return
        self.run_worker(self._complete(), exclusive=False)

    async def _complete(self) -> None:
        self.sub_title = "Completing..."
        try:
            await self.session.complete()
        finally:
            self.sub_title = f"Editing: {self.filename}" if self.filename else ""
        if self.session.error_message:
            self.notify(self.session.error_message, title="Error", severity="error")
        self.refresh_document()

    def action_dismiss_error(self) -> None:
        self.session.dismiss_error()

    def action_save(self) -> None:
        if not self.filename:
            self.notify("No filename set", severity="warning")
            return
        if self.session.save_file(self.filename):
            self.notify(self.session.status_message)
        else:
            self.notify(self.session.status_message, severity="error")
