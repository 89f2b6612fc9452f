"""Constants and configuration for the storymark editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Document defaults
    WELCOME_MESSAGE = (
        "Welcome to Storymark!\n"
        "\n"
        "Select a word and press Ctrl-K to mark it as a concept, "
        "or Ctrl-T to let the assistant complete your sentence."
    )

    # File format
    DOCUMENT_TYPE_IDENTIFIER = "com.example.writingapp.archive"
    DOCUMENT_EXTENSION = ".story"
    JSON_INDENT = 2

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Completion
    DEFAULT_COMPLETION_MODEL = "gpt-4o"
    DEFAULT_SYSTEM_PROMPT = (
        "You are AI autocomplete text software. "
        "Help user complete their sentence in a natural way."
    )
    API_KEY_ENV_VAR = "OPENAI_API_KEY"

    # Status messages
    FILE_NOT_OPENED_MESSAGE = "File could not be opened"
    MISSING_API_KEY_MESSAGE = "Set OPENAI_API_KEY environment variable"
