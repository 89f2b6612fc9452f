#!/usr/bin/env python3
"""Storymark - a rich-text writing app.

Usage:
    python main.py [filename]

Controls:
    Ctrl-B: Toggle bold on the selection
    Ctrl-K: Toggle concept on the selection
    Ctrl-T: Complete the sentence at the caret
    Ctrl-S: Save file
    Ctrl-Q: Quit
    Shift-Arrow keys: Extend the selection
"""

from storymark.__main__ import main


if __name__ == "__main__":
    main()
