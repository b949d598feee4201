"""ThoughtStream - personal note capture with attachment text extraction."""

__version__ = "0.1.0"
