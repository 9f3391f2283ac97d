"""Magic Writer: an AI-assisted rich-text writing editor."""

__version__ = "0.1.0"
