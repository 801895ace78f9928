"""notionedit: edit a single Notion block from the terminal."""

__version__ = "0.1.0"
