"""Textual user interface for notionedit."""
