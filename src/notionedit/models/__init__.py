"""Pydantic data models for notionedit."""
