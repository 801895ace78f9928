"""Shared test fixtures for all test modules."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from notionedit.models.block import BlockType, FetchedBlock


class FakeStore:
    """In-memory content store with scripted failures.

    Exceptions queued in ``fetch_errors`` / ``update_errors`` are raised by
    successive calls, one per call, before the store falls back to succeeding.
    """

    def __init__(self, blocks: Optional[Dict[str, FetchedBlock]] = None):
        self.blocks: Dict[str, FetchedBlock] = dict(blocks or {})
        self.fetch_errors: List[Exception] = []
        self.update_errors: List[Exception] = []
        self.fetch_calls: List[str] = []
        self.update_calls: List[tuple] = []
        self.update_languages: List[Optional[str]] = []

    async def fetch_block(self, block_id: str) -> FetchedBlock:
        self.fetch_calls.append(block_id)
        if self.fetch_errors:
            raise self.fetch_errors.pop(0)
        return self.blocks[block_id]

    async def update_block(
        self, block_id: str, text: str, block_type: BlockType, language: Optional[str] = None
    ) -> Optional[datetime]:
        self.update_calls.append((block_id, text, BlockType(block_type)))
        self.update_languages.append(language)
        if self.update_errors:
            raise self.update_errors.pop(0)
        edited = datetime(2025, 1, 15, 12, 0, len(self.update_calls), tzinfo=timezone.utc)
        self.blocks[block_id] = FetchedBlock(
            block_id=block_id,
            block_type=block_type,
            text=text,
            last_edited_time=edited,
            code_language=(language or "plain text") if BlockType(block_type) is BlockType.CODE else None,
        )
        return edited


def build_block(block_id: str, text: str, block_type: BlockType = BlockType.PARAGRAPH) -> FetchedBlock:
    """Build a FetchedBlock with the caller's id."""
    return FetchedBlock(
        block_id=block_id,
        block_type=block_type,
        text=text,
        last_edited_time=datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_block():
    """Factory for FetchedBlock values."""
    return build_block


@pytest.fixture
def block_id():
    return "0f1e2d3c-4b5a-6978-8796-a5b4c3d2e1f0"


@pytest.fixture
def fake_store(block_id):
    """FakeStore holding a single paragraph block."""
    return FakeStore({block_id: build_block(block_id, "Meeting notes")})
