"""Unit tests for NotionClient."""

import json

import httpx
import pytest

from notionedit.models.block import BlockType
from notionedit.models.config import NotionConfig
from notionedit.services.exceptions import (
    NotionAPIError,
    NotionConnectionError,
    NotionResponseError,
    NotionTimeoutError,
)
from notionedit.services.notion_client import NotionClient, UnsupportedBlockError

BLOCK_ID = "9b1c2d3e-0000-4000-8000-000000000001"


def paragraph(text, block_type="paragraph"):
    return {
        "object": "block",
        "id": BLOCK_ID,
        "type": block_type,
        "last_edited_time": "2025-01-15T09:30:00.000Z",
        block_type: {"rich_text": [{"type": "text", "plain_text": text}]},
    }


class TestNotionClient:
    """Test NotionClient against httpx.MockTransport."""

    @pytest.fixture
    def notion_config(self):
        return NotionConfig(token="secret_test", api_base_url="https://api.notion.test/v1")

    @pytest.fixture
    def requests(self):
        return []

    def make_client(self, notion_config, requests, handler):
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return NotionClient(notion_config, transport=httpx.MockTransport(record))

    def test_client_initialization(self, notion_config):
        client = NotionClient(notion_config)
        assert client.base_url == "https://api.notion.test/v1"
        assert client.timeout.read == 30.0
        assert client.timeout.connect == 10.0

    @pytest.mark.asyncio
    async def test_fetch_block(self, notion_config, requests):
        client = self.make_client(notion_config, requests, lambda r: httpx.Response(200, json=paragraph("Hello")))

        block = await client.fetch_block(BLOCK_ID)

        assert block.text == "Hello"
        assert block.block_type is BlockType.PARAGRAPH
        [request] = requests
        assert request.method == "GET"
        assert request.url.path == f"/v1/blocks/{BLOCK_ID}"
        assert request.headers["Authorization"] == "Bearer secret_test"
        assert request.headers["Notion-Version"] == "2022-06-28"

    @pytest.mark.asyncio
    async def test_fetch_unsupported_block(self, notion_config, requests):
        body = {"object": "block", "id": BLOCK_ID, "type": "table", "table": {}}
        client = self.make_client(notion_config, requests, lambda r: httpx.Response(200, json=body))

        with pytest.raises(UnsupportedBlockError) as exc_info:
            await client.fetch_block(BLOCK_ID)
        assert exc_info.value.block_type == "table"

    @pytest.mark.asyncio
    async def test_update_block_sends_typed_payload(self, notion_config, requests):
        client = self.make_client(
            notion_config, requests, lambda r: httpx.Response(200, json=paragraph("Title", "heading_1"))
        )

        edited = await client.update_block(BLOCK_ID, "Title", BlockType.HEADING_1)

        [request] = requests
        assert request.method == "PATCH"
        assert json.loads(request.content) == {
            "heading_1": {"rich_text": [{"type": "text", "text": {"content": "Title"}}]}
        }
        assert edited.year == 2025

    @pytest.mark.asyncio
    async def test_api_error_carries_status_and_code(self, notion_config, requests):
        body = {"object": "error", "status": 404, "code": "object_not_found", "message": "Could not find block"}
        client = self.make_client(notion_config, requests, lambda r: httpx.Response(404, json=body))

        with pytest.raises(NotionAPIError) as exc_info:
            await client.fetch_block(BLOCK_ID)

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "object_not_found"
        assert "Could not find block" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rate_limit_reads_retry_after(self, notion_config, requests):
        body = {"object": "error", "status": 429, "code": "rate_limited", "message": "Slow down"}
        client = self.make_client(
            notion_config, requests, lambda r: httpx.Response(429, json=body, headers={"Retry-After": "3"})
        )

        with pytest.raises(NotionAPIError) as exc_info:
            await client.update_block(BLOCK_ID, "x", BlockType.PARAGRAPH)

        assert exc_info.value.retry_after == 3.0

    @pytest.mark.asyncio
    async def test_timeout(self, notion_config, requests):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = self.make_client(notion_config, requests, handler)
        with pytest.raises(NotionTimeoutError):
            await client.fetch_block(BLOCK_ID)

    @pytest.mark.asyncio
    async def test_connection_error(self, notion_config, requests):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = self.make_client(notion_config, requests, handler)
        with pytest.raises(NotionConnectionError):
            await client.fetch_block(BLOCK_ID)

    @pytest.mark.asyncio
    async def test_invalid_json(self, notion_config, requests):
        client = self.make_client(notion_config, requests, lambda r: httpx.Response(200, content=b"<html>"))
        with pytest.raises(NotionResponseError):
            await client.fetch_block(BLOCK_ID)

    @pytest.mark.asyncio
    async def test_unexpected_shape(self, notion_config, requests):
        client = self.make_client(
            notion_config, requests, lambda r: httpx.Response(200, json={"id": BLOCK_ID, "type": "paragraph"})
        )
        with pytest.raises(NotionResponseError):
            await client.fetch_block(BLOCK_ID)

    @pytest.mark.asyncio
    async def test_fetch_code_block_reports_language(self, notion_config, requests):
        body = paragraph("print(1)", "code")
        body["code"]["language"] = "python"
        client = self.make_client(notion_config, requests, lambda r: httpx.Response(200, json=body))

        block = await client.fetch_block(BLOCK_ID)

        assert block.block_type is BlockType.CODE
        assert block.code_language == "python"

    @pytest.mark.asyncio
    async def test_update_code_block_sends_language(self, notion_config, requests):
        client = self.make_client(
            notion_config, requests, lambda r: httpx.Response(200, json=paragraph("print(2)", "code"))
        )

        await client.update_block(BLOCK_ID, "print(2)", BlockType.CODE, language="python")

        assert json.loads(requests[0].content)["code"]["language"] == "python"
