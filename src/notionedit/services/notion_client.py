"""Async Notion client for fetching and updating a single block."""

from datetime import datetime
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError

from notionedit.models.block import (
    BlockType,
    CodeBlock,
    FetchedBlock,
    UnsupportedBlock,
    build_update_payload,
    parse_block,
)
from notionedit.models.config import NotionConfig
from notionedit.services.exceptions import (
    NotionAPIError,
    NotionConnectionError,
    NotionResponseError,
    NotionTimeoutError,
)
from notionedit.utils.logging import get_logger

logger = get_logger(__name__)


class UnsupportedBlockError(NotionAPIError):
    """The block exists but its type has no editable text body."""

    def __init__(self, block_id: str, block_type: str):
        super().__init__(
            f"Block {block_id} has type '{block_type}', which cannot be edited as text",
            status_code=None,
            code="unsupported_block_type",
        )
        self.block_id = block_id
        self.block_type = block_type


class RemoteContentStore(Protocol):
    """What the edit screen needs from a content store."""

    async def fetch_block(self, block_id: str) -> FetchedBlock:
        ...

    async def update_block(
        self, block_id: str, text: str, block_type: BlockType, language: Optional[str] = None
    ) -> Optional[datetime]:
        ...


class NotionClient:
    """
    HTTP client for the Notion blocks API.

    One request per call; retrying is the edit session's job, so this
    client only translates httpx failures into NotionError subclasses.
    """

    def __init__(self, config: NotionConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize Notion client.

        Args:
            config: Notion configuration (token, base URL, API version)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self.base_url = str(config.api_base_url).rstrip("/")
        self.timeout = httpx.Timeout(config.timeout, connect=10.0)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Notion-Version": self.config.notion_version,
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send one request and return the decoded JSON body.

        Raises:
            NotionTimeoutError: On any httpx timeout
            NotionAPIError: On a non-2xx response
            NotionConnectionError: On other transport failures
            NotionResponseError: If a 2xx body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        logger.debug("notion_request", method=method, url=url, payload=json)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=json, headers=self._headers())
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NotionTimeoutError(f"Request timeout: {e}") from e
        except httpx.HTTPStatusError as e:
            raise _api_error_from_response(e.response) from e
        except httpx.RequestError as e:
            raise NotionConnectionError(f"Network error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise NotionResponseError(f"Invalid JSON from Notion: {e}") from e
        if not isinstance(data, dict):
            raise NotionResponseError("Expected a JSON object from Notion")

        logger.debug("notion_response", method=method, url=url, status_code=response.status_code)
        return data

    async def fetch_block(self, block_id: str) -> FetchedBlock:
        """
        Fetch one block and extract its plain text.

        Args:
            block_id: Notion block id

        Returns:
            FetchedBlock with text, type and last edited time

        Raises:
            UnsupportedBlockError: If the block type has no text body
            NotionError: On network or API errors
        """
        data = await self._request("GET", f"/blocks/{block_id}")
        block = self._parse(data)
        if isinstance(block, UnsupportedBlock):
            raise UnsupportedBlockError(block.id, block.type)

        fetched = FetchedBlock(
            block_id=block.id,
            block_type=block.block_type,
            text=block.extract_text(),
            last_edited_time=block.last_edited_time,
            code_language=block.code.language if isinstance(block, CodeBlock) else None,
        )
        logger.info(
            "block_fetched",
            block_id=block_id,
            block_type=fetched.block_type.value,
            text_length=len(fetched.text),
        )
        return fetched

    async def update_block(
        self, block_id: str, text: str, block_type: BlockType, language: Optional[str] = None
    ) -> Optional[datetime]:
        """
        Replace a block's text, asserting its structural type.

        Args:
            block_id: Notion block id
            text: New plain text
            block_type: Type the block should have after the update
            language: Language for a code block (None keeps the default)

        Returns:
            The block's new last_edited_time (None if the API omitted it)

        Raises:
            NotionError: On network or API errors
        """
        payload = build_update_payload(block_type, text, language)
        data = await self._request("PATCH", f"/blocks/{block_id}", json=payload)
        block = self._parse(data)
        logger.info(
            "block_updated",
            block_id=block_id,
            block_type=BlockType(block_type).value,
            text_length=len(text),
        )
        return block.last_edited_time

    def _parse(self, data: Dict[str, Any]):
        try:
            return parse_block(data)
        except ValidationError as e:
            raise NotionResponseError(f"Unexpected block shape: {e}") from e


def _api_error_from_response(response: httpx.Response) -> NotionAPIError:
    """Build a NotionAPIError from an error response.

    Notion error bodies look like:
    {"object": "error", "status": 404, "code": "object_not_found", "message": "..."}
    """
    code = None
    message = response.text
    try:
        body = response.json()
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or message
    except ValueError:
        pass

    retry_after = None
    if header := response.headers.get("Retry-After"):
        try:
            retry_after = float(header)
        except ValueError:
            retry_after = None

    return NotionAPIError(
        f"API error: {response.status_code} - {message}",
        status_code=response.status_code,
        code=code,
        retry_after=retry_after,
    )
