"""Remote Notion block models.

A block fetched from Notion is parsed into one of a closed set of text
block variants, discriminated on its ``type`` field. Every variant stores
its body under a key named after the type (``paragraph``, ``heading_1``,
...), mirroring the Notion JSON, and supports the same two operations:

- ``extract_text()``: concatenated plain text of the rich-text spans
- ``build_update_payload(block_type, text)``: PATCH body asserting a type

Blocks of any other type are parsed into ``UnsupportedBlock`` so callers
can report them instead of silently editing an empty string.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

# Notion rejects text.content longer than this
MAX_TEXT_CONTENT_LENGTH = 2000


class BlockType(str, Enum):
    """Structural types that can be edited as plain text."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CODE = "code"
    QUOTE = "quote"
    CALLOUT = "callout"

    @property
    def label(self) -> str:
        """Human-readable name used in the status bar."""
        return _LABELS[self]


_LABELS = {
    BlockType.PARAGRAPH: "Paragraph",
    BlockType.HEADING_1: "Heading 1",
    BlockType.HEADING_2: "Heading 2",
    BlockType.HEADING_3: "Heading 3",
    BlockType.BULLETED_LIST_ITEM: "Bulleted list",
    BlockType.NUMBERED_LIST_ITEM: "Numbered list",
    BlockType.TO_DO: "To-do",
    BlockType.TOGGLE: "Toggle",
    BlockType.CODE: "Code",
    BlockType.QUOTE: "Quote",
    BlockType.CALLOUT: "Callout",
}


class RichTextSpan(BaseModel):
    """One rich-text object; only the plain text matters for editing."""

    plain_text: str = ""

    model_config = {"extra": "ignore"}


class TextBody(BaseModel):
    """Body shared by every text block type."""

    rich_text: List[RichTextSpan] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ToDoBody(TextBody):
    checked: bool = False


class CodeBody(TextBody):
    language: str = "plain text"


class _TextBlock(BaseModel):
    """Fields common to all supported block variants."""

    id: str
    last_edited_time: Optional[datetime] = None
    has_children: bool = False
    archived: bool = False

    model_config = {"extra": "ignore"}

    @property
    def block_type(self) -> BlockType:
        return BlockType(self.type)

    def body(self) -> TextBody:
        return getattr(self, self.type)

    def extract_text(self) -> str:
        """Return the block's plain text (rich-text formatting is dropped)."""
        return "".join(span.plain_text for span in self.body().rich_text)


class ParagraphBlock(_TextBlock):
    type: Literal["paragraph"]
    paragraph: TextBody


class Heading1Block(_TextBlock):
    type: Literal["heading_1"]
    heading_1: TextBody


class Heading2Block(_TextBlock):
    type: Literal["heading_2"]
    heading_2: TextBody


class Heading3Block(_TextBlock):
    type: Literal["heading_3"]
    heading_3: TextBody


class BulletedListItemBlock(_TextBlock):
    type: Literal["bulleted_list_item"]
    bulleted_list_item: TextBody


class NumberedListItemBlock(_TextBlock):
    type: Literal["numbered_list_item"]
    numbered_list_item: TextBody


class ToDoBlock(_TextBlock):
    type: Literal["to_do"]
    to_do: ToDoBody


class ToggleBlock(_TextBlock):
    type: Literal["toggle"]
    toggle: TextBody


class CodeBlock(_TextBlock):
    type: Literal["code"]
    code: CodeBody


class QuoteBlock(_TextBlock):
    type: Literal["quote"]
    quote: TextBody


class CalloutBlock(_TextBlock):
    type: Literal["callout"]
    callout: TextBody


RemoteBlock = Annotated[
    Union[
        ParagraphBlock,
        Heading1Block,
        Heading2Block,
        Heading3Block,
        BulletedListItemBlock,
        NumberedListItemBlock,
        ToDoBlock,
        ToggleBlock,
        CodeBlock,
        QuoteBlock,
        CalloutBlock,
    ],
    Field(discriminator="type"),
]

_remote_block_adapter = TypeAdapter(RemoteBlock)


class UnsupportedBlock(BaseModel):
    """A block whose type has no plain-text body (image, table, ...)."""

    id: str
    type: str
    last_edited_time: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class FetchedBlock(BaseModel):
    """Result of fetching one block from the content store."""

    block_id: str = Field(..., description="Block identifier as returned by the API")
    block_type: BlockType = Field(..., description="Structural type of the block")
    text: str = Field(..., description="Plain text extracted from the block")
    last_edited_time: Optional[datetime] = Field(
        default=None,
        description="Remote last_edited_time, if the API returned one"
    )
    code_language: Optional[str] = Field(
        default=None,
        description="Language of a code block (None for other types)"
    )

    model_config = {"frozen": True}


def parse_block(data: Dict[str, Any]) -> Union[RemoteBlock, UnsupportedBlock]:
    """Parse a Notion block JSON object into its variant.

    Args:
        data: Decoded JSON of a block object

    Returns:
        The matching text block variant, or UnsupportedBlock

    Raises:
        pydantic.ValidationError: If a supported block is malformed
    """
    block_type = data.get("type")
    if block_type not in {t.value for t in BlockType}:
        return UnsupportedBlock(**data)
    return _remote_block_adapter.validate_python(data)


def split_text(text: str, limit: int = MAX_TEXT_CONTENT_LENGTH) -> List[str]:
    """Split text into chunks no longer than the API's text.content limit."""
    if not text:
        return []
    return [text[i:i + limit] for i in range(0, len(text), limit)]


def build_update_payload(block_type: BlockType, text: str, language: Optional[str] = None) -> Dict[str, Any]:
    """Build the PATCH /blocks/{id} body that sets ``text`` on ``block_type``.

    Args:
        block_type: Structural type the saved block should have
        text: Plain text content (may be empty)
        language: Code language to keep; code blocks default to "plain text"

    Returns:
        JSON-serialisable request body
    """
    block_type = BlockType(block_type)
    rich_text = [
        {"type": "text", "text": {"content": chunk}}
        for chunk in split_text(text)
    ]
    body: Dict[str, Any] = {"rich_text": rich_text}
    if block_type is BlockType.CODE:
        body["language"] = language or "plain text"
    return {block_type.value: body}
