"""Notion identifier helpers."""

import re

_HEX_ID = re.compile(r"[0-9a-fA-F]{32}")
_DASHED_ID = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


def normalize_block_id(raw: str) -> str:
    """
    Normalize a block id to Notion's dashed UUID form.

    Accepts:
        - "0123456789abcdef0123456789abcdef"
        - "01234567-89ab-cdef-0123-456789abcdef"
        - A Notion URL. A "#<id>" fragment (block link) wins over the page id
          at the end of the path.

    Args:
        raw: User-supplied id or URL

    Returns:
        Lowercase dashed id (8-4-4-4-12)

    Raises:
        ValueError: If no 32-hex-digit id can be found
    """
    value = raw.strip()

    if "://" in value or value.startswith("www.") or "notion.so" in value:
        path, _, fragment = value.partition("#")
        path = path.split("?", 1)[0]
        candidates = _find_ids(fragment) or _find_ids(path)
        if not candidates:
            raise ValueError(f"No block id found in URL: {raw}")
        return _dash(candidates[-1])

    if _DASHED_ID.fullmatch(value) or _HEX_ID.fullmatch(value):
        return _dash(value.replace("-", ""))

    raise ValueError(f"Invalid block id: {raw}. Expected 32 hex digits, optionally dashed, or a Notion URL")


def _find_ids(text: str) -> list[str]:
    found = [m.group(0).replace("-", "") for m in _DASHED_ID.finditer(text)]
    if found:
        return found
    return _HEX_ID.findall(text)


def _dash(hex_id: str) -> str:
    hex_id = hex_id.lower()
    return f"{hex_id[:8]}-{hex_id[8:12]}-{hex_id[12:16]}-{hex_id[16:20]}-{hex_id[20:]}"
