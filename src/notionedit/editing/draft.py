"""Draft buffer: the in-progress text of the block being edited."""


class Draft:
    """Editable text plus the baseline it is compared against.

    The draft is dirty exactly when its text differs from the baseline,
    so typing a change and then undoing it leaves the draft clean.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._baseline = text

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text

    def reset(self, text: str) -> None:
        """Replace both text and baseline (fresh content from the store)."""
        self._text = text
        self._baseline = text

    @property
    def baseline(self) -> str:
        return self._baseline

    def is_dirty(self) -> bool:
        return self._text != self._baseline

    def mark_clean(self) -> None:
        """Adopt the current text as the baseline. Idempotent."""
        self._baseline = self._text
