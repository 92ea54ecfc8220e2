"""
Optional morphological tokenizer.

Used only as a secondary ranking signal. Having no tokenizer is a valid
configuration: ranking then skips the morpheme-count criterion.
"""

import logging
from typing import List, Optional, Protocol

from yomikata.settings import TOKENIZER_ENABLED, TOKENIZER_SPLIT_MODE

logger = logging.getLogger(__name__)


class Tokenizer(Protocol):
    def tokenize(self, text: str) -> List[str]:
        ...


class SudachiTokenizer:
    """Tokenizer backed by SudachiPy."""

    def __init__(self, mode: str = "C"):
        from sudachipy import Dictionary, SplitMode

        self.tokenizer = Dictionary().create()
        # Mode A: Shortest, Mode C: Longest (食べ物 stays one morpheme)
        if mode == "A":
            self.mode = SplitMode.A
        elif mode == "B":
            self.mode = SplitMode.B
        else:
            self.mode = SplitMode.C

    def tokenize(self, text: str) -> List[str]:
        if not text:
            return []
        return [m.surface() for m in self.tokenizer.tokenize(text, self.mode) if m.surface().strip()]


def load_tokenizer(enabled: Optional[bool] = None) -> Optional[Tokenizer]:
    """
    Construct the tokenizer once at startup, honouring the feature toggle.

    Args:
        enabled: Overrides YOMIKATA_TOKENIZER when given.

    Returns:
        A Tokenizer, or None if the feature is off.
    """
    if enabled is None:
        enabled = TOKENIZER_ENABLED
    if not enabled:
        return None
    logger.info(f"Loading Sudachi tokenizer (mode {TOKENIZER_SPLIT_MODE})")
    return SudachiTokenizer(TOKENIZER_SPLIT_MODE)
