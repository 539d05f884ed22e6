from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

from .models import Token, TokenKind

# ECMAScript's whitespace set: unlike str.isspace, it excludes the
# U+001C..U+001F separators and U+0085, and includes the BOM (U+FEFF).
WHITESPACE_CLASS = (
    r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)
SEGMENT_PATTERN = re.compile(
    f"(?P<space>[{WHITESPACE_CLASS}]+)|(?P<word>[^{WHITESPACE_CLASS}]+)"
)


def tokenize(text: str) -> List[Token]:
    """Split text into alternating word and whitespace tokens.

    Whitespace runs are kept as separator tokens, so joining every token's
    text gives back the input unchanged. Whitespace follows the browser
    definition (``WHITESPACE_CLASS``) rather than ``str.isspace`` so scripts
    saved by the web app split into the same words here.
    """
    tokens: List[Token] = []
    for index, match in enumerate(SEGMENT_PATTERN.finditer(text)):
        kind = TokenKind.SEPARATOR if match.lastgroup == "space" else TokenKind.WORD
        tokens.append(Token(index=index, kind=kind, text=match.group()))
    return tokens


def detokenize(tokens: List[Token]) -> str:
    """Rebuild the original text from a token sequence."""
    return "".join(token.text for token in tokens)


@dataclass(frozen=True, slots=True)
class TokenizedScript:
    """Immutable token sequence plus the word index derived from it."""

    text: str
    tokens: tuple[Token, ...]
    word_indices: tuple[int, ...]
    _rank_by_index: Dict[int, int] = field(repr=False, compare=False)

    @classmethod
    def from_text(cls, text: str) -> "TokenizedScript":
        tokens = tuple(tokenize(text))
        word_indices = tuple(token.index for token in tokens if token.is_word)
        rank_by_index = {index: rank for rank, index in enumerate(word_indices)}
        return cls(
            text=text,
            tokens=tokens,
            word_indices=word_indices,
            _rank_by_index=rank_by_index,
        )

    @property
    def total_words(self) -> int:
        return len(self.word_indices)

    @property
    def words(self) -> List[str]:
        return [self.tokens[index].text for index in self.word_indices]

    def word_rank(self, token_index: int) -> int | None:
        """Return the rank of the word at ``token_index`` (None for separators)."""
        return self._rank_by_index.get(token_index)

    def word_at(self, rank: int) -> Token | None:
        if 0 <= rank < len(self.word_indices):
            return self.tokens[self.word_indices[rank]]
        return None
