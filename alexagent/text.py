"""Tokenisation, compression and matching helpers for mixed English/Chinese text."""

from __future__ import annotations

from dataclasses import dataclass, field

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63

STOP_WORDS = frozenset(
    {
        # English
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has",
        "he", "in", "is", "it", "its", "of", "on", "that", "the", "to", "was",
        "were", "will", "with",
        # Chinese
        "这", "是", "的", "了", "和", "在", "有", "一", "个", "中",
    }
)


@dataclass
class TokenizeResult:
    """Words kept by the tokenizer and the number of stop words it removed."""

    words: list[str] = field(default_factory=list)
    stop_words: int = 0


def _to_int64(value: int) -> int:
    """Wrap an integer to a signed 64-bit value."""
    value &= _INT64_MASK
    return value - (1 << 64) if value >= _INT64_SIGN else value


def _is_word_char(char: str) -> bool:
    return "a" <= char <= "z" or "0" <= char <= "9" or char == "_"


def _is_cjk(char: str) -> bool:
    return 0x4E00 <= ord(char) <= 0x9FFF


def tokenize(text: str) -> TokenizeResult:
    """Split text into lower-case words and single CJK characters, dropping stop words."""
    text = text.strip().lower()
    result = TokenizeResult()
    if not text:
        return result

    current: list[str] = []

    def flush() -> None:
        if not current:
            return
        word = "".join(current)
        current.clear()
        if word in STOP_WORDS:
            result.stop_words += 1
        elif len(word) > 1:
            result.words.append(word)

    for char in text:
        if _is_word_char(char):
            current.append(char)
        elif _is_cjk(char):
            flush()
            if char in STOP_WORDS:
                result.stop_words += 1
            else:
                result.words.append(char)
        else:
            flush()
    flush()
    return result


def compress_text(text: str, ratio: float) -> str:
    """Keep the leading fraction of the words of ``text``.

    The text is returned unchanged when the ratio is outside (0, 1) or when
    fewer than five words would remain.
    """
    if ratio <= 0 or ratio >= 1:
        return text
    words = text.split()
    if not words:
        return text
    target = int(len(words) * ratio)
    if target >= len(words) or target < 5:
        return text
    return " ".join(words[:target])


def calculate_text_match(query: str, content: str) -> float:
    """Score how well ``query`` matches ``content`` in the range [0, 1]."""
    query = query.lower()
    content = content.lower()
    if query in content:
        return 1.0

    query_words = tokenize(query).words
    if not query_words:
        return 0.0
    content_words = set(tokenize(content).words)
    matches = sum(1 for word in query_words if word in content_words)
    return matches / len(query_words)


def hash_string(s: str) -> int:
    """Polynomial (base 31) string hash on 64-bit signed arithmetic, made non-negative."""
    value = 0
    for char in s:
        value = _to_int64(value * 31 + ord(char))
    if value < 0:
        value = _to_int64(-value)
    return value