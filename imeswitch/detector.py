"""Character classification and cursor-context language detection.

Pure functions only. Everything here is total: any string in, a verdict out.
"""
from enum import Enum


class CharacterClass(Enum):
    CHINESE = "chinese"
    LATIN = "latin"
    NEUTRAL = "neutral"


class LangContext(Enum):
    """Language verdict for the text around the cursor.

    Values double as the arguments passed to the switch helper.
    """
    ZH = "zh"
    EN = "en"
    MIXED = "mixed"
    UNKNOWN = "unknown"


# Ideograph blocks (inclusive ranges)
_CJK_RANGES = (
    (0x4E00, 0x9FFF),    # CJK Unified Ideographs
    (0x3400, 0x4DBF),    # Extension A
    (0x20000, 0x2A6DF),  # Extension B
    (0x2A700, 0x2CEAF),  # Extensions C/D/E
    (0xF900, 0xFAFF),    # Compatibility Ideographs
)

_CJK_PUNCT_RANGES = (
    (0x3000, 0x303F),  # CJK Symbols and Punctuation
    (0xFF00, 0xFFEF),  # Halfwidth and Fullwidth Forms
)

# “ ” ‘ ’ … —
_CJK_PUNCT_POINTS = frozenset({0x201C, 0x201D, 0x2018, 0x2019, 0x2026, 0x2014})

_WHITESPACE = frozenset(' \t\n\r')


def _code_point(ch: str):
    if not ch:
        return None
    return ord(ch[0])


def is_cjk(ch: str) -> bool:
    cp = _code_point(ch)
    if cp is None:
        return False
    return any(lo <= cp <= hi for lo, hi in _CJK_RANGES)


def is_chinese_punctuation(ch: str) -> bool:
    """Full-width and CJK punctuation (。，、《》！？ and the curly quotes)."""
    cp = _code_point(ch)
    if cp is None:
        return False
    if cp in _CJK_PUNCT_POINTS:
        return True
    return any(lo <= cp <= hi for lo, hi in _CJK_PUNCT_RANGES)


def is_ascii(ch: str) -> bool:
    """Printable ASCII, space included."""
    cp = _code_point(ch)
    return cp is not None and 0x20 <= cp <= 0x7E


def is_chinese_char(ch: str) -> bool:
    return is_cjk(ch) or is_chinese_punctuation(ch)


def is_english_char(ch: str) -> bool:
    # Whitespace is neutral, not English
    return is_ascii(ch) and ch[0] not in _WHITESPACE


def classify(ch: str) -> CharacterClass:
    """Map a single character to its class. Empty input is NEUTRAL."""
    if is_chinese_char(ch):
        return CharacterClass.CHINESE
    if is_english_char(ch):
        return CharacterClass.LATIN
    return CharacterClass.NEUTRAL


def detect(line_text: str, cursor_column: int, look_around: int = 1) -> LangContext:
    """Detect the language context around a cursor.

    The window is ``look_around`` characters before the cursor and
    ``look_around`` characters from the cursor onwards, clipped to the line.
    Neutral characters (whitespace, other scripts) are not counted.

    Args:
        line_text: Full text of the line holding the cursor.
        cursor_column: Cursor offset within the line, in characters.
        look_around: Characters to inspect on each side of the cursor.

    Returns:
        ZH or EN when only one script is present, MIXED when both are,
        UNKNOWN for an empty or all-neutral window.
    """
    start = max(cursor_column - look_around, 0)
    end = min(cursor_column + look_around, len(line_text))

    zh_count = 0
    en_count = 0
    for ch in line_text[start:end] if start < end else ():
        cls = classify(ch)
        if cls is CharacterClass.CHINESE:
            zh_count += 1
        elif cls is CharacterClass.LATIN:
            en_count += 1

    if zh_count and en_count:
        return LangContext.MIXED
    if zh_count:
        return LangContext.ZH
    if en_count:
        return LangContext.EN
    return LangContext.UNKNOWN
