"""Tests for character classification and cursor-context detection."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from imeswitch.detector import (
    CharacterClass, LangContext, classify, detect,
    is_cjk, is_chinese_punctuation, is_ascii, is_chinese_char, is_english_char,
)


def test_is_cjk_common_hanzi():
    for ch in '你好中文':
        assert is_cjk(ch)


def test_is_cjk_extension_blocks():
    assert is_cjk('\u3400')     # Extension A
    assert is_cjk('\U00020000')       # Extension B
    assert is_cjk('\U0002A700')       # Extension C
    assert is_cjk('\uf900')     # Compatibility
    assert not is_cjk('\U0002A6E0')   # gap between B and C


def test_is_cjk_rejects_ascii_and_empty():
    for ch in 'aZ1.,':
        assert not is_cjk(ch)
    assert not is_cjk('')


def test_chinese_punctuation():
    for ch in '。，、！？《》…—“”‘’':
        assert is_chinese_punctuation(ch), ch
    assert not is_chinese_punctuation('.')
    assert not is_chinese_punctuation('!')
    assert not is_chinese_punctuation('')


def test_is_ascii_includes_space():
    assert is_ascii('a')
    assert is_ascii('9')
    assert is_ascii(' ')
    assert not is_ascii('中')
    assert not is_ascii('\x7f')


def test_english_char_excludes_whitespace():
    assert is_english_char('a')
    assert is_english_char('~')
    for ch in ' \t\n\r':
        assert not is_english_char(ch)
    assert not is_english_char('中')
    assert not is_english_char('')


def test_chinese_char():
    assert is_chinese_char('中')
    assert is_chinese_char('，')
    assert not is_chinese_char('a')


def test_classify():
    assert classify('中') is CharacterClass.CHINESE
    assert classify('。') is CharacterClass.CHINESE
    assert classify('\uff21') is CharacterClass.CHINESE  # full-width A
    assert classify('a') is CharacterClass.LATIN
    assert classify('!') is CharacterClass.LATIN
    assert classify('~') is CharacterClass.LATIN
    assert classify(' ') is CharacterClass.NEUTRAL
    assert classify('\x00') is CharacterClass.NEUTRAL
    assert classify('é') is CharacterClass.NEUTRAL
    assert classify('я') is CharacterClass.NEUTRAL
    assert classify('') is CharacterClass.NEUTRAL


def test_classify_range_edges():
    assert classify('\x20') is CharacterClass.NEUTRAL
    assert classify('\x21') is CharacterClass.LATIN
    assert classify('\x7e') is CharacterClass.LATIN
    assert classify('\x7f') is CharacterClass.NEUTRAL
    assert classify('\u4e00') is CharacterClass.CHINESE
    assert classify('\u9fff') is CharacterClass.CHINESE
    assert classify('\u3000') is CharacterClass.CHINESE
    assert classify('\u303f') is CharacterClass.CHINESE
    assert classify('\u3040') is CharacterClass.NEUTRAL
    assert classify('\u2014') is CharacterClass.CHINESE
    assert classify('\u2013') is CharacterClass.NEUTRAL


def test_detect_scenarios():
    assert detect('你', 1) is LangContext.ZH
    assert detect('hello', 3) is LangContext.EN
    assert detect('你a', 1) is LangContext.MIXED
    assert detect('', 0) is LangContext.UNKNOWN
    assert detect('你好ab', 2, look_around=2) is LangContext.MIXED
    assert detect('。', 0) is LangContext.ZH


def test_detect_line_edges():
    # start of line: only the character after the cursor
    assert detect('Hello', 0) is LangContext.EN
    # end of line: only the character before the cursor
    assert detect('你好', 2) is LangContext.ZH
    assert detect('你好', 1) is LangContext.ZH


def test_detect_window_is_asymmetric():
    # look_around=1 at column 2 inspects indices 1 and 2 only
    assert detect('a你b', 2) is LangContext.MIXED
    assert detect('ab你', 1) is LangContext.EN
    assert detect('你好ab', 2) is LangContext.MIXED
    assert detect('你好 ab', 2) is LangContext.ZH


def test_detect_neutral_only_is_unknown():
    assert detect('   ', 1) is LangContext.UNKNOWN
    assert detect('\t\t', 1) is LangContext.UNKNOWN


def test_detect_ignores_neutral_in_counts():
    assert detect('const x = 1', 5) is LangContext.EN
    assert detect('你 ', 1) is LangContext.ZH


def test_detect_out_of_range_cursor():
    assert detect('abc', 10) is LangContext.UNKNOWN
    assert detect('abc', -5) is LangContext.UNKNOWN
    # window clipped to the line
    assert detect('abc', 3) is LangContext.EN


def test_detect_zero_look_around():
    assert detect('abc', 1, look_around=0) is LangContext.UNKNOWN


def test_detect_astral_ideograph():
    assert detect('\U00020000', 1) is LangContext.ZH


def test_detect_single_character_windows():
    for cp in (0x4E00, 0x6587, 0x9FFF, 0x3400, 0xF900, 0xFF0C, 0x3002):
        assert detect(chr(cp), 0) is LangContext.ZH
        assert detect(chr(cp), 1) is LangContext.ZH
    for cp in range(0x21, 0x7F):
        assert detect(chr(cp), 0) is LangContext.EN


def test_detect_is_idempotent():
    line = '写 code 中'
    for col in range(len(line) + 1):
        first = detect(line, col, 2)
        assert detect(line, col, 2) is first
        assert detect(line, col, 2) is first
