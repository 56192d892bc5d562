import io

from cc_switch.layout import (
    ASCII_BOX,
    Alignment,
    BoxDrawer,
    TerminalCaps,
    bordered_line,
    detect_terminal_caps,
    display_width,
    format_profile_details,
    format_token,
    optimal_box_width,
    pad_to_width,
    truncate_to_width,
)
from cc_switch.profiles import Profile


def test_display_width_counts_wide_characters():
    assert display_width("abc") == 3
    assert display_width("你好") == 4
    assert display_width("こんにちは") == 10
    assert display_width("カタカナ") == 8
    assert display_width("한글") == 4
    assert display_width("ＡＢ") == 4
    assert display_width("→") == 1
    assert display_width("") == 0


def test_pad_to_width_alignments():
    assert pad_to_width("ab", 5) == "ab   "
    assert pad_to_width("ab", 5, Alignment.RIGHT) == "   ab"
    # odd remainder goes to the right
    assert pad_to_width("ab", 5, Alignment.CENTER) == " ab  "
    assert pad_to_width("ab", 6, Alignment.CENTER, "=") == "==ab=="
    assert pad_to_width("toolong", 3) == "toolong"
    assert pad_to_width("你", 4) == "你  "


def test_bordered_line_matches_expected_shapes():
    assert bordered_line("Test", 10, Alignment.LEFT) == "║ Test   ║"
    assert bordered_line("Test", 10, Alignment.CENTER) == "║  Test  ║"
    assert bordered_line("Test", 10, Alignment.RIGHT) == "║   Test ║"
    assert bordered_line("你好", 10, Alignment.LEFT) == "║ 你好   ║"


def test_bordered_line_too_narrow_returns_content():
    assert bordered_line("Test", 3) == "Test"


def test_bordered_line_truncates_by_display_width():
    line = bordered_line("你好世界", 8)
    assert line == "║ 你好 ║"
    # a wide character that does not fit leaves a padded gap
    line = bordered_line("你好世界", 7)
    assert line == "║ 你  ║"
    assert display_width(line) == 7


def test_truncate_to_width():
    assert truncate_to_width("abcdef", 3) == "abc"
    assert truncate_to_width("你好", 3) == "你"
    assert truncate_to_width("ab", 10) == "ab"


def test_box_drawer_unicode_and_ascii():
    box = BoxDrawer(TerminalCaps(unicode=True, width=120))
    assert box.top(20, "Hi") == "╔" + "═" * 7 + " Hi " + "═" * 7 + "╗"
    assert box.bottom(6) == "╚════╝"
    # a title that does not fit yields a plain border
    assert box.top(6, "A very long title") == "╔════╗"

    ascii_box = BoxDrawer(TerminalCaps(unicode=False, width=120))
    assert ascii_box.style is ASCII_BOX
    assert ascii_box.top(8) == "+------+"
    assert ascii_box.bottom(8) == "+------+"
    assert ascii_box.line("x", 6) == "| x  |"


def test_detect_terminal_caps_from_environment():
    stream = io.StringIO()
    assert detect_terminal_caps({"TERM": "xterm-256color"}, stream).unicode
    assert detect_terminal_caps({"TERM": "tmux-256color"}, stream).unicode
    assert detect_terminal_caps({"LANG": "en_US.UTF-8"}, stream).unicode
    assert not detect_terminal_caps({"TERM": "dumb"}, stream).unicode
    assert not detect_terminal_caps({"LANG": "C"}, stream).unicode
    assert not detect_terminal_caps(
        {"TERM": "xterm", "CC_SWITCH_ASCII": "1"}, stream
    ).unicode
    caps = detect_terminal_caps({}, stream)
    assert caps.unicode
    # StringIO is not a TTY
    assert caps.color is False


def test_optimal_box_width_clamps():
    assert optimal_box_width(40, 80, 60, 200) == 60
    assert optimal_box_width(40, 80, 30, 200) == 40
    assert optimal_box_width(40, 80, 100, 200) == 80
    assert optimal_box_width(40, 80, 60, 50) == 46


def test_format_token():
    assert format_token("abc") == "ab***"
    assert format_token("abcdef") == "abc***"
    assert format_token("abcdefgh") == "abcd***"
    token = "sk-ant-REDACTED"
    assert format_token(token) == "sk-ant-api03...stuvwxyz"


def test_format_profile_details_aligns_labels():
    p = Profile("work", "abcdefgh", "https://api.example.com", model="m1")
    lines = format_profile_details(p, indent="  ")
    assert lines == [
        "  Token: abcd***",
        "  URL:   https://api.example.com",
        "  Model: m1",
    ]


def test_format_profile_details_skips_blank_strings():
    p = Profile("work", "tok", "u", model="  ", api_timeout_ms=0)
    text = "\n".join(format_profile_details(p))
    assert "Model" not in text
    assert "API Timeout (ms): 0" in text
