import os
from dataclasses import dataclass

import pytest
from wcwidth import wcswidth

from promptline.powerline import (
    ELLIPSIS,
    MAX_INTEGER,
    Alignment,
    Powerline,
    Segment,
    ShellInfo,
    term_width,
    truncate_text,
)
from promptline.themes import Symbols, Theme


@dataclass
class _Args:
    condensed: bool = False
    max_width_percentage: int = 0
    truncate_segment_width: int = 16
    east_asian_width: bool = False
    eval: bool = False
    prompt_on_new_line: bool = False
    prev_error: int = 0
    ignore_repos: str = ""
    path_aliases: str = ""


SYMBOLS = Symbols(separator=">", separator_thin="|", separator_reverse="<", separator_reverse_thin="!")
PLAIN = ShellInfo(root_indicator="$", color_template="%s")
SPLIT = ShellInfo(
    root_indicator="%",
    color_template="%s",
    eval_prompt_prefix="PS1=",
    eval_prompt_suffix=";",
    eval_prompt_right_prefix="RPS1=",
    eval_prompt_right_suffix=";",
)


def make(args=None, *, align=Alignment.LEFT, shell=PLAIN, theme=None, priorities=None):
    return Powerline(args or _Args(), "/tmp", priorities or {}, align, theme or Theme(), shell, SYMBOLS)


@pytest.fixture
def columns(monkeypatch):
    def _no_terminal(*_a, **_k):
        raise OSError("not a terminal")

    monkeypatch.setattr(os, "get_terminal_size", _no_terminal)

    def _set(value):
        monkeypatch.setenv("COLUMNS", str(value))

    return _set


def test_compute_width_condensed_invariant():
    seg = Segment(content="abc", separator=">")
    assert seg.compute_width(False) == seg.compute_width(True) + 2
    assert Segment(content="ab").compute_width(True) == 2


def test_compute_width_wide_chars():
    assert Segment(content="日").compute_width(True) == wcswidth("日")


def test_reset_and_colors():
    p = make()
    assert p.reset == "[0m"
    assert p.fg_color(7) == "[38;5;7m"
    assert p.bg_color(7) == "[48;5;7m"
    assert p.color("38", p.theme.reset) == p.reset


def test_template_applied_to_colors():
    p = make(shell=ShellInfo(color_template="<%s>"))
    assert p.reset == "<[0m>"
    assert p.fg_color(3) == "<" + make().fg_color(3) + ">"


def test_append_segment_fills_defaults():
    p = make(priorities={"cwd": 5})
    original = Segment(content="x", foreground=1, background=2, priority=1)
    p.append_segment("cwd", original)
    seg = p.segments[0][0]
    assert seg.separator == SYMBOLS.separator
    assert seg.separator_foreground == 2
    assert seg.priority == 6
    assert seg.width == seg.compute_width(False)
    assert original.priority == 1


def test_right_prompt_uses_reverse_separator():
    p = make(align=Alignment.RIGHT, shell=SPLIT)
    assert p.is_right_prompt()
    p.append_segment("x", Segment(content="r", background=4))
    assert p.segments[0][0].separator == SYMBOLS.separator_reverse


def test_new_row():
    p = make()
    p.new_row()
    p.append_segment("a", Segment(content="a"))
    assert p.cur_segment == 1
    assert [len(row) for row in p.segments] == [0, 1]


def test_path_aliases_and_ignore_repos():
    p = make(_Args(path_aliases="~/a=A,b/c=BC,", ignore_repos="r1,,r2"))
    assert p.path_aliases == {"~/a": "A", "b/c": "BC"}
    assert p.ignore_repos == {"r1", "r2"}


def test_path_alias_without_equals_raises():
    with pytest.raises(ValueError):
        make(_Args(path_aliases="nothing"))


def test_term_width_from_columns(columns):
    columns(80)
    assert term_width() == 80


def test_term_width_bad_columns(columns, monkeypatch):
    columns("wide")
    assert term_width() == 0
    monkeypatch.delenv("COLUMNS")
    assert term_width() == 0


def test_truncate_text_short_unchanged():
    assert truncate_text("hello", 10, ELLIPSIS) == "hello"


@pytest.mark.parametrize("text,width", [("abcdefghij", 5), ("日本語日本語", 4)])
def test_truncate_text_fits(text, width):
    result = truncate_text(text, width, ELLIPSIS)
    assert result.endswith(ELLIPSIS)
    assert wcswidth(result) <= width
    assert text.startswith(result[:-1])


def test_truncate_row_disabled_without_percentage(columns):
    columns(5)
    p = make()
    p.append_segment("a", Segment(content="a" * 40))
    p.truncate_row(0)
    assert p.segments[0][0].content == "a" * 40


def test_truncate_row_drops_lowest_priority(columns):
    columns(20)
    p = make(_Args(max_width_percentage=100, truncate_segment_width=0), priorities={"a": 3, "b": 1, "c": 2})
    for name in "abc":
        p.append_segment(name, Segment(content=name * 4, background=1))
    p.truncate_row(0)
    assert [s.content for s in p.segments[0]] == ["aaaa", "cccc"]
    assert sum(s.width for s in p.segments[0]) <= 20


def test_truncate_row_shortens_long_segment(columns):
    columns(20)
    p = make(_Args(max_width_percentage=100, truncate_segment_width=10))
    p.append_segment("a", Segment(content="x" * 30, background=1))
    p.truncate_row(0)
    seg = p.segments[0][0]
    assert seg.content.endswith(ELLIPSIS)
    assert seg.width <= 10
    assert seg.width == seg.compute_width(False)


def test_truncate_row_keeps_max_priority(columns):
    columns(10)
    p = make(_Args(max_width_percentage=100))
    title = "title" * 10
    p.append_segment("t", Segment(content=title, priority=MAX_INTEGER, hide_separators=True))
    p.append_segment("a", Segment(content="a", background=1))
    p.truncate_row(0)
    assert [s.content for s in p.segments[0]] == [title]


def test_num_east_asian_runes():
    assert make().num_east_asian_runes("±±a") == 2
    assert make(_Args(east_asian_width=True)).num_east_asian_runes("±±a") == 0


def test_draw_row_pads_ambiguous_chars():
    p = make()
    p.append_segment("a", Segment(content="±±", foreground=1, background=2))
    assert p.draw_row(0).endswith(p.reset + " " * 3)


def test_draw_row_exact_output():
    p = make()
    p.append_segment("a", Segment(content="x", foreground=1, background=2))
    assert p.draw_row(0) == "[38;5;1m[48;5;2m x [0m[38;5;2m>[0m "


def test_draw_row_next_segment_background():
    p = make()
    p.append_segment("a", Segment(content="x", foreground=1, background=2))
    p.append_segment("b", Segment(content="y", foreground=3, background=4))
    out = p.draw_row(0)
    assert p.bg_color(4) + p.fg_color(2) + ">" in out


def test_draw_row_condensed_and_hidden():
    p = make(_Args(condensed=True))
    p.append_segment("t", Segment(content="TITLE", hide_separators=True))
    p.append_segment("a", Segment(content="x", foreground=1, background=2))
    out = p.draw_row(0)
    assert out.startswith("TITLE")
    assert " x " not in out
    assert p.bg_color(2) + "x" in out


def test_draw_multiple_rows():
    p = make()
    p.append_segment("a", Segment(content="one", background=1))
    p.new_row()
    p.append_segment("b", Segment(content="two", background=1))
    out = p.draw()
    assert out.count("\n") == 1
    assert out.index("one") < out.index("\n") < out.index("two")


def test_prompt_on_new_line_failed_command():
    theme = Theme(cmd_failed_fg=9, cmd_failed_bg=52)
    p = make(_Args(prompt_on_new_line=True, prev_error=1), theme=theme)
    p.append_segment("a", Segment(content="x", background=1))
    out = p.draw()
    assert "\n" + p.fg_color(9) + p.bg_color(52) + "$" + p.reset in out
    assert out.endswith(p.reset + " ")


def test_eval_with_right_prompt():
    args = _Args(eval=True)
    left = make(args, shell=SPLIT)
    right = make(args, align=Alignment.RIGHT, shell=SPLIT)
    right.append_segment("r", Segment(content="R", foreground=1, background=2))
    left.right_powerline = right
    left.append_segment("l", Segment(content="L", foreground=3, background=4))
    assert left.has_right_modules()
    assert left.supports_right_modules()
    out = left.draw()
    assert out.startswith("PS1=")
    assert "\nRPS1=" in out
    assert out.endswith(";")
    assert out.index(" L ") < out.index("RPS1=") < out.index(" R ")
    assert "<" in out[out.index("RPS1="):]


def test_no_right_support_for_plain_shell():
    p = make()
    assert not p.supports_right_modules()
    assert not p.has_right_modules()
    assert not make(align=Alignment.RIGHT).is_right_prompt()