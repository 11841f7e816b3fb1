"""Prompt layout: segments, colouring, truncation and rendering."""

from __future__ import annotations

import dataclasses
import enum
import os
import re
import sys
import unicodedata
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from wcwidth import wcwidth

from .themes import Symbols, Theme

MAX_INTEGER = 2**63 - 1
ELLIPSIS = "\u2026"

_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7_]+\Z")


class Alignment(enum.Enum):
    """Which side of the terminal a prompt is anchored to."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class ShellInfo:
    """Escaping and prompt conventions of one shell."""

    root_indicator: str = ""
    color_template: str = "%s"
    escaped_dollar: str = ""
    escaped_backtick: str = ""
    escaped_backslash: str = ""
    eval_prompt_prefix: str = ""
    eval_prompt_suffix: str = ""
    eval_prompt_right_prefix: str = ""
    eval_prompt_right_suffix: str = ""


def _string_width(text: str) -> int:
    return sum(max(wcwidth(ch), 0) for ch in text)


@dataclass
class Segment:
    """One coloured block of the prompt."""

    content: str
    foreground: int = 0
    background: int = 0
    separator: str = ""
    separator_foreground: int = 0
    priority: int = 0
    width: int = 0
    hide_separators: bool = False

    def compute_width(self, condensed: bool) -> int:
        """Terminal cells the segment occupies once drawn."""
        width = _string_width(self.content) + _string_width(self.separator)
        return width if condensed else width + 2


def _parse_int(text: str) -> int:
    if text != text.strip():
        raise ValueError(f"invalid integer: {text!r}")
    try:
        return int(text, 0)
    except ValueError:
        if _LEGACY_OCTAL.match(text):
            return int(text, 8)
        raise


def term_width() -> int:
    """Width of the terminal on stdin, else $COLUMNS, else 0."""
    try:
        return os.get_terminal_size(sys.stdin.fileno()).columns
    except (OSError, ValueError, AttributeError):
        pass
    value = os.environ.get("COLUMNS")
    if value is None:
        return 0
    try:
        return _parse_int(value)
    except ValueError:
        return 0


def truncate_text(text: str, max_width: int, tail: str) -> str:
    """Cut ``text`` so that, with ``tail`` appended, it fits ``max_width`` cells."""
    if _string_width(text) <= max_width:
        return text
    budget = max_width - _string_width(tail)
    used = 0
    kept = []
    for ch in text:
        w = max(wcwidth(ch), 0)
        if used + w > budget:
            break
        used += w
        kept.append(ch)
    return "".join(kept) + tail


def _div_trunc(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _lowest_priority(
    row: list[Segment], eligible: Callable[[Segment], bool] = lambda _s: True
) -> int | None:
    best: int | None = None
    best_priority = MAX_INTEGER
    for idx, seg in enumerate(row):
        if eligible(seg) and seg.priority < best_priority:
            best, best_priority = idx, seg.priority
    return best


def _parse_path_aliases(text: str) -> dict[str, str]:
    aliases = {}
    for item in text.split(","):
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"path alias {item!r} must have the form path=name")
        aliases[key] = value
    return aliases


class Powerline:
    """A prompt made of rows of segments, anchored left or right."""

    def __init__(
        self,
        args: Any,
        cwd: str,
        priorities: Mapping[str, int],
        align: Alignment = Alignment.LEFT,
        theme: Theme | None = None,
        shell_info: ShellInfo | None = None,
        symbols: Symbols | None = None,
    ) -> None:
        self.args = args
        self.cwd = cwd
        self.priorities = dict(priorities)
        self.align = align
        self.theme = theme if theme is not None else Theme()
        self.shell_info = shell_info if shell_info is not None else ShellInfo()
        self.symbols = symbols if symbols is not None else Symbols()
        self.reset = self.shell_info.color_template % "[0m"
        self.ignore_repos = {repo for repo in args.ignore_repos.split(",") if repo}
        self.path_aliases = _parse_path_aliases(args.path_aliases)
        self.segments: list[list[Segment]] = [[]]
        self.cur_segment = 0
        self.right_powerline: Powerline | None = None

    def color(self, prefix: str, code: int) -> str:
        if code == self.theme.reset:
            return self.reset
        return self.shell_info.color_template % f"[{prefix};5;{code}m"

    def fg_color(self, code: int) -> str:
        return self.color("38", code)

    def bg_color(self, code: int) -> str:
        return self.color("48", code)

    def append_segment(self, origin: str, segment: Segment) -> None:
        """Add a copy of ``segment`` to the current row, filling in defaults."""
        seg = dataclasses.replace(segment)
        if not seg.separator:
            seg.separator = (
                self.symbols.separator_reverse if self.is_right_prompt() else self.symbols.separator
            )
        if seg.separator_foreground == 0:
            seg.separator_foreground = seg.background
        seg.priority += self.priorities.get(origin, 0)
        seg.width = seg.compute_width(self.args.condensed)
        self.segments[self.cur_segment].append(seg)

    def new_row(self) -> None:
        self.segments.append([])
        self.cur_segment += 1

    def truncate_row(self, row_num: int) -> None:
        """Shorten, then drop, low-priority segments until the row fits."""
        max_length = _div_trunc(term_width() * self.args.max_width_percentage, 100)
        row = list(self.segments[row_num])
        if max_length > 0:
            condensed = self.args.condensed
            limit = self.args.truncate_segment_width
            row_length = sum(seg.width for seg in row)

            if row_length > max_length and limit > 0:
                while row_length > max_length:
                    idx = _lowest_priority(row, lambda s: s.width > limit)
                    if idx is None:
                        break
                    old = row[idx]
                    content = truncate_text(
                        old.content, limit - _string_width(old.separator) - 3, ELLIPSIS
                    )
                    if content == old.content:
                        break
                    new = dataclasses.replace(old, content=content)
                    new.width = new.compute_width(condensed)
                    row[idx] = new
                    row_length += new.width - old.width

            while row_length > max_length:
                idx = _lowest_priority(row)
                if idx is None:
                    break
                row_length -= row.pop(idx).width
        self.segments[row_num] = row

    def num_east_asian_runes(self, content: str) -> int:
        """Count East Asian ambiguous-width characters unless wide mode is on."""
        if self.args.east_asian_width:
            return 0
        return sum(1 for ch in content if unicodedata.east_asian_width(ch) == "A")

    def draw_row(self, row_num: int) -> str:
        row = self.segments[row_num]
        right = self.is_right_prompt()
        condensed = self.args.condensed
        east_asian = 0
        out = []

        if right:
            out.append(" ")
        for idx, seg in enumerate(row):
            if seg.hide_separators:
                out.append(seg.content)
                continue
            separator_background = ""
            if right:
                separator_background = (
                    self.reset if idx == 0 else self.bg_color(row[idx - 1].background)
                )
                out += [separator_background, self.fg_color(seg.separator_foreground), seg.separator]
            elif idx >= len(row) - 1:
                if not self.has_right_modules() or self.supports_right_modules():
                    separator_background = self.reset
                elif row_num >= len(self.segments) - 1:
                    following = self.right_powerline.segments[0][0]
                    separator_background = self.bg_color(following.background)
            else:
                separator_background = self.bg_color(row[idx + 1].background)

            out += [self.fg_color(seg.foreground), self.bg_color(seg.background)]
            pad = "" if condensed else " "
            out += [pad, seg.content, pad]
            east_asian += self.num_east_asian_runes(seg.content)
            if not right:
                out += [separator_background, self.fg_color(seg.separator_foreground), seg.separator]
            out.append(self.reset)

        if not right or not self.has_right_modules():
            out.append(" ")
        if not right:
            out.append(" " * east_asian)
        return "".join(out)

    def draw(self) -> str:
        """Render the whole prompt, including any right-hand prompt."""
        info = self.shell_info
        out = []
        if self.args.eval:
            if self.align is Alignment.LEFT:
                out.append(info.eval_prompt_prefix)
            elif self.supports_right_modules():
                out.append(info.eval_prompt_right_prefix)

        rows = []
        for row_num in range(len(self.segments)):
            self.truncate_row(row_num)
            rows.append(self.draw_row(row_num))
        out.append("\n".join(rows))

        if self.args.prompt_on_new_line:
            if self.args.prev_error == 0:
                fg, bg = self.theme.cmd_passed_fg, self.theme.cmd_passed_bg
            else:
                fg, bg = self.theme.cmd_failed_fg, self.theme.cmd_failed_bg
            out += [
                "\n",
                self.fg_color(fg),
                self.bg_color(bg),
                info.root_indicator,
                self.reset,
                self.fg_color(bg),
                self.symbols.separator,
                self.reset,
                " ",
            ]

        if self.args.eval:
            if self.align is Alignment.LEFT:
                out.append(info.eval_prompt_suffix)
                if self.has_right_modules():
                    out.append("\n")
            elif self.supports_right_modules():
                out.append(info.eval_prompt_suffix)
            if self.has_right_modules():
                out.append(self.right_powerline.draw())
        return "".join(out)

    def has_right_modules(self) -> bool:
        return self.right_powerline is not None and len(self.right_powerline.segments[0]) > 0

    def supports_right_modules(self) -> bool:
        info = self.shell_info
        return bool(info.eval_prompt_right_prefix or info.eval_prompt_right_suffix)

    def is_right_prompt(self) -> bool:
        return self.align is Alignment.RIGHT and self.supports_right_modules()