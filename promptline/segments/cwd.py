"""The current-directory segment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from ..options import warn
from ..powerline import ELLIPSIS, Alignment, Powerline, Segment


@dataclass(frozen=True)
class PathSegment:
    """One displayed component of the working directory."""

    path: str
    home: bool = False
    root: bool = False
    ellipsis: bool = False
    alias: bool = False


def _find_run(segments: list[PathSegment], names: list[str]) -> int | None:
    size = len(names)
    for start in range(len(segments)):
        # Runs are only searched for up to the mirror position of ``start``.
        if start + size > len(segments) - start:
            return None
        if [seg.path for seg in segments[start:start + size]] == names:
            return start
    return None


def maybe_alias_path_segments(p: Powerline, path_segments: list[PathSegment]) -> list[PathSegment]:
    """Replace runs of directories with their configured aliases, longest first."""
    segments = list(path_segments)
    for key in sorted(p.path_aliases, key=len, reverse=True):
        names = key.strip("/").split("/")
        if len(names) > len(segments):
            continue
        start = _find_run(segments, names)
        if start is None:
            continue
        alias = PathSegment(path=p.path_aliases[key], alias=True)
        segments = segments[:start] + [alias] + segments[start + len(names):]
    return segments


def cwd_to_path_segments(p: Powerline, cwd: str) -> list[PathSegment]:
    """Split ``cwd`` into displayed components, folding in $HOME and aliases."""
    segments: list[PathSegment] = []
    home = os.environ.get("HOME", "")
    if cwd.startswith(home):
        segments.append(PathSegment(path="~", home=True))
        cwd = cwd[len(home):]
    elif cwd == "/":
        segments.append(PathSegment(path="/", root=True))

    names = cwd.strip("/").split("/")
    if names[0] == "":
        names = names[1:]
    segments.extend(PathSegment(path=name) for name in names)
    return maybe_alias_path_segments(p, segments)


def maybe_shorten_name(p: Powerline, name: str) -> str:
    """Cut ``name`` to the configured maximum directory length."""
    limit = p.args.cwd_max_dir_size
    if limit > 0 and len(name) > limit:
        return name[:limit]
    return name


def escape_variables(p: Powerline, name: str) -> str:
    """Escape characters the shell would otherwise expand."""
    info = p.shell_info
    name = name.replace("\\", info.escaped_backslash)
    name = name.replace("`", info.escaped_backtick)
    return name.replace("$", info.escaped_dollar)


def get_color(p: Powerline, path_segment: PathSegment, is_last_dir: bool) -> tuple[int, int, bool]:
    """Return foreground, background and whether the segment is drawn specially."""
    theme = p.theme
    if path_segment.home and theme.home_special_display:
        return theme.home_fg, theme.home_bg, True
    if path_segment.alias:
        return theme.alias_fg, theme.alias_bg, True
    if is_last_dir:
        return theme.cwd_fg, theme.path_bg, False
    return theme.path_fg, theme.path_bg, False


def _limit_depth(segments: list[PathSegment], max_depth: int) -> list[PathSegment]:
    if max_depth <= 0:
        warn("Ignoring -cwd-max-depth argument since it's smaller than or equal to 0")
        return segments
    if len(segments) <= max_depth:
        return segments
    n_before = 2 if max_depth > 2 else max_depth - 1
    first = segments[:n_before]
    second = segments[len(segments) + n_before - max_depth:]
    return [*first, PathSegment(path=ELLIPSIS, ellipsis=True), *second]


def segment_cwd(p: Powerline) -> None:
    """Append the working-directory segments to ``p``."""
    cwd = p.cwd or os.environ.get("PWD", "")
    theme = p.theme

    if p.args.cwd_mode == "plain":
        home = os.environ.get("HOME", "")
        if cwd.startswith(home):
            cwd = "~" + cwd[len(home):]
        p.append_segment("cwd", Segment(content=cwd, foreground=theme.cwd_fg, background=theme.path_bg))
        return

    path_segments = cwd_to_path_segments(p, cwd)
    if p.args.cwd_mode == "dironly":
        path_segments = path_segments[-1:]
    else:
        path_segments = _limit_depth(path_segments, p.args.cwd_max_depth)

    supports_right = p.supports_right_modules()
    last = len(path_segments) - 1
    for idx, path_segment in enumerate(path_segments):
        is_last_dir = idx == last
        foreground, background, special = get_color(p, path_segment, is_last_dir)
        segment = Segment(
            content=escape_variables(p, maybe_shorten_name(p, path_segment.path)),
            foreground=foreground,
            background=background,
        )
        if not special:
            if p.align is Alignment.RIGHT and supports_right and idx != 0:
                segment.separator = p.symbols.separator_reverse_thin
                segment.separator_foreground = theme.separator_fg
            elif (p.align is Alignment.LEFT or not supports_right) and not is_last_dir:
                segment.separator = p.symbols.separator_thin
                segment.separator_foreground = theme.separator_fg
        p.append_segment("cwd" if is_last_dir else "cwd-path", segment)