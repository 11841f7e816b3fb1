"""Colour themes and separator symbol sets."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_COLOR_MAP_FIELD = "hostname_colorized_fg_map"
_BOOL_FIELDS = frozenset({"home_special_display"})


@dataclass(frozen=True)
class Symbols:
    """Glyphs used for separators and repository states."""

    lock: str = ""
    network: str = ""
    separator: str = ""
    separator_thin: str = ""
    separator_reverse: str = ""
    separator_reverse_thin: str = ""

    repo_detached: str = ""
    repo_ahead: str = ""
    repo_behind: str = ""
    repo_staged: str = ""
    repo_not_staged: str = ""
    repo_untracked: str = ""
    repo_conflicted: str = ""
    repo_stashed: str = ""


@dataclass
class Theme:
    """256-colour palette for every kind of prompt segment."""

    reset: int = 0
    username_fg: int = 0
    username_bg: int = 0
    username_root_bg: int = 0

    # Precomputed foreground for each colorized hostname background.
    hostname_colorized_fg_map: dict[int, int] = field(default_factory=dict)

    home_special_display: bool = False
    home_fg: int = 0
    home_bg: int = 0
    alias_fg: int = 0
    alias_bg: int = 0
    path_fg: int = 0
    path_bg: int = 0
    cwd_fg: int = 0
    separator_fg: int = 0

    readonly_fg: int = 0
    readonly_bg: int = 0

    ssh_fg: int = 0
    ssh_bg: int = 0

    kube_cluster_fg: int = 0
    kube_cluster_bg: int = 0
    kube_namespace_fg: int = 0
    kube_namespace_bg: int = 0

    dot_env_fg: int = 0
    dot_env_bg: int = 0

    repo_clean_fg: int = 0
    repo_clean_bg: int = 0
    repo_dirty_fg: int = 0
    repo_dirty_bg: int = 0

    jobs_fg: int = 0
    jobs_bg: int = 0

    cmd_passed_fg: int = 0
    cmd_passed_bg: int = 0
    cmd_failed_fg: int = 0
    cmd_failed_bg: int = 0

    git_ahead_fg: int = 0
    git_ahead_bg: int = 0
    git_behind_fg: int = 0
    git_behind_bg: int = 0
    git_staged_fg: int = 0
    git_staged_bg: int = 0
    git_not_staged_fg: int = 0
    git_not_staged_bg: int = 0
    git_untracked_fg: int = 0
    git_untracked_bg: int = 0
    git_conflicted_fg: int = 0
    git_conflicted_bg: int = 0
    git_stashed_fg: int = 0
    git_stashed_bg: int = 0

    tf_ws_fg: int = 0
    tf_ws_bg: int = 0

    shell_var_fg: int = 0
    shell_var_bg: int = 0

    node_fg: int = 0
    node_bg: int = 0

    @classmethod
    def from_json(cls, data: Any, base: Theme) -> Theme:
        """Return ``base`` overlaid with the fields of a JSON theme.

        ``data`` is JSON text or an already decoded mapping. Keys are the
        CamelCase field names, matched case-insensitively; unknown keys are
        ignored. Raises ValueError on malformed JSON or badly typed values.
        """
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        changes: dict[str, Any] = {_COLOR_MAP_FIELD: dict(base.hostname_colorized_fg_map)}
        if data is None:
            return dataclasses.replace(base, **changes)
        if not isinstance(data, Mapping):
            raise ValueError("a theme must be a JSON object")

        by_key = {f.name.replace("_", "").lower(): f.name for f in dataclasses.fields(cls)}
        for key, value in data.items():
            name = by_key.get(str(key).lower())
            if name is None:
                continue
            if value is None:
                if name == _COLOR_MAP_FIELD:
                    changes[name] = {}
                continue
            if name == _COLOR_MAP_FIELD:
                changes[name].update(_parse_color_map(value, key))
            elif name in _BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise ValueError(f"theme field {key!r} must be a boolean")
                changes[name] = value
            else:
                changes[name] = _parse_color(value, key)
        return dataclasses.replace(base, **changes)


def _parse_color(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"theme field {key!r} must be an integer colour code")
    if not 0 <= value <= 255:
        raise ValueError(f"theme field {key!r} is out of range 0-255: {value}")
    return value


def _parse_color_map(value: Any, key: str) -> dict[int, int]:
    if not isinstance(value, Mapping):
        raise ValueError(f"theme field {key!r} must be an object")
    result = {}
    for raw_key, raw_value in value.items():
        text = str(raw_key)
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"theme field {key!r} has a non-numeric key {text!r}")
        result[_parse_color(int(text), key)] = _parse_color(raw_value, key)
    return result