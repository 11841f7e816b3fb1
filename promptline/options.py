"""Command-line options and start-up checks."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .themes import Theme

DEFAULT_MODULES = "nix-shell,venv,user,host,ssh,cwd,perms,git,hg,jobs,exit,root,vgo"
DEFAULT_PRIORITY = "root,cwd,user,host,ssh,perms,git-branch,git-status,hg,jobs,exit,cwd-path"

_MODULE_CHOICES = (
    "(valid choices: aws, cwd, docker, dotenv, duration, exit, git, gitlite, hg, host, "
    "jobs, kube, load, newline, nix-shell, node, perlbrew, perms, root, shell-var, ssh, "
    "svn, termtitle, terraform-workspace, time, user, venv, vgo)"
)

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class InvalidCwdError(Exception):
    """The current directory cannot be determined."""


@dataclass
class Args:
    """Settings that control which segments are drawn and how."""

    cwd_mode: str = "fancy"
    cwd_max_depth: int = 5
    cwd_max_dir_size: int = -1
    colorize_hostname: bool = False
    east_asian_width: bool = False
    prompt_on_new_line: bool = False
    mode: str = "patched"
    theme: str = "default"
    shell: str = "bash"
    modules: str = DEFAULT_MODULES
    modules_right: str = ""
    priority: str = DEFAULT_PRIORITY
    max_width_percentage: int = 0
    truncate_segment_width: int = 16
    prev_error: int = 0
    numeric_exit_codes: bool = False
    ignore_repos: str = ""
    shorten_gke_names: bool = False
    shell_var: str = ""
    path_aliases: str = ""
    duration: str = ""
    eval: bool = False
    condensed: bool = False


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="promptline", allow_abbrev=False)
    defaults = Args()

    def option(flag: str, dest: str, kind: type, help_text: str) -> None:
        names = (f"-{flag}", f"--{flag}")
        default = getattr(defaults, dest)
        if kind is bool:
            parser.add_argument(
                *names, dest=dest, nargs="?", const=True, default=default,
                type=_parse_bool, help=help_text,
            )
        else:
            parser.add_argument(*names, dest=dest, type=kind, default=default, help=help_text)

    option("cwd-mode", "cwd_mode", str,
           "How to display the current directory (valid choices: fancy, plain, dironly)")
    option("cwd-max-depth", "cwd_max_depth", int,
           "Maximum number of directories to show in path")
    option("cwd-max-dir-size", "cwd_max_dir_size", int,
           "Maximum number of letters displayed for each directory in the path")
    option("colorize-hostname", "colorize_hostname", bool,
           "Colorize the hostname based on a hash of itself")
    option("east-asian-width", "east_asian_width", bool, "Use East Asian Ambiguous Widths")
    option("newline", "prompt_on_new_line", bool, "Show the prompt on a new line")
    option("mode", "mode", str,
           "The characters used to make separators between segments "
           "(valid choices: patched, compatible, flat)")
    option("theme", "theme", str,
           "Set this to the theme you want to use (valid choices: default, low-contrast)")
    option("shell", "shell", str, "Set this to your shell type (valid choices: bare, bash, zsh)")
    option("modules", "modules", str,
           "The list of modules to load, separated by ',' " + _MODULE_CHOICES)
    option("modules-right", "modules_right", str,
           "The list of modules to load anchored to the right, for shells that support it, "
           "separated by ',' " + _MODULE_CHOICES)
    option("priority", "priority", str,
           "Segments sorted by priority; if not enough space exists, the least prioritised "
           "segments are removed first. Separate with ',' " + _MODULE_CHOICES)
    option("max-width", "max_width_percentage", int,
           "Maximum width of the shell that the prompt may use, in percent. "
           "Setting this to 0 disables the shrinking subsystem.")
    option("truncate-segment-width", "truncate_segment_width", int,
           "Minimum width of a segment, segments longer than this will be shortened if space "
           "is limited. Setting this to 0 disables it.")
    option("error", "prev_error", int, "Exit code of previously executed command")
    option("numeric-exit-codes", "numeric_exit_codes", bool,
           "Shows numeric exit codes for errors.")
    option("ignore-repos", "ignore_repos", str,
           "A list of git repos to ignore, separated by ','. "
           "Repos are identified by their root directory.")
    option("shorten-gke-names", "shorten_gke_names", bool, "Shortens names for GKE Kube clusters.")
    option("shell-var", "shell_var", str, "A shell variable to add to the segments.")
    option("path-aliases", "path_aliases", str,
           "One or more aliases from a path to a short name, separated by ','. "
           "Specify these as key/value pairs like foo/bar/baz=FBB. Use '~' for your home dir.")
    option("duration", "duration", str, "The elapsed clock-time of the previous command")
    option("eval", "eval", bool, "Output prompt in 'eval' format.")
    option("condensed", "condensed", bool, "Remove spacing between segments")
    return parser


def parse_args(argv: list[str] | None = None) -> Args:
    """Parse command-line flags; exits with status 2 on bad usage."""
    if argv is None:
        argv = sys.argv[1:]
    namespace = _build_parser().parse_args(argv)
    return Args(**vars(namespace))


def parse_priorities(text: str) -> dict[str, int]:
    """Map each comma-separated name to its priority; earlier names rank higher."""
    names = text.split(",")
    return {name: len(names) - idx for idx, name in enumerate(names)}


def load_json_theme(path: str | os.PathLike[str], base: Theme) -> Theme:
    """Read a JSON theme file laid over ``base``.

    Raises OSError if the file cannot be read and ValueError if it is not a
    valid theme.
    """
    return Theme.from_json(Path(path).read_bytes(), base)


def path_exists(path: str) -> bool:
    """False only when ``path`` definitely does not exist."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except (OSError, ValueError):
        return True
    return True


def warn(msg: str) -> None:
    """Write a warning to stderr."""
    sys.stderr.write(f"[promptline]{msg}")


def get_valid_cwd() -> str:
    """Return $PWD, warning if it no longer exists on disk."""
    cwd = os.environ.get("PWD")
    if cwd is None:
        warn("Your current directory is invalid.")
        raise InvalidCwdError("Your current directory is invalid.")

    parts = cwd.split(os.sep)
    up = cwd
    while parts and not path_exists(up):
        parts.pop()
        up = os.sep.join(parts)
    if cwd != up:
        warn("Your current directory is invalid. Lowest valid directory: " + up)
    return cwd