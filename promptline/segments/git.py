"""A lightweight git branch segment."""

from __future__ import annotations

import os
import subprocess

from ..powerline import Powerline, Segment

_FAILURES = (OSError, subprocess.CalledProcessError)


def git_process_env() -> dict[str, str]:
    """Minimal, locale-neutral environment for running git."""
    return {
        "LANG": "C",
        "HOME": os.environ.get("HOME", ""),
        "PATH": os.environ.get("PATH", ""),
    }


def run_git_command(*args: str) -> str:
    """Run a command and return its standard output.

    Raises OSError if it cannot be started and subprocess.CalledProcessError
    if it exits with a non-zero status.
    """
    result = subprocess.run(
        list(args),
        capture_output=True,
        env=git_process_env(),
        check=True,
    )
    out = result.stdout
    if isinstance(out, bytes):
        out = out.decode("utf-8", errors="replace")
    return out


def git_detached_branch(p: Powerline) -> str:
    """Describe HEAD when it is not on a branch."""
    try:
        out = run_git_command("git", "rev-parse", "--short", "HEAD")
    except _FAILURES:
        try:
            out = run_git_command("git", "symbolic-ref", "--short", "HEAD")
        except _FAILURES:
            return "Error"
        return out.partition("\n")[0]
    return f"{p.symbols.repo_detached} {out.partition(chr(10))[0]}"


def segment_git_lite(p: Powerline) -> None:
    """Show the current git branch without inspecting the working tree."""
    if p.ignore_repos:
        try:
            top = run_git_command("git", "rev-parse", "--show-toplevel").strip()
        except _FAILURES:
            return
        if top in p.ignore_repos:
            return

    try:
        status = run_git_command("git", "rev-parse", "--abbrev-ref", "HEAD").strip()
    except _FAILURES:
        return

    branch = status if status != "HEAD" else git_detached_branch(p)
    p.append_segment(
        "git-branch",
        Segment(content=branch, foreground=p.theme.repo_clean_fg, background=p.theme.repo_clean_bg),
    )