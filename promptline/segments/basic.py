"""Small segments: exit status, root marker, jobs, permissions and more."""

from __future__ import annotations

import os
import socket
import subprocess

from ..powerline import MAX_INTEGER, Powerline, Segment

DOTENV_FILES = (".env", ".envrc")
TERRAFORM_WORKSPACE_FILE = os.path.join(".", ".terraform", "environment")

_SIGNALS = (
    "SIGHUP", "SIGINT", "SIGQUIT", "SIGILL", "SIGTRAP", "SIGIOT", "SIGBUS",
    "SIGFPE", "SIGKILL", "SIGUSR1", "SIGSEGV", "SIGUSR2", "SIGPIPE", "SIGALRM",
    "SIGTERM", "SIGSTKFLT", "SIGCHLD", "SIGCONT", "SIGSTOP", "SIGTSTP",
    "SIGTTIN", "SIGTTOU",
)

_EXIT_MEANINGS = {
    1: "ERROR",
    2: "USAGE",
    126: "NOPERM",
    127: "NOTFOUND",
    **{128 + number: name for number, name in enumerate(_SIGNALS, start=1)},
}


def _is_regular_file(path: str) -> bool:
    try:
        return not os.path.isdir(path) and os.path.exists(path)
    except (OSError, ValueError):
        return False


def segment_dotenv(p: Powerline) -> None:
    """Mark directories holding a .env or .envrc file."""
    if any(_is_regular_file(name) for name in DOTENV_FILES):
        p.append_segment(
            "dotenv",
            Segment(content="\u2235", foreground=p.theme.dot_env_fg, background=p.theme.dot_env_bg),
        )


def meaning_from_exit_code(exit_code: int) -> str:
    """Symbolic name of a shell exit status, or the number itself."""
    return _EXIT_MEANINGS.get(exit_code, str(exit_code))


def segment_exit_code(p: Powerline) -> None:
    """Show the previous command's exit status when it failed."""
    code = p.args.prev_error
    if code == 0:
        return
    meaning = str(code) if p.args.numeric_exit_codes else meaning_from_exit_code(code)
    p.append_segment(
        "exit",
        Segment(content=meaning, foreground=p.theme.cmd_failed_fg, background=p.theme.cmd_failed_bg),
    )


def _command_output(*argv: str) -> str:
    try:
        result = subprocess.run(list(argv), capture_output=True, text=True, check=False)
    except OSError:
        return ""
    return result.stdout or ""


def _parse_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def segment_jobs(p: Powerline) -> None:
    """Count background jobs of the calling shell."""
    ppid = os.getppid()
    if p.args.shell == "bash":
        ppid = _parse_int(_command_output("ps", "-p", str(ppid), "-oppid="))

    lines = _command_output("ps", "-a", "-oppid=").split("\n")
    n_jobs = sum(1 for line in lines if _parse_int(line) == ppid) - 1
    if n_jobs > 0:
        p.append_segment(
            "jobs",
            Segment(content=str(n_jobs), foreground=p.theme.jobs_fg, background=p.theme.jobs_bg),
        )


def segment_newline(p: Powerline) -> None:
    """Start a new row of segments."""
    p.new_row()


def segment_perms(p: Powerline) -> None:
    """Show a lock when the working directory is not writable."""
    cwd = p.cwd or os.environ.get("PWD", "")
    if not os.access(cwd, os.W_OK):
        p.append_segment(
            "perms",
            Segment(
                content=p.symbols.lock,
                foreground=p.theme.readonly_fg,
                background=p.theme.readonly_bg,
            ),
        )


def segment_root(p: Powerline) -> None:
    """Show the shell's prompt character, coloured by the last exit status."""
    theme = p.theme
    if p.args.prev_error == 0:
        fg, bg = theme.cmd_passed_fg, theme.cmd_passed_bg
    else:
        fg, bg = theme.cmd_failed_fg, theme.cmd_failed_bg
    p.append_segment(
        "root", Segment(content=p.shell_info.root_indicator, foreground=fg, background=bg)
    )


def segment_term_title(p: Powerline) -> None:
    """Set the terminal title on xterm-like terminals."""
    term = os.environ.get("TERM", "")
    if "xterm" not in term and "rxvt" not in term:
        return

    if p.args.shell == "bash":
        title = "\\[\\e]0;\\u@\\h: \\w\\a\\]"
    elif p.args.shell == "zsh":
        title = "%{\033]0;%n@%m: %~\007%}"
    else:
        user = os.environ.get("USER", "")
        host = socket.gethostname()
        title = f"\033]0;{user}@{host}: {p.cwd}\007"

    p.append_segment(
        "termtitle", Segment(content=title, priority=MAX_INTEGER, hide_separators=True)
    )


def segment_terraform_workspace(p: Powerline) -> None:
    """Show the selected Terraform workspace."""
    if not _is_regular_file(TERRAFORM_WORKSPACE_FILE):
        return
    try:
        with open(TERRAFORM_WORKSPACE_FILE, "rb") as handle:
            workspace = handle.read().decode("utf-8", errors="replace")
    except OSError:
        return
    p.append_segment(
        "terraform-workspace",
        Segment(content=workspace, foreground=p.theme.tf_ws_fg, background=p.theme.tf_ws_bg),
    )