import subprocess
import sys
from unittest import mock

import pytest

from promptline.options import Args
from promptline.powerline import Powerline, ShellInfo
from promptline.segments import git
from promptline.themes import Symbols, Theme

THEME = Theme(repo_clean_fg=0, repo_clean_bg=148)
SYMBOLS = Symbols(repo_detached="DET", separator=">")


def make_powerline(**overrides):
    return Powerline(Args(**overrides), "/tmp", {}, theme=THEME, shell_info=ShellInfo(),
                     symbols=SYMBOLS)


def fake_git(responses):
    def run(argv, **kwargs):
        key = tuple(argv[1:])
        answer = responses.get(key)
        if answer is None:
            raise subprocess.CalledProcessError(128, argv)
        return subprocess.CompletedProcess(argv, 0, stdout=answer.encode(), stderr=b"")
    return run


def contents(p):
    return [seg.content for row in p.segments for seg in row]


def test_git_process_env(monkeypatch):
    monkeypatch.setenv("HOME", "/home/alice")
    monkeypatch.setenv("PATH", "/usr/bin")
    assert git.git_process_env() == {"LANG": "C", "HOME": "/home/alice", "PATH": "/usr/bin"}


def test_run_git_command_returns_stdout():
    assert git.run_git_command(sys.executable, "-c", "print('hi')").strip() == "hi"


def test_run_git_command_failure():
    with pytest.raises(subprocess.CalledProcessError):
        git.run_git_command(sys.executable, "-c", "import sys; sys.exit(3)")


def test_branch_segment():
    responses = {("rev-parse", "--abbrev-ref", "HEAD"): "main\n"}
    with mock.patch("subprocess.run", side_effect=fake_git(responses)):
        p = make_powerline()
        git.segment_git_lite(p)
    seg = p.segments[0][0]
    assert seg.content == "main"
    assert seg.background == THEME.repo_clean_bg


def test_detached_head():
    responses = {
        ("rev-parse", "--abbrev-ref", "HEAD"): "HEAD\n",
        ("rev-parse", "--short", "HEAD"): "abc1234\n",
    }
    with mock.patch("subprocess.run", side_effect=fake_git(responses)):
        p = make_powerline()
        git.segment_git_lite(p)
    assert contents(p) == [f"{SYMBOLS.repo_detached} abc1234"]


def test_detached_falls_back_to_symbolic_ref():
    responses = {("symbolic-ref", "--short", "HEAD"): "topic\nextra\n"}
    with mock.patch("subprocess.run", side_effect=fake_git(responses)):
        assert git.git_detached_branch(make_powerline()) == "topic"


def test_detached_error():
    with mock.patch("subprocess.run", side_effect=fake_git({})):
        assert git.git_detached_branch(make_powerline()) == "Error"


def test_not_a_repository():
    with mock.patch("subprocess.run", side_effect=fake_git({})):
        p = make_powerline()
        git.segment_git_lite(p)
    assert contents(p) == []


def test_missing_git_binary():
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("git")):
        p = make_powerline()
        git.segment_git_lite(p)
    assert contents(p) == []


def test_ignored_repo():
    responses = {
        ("rev-parse", "--show-toplevel"): "/work/repo\n",
        ("rev-parse", "--abbrev-ref", "HEAD"): "main\n",
    }
    with mock.patch("subprocess.run", side_effect=fake_git(responses)):
        ignored = make_powerline(ignore_repos="/work/repo")
        git.segment_git_lite(ignored)
        other = make_powerline(ignore_repos="/elsewhere")
        git.segment_git_lite(other)
    assert contents(ignored) == []
    assert contents(other) == ["main"]