"""Tests for the git subprocess adapter (subprocess.run is mocked)."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from blame_split.io.git_cli import (
    GitBackend,
    GitUnavailableError,
    QueryResult,
    resolve_repo_path,
    split_lines,
)


def _completed(stdout="", returncode=0, stderr=""):
    proc = MagicMock()
    proc.stdout = stdout.encode("utf-8")
    proc.returncode = returncode
    proc.stderr = stderr.encode("utf-8")
    return proc


@pytest.fixture
def run():
    with patch("blame_split.io.git_cli.subprocess.run") as mocked:
        mocked.return_value = _completed("a\nb\n")
        yield mocked


def _argv(run):
    return run.call_args.args[0]


class TestCommands:
    def test_blame_working_tree(self, run):
        GitBackend(cwd="/repo").blame("src/x.py")
        assert _argv(run) == ["git", "blame", "--porcelain", "--", "src/x.py"]
        assert run.call_args.kwargs["cwd"] == "/repo"

    def test_blame_at_revision(self, run):
        GitBackend().blame("x.py", "abc123^")
        assert _argv(run) == ["git", "blame", "--porcelain", "abc123^", "--", "x.py"]

    def test_blame_contents_sends_stdin(self, run):
        GitBackend().blame_contents("x.py", ["one", "two"])
        assert _argv(run) == ["git", "blame", "--porcelain", "--contents", "-", "--", "x.py"]
        assert run.call_args.kwargs["input"] == b"one\ntwo\n"

    def test_show_file(self, run):
        GitBackend().show_file("dir/x.py", "abc123")
        assert _argv(run) == ["git", "show", "abc123:dir/x.py"]

    def test_show_commit(self, run):
        GitBackend().show_commit("abc123")
        assert _argv(run) == ["git", "show", "--stat", "--patch", "--no-color", "abc123"]

    def test_custom_executable_and_timeout(self, run):
        GitBackend(git="/usr/local/bin/git", timeout=5).show_commit("abc")
        assert _argv(run)[0] == "/usr/local/bin/git"
        assert run.call_args.kwargs["timeout"] == 5


class TestResults:
    def test_output_split_into_lines(self, run):
        result = GitBackend().show_file("x.py", "HEAD")
        assert result == QueryResult(lines=["a", "b"], returncode=0, stderr="")
        assert result.ok

    def test_blank_lines_are_kept(self, run):
        run.return_value = _completed("a\n\n\nb\n")
        assert GitBackend().show_file("x.py", "HEAD").lines == ["a", "", "", "b"]

    def test_nonzero_exit_is_data(self, run):
        run.return_value = _completed("", 128, "fatal: bad revision 'nope'\n")
        result = GitBackend().blame("x.py", "nope")
        assert not result.ok
        assert result.returncode == 128
        assert "bad revision" in result.stderr

    def test_missing_git_is_fatal(self, run):
        run.side_effect = FileNotFoundError("git")
        with pytest.raises(GitUnavailableError, match="not found"):
            GitBackend().blame("x.py")

    def test_timeout_is_fatal(self, run):
        run.side_effect = subprocess.TimeoutExpired(["git"], 30)
        with pytest.raises(GitUnavailableError, match="timed out"):
            GitBackend().blame("x.py")


class TestToplevel:
    def test_toplevel(self, run):
        run.return_value = _completed("/home/me/repo\n")
        assert GitBackend().toplevel() == "/home/me/repo"

    def test_toplevel_outside_repository(self, run):
        run.return_value = _completed("", 128, "fatal: not a git repository")
        assert GitBackend().toplevel() is None

    def test_resolve_repo_path(self, run, tmp_path):
        root = tmp_path / "repo"
        target = root / "src" / "x.py"
        run.return_value = _completed(f"{root}\n")
        backend, relpath = resolve_repo_path(str(target))
        assert backend.cwd == str(root)
        assert relpath == "src/x.py"

    def test_resolve_outside_repository(self, run, tmp_path):
        run.return_value = _completed("", 128, "fatal: not a git repository")
        backend, relpath = resolve_repo_path(str(tmp_path / "x.py"))
        assert backend.cwd == str(tmp_path)
        assert relpath == "x.py"


class TestLineSplitting:
    def test_split_lines_only_breaks_on_newline(self):
        assert split_lines("a\x0cb\nc\x1ed\n") == ["a\x0cb", "c\x1ed"]

    def test_split_lines_keeps_one_trailing_blank(self):
        assert split_lines("a\n\n") == ["a", ""]
        assert split_lines("") == []

    def test_carriage_return_stays_inside_line(self, run):
        run.return_value = _completed("one\r\ntwo\rstill two\n")
        assert GitBackend().show_file("x.py", "HEAD").lines == ["one\r", "two\rstill two"]

    def test_empty_buffer_sends_no_lines(self, run):
        GitBackend().blame_contents("x.py", [])
        assert run.call_args.kwargs["input"] == b""
