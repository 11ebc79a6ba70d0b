import stat
import sys
from datetime import timedelta

import pytest

from listme import blame
from listme.blame import blame_file, parse_line_porcelain
from listme.errors import BlameLookupError, BlameUnavailable
from listme.models import FileBlame, LineBlame

from conftest import GIT_AUTHOR, GIT_TIMESTAMP

PORCELAIN = """\
4d3c2b1a 1 1 2
author Jane Doe
author-mail <jane@example.com>
author-time 1600000000
author-tz +0000
committer Jane Doe
committer-time 1600000000
summary initial
filename main.go
\tpackage main
4d3c2b1a 2 2
author Jane Doe
author-mail <jane@example.com>
author-time 1600000000
author-tz +0000
filename main.go
\t// author Mallory in the content
0000000000 3 3 1
author Not Committed Yet
author-mail <not.committed.yet>
filename main.go
\t// TODO: uncommitted"""


def test_parse_line_porcelain():
    blames = parse_line_porcelain(PORCELAIN.splitlines(keepends=True))
    assert blames == [
        LineBlame("Jane Doe", 1600000000),
        LineBlame("Jane Doe", 1600000000),
        LineBlame("Not Committed Yet", 0),
    ]


def test_parse_flushes_last_record_without_separator():
    blames = parse_line_porcelain(["author Alice\n", "author-time 10\n", "author Bob"])
    assert blames == [LineBlame("Alice", 10), LineBlame("Bob", 0)]


def test_parse_ignores_bad_timestamps_and_orphan_lines():
    blames = parse_line_porcelain(["author-time 5\n", "author Alice\n", "author-time soon\n"])
    assert blames == [LineBlame("Alice", 0)]


def test_parse_empty_stream():
    assert parse_line_porcelain([]) == []


def test_file_blame_lookup_is_one_based_and_strict():
    file_blame = FileBlame((LineBlame("a", 1), LineBlame("b", 2)))
    assert len(file_blame) == 2
    assert file_blame.blame_line(1).author == "a"
    assert file_blame.blame_line(2).author == "b"
    for number in (0, 3, -1):
        with pytest.raises(BlameLookupError):
            file_blame.blame_line(number)


def test_line_blame_age():
    assert LineBlame("a", 0).age() is None
    assert LineBlame("a", 1000).age(now=1000 + 86400) == timedelta(days=1)


def test_blame_file(git_repo):
    repo, git = git_repo
    source = repo / "main.go"
    source.write_text("package main\n\n// FIXME: leak\n")
    git("add", "main.go")
    git("commit", "-q", "-m", "initial")

    file_blame = blame_file(source)
    assert len(file_blame) == 3
    assert file_blame.blame_line(3) == LineBlame(GIT_AUTHOR, GIT_TIMESTAMP)


def test_blame_file_uncommitted_line(git_repo):
    repo, git = git_repo
    source = repo / "main.go"
    source.write_text("package main\n")
    git("add", "main.go")
    git("commit", "-q", "-m", "initial")
    source.write_text("package main\n// TODO: new\n")

    file_blame = blame_file(source)
    assert len(file_blame) == 2
    assert file_blame.blame_line(2).author == "Not Committed Yet"


def test_blame_untracked_file(git_repo):
    repo, git = git_repo
    (repo / "tracked.py").write_text("pass\n")
    git("add", "tracked.py")
    git("commit", "-q", "-m", "initial")
    source = repo / "new.py"
    source.write_text("# TODO: track me\n")
    with pytest.raises(BlameUnavailable):
        blame_file(source)


def test_blame_outside_repository(tmp_path):
    source = tmp_path / "loose.py"
    source.write_text("# TODO: x\n")
    with pytest.raises(BlameUnavailable):
        blame_file(source)


def test_blame_without_git(tmp_path, monkeypatch):
    monkeypatch.setattr(blame, "GIT_EXECUTABLE", "listme-no-such-git")
    source = tmp_path / "loose.py"
    source.write_text("# TODO: x\n")
    with pytest.raises(BlameUnavailable):
        blame_file(source)


@pytest.fixture()
def noisy_git(tmp_path, monkeypatch):
    """A fake git writing far more to stderr than a pipe buffer holds."""
    if sys.platform == "win32":
        pytest.skip("needs a POSIX shell")

    def install(exit_code: int):
        script = tmp_path / "noisy-git"
        script.write_text(
            "#!/bin/sh\n"
            "head -c 300000 /dev/zero | tr '\\0' 'w' >&2\n"
            "printf 'author Alice\\nauthor-time 5\\nauthor Bob\\n'\n"
            f"exit {exit_code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        monkeypatch.setattr(blame, "GIT_EXECUTABLE", str(script))

    return install


def test_blame_survives_large_stderr(tmp_path, noisy_git):
    noisy_git(0)
    file_blame = blame_file(tmp_path / "any.py")
    assert file_blame.lines == (LineBlame("Alice", 5), LineBlame("Bob", 0))


def test_blame_failure_reports_stderr(tmp_path, noisy_git):
    noisy_git(128)
    with pytest.raises(BlameUnavailable, match=r"exit 128\): w+"):
        blame_file(tmp_path / "any.py")
