# Shared fixtures: file trees on disk and throw-away git repositories
import shutil
import subprocess
from pathlib import Path

import pytest

GIT_AUTHOR = "Jane Doe"
#: 2020-09-13, far older than any default age limit
GIT_TIMESTAMP = 1600000000


@pytest.fixture()
def write(tmp_path: Path):
    """Write ``{relative path: str | bytes}`` below ``tmp_path``."""

    def _write(files: dict, root: Path = tmp_path) -> Path:
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content)
        return root

    return _write


@pytest.fixture()
def git_repo(tmp_path: Path, monkeypatch):
    """An initialised git repository in ``tmp_path`` plus a ``git(*args)`` runner."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    for key, value in {
        "GIT_AUTHOR_NAME": GIT_AUTHOR,
        "GIT_AUTHOR_EMAIL": "jane@example.com",
        "GIT_AUTHOR_DATE": f"{GIT_TIMESTAMP} +0000",
        "GIT_COMMITTER_NAME": GIT_AUTHOR,
        "GIT_COMMITTER_EMAIL": "jane@example.com",
        "GIT_COMMITTER_DATE": f"{GIT_TIMESTAMP} +0000",
        "GIT_CONFIG_NOSYSTEM": "1",
        "HOME": str(tmp_path / ".home"),
    }.items():
        monkeypatch.setenv(key, value)

    def git(*args: str) -> str:
        proc = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", "-c", "init.defaultBranch=main", *args],
            cwd=tmp_path,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        return proc.stdout

    repo = tmp_path / "repo"
    repo.mkdir()
    git("init", "-q", str(repo))

    def git_in_repo(*args: str) -> str:
        return git("-C", str(repo), *args)

    return repo, git_in_repo
