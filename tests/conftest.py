"""
conftest.py — Fixtures compartidas: repos Git temporales.
"""

from __future__ import annotations

from pathlib import Path

import git as gitpython
import pytest

from hugopages.config import AppConfig, PublishConfig
from hugopages.utils.logger import clear_secrets


@pytest.fixture(autouse=True)
def _olvidar_secretos():
    """Cada test arranca sin secretos registrados en el logger."""
    clear_secrets()
    yield
    clear_secrets()


@pytest.fixture
def git_identity(monkeypatch):
    """Identidad de Git para poder commitear en CI sin config global."""
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Deploy Bot")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "deploy@example.com")


@pytest.fixture
def site_repo(tmp_path, git_identity) -> gitpython.Repo:
    """Repo del sitio con un commit en la rama principal."""
    path = tmp_path / "site"
    path.mkdir()
    repo = gitpython.Repo.init(path)
    (path / "config.toml").write_text('title = "Mi sitio"\n', encoding="utf-8")
    repo.index.add(["config.toml"])
    repo.index.commit("Sitio inicial")
    return repo


@pytest.fixture
def remote_repo(tmp_path) -> gitpython.Repo:
    """Repo bare que hace de remoto en <tmp>/remote/owner/site.git."""
    path = tmp_path / "remote" / "owner" / "site.git"
    path.mkdir(parents=True)
    return gitpython.Repo.init(path, bare=True)


def commit_pages(repo: gitpython.Repo, content: str, branch: str = "gh-pages"):
    """
    Crea un commit huérfano con index.html = content y mueve `branch` ahí.

    Simula lo que deja ghp-import: una rama sin relación con main.
    """
    workdir = Path(repo.working_tree_dir)
    (workdir / "index.html").write_text(content, encoding="utf-8")
    repo.index.add(["index.html"])
    commit = repo.index.commit(f"Update {content}", parent_commits=[], head=False)
    repo.create_head(branch, commit, force=True)
    return commit


def local_config(repo: gitpython.Repo, remote_root: Path, **publish) -> AppConfig:
    """Config que apunta el push a un remoto en disco en vez de GitHub."""
    return AppConfig(
        workdir=repo.working_tree_dir,
        token="s3cr3t-token",
        repo_slug="owner/site",
        publish=PublishConfig(
            host=str(remote_root),
            remote_template="{host}/{slug}.git",
            **publish,
        ),
    )


# ghp-import falso: commitea el directorio recibido en la rama con git plumbing
FAKE_GHP_IMPORT = '''
import os, subprocess, sys

out = os.path.abspath(sys.argv[-1])
branch = sys.argv[sys.argv.index("-b") + 1] if "-b" in sys.argv else "gh-pages"
env = dict(os.environ, GIT_WORK_TREE=out, GIT_INDEX_FILE=os.path.abspath(".git/ghp-index"))


def git(*args):
    return subprocess.run(["git", *args], check=True, capture_output=True, text=True, cwd=out, env=env).stdout.strip()


git("add", "-A")
sha = git("commit-tree", git("write-tree"), "-m", "Update docs")
git("update-ref", "refs/heads/" + branch, sha)
'''
