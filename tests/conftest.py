"""Pytest fixtures for git-worktree-keeper tests"""
import tempfile
from pathlib import Path
import pytest
import git

from git_worktree_keeper.config import Config
from git_worktree_keeper.core import WorktreeKeeper


def run_git(path, *args):
    """Run a git command with path as the working directory."""
    return git.Git(str(path)).execute(["git", *args])


def commit_file(path, name="change.txt", content="change\n", message="Add change"):
    """Create and commit a file inside a worktree."""
    (Path(path) / name).write_text(content)
    run_git(path, "add", name)
    run_git(path, "commit", "--quiet", "-m", message)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture(autouse=True)
def neutral_cwd(temp_dir, monkeypatch):
    """Run every test from a directory outside any repository or worktree."""
    elsewhere = temp_dir / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    return elsewhere


@pytest.fixture
def worktrees_root(temp_dir, monkeypatch):
    """Managed root for the test, also exported through WT_ROOT."""
    root = temp_dir / "worktrees"
    root.mkdir()
    monkeypatch.setenv("WT_ROOT", str(root))
    return root


@pytest.fixture
def config(worktrees_root):
    """Configuration pointing at the test's managed root."""
    return Config(worktrees_root=worktrees_root)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    repo.config_writer().set_value("commit", "gpgsign", "false").release()

    # Create initial commit on main branch
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    repo.git.branch('-M', 'main')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def repo_path(git_repo):
    return Path(git_repo.working_dir)


@pytest.fixture
def origin_repo(temp_dir, git_repo):
    """Attach a local bare 'origin' to git_repo and publish main to it."""
    origin_path = temp_dir / "origin.git"
    origin = git.Repo.init(origin_path, bare=True)

    git_repo.create_remote('origin', str(origin_path))
    git_repo.git.push('--quiet', '-u', 'origin', 'main')
    git_repo.git.remote('set-head', 'origin', 'main')

    yield origin

    origin.close()


@pytest.fixture
def keeper(config, repo_path):
    """WorktreeKeeper bound to the test repository."""
    return WorktreeKeeper(config, repo=repo_path)


@pytest.fixture
def make_worktree(keeper):
    """Factory creating a worktree for a new branch under the managed root."""
    def _make(name, base=None):
        path, _ = keeper.create(name, base=base, create_branch=True)
        return path
    return _make
