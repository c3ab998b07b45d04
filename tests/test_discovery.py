"""Tests for repository discovery under the managed root"""
from pathlib import Path

from git_worktree_keeper.services.discovery import RepoDiscovery, read_link_file, repo_from_gitdir


def make_admin_dir(repo, name):
    """Create <repo>/.git/worktrees/<name> without running git."""
    admin = repo / ".git" / "worktrees" / name
    admin.mkdir(parents=True)
    return admin


def make_worktree_dir(path, gitdir):
    path.mkdir(parents=True)
    (path / ".git").write_text(f"gitdir: {gitdir}\n")
    return path


class TestLinkFile:
    """Test reading worktree link files."""

    def test_absolute_gitdir(self, temp_dir):
        link = temp_dir / ".git"
        link.write_text("gitdir: /srv/repo/.git/worktrees/feat\n")

        assert read_link_file(link) == Path("/srv/repo/.git/worktrees/feat")

    def test_relative_gitdir_resolved_against_worktree(self, temp_dir):
        wt = temp_dir / "wt"
        wt.mkdir()
        link = wt / ".git"
        link.write_text("gitdir: ../repo/.git/worktrees/wt\n")

        assert read_link_file(link) == wt / "../repo/.git/worktrees/wt"

    def test_malformed_link_file(self, temp_dir):
        link = temp_dir / ".git"
        link.write_text("not a link file\n")

        assert read_link_file(link) is None

    def test_empty_gitdir(self, temp_dir):
        link = temp_dir / ".git"
        link.write_text("gitdir:   \n")

        assert read_link_file(link) is None

    def test_missing_file(self, temp_dir):
        assert read_link_file(temp_dir / ".git") is None

    def test_repo_from_gitdir(self):
        assert repo_from_gitdir(Path("/srv/repo/.git/worktrees/feat")) == Path("/srv/repo")
        assert repo_from_gitdir(Path("/srv/repo/.git/modules/feat")) is None
        assert repo_from_gitdir(Path("/srv/repo/admin/worktrees/feat")) is None


class TestRepoDiscovery:
    """Test walking the managed root."""

    def test_missing_root(self, temp_dir):
        result = RepoDiscovery(temp_dir / "nope").discover()

        assert result.repos == []
        assert result.orphans == []
        assert result.warnings == []

    def test_finds_owning_repositories(self, temp_dir):
        root = temp_dir / "root"
        repo_a = temp_dir / "a"
        repo_b = temp_dir / "b"
        make_worktree_dir(root / "a" / "feat", make_admin_dir(repo_a, "feat"))
        make_worktree_dir(root / "a" / "fix", make_admin_dir(repo_a, "fix"))
        make_worktree_dir(root / "b" / "main-copy", make_admin_dir(repo_b, "main-copy"))

        result = RepoDiscovery(root).discover()

        assert result.repos == [repo_a, repo_b]
        assert result.orphans == []

    def test_slash_named_branches_are_nested(self, temp_dir):
        root = temp_dir / "root"
        repo = temp_dir / "repo"
        make_worktree_dir(root / "repo" / "feat" / "login", make_admin_dir(repo, "login"))

        result = RepoDiscovery(root).discover()

        assert result.repos == [repo]

    def test_orphaned_worktree(self, temp_dir):
        root = temp_dir / "root"
        orphan = make_worktree_dir(root / "deleted" / "feat", temp_dir / "deleted/.git/worktrees/feat")

        result = RepoDiscovery(root).discover()

        assert result.repos == []
        assert result.orphans == [orphan]

    def test_malformed_link_file_warns_and_continues(self, temp_dir):
        root = temp_dir / "root"
        repo = temp_dir / "repo"
        bad = root / "repo" / "bad"
        bad.mkdir(parents=True)
        (bad / ".git").write_text("garbage")
        make_worktree_dir(root / "repo" / "good", make_admin_dir(repo, "good"))

        result = RepoDiscovery(root).discover()

        assert result.repos == [repo]
        assert result.orphans == []
        assert len(result.warnings) == 1
        assert result.warnings[0].path == bad / ".git"
        assert str(result.warnings[0]).startswith("warning: cannot parse link file")

    def test_gitdir_outside_a_repository_warns(self, temp_dir):
        root = temp_dir / "root"
        odd = temp_dir / "somewhere" / "else"
        odd.mkdir(parents=True)
        make_worktree_dir(root / "repo" / "odd", odd)

        result = RepoDiscovery(root).discover()

        assert result.repos == []
        assert result.orphans == []
        assert len(result.warnings) == 1

    def test_standalone_clone_is_not_entered(self, temp_dir):
        root = temp_dir / "root"
        clone = root / "clone"
        (clone / ".git").mkdir(parents=True)
        make_worktree_dir(clone / "nested", temp_dir / "missing/.git/worktrees/nested")

        result = RepoDiscovery(root).discover()

        assert result.orphans == []
        assert result.repos == []

    def test_symlinks_not_followed(self, temp_dir):
        root = temp_dir / "root"
        root.mkdir()
        target = temp_dir / "target"
        make_worktree_dir(target / "feat", temp_dir / "missing/.git/worktrees/feat")
        (root / "linked").symlink_to(target)

        result = RepoDiscovery(root).discover()

        assert result.orphans == []

    def test_real_worktree(self, temp_dir, repo_path, make_worktree, worktrees_root):
        make_worktree("feat")

        result = RepoDiscovery(worktrees_root).discover()

        assert result.repos == [repo_path]
        assert result.orphans == []
