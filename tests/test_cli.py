"""Tests for the command-line interface"""
import git
import pytest

from conftest import run_git
from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.cli.main import main


class TestArgs:
    """Test argument parsing."""

    def test_aliases_normalized(self):
        assert parse_args(["n", "feat"]).command == "new"
        assert parse_args(["s", "feat"]).command == "switch"
        assert parse_args(["ls"]).command == "list"
        assert parse_args(["remove", "feat"]).command == "rm"
        assert parse_args(["p", "feat"]).command == "path"
        assert parse_args(["ln", ".env"]).command == "link"

    def test_new_arguments(self):
        args = parse_args(["new", "-c", "feat", "develop", "--repo", "/tmp/repo"])

        assert args.name == "feat"
        assert args.base == "develop"
        assert args.create
        assert args.repo == "/tmp/repo"

    def test_rm_many_targets(self):
        args = parse_args(["rm", "a", "b", "c", "--force"])

        assert args.targets == ["a", "b", "c"]
        assert args.force

    def test_prune_flags(self):
        args = parse_args(["prune", "-n", "--gone"])

        assert args.dry_run
        assert args.gone
        assert args.repo is None

    def test_global_flags(self):
        args = parse_args(["-v", "list"])

        assert args.verbose
        assert not args.debug

    def test_missing_command_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2

    def test_rm_requires_target(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["rm"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("wt ")


class TestMain:
    """Test commands end to end: stdout, stderr and exit codes."""

    def test_new_prints_path(self, capsys, repo_path, worktrees_root):
        code = main(["new", "-c", "feat", "--repo", str(repo_path)])

        captured = capsys.readouterr()
        expected = worktrees_root / "test_repo" / "feat"
        assert code == 0
        assert captured.out == f"{expected}\n"
        assert "wt: creating branch 'feat'" in captured.err
        assert expected.is_dir()

    def test_path_prints_only_path(self, capsys, repo_path, worktrees_root):
        main(["new", "-c", "feat", "--repo", str(repo_path)])
        capsys.readouterr()

        code = main(["path", "feat", "--repo", str(repo_path)])

        captured = capsys.readouterr()
        assert code == 0
        assert captured.out == f"{worktrees_root / 'test_repo' / 'feat'}\n"
        assert captured.err == ""

    def test_path_not_found(self, capsys, repo_path, worktrees_root):
        code = main(["path", "nope", "--repo", str(repo_path)])

        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        assert "wt: no worktree found for branch: nope" in captured.err

    def test_base_without_create_is_usage_error(self, capsys, repo_path, worktrees_root):
        code = main(["new", "feat", "main", "--repo", str(repo_path)])

        assert code == 2
        assert "requires --create" in capsys.readouterr().err

    def test_not_a_repository(self, capsys, worktrees_root):
        code = main(["list"])

        assert code == 1
        assert "not a git repository" in capsys.readouterr().err

    def test_switch_twice(self, capsys, repo_path, worktrees_root):
        main(["switch", "feat", "--repo", str(repo_path)])
        first = capsys.readouterr()

        main(["switch", "feat", "--repo", str(repo_path)])
        second = capsys.readouterr()

        assert first.out == second.out
        assert "creating branch 'feat'" in first.err
        assert second.err == ""

    def test_list_porcelain(self, capsys, repo_path, worktrees_root):
        code = main(["list", "--porcelain", "--repo", str(repo_path)])

        captured = capsys.readouterr()
        assert code == 0
        assert captured.out.startswith(f"worktree {repo_path}\n")

    def test_list_table(self, capsys, repo_path, worktrees_root):
        main(["new", "-c", "feat", "--repo", str(repo_path)])
        capsys.readouterr()

        code = main(["ls", "--repo", str(repo_path)])

        out = capsys.readouterr().out
        assert code == 0
        assert "BRANCH" in out
        assert "main" in out
        assert "feat" in out

    def test_rm_partial_failure_exit_code(self, capsys, repo_path, worktrees_root):
        main(["new", "-c", "a", "--repo", str(repo_path)])
        main(["new", "-c", "b", "--repo", str(repo_path)])
        capsys.readouterr()

        code = main(["rm", "a", "missing", "b", "--repo", str(repo_path)])

        err = capsys.readouterr().err
        assert code == 1
        assert "removed worktree and branch 'a'" in err
        assert "removed worktree and branch 'b'" in err
        assert "no worktree found for branch: missing" in err
        assert "1 worktree(s) could not be removed" in err
        assert not (worktrees_root / "test_repo").exists()

    def test_rm_success(self, capsys, repo_path, worktrees_root):
        main(["new", "-c", "a", "--repo", str(repo_path)])

        assert main(["rm", "a", "--repo", str(repo_path)]) == 0

    def test_prune_dry_run(self, capsys, repo_path, origin_repo, worktrees_root):
        main(["new", "-c", "feat", "--repo", str(repo_path)])
        capsys.readouterr()

        code = main(["prune", "--dry-run", "--repo", str(repo_path)])

        err = capsys.readouterr().err
        assert code == 0
        assert "would remove feat (merged)" in err
        assert "would remove 1 item(s) (dry run)" in err
        assert (worktrees_root / "test_repo" / "feat").is_dir()

    def test_prune(self, capsys, repo_path, origin_repo, worktrees_root):
        main(["new", "-c", "feat", "--repo", str(repo_path)])
        capsys.readouterr()

        code = main(["prune", "--repo", str(repo_path)])

        err = capsys.readouterr().err
        assert code == 0
        assert "pruned 1 item(s)" in err
        assert not (worktrees_root / "test_repo" / "feat").exists()

    def test_prune_shows_warnings(self, capsys, repo_path, temp_dir, worktrees_root):
        git.Repo.init(temp_dir / "empty-origin.git", bare=True).close()
        run_git(repo_path, "remote", "add", "origin", str(temp_dir / "empty-origin.git"))

        code = main(["prune", "--repo", str(repo_path)])

        assert code == 0
        assert "wt: warning: cannot determine default branch" in capsys.readouterr().err

    def test_link(self, capsys, repo_path, worktrees_root):
        (repo_path / ".env").write_text("X=1\n")
        main(["new", "-c", "feat", "--repo", str(repo_path)])
        capsys.readouterr()

        code = main(["link", ".env", "--repo", str(repo_path)])

        assert code == 0
        assert "wt: linked .env" in capsys.readouterr().err
        assert (worktrees_root / "test_repo" / "feat" / ".env").is_symlink()

    def test_link_rejects_absolute_path(self, capsys, repo_path, worktrees_root):
        run_git(repo_path, "branch", "feat")
        main(["new", "feat", "--repo", str(repo_path)])

        assert main(["link", "/etc/hosts", "--repo", str(repo_path)]) == 2
