import os

import pytest

from quickfuzz.repo_expander import expand_repositories, is_repository_root


def test_repository_root_is_kept_as_is(make_repo):
    proj = make_repo("proj")
    make_repo("proj/vendor/lib")
    assert expand_repositories([str(proj)]) == [str(proj)]


def test_non_repository_is_replaced_by_repository_children(make_repo):
    src = make_repo("src", git=False)
    repo = make_repo("src/only-repo")
    make_repo("src/plain", git=False)
    assert expand_repositories([str(src)]) == [str(repo)]


def test_children_in_lexical_order(make_repo):
    src = make_repo("src", git=False)
    for name in ["zeta", "alpha", "mid"]:
        make_repo(f"src/{name}")
    assert expand_repositories([str(src)]) == [
        str(src / "alpha"), str(src / "mid"), str(src / "zeta")
    ]


def test_directory_without_repositories_yields_nothing(make_repo):
    empty = make_repo("empty", git=False)
    make_repo("empty/child", git=False)
    assert expand_repositories([str(empty)]) == []


def test_only_immediate_children_are_examined(make_repo):
    top = make_repo("top", git=False)
    make_repo("top/group", git=False)
    make_repo("top/group/deep-repo")
    assert expand_repositories([str(top)]) == []


def test_saved_order_is_preserved_and_missing_dirs_skipped(make_repo, tmp_path):
    b = make_repo("b")
    parent = make_repo("parent", git=False)
    a = make_repo("parent/a")
    missing = tmp_path / "gone"
    assert expand_repositories([str(b), str(missing), str(parent)]) == [str(b), str(a)]


def test_worktree_git_file_counts_as_root(tmp_path):
    wt = tmp_path / "worktree"
    wt.mkdir()
    (wt / ".git").write_text("gitdir: /elsewhere/.git/worktrees/worktree\n")
    assert is_repository_root(wt)
    assert expand_repositories([str(wt)]) == [str(wt)]


def test_files_next_to_repositories_are_ignored(make_repo):
    src = make_repo("src", git=False)
    (src / "README").write_text("")
    repo = make_repo("src/repo")
    assert expand_repositories([str(src)]) == [str(repo)]

def test_unsearchable_saved_directory_yields_nothing(make_repo):
    src = make_repo("src", git=False)
    make_repo("src/api")
    # listable but not searchable: iterdir works, stat of each child fails
    src.chmod(0o444)
    try:
        if os.geteuid() == 0:
            pytest.skip("root bypasses permission bits")
        assert expand_repositories([str(src)]) == []
    finally:
        src.chmod(0o700)


def test_child_stat_errors_are_not_raised(make_repo, monkeypatch):
    src = make_repo("src", git=False)
    make_repo("src/api")
    real_stat = os.stat

    def stat(path, *args, **kwargs):
        if os.path.dirname(os.fspath(path)) == str(src):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_stat(path, *args, **kwargs)

    monkeypatch.setattr(os, "stat", stat)
    assert expand_repositories([str(src)]) == []
