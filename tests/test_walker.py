"""Tests for the date-sharded directory walker."""

import pytest

import walker
from walker import find_in_date_dirs, is_valid_date_dir, iter_date_dirs, iter_post_files


def touch(path, text="x"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "posts"
    touch(root / "2024-01-02" / "a.md")
    touch(root / "2024-01-02" / "notes.txt")
    touch(root / "2024-01-01" / "b.md")
    touch(root / "2024-01-03" / "nested" / "d.md")
    touch(root / "drafts" / "c.md")
    touch(root / "2024-13-01" / "e.md")
    touch(root / "flat.md")
    return root


class TestIsValidDateDir:
    def test_valid(self):
        assert is_valid_date_dir("2024-01-31")
        assert is_valid_date_dir("2024-02-29")

    def test_invalid(self):
        assert not is_valid_date_dir("2023-02-29")
        assert not is_valid_date_dir("2024-1-5")
        assert not is_valid_date_dir("drafts")
        assert not is_valid_date_dir("2024-01-01-extra")


class TestIterPostFiles:
    def test_layout(self, tree):
        names = [p.relative_to(tree).as_posix() for p in iter_post_files(tree)]
        assert names == ["2024-01-01/b.md", "2024-01-02/a.md", "flat.md"]

    def test_missing_root_is_empty(self, tmp_path):
        assert list(iter_post_files(tmp_path / "nope")) == []
        assert list(iter_date_dirs(tmp_path / "nope")) == []

    def test_root_read_failure_raises(self, tmp_path):
        not_a_dir = touch(tmp_path / "file")
        with pytest.raises(OSError):
            list(iter_post_files(not_a_dir))

    def test_unreadable_date_dir_skipped(self, tree, monkeypatch):
        real = walker._entries

        def flaky(directory):
            if directory.name == "2024-01-02":
                raise PermissionError("denied")
            return real(directory)

        monkeypatch.setattr(walker, "_entries", flaky)
        names = [p.name for p in iter_post_files(tree)]
        assert names == ["b.md", "flat.md"]


class TestFindInDateDirs:
    def test_found(self, tree):
        assert find_in_date_dirs(tree, "a.md") == tree / "2024-01-02" / "a.md"

    def test_ignores_flat_and_invalid_dirs(self, tree):
        assert find_in_date_dirs(tree, "flat.md") is None
        assert find_in_date_dirs(tree, "e.md") is None
        assert find_in_date_dirs(tree, "c.md") is None
