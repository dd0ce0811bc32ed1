"""Shared fixtures for the post repository tests."""

from pathlib import Path

import pytest

from repository import PostRepository


class RecordingNotifier:
    def __init__(self):
        self.urls = []

    def notify(self, url):
        self.urls.append(url)


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "content" / "posts").mkdir(parents=True)
    (root / "static" / "images" / "uploads").mkdir(parents=True)
    return root


@pytest.fixture
def repo(site):
    return PostRepository(
        site / "content" / "posts",
        image_dir=site / "static" / "images" / "uploads",
        site_root=site,
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


def write_post(path: Path, front_matter: str, body: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{front_matter}---\n\n{body}", encoding="utf-8")
    return path
