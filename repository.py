from __future__ import annotations
import dataclasses, datetime, logging, os, tempfile
from pathlib import Path

from publisher.front_matter import INDEX_TITLE, PostRecord, encode_post, parse_post_file, read_title
from publisher.images import extract_image_paths
from platforms.indexnow_client import IndexNowClient, IndexNowNotifier
from search import ListPostsResult, filter_posts, paginate, sort_posts
from slugs import create_safe_filename
from walker import find_in_date_dirs, is_dir_empty, iter_date_dirs, iter_post_files

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Aries"

class PostNotFoundError(LookupError):
    def __init__(self, title: str):
        super().__init__(f"post not found: {title}")
        self.title = title

def _today() -> str:
    return datetime.date.today().isoformat()

def _now() -> str:
    return datetime.datetime.now().astimezone().isoformat(timespec="seconds")

def _file_mode() -> int:
    # what open() would give a new file under the current umask
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask

def _write_atomic(path: Path, text: str):
    fd, tmp = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp, _file_mode())
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise

class PostRepository:
    """Posts stored as `<content_dir>/<YYYY-MM-DD>/<slug>.md`.

    Assumes a single writer owns content_dir.
    """

    def __init__(self, content_dir, image_dir=None, site_root=None,
                 default_author: str = DEFAULT_AUTHOR, site_base_url: str = "",
                 notifier: IndexNowNotifier | None = None):
        self.content_dir = Path(content_dir)
        self.image_dir = Path(image_dir) if image_dir else None
        self.site_root = Path(site_root) if site_root else None
        self.default_author = default_author
        self.site_base_url = site_base_url.rstrip("/")
        self.notifier = notifier

    @classmethod
    def from_settings(cls, settings) -> "PostRepository":
        notifier = None
        ix = settings.indexnow
        if ix.enabled and ix.host and ix.key:
            client = IndexNowClient(ix.host, ix.key, ix.key_location or None, ix.endpoint, ix.timeout)
            notifier = IndexNowNotifier(client, ix.delay_seconds)
        return cls(
            settings.content_dir,
            image_dir=settings.image_dir,
            site_root=settings.site_root,
            default_author=settings.default_author,
            site_base_url=settings.site_base_url,
            notifier=notifier,
        )

    # ---- reads ----

    def list_posts(self, page: int = 1, page_size: int = 5, search: str = "") -> ListPostsResult:
        posts = []
        for path in iter_post_files(self.content_dir):
            post = parse_post_file(path, self.site_root)
            if post.title == INDEX_TITLE:
                continue
            posts.append(post)
        posts = filter_posts(posts, search)
        return paginate(sort_posts(posts), page, page_size)

    def list_titles(self) -> list[str]:
        return [p.stem for p in iter_post_files(self.content_dir)]

    def find_post(self, title: str) -> Path | None:
        """By slug filename across date directories, then by exact front-matter title."""
        path = find_in_date_dirs(self.content_dir, create_safe_filename(title) + ".md")
        if path is not None:
            return path
        for d in iter_date_dirs(self.content_dir):
            try:
                files = sorted(d.glob("*.md"))
            except OSError as e:
                logger.debug("skipping %s: %s", d, e)
                continue
            for f in files:
                try:
                    text = f.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError):
                    continue
                if read_title(text) == title:
                    return f
        return None

    def _require(self, title: str) -> Path:
        path = self.find_post(title)
        if path is None:
            raise PostNotFoundError(title)
        return path

    def load_post(self, title: str) -> str:
        return self._require(title).read_text(encoding="utf-8")

    def check_title_duplicate(self, title: str) -> tuple[bool, Path | None]:
        path = find_in_date_dirs(self.content_dir, create_safe_filename(title) + ".md")
        return path is not None, path

    # ---- writes ----

    def _prepare(self, post: PostRecord) -> tuple[PostRecord, str, str]:
        today = _today()
        stem = create_safe_filename(post.slug or post.title)
        post = dataclasses.replace(
            post,
            date=today,
            lastmod=_now(),
            author=post.author or self.default_author,
            weight=post.weight if post.weight > 0 else 1,
            cover_image_inline=None,
        )
        return post, today, stem

    def _notify(self, today: str, stem: str):
        if self.notifier is None or not self.site_base_url:
            return
        self.notifier.notify(f"{self.site_base_url}/{today}/{stem}/")

    def save_post(self, post: PostRecord) -> Path:
        """Write under today's directory, overwriting any file with the same slug."""
        post, today, stem = self._prepare(post)
        date_dir = self.content_dir / today
        date_dir.mkdir(parents=True, exist_ok=True)
        path = date_dir / f"{stem}.md"
        path.write_text(encode_post(post), encoding="utf-8", newline="")
        logger.info("saved %s", path)
        self._notify(today, stem)
        return path

    def delete_post(self, title: str, *, cascade_images: bool = True) -> Path:
        path = self._require(title)
        if cascade_images:
            content = path.read_text(encoding="utf-8")
            self._delete_images(content)
        path.unlink()
        logger.info("deleted %s", path)
        self._prune(path.parent)
        return path

    def update_post(self, old_title: str, post: PostRecord) -> Path:
        """Replace a post, possibly under a new slug. The old file is kept until the new one is in place."""
        old_path = self._require(old_title)
        post, today, stem = self._prepare(post)
        date_dir = self.content_dir / today
        date_dir.mkdir(parents=True, exist_ok=True)
        new_path = date_dir / f"{stem}.md"
        _write_atomic(new_path, encode_post(post))
        if old_path.resolve() != new_path.resolve():
            old_path.unlink()
            self._prune(old_path.parent)
        logger.info("updated %s -> %s", old_path, new_path)
        self._notify(today, stem)
        return new_path

    def _delete_images(self, content: str):
        for img in extract_image_paths(content, self.image_dir, self.site_root):
            if not img.exists():
                logger.warning("image %s referenced by post is missing", img)
                continue
            try:
                img.unlink()
                logger.info("deleted image %s", img)
            except OSError as e:
                logger.warning("failed to delete image %s: %s", img, e)

    def _prune(self, date_dir: Path):
        try:
            if is_dir_empty(date_dir):
                date_dir.rmdir()
                logger.info("removed empty directory %s", date_dir)
        except OSError as e:
            logger.warning("failed to remove empty directory %s: %s", date_dir, e)
