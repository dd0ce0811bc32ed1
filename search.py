from __future__ import annotations
import datetime, functools
from dataclasses import dataclass, field
from typing import Iterable
from publisher.front_matter import PostRecord

DEFAULT_PAGE_SIZE = 5
LASTMOD_FMT = "%Y-%m-%dT%H:%M:%S%z"
DATE_FMT = "%Y-%m-%d"

@dataclass
class ListPostsResult:
    posts: list[PostRecord] = field(default_factory=list)
    total_count: int = 0

    def to_dict(self) -> dict:
        return {"posts": [p.to_dict() for p in self.posts], "totalCount": self.total_count}

def _fields(post: PostRecord) -> tuple[str, str, list[str]]:
    return post.title.lower(), post.slug.lower(), [k.lower() for k in post.keywords]

def _contains(term: str, title: str, slug: str, keywords: list[str]) -> bool:
    return term in title or term in slug or any(term in k for k in keywords)

def matches_query(post: PostRecord, query: str) -> bool:
    """Substring match on title/slug/keywords, then an AND over whitespace tokens."""
    q = query.strip().lower()
    if not q:
        return True
    title, slug, keywords = _fields(post)
    if _contains(q, title, slug, keywords):
        return True
    tokens = q.split()
    if len(q) > 1 and len(tokens) > 1:
        return all(_contains(t, title, slug, keywords) for t in tokens)
    return False

def filter_posts(posts: Iterable[PostRecord], query: str) -> list[PostRecord]:
    return [p for p in posts if matches_query(p, query)]

def _parse(value: str, fmt: str) -> datetime.datetime | None:
    if not value:
        return None
    try:
        return datetime.datetime.strptime(value, fmt)
    except ValueError:
        return None

def _compare_recency(a: PostRecord, b: PostRecord) -> int:
    ta, tb = _parse(a.lastmod, LASTMOD_FMT), _parse(b.lastmod, LASTMOD_FMT)
    if ta is None or tb is None:
        ta, tb = _parse(a.date, DATE_FMT), _parse(b.date, DATE_FMT)
    if ta is None or tb is None or ta == tb:
        return 0
    return -1 if ta > tb else 1

def sort_posts(posts: Iterable[PostRecord]) -> list[PostRecord]:
    """Newest first; pairs without comparable timestamps keep encounter order."""
    return sorted(posts, key=functools.cmp_to_key(_compare_recency))

def paginate(posts: list[PostRecord], page: int, page_size: int) -> ListPostsResult:
    total = len(posts)
    page = max(page, 1)
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    start = (page - 1) * page_size
    if start >= total:
        return ListPostsResult([], total)
    return ListPostsResult(posts[start:min(start + page_size, total)], total)
