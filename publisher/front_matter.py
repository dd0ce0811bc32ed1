from __future__ import annotations
import base64, enum, logging, re, yaml
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DELIMITER = "---"
INDEX_TITLE = "_index"

@dataclass
class PostRecord:
    title: str
    slug: str = ""
    cover_image: str = ""
    cover_image_inline: bytes | None = None  # never written back to disk
    keywords: list[str] = field(default_factory=list)
    hidden_in_list: bool = True
    date: str = ""
    lastmod: str = ""
    tags: list[str] = field(default_factory=list)
    author: str = ""
    description: str = ""
    weight: int = 1
    body: str = ""

    def to_dict(self) -> dict:
        inline = self.cover_image_inline
        return {
            "title": self.title,
            "slug": self.slug,
            "coverImage": self.cover_image,
            "coverImageBase64": base64.b64encode(inline).decode("ascii") if inline else "",
            "keywords": list(self.keywords),
            "hiddenInList": self.hidden_in_list,
            "date": self.date,
            "lastmod": self.lastmod,
            "tags": list(self.tags),
            "author": self.author,
            "description": self.description,
            "weight": self.weight,
        }

def _escape(s: str) -> str:
    return (s.replace("\\", "\\\\").replace('"', '\\"')
             .replace("\n", "\\n").replace("\r", "\\r"))

def _quoted(s: str) -> str:
    return f'"{_escape(s)}"'

def encode_post(post: PostRecord) -> str:
    lines = [
        DELIMITER,
        f"title: {_quoted(post.title)}",
        f"date: {post.date}",
        f"lastmod: {post.lastmod}",
        f"description: {_quoted(post.description)}",
    ]
    if post.tags:
        lines.append("tags: [" + ", ".join(_quoted(t) for t in post.tags) + "]")
    lines.append(f"author: [{_quoted(post.author)}]")
    if post.cover_image:
        lines += [
            "cover:",
            f"    image: {post.cover_image}",
            f"    hiddenInList: {'true' if post.hidden_in_list else 'false'}",
        ]
    keywords = list(dict.fromkeys(k for k in post.keywords if k))
    if keywords:
        lines.append("keywords:")
        lines += [f"    - {_quoted(k)}" for k in keywords]
    lines.append(f"weight: {post.weight}")
    if post.slug:
        lines.append(f"slug: {_quoted(post.slug)}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n\n" + post.body

# ---- decoding ----

class _State(enum.Enum):
    ROOT = "root"
    IN_KEYWORDS = "keywords"
    IN_COVER = "cover"

_UNESCAPE_RE = re.compile(r'\\(["\\nr])')
_UNESCAPED = {"n": "\n", "r": "\r"}

def _scalar(raw: str) -> str:
    v = raw.strip()
    if len(v) >= 2 and v[0] == '"' and v[-1] == '"':
        return _UNESCAPE_RE.sub(lambda m: _UNESCAPED.get(m.group(1), m.group(1)), v[1:-1])
    return v

def _inline_list(raw: str) -> list[str]:
    v = raw.strip()
    if not v:
        return []
    try:
        data = yaml.safe_load(v)
    except yaml.YAMLError:
        data = None
    if isinstance(data, list):
        return [str(x) for x in data if x is not None]
    return [_scalar(x) for x in v.strip("[]").split(",") if x.strip()]

def _indented(line: str) -> bool:
    return line[:1] in (" ", "\t")

def split_front_matter(text: str) -> tuple[str, str] | None:
    """Return (front matter, body) or None when the delimiters are missing."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        return None
    offset = len(lines[0])
    for line in lines[1:]:
        if line.rstrip("\r\n") == DELIMITER:
            fm = text[len(lines[0]):offset]
            body = text[offset + len(line):]
            if body.startswith("\n"):
                body = body[1:]
            return fm, body
        offset += len(line)
    return None

def _apply_root_key(post: PostRecord, stripped: str) -> _State:
    key, _, value = stripped.partition(":")
    if key == "title":
        post.title = _scalar(value)
    elif key == "date":
        post.date = _scalar(value)
    elif key == "lastmod":
        post.lastmod = _scalar(value)
    elif key == "slug":
        post.slug = _scalar(value)
    elif key == "description":
        post.description = _scalar(value)
    elif key == "weight":
        try:
            post.weight = int(_scalar(value))
        except ValueError:
            logger.debug("ignoring non-integer weight %r", value)
    elif key == "tags":
        post.tags = _inline_list(value)
    elif key == "author":
        authors = _inline_list(value)
        post.author = authors[0] if authors else ""
    elif key == "keywords":
        return _State.IN_KEYWORDS
    elif key == "cover":
        return _State.IN_COVER
    return _State.ROOT

def parse_front_matter(front_matter: str, post: PostRecord) -> PostRecord:
    state = _State.ROOT
    for line in front_matter.split("\n"):
        line = line.rstrip("\r")
        stripped = line.strip()

        if state is _State.IN_KEYWORDS:
            if stripped.startswith("-"):
                post.keywords.append(_scalar(stripped[1:]))
                continue
            if not stripped or _indented(line):
                continue
            state = _State.ROOT

        elif state is _State.IN_COVER:
            if _indented(line) or not stripped:
                key, _, value = stripped.partition(":")
                if key == "image":
                    post.cover_image = _scalar(value)
                elif key == "hiddenInList":
                    post.hidden_in_list = _scalar(value).lower() == "true"
                continue
            state = _State.ROOT

        if ":" in stripped:
            state = _apply_root_key(post, stripped)
    return post

def parse_post(text: str, fallback_title: str, site_root: str | Path | None = None) -> PostRecord:
    """Best-effort decode of a stored post; never raises on malformed input."""
    post = PostRecord(title=fallback_title)
    parts = split_front_matter(text)
    if parts is None:
        return post
    fm, post.body = parts
    parse_front_matter(fm, post)
    if not post.title:
        post.title = fallback_title
    if post.cover_image and site_root:
        post.cover_image_inline = _read_cover(post.cover_image, site_root)
    return post

def _read_cover(cover_image: str, site_root: str | Path) -> bytes | None:
    path = Path(site_root) / "static" / cover_image.lstrip("/")
    try:
        return path.read_bytes()
    except OSError as e:
        logger.debug("cover image unavailable %s: %s", path, e)
        return None

def parse_post_file(path: str | Path, site_root: str | Path | None = None) -> PostRecord:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("could not read %s: %s", path, e)
        return PostRecord(title=path.stem)
    return parse_post(text, path.stem, site_root)

def read_title(text: str) -> str | None:
    """Title field of the front matter only, without parsing the rest."""
    parts = split_front_matter(text)
    if parts is None:
        return None
    for line in parts[0].split("\n"):
        stripped = line.strip()
        if stripped.startswith("title:"):
            return _scalar(stripped[len("title:"):])
    return None
