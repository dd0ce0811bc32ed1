from __future__ import annotations
import base64, binascii, logging, os, tempfile
from pathlib import Path
from PIL import Image

logger = logging.getLogger(__name__)

MAX_EDGE = 1920
JPEG_QUALITY = 85
UPLOAD_PREFIX = "/images/uploads/"

def compress_image(src_path: str | Path, dst_path: str | Path) -> Path:
    """Fit inside 1920x1920 (never upscales) and re-encode as JPEG q85."""
    dst = Path(dst_path)
    with Image.open(src_path) as img:
        img = img.convert("RGB")
        img.thumbnail((MAX_EDGE, MAX_EDGE), Image.Resampling.LANCZOS)
        dst.parent.mkdir(parents=True, exist_ok=True)
        img.save(dst, format="JPEG", quality=JPEG_QUALITY)
    return dst

def save_and_compress_image(base64_data: str, original_filename: str, dst_path: str | Path) -> Path:
    try:
        data = base64.b64decode(base64_data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 image payload: {e}") from e

    fd, tmp = tempfile.mkstemp(prefix="upload-", suffix=Path(original_filename).suffix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        return compress_image(tmp, dst_path)
    finally:
        os.remove(tmp)

def load_image_base64(image_path: str, site_root: str | Path | None) -> str:
    """Base64 of an image referenced as `/x/y.png` (under site_root/static) or by absolute path."""
    if image_path.startswith("/") and site_root:
        path = Path(site_root) / "static" / image_path.lstrip("/")
    elif os.path.isabs(image_path):
        path = Path(image_path)
    else:
        raise ValueError(f"invalid image path or site root not set: {image_path!r}")
    return base64.b64encode(path.read_bytes()).decode("ascii")

def extract_image_refs(content: str) -> list[str]:
    """Targets of every `![alt](target)` in the markdown, in order."""
    refs = []
    for line in content.split("\n"):
        pos = line.find("![")
        while pos != -1:
            start = line.find("](", pos)
            end = line.find(")", start + 2) if start != -1 else -1
            if end == -1:
                break
            ref = line[start + 2:end].strip().strip("\"'")
            if ref:
                refs.append(ref)
            pos = line.find("![", end + 1)
    return refs

def resolve_image_ref(ref: str, image_dir: str | Path | None, site_root: str | Path | None) -> Path | None:
    if ref.startswith(UPLOAD_PREFIX):
        return Path(image_dir) / Path(ref).name if image_dir else None
    if "://" in ref:
        return None
    if os.path.isabs(ref):
        return Path(ref)
    base = site_root or image_dir
    return Path(base) / ref if base else None

def extract_image_paths(content: str, image_dir: str | Path | None, site_root: str | Path | None) -> list[Path]:
    paths = []
    for ref in extract_image_refs(content):
        p = resolve_image_ref(ref, image_dir, site_root)
        if p is None:
            logger.debug("skipping image reference %s", ref)
            continue
        paths.append(p)
    return paths
