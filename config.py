from __future__ import annotations
import os, yaml
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

BASE = Path(__file__).resolve().parent
DEFAULT_CONFIG = BASE / "config.yaml"

class ConfigError(ValueError):
    pass

@dataclass
class IndexNowSettings:
    enabled: bool = False
    endpoint: str = "https://api.indexnow.org/IndexNow"
    host: str = ""
    key: str = ""
    key_location: str = ""
    delay_seconds: float = 2.0
    timeout: float = 30.0

@dataclass
class Settings:
    content_dir: Path = Path("content/posts")
    image_dir: Path | None = None
    site_root: Path | None = None
    default_author: str = "Aries"
    page_size: int = 5
    site_base_url: str = ""
    indexnow: IndexNowSettings = field(default_factory=IndexNowSettings)

def _expand(v):
    return os.path.expandvars(v) if isinstance(v, str) else v

def _path(v) -> Path | None:
    v = _expand(v)
    return Path(v).expanduser() if v else None

def _float(v, default: float) -> float:
    if v is None:
        return default
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"expected a number, got {v!r}") from e

def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping")
    return data

def load_settings(path: str | Path | None = None) -> Settings:
    """config.yaml (optional) + .env + environment overrides."""
    load_dotenv()
    cfg_path = Path(path) if path else DEFAULT_CONFIG
    if path or cfg_path.exists():
        cfg = _read_yaml(cfg_path)
    else:
        cfg = {}

    inc = cfg.get("indexnow") or {}
    if not isinstance(inc, dict):
        raise ConfigError("'indexnow' must be a mapping")
    indexnow = IndexNowSettings(
        enabled=bool(inc.get("enabled", False)),
        endpoint=_expand(inc.get("endpoint")) or IndexNowSettings.endpoint,
        host=os.getenv("INDEXNOW_HOST") or _expand(inc.get("host")) or "",
        key=os.getenv("INDEXNOW_KEY") or _expand(inc.get("key")) or "",
        key_location=_expand(inc.get("key_location")) or "",
        delay_seconds=_float(inc.get("delay_seconds"), 2.0),
        timeout=_float(inc.get("timeout"), 30.0),
    )

    try:
        page_size = int(cfg.get("page_size", 5))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"page_size must be an integer: {e}") from e

    return Settings(
        content_dir=_path(os.getenv("HUGO_CONTENT_DIR") or cfg.get("content_dir")) or Settings.content_dir,
        image_dir=_path(os.getenv("HUGO_IMAGE_DIR") or cfg.get("image_dir")),
        site_root=_path(os.getenv("HUGO_SITE_ROOT") or cfg.get("site_root")),
        default_author=_expand(cfg.get("default_author")) or Settings.default_author,
        page_size=page_size,
        site_base_url=(os.getenv("HUGO_SITE_BASE_URL") or _expand(cfg.get("site_base_url")) or "").rstrip("/"),
        indexnow=indexnow,
    )
