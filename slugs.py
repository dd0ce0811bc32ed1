MAX_SLUG_LEN = 50
DEFAULT_SLUG = "post"

def _keep(ch: str) -> bool:
    return ch.isalpha() or ch.isdecimal() or ch in "-_"

def _lower(s: str) -> str:
    # one code point per character: "İ".lower() would add a combining dot
    return "".join(ch.lower()[:1] for ch in s)

def create_safe_filename(title: str) -> str:
    """Turn a title (or custom slug) into the stem used for `<date>/<stem>.md`."""
    s = "".join(ch if _keep(ch) else "-" for ch in _lower(title))
    # two passes only: runs of five or more hyphens keep a "--"
    s = s.replace("--", "-")
    s = s.replace("--", "-")
    s = s[:MAX_SLUG_LEN].strip("-_")
    return s or DEFAULT_SLUG

def split_keywords(text: str) -> list[str]:
    out = []
    for k in text.split(","):
        k = k.strip()
        if k and k not in out:
            out.append(k)
    return out
