# brewlab_backend/app/utils/strings.py

import re
import secrets
import string
from unicodedata import normalize

_slug_drop = re.compile(r"[^a-z0-9\s-]")
_slug_space = re.compile(r"\s+")
_ID_ALPHABET = string.ascii_letters + string.digits + "_-"

def slugify(text: str) -> str:
    """Lowercase, drop anything but [a-z0-9 -], spaces -> dashes ("Hario V60" -> "hario-v60")."""
    s = _slug_drop.sub("", (text or "").lower().strip())
    return _slug_space.sub("-", s)

def new_id(size: int = 12) -> str:
    """URL-safe random id (recipe ids, share tokens)."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(size))

def safe_filename(name: str, fallback: str = "file") -> str:
    """
    Make a safe, portable filename:
    - strips any path components
    - normalizes unicode
    - keeps only [A-Za-z0-9._-]
    - collapses repeats and trims leading/trailing dots/underscores
    """
    if not name:
        return fallback
    name = name.split("/")[-1].split("\\")[-1]
    name = normalize("NFKD", name)
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name)
    name = re.sub(r"_+", "_", name).strip("._")
    return name or fallback
