"""
config.py

Runtime settings for the catalog builder. Every value can be overridden
through an environment variable of the same name; values that don't parse
are reported and replaced by the default.
"""
import os
from pathlib import Path

from .utils import get_logger

log = get_logger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)

    if value is None:
        return default

    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast, minimum=None):
    value = os.environ.get(name)

    if value is None or not value.strip():
        return default

    try:
        number = cast(value.strip())
    except ValueError:
        log.warning(f"Invalid {name}={value!r}, using default {default}")
        return default

    if minimum is not None and number < minimum:
        log.warning(f"{name}={value!r} is below {minimum}, using default {default}")
        return default

    return number


# ------------- CONFIG -------------
PLAYLIST_URL = os.environ.get("PLAYLIST_URL", "")          # playlist or link-list used when no sources are given
EPG_URL = os.environ.get("EPG_URL") or None                # explicit guide URL, wins over the discovered ones
ENABLE_EPG = _env_bool("ENABLE_EPG", True)                 # publish a guide URL at all
REMAP_FILE = Path(os.environ.get("REMAP_FILE", "link.epg.remapping"))
FALLBACK_PLAYLIST = os.environ.get("FALLBACK_PLAYLIST") or None   # local copy, stands in for one failed top-level download
TIMEOUT = _env_number("TIMEOUT", 10.0, float, minimum=0.1)        # seconds per request
RETRY_TOTAL = _env_number("RETRY_TOTAL", 3, int, minimum=0)
MAX_THREADS = _env_number("MAX_THREADS", 8, int, minimum=1)       # concurrent playlist downloads
USER_AGENT = os.environ.get("USER_AGENT", "VLC/3.0.18 LibVLC/3.0.18")
# -----------------------------------

ID_PREFIX = "tv"
DEFAULT_GENRE = "Uncategorized"


def resolve_guide_url(discovered: str | None) -> str | None:
    """Pick the guide URL handed to the schedule-data side."""
    if not ENABLE_EPG:
        return None

    return EPG_URL or discovered
