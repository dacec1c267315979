"""
sources.py

Fetch playlist documents from URLs or local paths.

A location may point at an M3U playlist or at a plain "link list" whose
non-empty lines are playlist locations themselves. Downloads run in a
thread pool; results always come back in the order they were asked for.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from threading import Lock
from typing import List, Optional, Sequence
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import config
from .utils import get_logger

log = get_logger(__name__)

M3U_HEADER = "#EXTM3U"


class SourceError(Exception):
    """A playlist could not be read, not even from the local fallback."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason


def make_session(retries: int = config.RETRY_TOTAL) -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": config.USER_AGENT, "Accept": "*/*"})
    retry_strategy = Retry(
        total=retries,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset(["HEAD", "GET", "OPTIONS"]),
        backoff_factor=0.5,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


session = make_session()


def is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def is_playlist(text: str) -> bool:
    return text.lstrip("\ufeff").strip().upper().startswith(M3U_HEADER)


def parse_link_list(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def resolve_link(base: str, link: str) -> str:
    """Listed locations are relative to the link list they come from."""
    if is_remote(link):
        return link

    if is_remote(base):
        return urljoin(base, link)

    if Path(link).is_absolute():
        return link

    return str(Path(base).parent / link)


class Fallback:
    """
    The local playlist copy, handed out at most once per run
    """

    def __init__(self, path: Optional[str]):
        self.path = path
        self.used_by: Optional[str] = None
        self._lock = Lock()

    def read(self, location: str, error: Exception) -> str:
        if not (self.path and Path(self.path).is_file()):
            raise SourceError(location, str(error)) from error

        with self._lock:
            if self.used_by is not None:
                raise SourceError(
                    location, f"{error} (local copy already used for {self.used_by})"
                ) from error

            self.used_by = location

        log.warning(f'Download of "{location}" failed, using local copy "{self.path}"')

        try:
            return Path(self.path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SourceError(location, f"fallback {self.path}: {e}") from e


def read_location(
    location: str,
    timeout: float = config.TIMEOUT,
    fallback: Optional[Fallback] = None,
) -> str:
    if not is_remote(location):
        try:
            return Path(location).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SourceError(location, str(e)) from e

    try:
        r = session.get(location, timeout=timeout, allow_redirects=True)
        r.raise_for_status()
    except requests.exceptions.RequestException as e:
        log.error(f'Failed to fetch "{location}": {e}')

        if fallback is None:
            raise SourceError(location, str(e)) from e

        return fallback.read(location, e)

    r.encoding = "utf-8"

    log.info(f"OK {r.status_code}: {location} ({len(r.text)} chars)")

    return r.text


def fetch_documents(
    locations: Sequence[str],
    max_workers: int = config.MAX_THREADS,
    timeout: float = config.TIMEOUT,
    fallback: Optional[Fallback] = None,
) -> List[str]:
    """Read all locations concurrently, keeping the input order."""
    if not locations:
        return []

    results: List[Optional[str]] = [None] * len(locations)

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(locations)))) as executor:
        futures = {
            executor.submit(read_location, loc, timeout, fallback): idx
            for idx, loc in enumerate(locations)
        }

        for future in as_completed(futures):
            # SourceError propagates: one unreadable playlist fails the run
            results[futures[future]] = future.result()

    return [text or "" for text in results]


def load_documents(
    locations: Sequence[str],
    max_workers: int = config.MAX_THREADS,
    timeout: float = config.TIMEOUT,
) -> List[str]:
    """
    Resolve locations into playlist texts.

    Only the locations given here may fall back to the local playlist copy,
    and only one of them per call. Link lists are expanded one level: each
    listed location is fetched (no fallback) and its text takes the link
    list's place in the output order.
    """
    fallback = Fallback(config.FALLBACK_PLAYLIST)

    documents = []

    for location, text in zip(locations, fetch_documents(locations, max_workers, timeout, fallback)):
        if is_playlist(text):
            documents.append(text)
            continue

        links = [resolve_link(location, link) for link in parse_link_list(text)]

        log.info(f'"{location}" is a link list with {len(links)} playlist(s)')

        documents.extend(fetch_documents(links, max_workers, timeout))

    return documents
