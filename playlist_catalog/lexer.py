"""
lexer.py

Split an M3U Extended playlist into raw entries.

Line classes:
 - #EXTM3U header, optionally carrying url-tvg="..." (guide data)
 - #EXTINF:<duration> attr="value" ...,<name>
 - #EXTVLCOPT:<option>  (only right after #EXTINF)
 - <scheme>://...      stream URL closing the entry

An #EXTINF block that never gets a URL is dropped.
"""
import re
from typing import Dict, List, Optional, Tuple

from . import config

EXTINF = "#EXTINF:"
EXTVLCOPT = "#EXTVLCOPT:"
USER_AGENT_OPT = "http-user-agent="

RE_ATTR = re.compile(r'([a-zA-Z-]+)="([^"]+)"')
RE_GROUP = re.compile(r'group-title="([^"]+)"')
RE_GUIDE_URL = re.compile(r'(?:x-tvg-url|url-tvg)="([^"]+)"')
RE_URL = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://\S")

# walk states
SEEKING = "seeking"
IN_METADATA = "in_metadata"
IN_OPTIONS = "in_options"
AWAITING_URL = "awaiting_url"


class RawEntry:
    """One playlist item: metadata line, its options and the stream URL."""

    def __init__(
        self,
        display_name: str,
        group_title: str = config.DEFAULT_GENRE,
        attributes: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        stream_url: str = "",
    ):
        self.display_name = display_name
        self.group_title = group_title
        self.attributes = attributes or {}
        self.headers = headers or {}
        self.stream_url = stream_url

    def __repr__(self) -> str:
        return f"RawEntry(name={self.display_name!r}, url={self.stream_url[:50]!r})"


def parse_attributes(metadata: str) -> Dict[str, str]:
    """
    Collect name="value" pairs from the #EXTINF payload.
    Keys lose their tvg- prefix: tvg-id -> id, tvg-logo -> logo.
    """
    attrs = {}

    for key, value in RE_ATTR.findall(metadata):
        if key.startswith("tvg-"):
            key = key[len("tvg-"):]

        attrs[key] = value

    return attrs


def parse_metadata(line: str) -> RawEntry:
    metadata = line[len(EXTINF):].strip()

    group = RE_GROUP.search(metadata)

    return RawEntry(
        display_name=metadata.split(",")[-1].strip(),
        group_title=group[1] if group else config.DEFAULT_GENRE,
        attributes=parse_attributes(metadata),
    )


def parse_option(line: str) -> Optional[Tuple[str, str]]:
    opt = line[len(EXTVLCOPT):].strip()

    if opt.lower().startswith(USER_AGENT_OPT):
        return "User-Agent", opt[len(USER_AGENT_OPT):]

    return None


def find_guide_url(header: str) -> Optional[str]:
    if m := RE_GUIDE_URL.search(header):
        return m[1]

    return None


def is_url(line: str) -> bool:
    return bool(RE_URL.match(line))


def segment(document: str) -> Tuple[Optional[str], List[RawEntry]]:
    """Return (guide_url, entries) for a playlist document."""
    lines = [line.strip() for line in document.lstrip("\ufeff").splitlines()]

    guide_url = find_guide_url(lines[0]) if lines else None

    entries: List[RawEntry] = []
    pending: Optional[RawEntry] = None
    state = SEEKING

    i = 0
    n = len(lines)
    while i < n:
        line = lines[i]

        if line.upper().startswith(EXTINF):
            # a previous block without URL is simply replaced
            pending = parse_metadata(line)
            state = IN_METADATA
            i += 1
            continue

        if state in (IN_METADATA, IN_OPTIONS):
            if line.upper().startswith(EXTVLCOPT):
                state = IN_OPTIONS

                if header := parse_option(line):
                    pending.headers[header[0]] = header[1]

                i += 1
                continue

            state = AWAITING_URL

        if state == AWAITING_URL and is_url(line):
            pending.stream_url = line
            entries.append(pending)
            pending = None
            state = SEEKING

        i += 1

    return guide_url, entries
