#!/usr/bin/env python3
"""
python -m playlist_catalog

Build the channel catalog from one or more playlists and write it as JSON.

Usage examples:

    # configured playlist (PLAYLIST_URL), catalog on stdout
    python -m playlist_catalog

    # explicit sources, in priority order (first one owns shared channels)
    python -m playlist_catalog https://example.org/a.m3u local/b.m3u8 -o catalog.json

    # custom remap file
    python -m playlist_catalog link.playlist --remap link.epg.remapping
"""
import argparse
import logging
import sys
from pathlib import Path

from . import config
from .aggregator import build_catalog
from .sources import SourceError
from .utils import get_logger, set_level

log = get_logger(__name__)


def main(argv=None):
    p = argparse.ArgumentParser(
        prog="playlist_catalog",
        description="Merge M3U playlists into a normalized live-TV channel catalog",
    )
    p.add_argument("sources", nargs="*", help="Playlist URLs, local paths or link lists (processed in order)")
    p.add_argument("--remap", type=Path, default=config.REMAP_FILE, help="Channel ID remap file (key=value per line)")
    p.add_argument("-o", "--output", type=Path, help="Write catalog JSON here instead of stdout")
    p.add_argument("-t", "--threads", type=int, default=config.MAX_THREADS, help="Concurrent playlist downloads")
    p.add_argument("--timeout", type=float, default=config.TIMEOUT, help="Request timeout in seconds")
    p.add_argument("--no-epg", action="store_true", help="Do not publish a guide URL")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    args = p.parse_args(argv)

    if args.debug:
        set_level(logging.DEBUG)

    sources = args.sources or ([config.PLAYLIST_URL] if config.PLAYLIST_URL else [])

    if not sources:
        p.error("no sources given and PLAYLIST_URL is not set")

    try:
        snapshot = build_catalog(sources, remap_path=args.remap, max_workers=args.threads, timeout=args.timeout)
    except SourceError as e:
        log.error(f"Catalog build failed: {e}")
        return 1

    guide_url = None if args.no_epg else config.resolve_guide_url(snapshot.guide_url)

    if guide_url:
        log.info(f"Guide data URL: {guide_url}")

    snapshot = snapshot._replace(guide_url=guide_url)

    text = snapshot.to_json() + "\n"

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        log.info(f'Catalog written to "{args.output}"')
    else:
        sys.stdout.write(text)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
