"""
aggregator.py

Run lexer -> normalizer -> resolver over every source playlist and fold
the results into one catalog snapshot. Documents are processed strictly in
the given order; that order decides which entry owns a channel.
"""
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from . import config, sources
from .lexer import segment
from .normalizer import normalize
from .remap import EMPTY, RuleSet, load_rules
from .resolver import Channel, PublishedChannel, resolve
from .utils import get_logger

log = get_logger(__name__)


class CatalogSnapshot(NamedTuple):
    genres: Tuple[str, ...]
    channels: Mapping[str, PublishedChannel]
    guide_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "genres": list(self.genres),
            "channels": [ch.to_dict() for ch in self.channels.values()],
        }

        if self.guide_url:
            data["epgUrl"] = self.guide_url

        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)


class DocumentResult(NamedTuple):
    genres: List[str]
    channels: Dict[str, Channel]
    guide_url: Optional[str]


def transform_document(document: str, rules: RuleSet = EMPTY) -> DocumentResult:
    guide_url, entries = segment(document)

    if guide_url:
        log.info(f"Guide URL found in playlist: {guide_url}")

    genres = [config.DEFAULT_GENRE]
    channels: Dict[str, Channel] = {}

    for entry in entries:
        outcome = resolve(normalize(entry), rules, channels)

        if outcome.created and outcome.channel.genres[0] not in genres:
            genres.append(outcome.channel.genres[0])

    log.info(f"Processed {len(entries)} entries into {len(channels)} channel(s), {len(genres)} genre(s)")

    return DocumentResult(genres, channels, guide_url)


def aggregate(documents: Iterable[str], rules: RuleSet = EMPTY) -> CatalogSnapshot:
    """
    Build a fresh catalog from the playlist texts, in order.

    Channel-level fields come from the first document (and entry) that
    produced a given ID; later ones only add streams.
    """
    genres: List[str] = [config.DEFAULT_GENRE]
    channels: Dict[str, Channel] = {}
    guide_urls: List[str] = []

    for num, document in enumerate(documents, start=1):
        result = transform_document(document, rules)

        for channel in result.channels.values():
            if (current := channels.get(channel.identity)) is None:
                channels[channel.identity] = channel.copy()
                continue

            for stream in channel.streams:
                current.add_stream(stream)

            log.debug(f"Document {num}) merged {len(channel.streams)} stream(s) into {channel.identity}")

        for genre in result.genres:
            if genre not in genres:
                genres.append(genre)

        if result.guide_url and result.guide_url not in guide_urls:
            guide_urls.append(result.guide_url)

    return CatalogSnapshot(
        genres=tuple(genres),
        channels=MappingProxyType({ident: ch.freeze() for ident, ch in channels.items()}),
        guide_url=",".join(guide_urls) if guide_urls else None,
    )


def build_catalog(
    locations: Sequence[str],
    remap_path: Optional[Path] = None,
    max_workers: int = config.MAX_THREADS,
    timeout: float = config.TIMEOUT,
) -> CatalogSnapshot:
    """
    Full run: reload remap rules, fetch every playlist, aggregate.

    Raises sources.SourceError if a playlist can't be read; nothing is
    returned in that case.
    """
    rules = load_rules(remap_path or config.REMAP_FILE)

    log.info(f"Loading playlists from {len(locations)} location(s)")

    documents = sources.load_documents(locations, max_workers=max_workers, timeout=timeout)

    snapshot = aggregate(documents, rules)

    log.info(f"Catalog ready: {len(snapshot.channels)} channel(s), {len(snapshot.genres)} genre(s)")

    return snapshot
