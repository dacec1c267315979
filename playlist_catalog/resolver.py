"""
resolver.py

Turn channel drafts into catalog channels. Drafts whose (remapped) ID is
already known are merged into the existing channel as extra streams; the
first channel seen for an ID keeps its name, genre and logo.
"""
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

from . import config
from .normalizer import ChannelDraft
from .remap import RuleSet
from .utils import get_logger

log = get_logger(__name__)


class PublishedChannel(NamedTuple):
    """Read-only form of a Channel, as handed out in a catalog snapshot."""

    key: str
    display_name: str
    genres: Tuple[str, ...]
    artwork: Optional[str]
    streams: Tuple[Mapping[str, str], ...]
    headers: Mapping[str, str]
    attributes: Mapping[str, str]

    @property
    def identity(self) -> str:
        return f"{config.ID_PREFIX}|{self.key}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.identity,
            "type": "tv",
            "name": self.display_name,
            "genre": list(self.genres),
        }

        if self.artwork:
            data["logo"] = self.artwork

        data["description"] = f"Channel: {self.display_name}"
        data["streams"] = [{"url": s["url"], "name": s["label"]} for s in self.streams]
        data["headers"] = dict(self.headers)
        data["tvg"] = dict(self.attributes)

        return data


class Channel:
    """A catalog channel with one or more candidate streams."""

    def __init__(
        self,
        key: str,
        display_name: str,
        genre: str,
        artwork: Optional[str],
        streams: List[Dict[str, str]],
        headers: Optional[Dict[str, str]] = None,
        attributes: Optional[Dict[str, str]] = None,
    ):
        self.key = key
        self.display_name = display_name
        self.genres = [genre]
        self.artwork = artwork
        self.streams = streams
        self.headers = headers or {}
        self.attributes = attributes or {}

    @property
    def identity(self) -> str:
        return f"{config.ID_PREFIX}|{self.key}"

    @classmethod
    def from_draft(cls, draft: ChannelDraft, key: str) -> "Channel":
        attributes = dict(draft.attributes)
        attributes["id"] = key
        attributes["name"] = draft.display_name

        return cls(
            key=key,
            display_name=draft.display_name,
            genre=draft.genre,
            artwork=draft.artwork,
            streams=[dict(draft.stream)],
            headers=dict(draft.headers),
            attributes=attributes,
        )

    def add_stream(self, stream: Dict[str, str]) -> None:
        self.streams.append(dict(stream))

    def copy(self) -> "Channel":
        channel = Channel(
            key=self.key,
            display_name=self.display_name,
            genre=self.genres[0],
            artwork=self.artwork,
            streams=[dict(s) for s in self.streams],
            headers=dict(self.headers),
            attributes=dict(self.attributes),
        )
        channel.genres = list(self.genres)
        return channel

    def freeze(self) -> "PublishedChannel":
        return PublishedChannel(
            key=self.key,
            display_name=self.display_name,
            genres=tuple(self.genres),
            artwork=self.artwork,
            streams=tuple(MappingProxyType(dict(s)) for s in self.streams),
            headers=MappingProxyType(dict(self.headers)),
            attributes=MappingProxyType(dict(self.attributes)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.freeze().to_dict()

    def __repr__(self) -> str:
        return f"Channel(id={self.identity!r}, streams={len(self.streams)})"


class MergeOutcome(NamedTuple):
    channel: Channel
    created: bool
    remapped_from: Optional[str] = None
    conflict: bool = False


def resolve(draft: ChannelDraft, rules: RuleSet, existing: Dict[str, Channel]) -> MergeOutcome:
    """
    Place `draft` into `existing` (keyed by canonical channel ID).

    A remap pointing at an ID some other entry already claimed is reported
    as a conflict, but the draft is still merged into the first channel.
    """
    key = draft.identity
    remapped_from = None
    conflict = False

    if (target := rules.get(key)) is not None:
        target = target.lower()

        if target != key and target in existing:
            conflict = True
            log.warning(
                f'Channel ID conflict for {key} -> {target}: "{target}" is already assigned to another channel'
            )

        log.info(f"Applied remapping: {key} -> {target}")

        remapped_from, key = key, target

    if (channel := existing.get(key)) is not None:
        channel.add_stream(draft.stream)

        log.debug(f"Added extra stream for {key} ({len(channel.streams)} total)")

        return MergeOutcome(channel, False, remapped_from, conflict)

    channel = Channel.from_draft(draft, key)

    existing[key] = channel

    return MergeOutcome(channel, True, remapped_from, conflict)
