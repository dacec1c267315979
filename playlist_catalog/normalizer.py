from typing import Dict, Optional

from .lexer import RawEntry


class ChannelDraft:
    """Canonical attributes of a single entry, before identity resolution."""

    def __init__(
        self,
        identity: str,
        display_name: str,
        genre: str,
        artwork: Optional[str],
        stream: Dict[str, str],
        headers: Dict[str, str],
        attributes: Dict[str, str],
    ):
        self.identity = identity
        self.display_name = display_name
        self.genre = genre
        self.artwork = artwork
        self.stream = stream
        self.headers = headers
        self.attributes = attributes

    def __repr__(self) -> str:
        return f"ChannelDraft(identity={self.identity!r}, name={self.display_name!r})"


def normalize(entry: RawEntry) -> ChannelDraft:
    attrs = entry.attributes

    identity = (attrs.get("id") or entry.display_name.strip()).lower()

    return ChannelDraft(
        identity=identity,
        display_name=attrs.get("name") or entry.display_name,
        genre=entry.group_title,
        artwork=attrs.get("logo"),
        # label stays the per-entry name so merged streams remain distinguishable
        stream={"url": entry.stream_url, "label": entry.display_name},
        headers=dict(entry.headers),
        attributes=dict(attrs),
    )
