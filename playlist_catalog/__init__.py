"""Build a genre-indexed live-TV channel catalog from M3U playlists."""
from .aggregator import CatalogSnapshot, aggregate, build_catalog
from .remap import RuleSet, load_rules, parse_rules
from .sources import SourceError

__version__ = "1.6.0"

__all__ = [
    "CatalogSnapshot",
    "RuleSet",
    "SourceError",
    "aggregate",
    "build_catalog",
    "load_rules",
    "parse_rules",
]
