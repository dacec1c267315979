"""
remap.py

Operator supplied channel ID remapping ("link.epg.remapping").

File format, one rule per line:

    # comment
    source-id=canonical-id

Both sides are case-insensitive. Broken lines are skipped and counted.
"""
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .utils import get_logger

log = get_logger(__name__)


class RuleSet:
    """Read-only source key -> canonical key lookup."""

    def __init__(self, rules: Optional[Mapping[str, str]] = None, skipped: int = 0):
        self._rules = MappingProxyType(dict(rules or {}))
        self.skipped = skipped

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    def get(self, key: str) -> Optional[str]:
        return self._rules.get(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet(rules={len(self._rules)}, skipped={self.skipped})"


EMPTY = RuleSet()


def parse_rules(text: str) -> RuleSet:
    rules = {}
    skipped = 0

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()

        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        key, value = key.strip().lower(), value.strip().lower()

        if not (sep and key and value):
            log.warning(f"Skipping invalid remap rule at line {lineno}: {line!r}")
            skipped += 1
            continue

        rules[key] = value

    return RuleSet(rules, skipped=skipped)


def load_rules(path: Path) -> RuleSet:
    """
    Load the remap file at `path`.

    A missing file just means no remapping is configured. Any other read
    error is logged and treated the same way so the run can go on.
    """
    path = Path(path)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        log.info(f'No remap file at "{path}", using channel IDs as-is')
        return EMPTY
    except (OSError, UnicodeDecodeError) as e:
        log.error(f'Failed to read remap file "{path}": {e}')
        return EMPTY

    rules = parse_rules(text)

    log.info(f"Loaded {rules.rule_count} remap rule(s)")

    if rules.skipped:
        log.warning(f"Skipped {rules.skipped} invalid remap rule(s)")

    return rules
