"""Parser for the inline source-chain notation attached to claims.

    chain    := segment ( "→" segment )*
    segment  := typed | fallback
    typed    := NAME "(" TYPE ")" [ "[" URL "]" ]
    fallback := TEXT

``fallback`` is an ordinary production, not an error path: any segment the
typed rule cannot read becomes a secondary link named after the whole
segment, so one garbled hop never costs the rest of the chain.
"""

from __future__ import annotations
import re
from typing import Iterable, List, Optional

from ..models import Claim, ChainLink, SourceType

ARROW = "→"

_TYPED_SEGMENT = re.compile(
    r"^(?P<name>.+?)\s*\(\s*(?P<type>\w+)\s*\)(?:\s*\[\s*(?P<url>.+?)\s*\])?$"
)
_LINK_TYPES = {t.value for t in SourceType}


def _typed(segment: str) -> Optional[ChainLink]:
    m = _TYPED_SEGMENT.match(segment)
    if not m:
        return None
    link_type = m.group("type").lower()
    if link_type not in _LINK_TYPES:
        return None
    name = m.group("name").strip()
    if not name:
        return None
    return ChainLink(name=name, type=SourceType(link_type), url=m.group("url") or None)


def _fallback(segment: str) -> ChainLink:
    return ChainLink(name=segment, type=SourceType.SECONDARY, url=None)


def parse_segment(segment: str) -> ChainLink:
    return _typed(segment) or _fallback(segment)


def parse_chain(raw: Optional[str]) -> List[ChainLink]:
    """Parse ``"A (secondary) [url] → B (primary)"`` into ordered links."""
    if not raw or not raw.strip():
        return []
    segments = (s.strip() for s in raw.split(ARROW))
    return [parse_segment(s) for s in segments if s]


def parse_chains(claims: Iterable[Claim]) -> List[List[ChainLink]]:
    """One link list per claim, in claim order."""
    return [parse_chain(c.chain_raw) for c in claims]
