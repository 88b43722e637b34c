"""Source normalization and deduplication.

Providers routinely list the same outlet twice ("BBC News" with a URL and
"bbc news" without one). Sources are keyed by normalized outlet name and,
independently, by normalized URL; any shared key puts two records in the
same group, transitively. Each group collapses to one canonical Source and
every raw index is mapped to the canonical position of its group.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Sequence, Tuple

from ..models import AnalysisPayload, Citation, Edge, IntegrityWarning, Source
from ..monitoring_metrics import INTEGRITY_WARNINGS
from .url_norm import name_key, url_key, url_quality

logger = logging.getLogger(__name__)


class _DisjointSet:
    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            # lower index stays root so the first occurrence anchors the group
            if rb < ra:
                ra, rb = rb, ra
            self.parent[rb] = ra


def source_keys(source: Source) -> List[str]:
    keys = []
    name = name_key(source.outlet_name)
    if name:
        keys.append(f"name:{name}")
    url = url_key(source.url)
    if url:
        keys.append(f"url:{url}")
    return keys


def merge_sources(base: Source, other: Source) -> Source:
    """Fold ``other`` into ``base``; non-null beats null, better URL wins."""
    update = {}
    if not base.outlet_name.strip() and other.outlet_name.strip():
        update["outlet_name"] = other.outlet_name
    if url_quality(other.url) > url_quality(base.url):
        update["url"] = other.url
    for field in ("political_lean", "category", "publish_date"):
        if getattr(base, field) is None and getattr(other, field) is not None:
            update[field] = getattr(other, field)
    if not base.image_url and other.image_url:
        update["image_url"] = other.image_url
    base_extra = base.model_extra or {}
    for key, value in (other.model_extra or {}).items():
        if key not in base_extra:
            update[key] = value
    if not update:
        return base
    return base.model_copy(update=update)


def normalize_sources(sources: Sequence[Source]) -> Tuple[List[Source], Dict[int, int]]:
    """
    Collapse duplicate sources.

    Args:
        sources: Raw sources in payload order

    Returns:
        (canonical sources in order of first occurrence, raw index -> canonical index)
    """
    groups = _DisjointSet(len(sources))
    owner: Dict[str, int] = {}
    for i, src in enumerate(sources):
        for key in source_keys(src):
            if key in owner:
                groups.union(owner[key], i)
            else:
                owner[key] = i

    canonical: List[Source] = []
    root_slot: Dict[int, int] = {}
    index_map: Dict[int, int] = {}
    for i, src in enumerate(sources):
        root = groups.find(i)
        if root not in root_slot:
            root_slot[root] = len(canonical)
            canonical.append(src)
        else:
            slot = root_slot[root]
            canonical[slot] = merge_sources(canonical[slot], src)
        index_map[i] = root_slot[root]

    merged = len(sources) - len(canonical)
    if merged:
        logger.info(f"Deduplicated sources: {len(sources)} -> {len(canonical)} ({merged} merged)")
    return canonical, index_map


def remap_payload(payload: AnalysisPayload, index_map: Dict[int, int],
                  canonical: List[Source]) -> Tuple[AnalysisPayload, List[IntegrityWarning]]:
    """Point citations and edges at canonical sources.

    Entries referring to a raw index with no mapping are dropped and reported.
    """
    warnings: List[IntegrityWarning] = []

    citations: List[Citation] = []
    for pos, c in enumerate(payload.citations):
        if c.source_index not in index_map:
            warnings.append(IntegrityWarning(
                kind="citation", index=pos,
                reason=f"source_index {c.source_index} does not match any source"))
            continue
        citations.append(c.model_copy(update={"source_index": index_map[c.source_index]}))

    edges: List[Edge] = []
    for pos, e in enumerate(payload.edges):
        missing = [i for i in (e.source_index, e.target_index) if i not in index_map]
        if missing:
            warnings.append(IntegrityWarning(
                kind="edge", index=pos,
                reason=f"endpoint {missing[0]} does not match any source"))
            continue
        edges.append(e.model_copy(update={
            "source_index": index_map[e.source_index],
            "target_index": index_map[e.target_index],
        }))

    for w in warnings:
        logger.warning(f"Dropped {w.kind} #{w.index}: {w.reason}")
        INTEGRITY_WARNINGS.labels(kind=w.kind).inc()

    remapped = payload.model_copy(update={"sources": canonical, "citations": citations, "edges": edges})
    return remapped, warnings
