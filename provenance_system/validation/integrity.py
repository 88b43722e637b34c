"""Referential integrity for citations and source edges."""

import logging
from typing import List, Set, Tuple, Union

from ..models import AnalysisPayload, Citation, Edge, IntegrityWarning
from ..monitoring_metrics import INTEGRITY_WARNINGS

logger = logging.getLogger(__name__)


def _in_range(i: int, size: int) -> bool:
    return 0 <= i < size


def _position(item: Union[Citation, Edge], pos: int) -> int:
    # warnings point into the provider's list, not the remapped one
    return item.raw_index if item.raw_index is not None else pos


def check_integrity(payload: AnalysisPayload) -> Tuple[AnalysisPayload, List[IntegrityWarning]]:
    """
    Drop every citation or edge that cannot be resolved.

    Runs after source deduplication, so source indices are canonical. A source
    with no outlet name keeps its index but gets no graph node, so anything
    touching it is dropped here too. Never raises: each dropped item yields
    one warning.

    Args:
        payload: Payload with canonical sources and remapped indices

    Returns:
        (payload with only resolvable citations/edges, warnings)
    """
    n_claims = len(payload.claims)
    n_sources = len(payload.sources)
    unnamed = {j for j, src in enumerate(payload.sources) if not src.outlet_name.strip()}
    warnings: List[IntegrityWarning] = []

    citations: List[Citation] = []
    seen_citations: Set[Tuple[int, int, str]] = set()
    for pos, c in enumerate(payload.citations):
        if not _in_range(c.claim_index, n_claims):
            reason = f"claim_index {c.claim_index} out of range (0..{n_claims - 1})"
        elif not _in_range(c.source_index, n_sources):
            reason = f"source_index {c.source_index} out of range (0..{n_sources - 1})"
        elif c.source_index in unnamed:
            reason = f"source {c.source_index} has no outlet name"
        elif (c.claim_index, c.source_index, c.excerpt) in seen_citations:
            reason = "duplicate citation"
        else:
            seen_citations.add((c.claim_index, c.source_index, c.excerpt))
            citations.append(c)
            continue
        warnings.append(IntegrityWarning(kind="citation", index=_position(c, pos), reason=reason))

    edges: List[Edge] = []
    seen_edges: Set[Tuple[int, int, str]] = set()
    for pos, e in enumerate(payload.edges):
        if not _in_range(e.source_index, n_sources):
            reason = f"source_index {e.source_index} out of range (0..{n_sources - 1})"
        elif not _in_range(e.target_index, n_sources):
            reason = f"target_index {e.target_index} out of range (0..{n_sources - 1})"
        elif e.source_index == e.target_index:
            reason = f"self-referencing edge on source {e.source_index}"
        elif e.source_index in unnamed or e.target_index in unnamed:
            blank = e.source_index if e.source_index in unnamed else e.target_index
            reason = f"source {blank} has no outlet name"
        elif (e.source_index, e.target_index, e.type.value) in seen_edges:
            reason = "duplicate edge"
        else:
            seen_edges.add((e.source_index, e.target_index, e.type.value))
            edges.append(e)
            continue
        warnings.append(IntegrityWarning(kind="edge", index=_position(e, pos), reason=reason))

    for w in warnings:
        logger.warning(f"Dropped {w.kind} #{w.index}: {w.reason}")
        INTEGRITY_WARNINGS.labels(kind=w.kind).inc()

    return payload.model_copy(update={"citations": citations, "edges": edges}), warnings
