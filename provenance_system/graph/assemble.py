"""Provenance graph assembly.

Node ids come from entity kind plus canonical index (``claim-3``,
``source-7``), and emission order is fixed: article, claims, sources, then
article edges, citation edges, source edges. ``url_valid`` is carried on the
sources but never decides topology, so probe timing cannot change the graph.
"""

from __future__ import annotations
import logging
from typing import List

from ..models import (AnalysisPayload, EdgeType, GraphEdge, GraphNode, NodeKind,
                      ProvenanceGraph)

logger = logging.getLogger(__name__)

ARTICLE_ID = "article"


def claim_id(index: int) -> str:
    return f"claim-{index}"


def source_id(index: int) -> str:
    return f"source-{index}"


def assemble_graph(payload: AnalysisPayload) -> ProvenanceGraph:
    """
    Build the article -> claims -> sources graph.

    Args:
        payload: Payload after dedup and integrity checks, so every citation
            and edge resolves to a named source

    Returns:
        ProvenanceGraph with no dangling edges
    """
    nodes: List[GraphNode] = [GraphNode(id=ARTICLE_ID, name=payload.topic, kind=NodeKind.ARTICLE)]
    edges: List[GraphEdge] = []

    for i, _ in enumerate(payload.claims):
        nodes.append(GraphNode(id=claim_id(i), name=f"Claim {i + 1}", kind=NodeKind.CLAIM))

    # Placeholder sources with no name get no node but keep their index;
    # integrity checking has already dropped anything pointing at them.
    for j, src in enumerate(payload.sources):
        if not src.outlet_name.strip():
            continue
        nodes.append(GraphNode(
            id=source_id(j),
            name=src.outlet_name.strip(),
            kind=NodeKind.SOURCE,
            political_lean=src.political_lean,
            source_type=src.source_type,
        ))

    for i, _ in enumerate(payload.claims):
        edges.append(GraphEdge(source_id=ARTICLE_ID, target_id=claim_id(i), type=EdgeType.CITES))

    for c in payload.citations:
        edges.append(GraphEdge(source_id=claim_id(c.claim_index), target_id=source_id(c.source_index),
                               type=EdgeType.CITES))

    for e in payload.edges:
        edges.append(GraphEdge(source_id=source_id(e.source_index), target_id=source_id(e.target_index),
                               type=e.type))

    logger.debug(f"Assembled graph: {len(nodes)} nodes, {len(edges)} edges")
    return ProvenanceGraph(nodes=nodes, edges=edges)
