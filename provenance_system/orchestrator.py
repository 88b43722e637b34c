from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
import asyncio
import time

import httpx
import structlog

from provenance_system.config import Settings, get_settings
from provenance_system.graph.assemble import assemble_graph
from provenance_system.llm.analyze_client import AnalyzeClient
from provenance_system.llm.prompts import build_prompts
from provenance_system.models import AnalysisResult, ExtractionMetadata, IntegrityWarning
from provenance_system.monitoring_metrics import PIPELINE_LATENCY
from provenance_system.net.page_fetch import fetch_page_content
from provenance_system.net.verify import verify_all
from provenance_system.text.chain import parse_chains
from provenance_system.tools.source_norm import normalize_sources, remap_payload
from provenance_system.tools.url_norm import is_url_query
from provenance_system.validation.integrity import check_integrity
from provenance_system.validation.schema import validate_payload

logger = structlog.get_logger()


@dataclass
class OrchestratorSettings:
    """Settings specific to one pipeline run."""
    verify_urls: bool = True
    verify_budget_seconds: Optional[float] = None  # If None, uses Settings.URL_VERIFY_BUDGET_SECONDS
    fetch_page: bool = True


class Orchestrator:
    """Runs a query (or an already-fetched payload) through the provenance pipeline.

    Stages: validate -> dedup/remap -> integrity -> (URL verification || chain
    parsing) -> graph assembly. Only validation and the provider call can fail
    the run; everything after degrades.
    """

    def __init__(self, s: Optional[OrchestratorSettings] = None, settings: Optional[Settings] = None,
                 analyze_client: Optional[AnalyzeClient] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.s = s or OrchestratorSettings()
        self.settings = settings or get_settings()
        self.analyze_client = analyze_client or AnalyzeClient(self.settings)
        self.http_client = http_client  # shared by URL probes and page fetch when given
        if self.s.verify_budget_seconds is None:
            self.s.verify_budget_seconds = self.settings.URL_VERIFY_BUDGET_SECONDS

    async def analyze(self, query: str) -> AnalysisResult:
        """
        Full request: optional page fetch, provider call, pipeline.

        Raises:
            ConfigurationError, UpstreamError: provider could not produce a payload
            SchemaError: provider payload is structurally broken
        """
        query = query.strip()
        is_url = is_url_query(query)
        log = logger.bind(query=query[:200], is_url=is_url)
        log.info("analysis_started")

        page = None
        if is_url and self.s.fetch_page:
            page = await fetch_page_content(query, self.settings.PAGE_FETCH_TIMEOUT_SECONDS,
                                            client=self.http_client)
            log.info("page_fetch_finished", content_extracted=page is not None)

        system_prompt, user_prompt = build_prompts(query, is_url, page)
        raw = await self.analyze_client.analyze(system_prompt, user_prompt)

        metadata = ExtractionMetadata(
            content_extracted=page is not None,
            original_url=query if is_url else None,
            extraction_timestamp=datetime.now(timezone.utc).isoformat(),
        )
        return await self.build_result(raw, extraction_metadata=metadata)

    async def build_result(self, raw: Union[bytes, str, Dict[str, Any]],
                           extraction_metadata: Optional[ExtractionMetadata] = None) -> AnalysisResult:
        """Turn a raw provider payload into a validated, graph-bearing result."""
        t0 = time.monotonic()

        with PIPELINE_LATENCY.labels(stage="validate").time():
            payload = validate_payload(raw)
            canonical, index_map = normalize_sources(payload.sources)
            payload, remap_warnings = remap_payload(payload, index_map, canonical)
            payload, integrity_warnings = check_integrity(payload)
        warnings: List[IntegrityWarning] = remap_warnings + integrity_warnings

        with PIPELINE_LATENCY.labels(stage="verify").time():
            if self.s.verify_urls:
                sources, chain_links = await asyncio.gather(
                    verify_all(payload.sources, self.s.verify_budget_seconds, client=self.http_client),
                    asyncio.to_thread(parse_chains, payload.claims),
                )
            else:
                sources = [src.model_copy(update={"url_valid": False}) for src in payload.sources]
                chain_links = parse_chains(payload.claims)
        payload = payload.model_copy(update={"sources": sources})

        with PIPELINE_LATENCY.labels(stage="assemble").time():
            graph = assemble_graph(payload)

        # provider extras ride along unless they shadow a result field
        extras = {k: v for k, v in (payload.model_extra or {}).items() if k not in AnalysisResult.model_fields}
        result = AnalysisResult(
            **{name: getattr(payload, name) for name in type(payload).model_fields},
            **extras,
            chain_links=chain_links,
            graph=graph,
            warnings=warnings,
            extraction_metadata=extraction_metadata or ExtractionMetadata(),
        )
        logger.info(
            "pipeline_finished",
            claims=len(payload.claims),
            sources=len(payload.sources),
            citations=len(payload.citations),
            edges=len(payload.edges),
            warnings=len(warnings),
            nodes=len(graph.nodes),
            graph_edges=len(graph.edges),
            elapsed=round(time.monotonic() - t0, 3),
        )
        return result
