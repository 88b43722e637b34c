import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import structlog

from provenance_system.exceptions import ProvenanceSystemError
from provenance_system.orchestrator import Orchestrator, OrchestratorSettings


def _init_logging():
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level)
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.TimeStamper(fmt="iso"), structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        cache_logger_on_first_use=True,
    )


def main(argv=None):
    _init_logging()
    p = argparse.ArgumentParser(prog="provenance-system", description="Claims, sources and provenance graphs")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--query", help="Topic text or article URL to analyze")
    src.add_argument("--payload", type=Path, help="Run the pipeline on a saved provider payload (JSON file)")
    p.add_argument("--no-verify", action="store_true", help="Skip URL probes (all sources unverified)")
    p.add_argument("--budget", type=float, default=None, help="URL verification budget in seconds")
    p.add_argument("--output", type=Path, default=None, help="Write result JSON here instead of stdout")
    args = p.parse_args(argv)

    s = OrchestratorSettings(verify_urls=not args.no_verify, verify_budget_seconds=args.budget)
    orchestrator = Orchestrator(s)

    try:
        if args.payload:
            result = asyncio.run(orchestrator.build_result(args.payload.read_bytes()))
        else:
            result = asyncio.run(orchestrator.analyze(args.query))
    except ProvenanceSystemError as e:
        print(json.dumps({"error": str(e), "details": getattr(e, "details", None)}), file=sys.stderr)
        return 1

    text = json.dumps(result.to_response(), indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        print(f"Result written to {args.output}", file=sys.stderr)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
