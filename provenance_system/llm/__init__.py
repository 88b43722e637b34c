"""
LLM Module - research provider access

Builds the analysis prompt and fetches the raw payload the pipeline validates.
"""

from provenance_system.llm.analyze_client import AnalyzeClient
from provenance_system.llm.prompts import build_prompts, SYSTEM_PROMPT

__all__ = [
    'AnalyzeClient',
    'build_prompts',
    'SYSTEM_PROMPT',
]
