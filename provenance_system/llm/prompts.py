"""
Prompt construction for the research provider.

The provider returns the raw payload that the pipeline validates; the JSON
shape described here must stay in step with ``models.AnalysisPayload``.
"""

from typing import Optional, Tuple

from ..net.page_fetch import PageContent

OUTPUT_SHAPE = """{
  "topic": "main subject",
  "headline": "exact article headline when a URL was given, otherwise a descriptive headline",
  "summary": "2-3 sentences on sourcing quality and key findings",
  "claims": [
    {
      "claim_text": "factual assertion made in the content itself",
      "confidence": 0.85,
      "confidence_explanation": "1-2 sentences",
      "position": 1,
      "source_chain": "Outlet (secondary) [https://...] → Report (primary) [https://...]"
    }
  ],
  "sources": [
    {
      "outlet_name": "string",
      "url": "string",
      "publish_date": "2025-01-01T00:00:00Z",
      "political_lean": "left|center|right (political content only)",
      "source_type": "primary|secondary|tertiary",
      "category": "news outlet|government agency|research institution|individual|political party|...",
      "image_url": "optional"
    }
  ],
  "citations": [
    {"claim_index": 0, "source_index": 0, "excerpt": "direct quote",
     "rationale": "why it supports the claim", "page_number": "page/section"}
  ],
  "edges": [
    {"source_index": 0, "target_index": 1, "edge_type": "cites|derives_from|republishes|contradicts"}
  ],
  "metrics": {
    "factual_accuracy": 85, "factual_accuracy_explanation": "...",
    "clickbait_level": 30, "clickbait_explanation": "...",
    "bias_level": 45, "bias_explanation": "...",
    "transparency_score": 0.9, "transparency_explanation": "...",
    "confidence_score": 0.85, "confidence_explanation": "...",
    "spectrum_coverage": "full|partial|limited|none",
    "political_distribution": {"left": 3, "center": 2, "right": 2}
  }
}"""

SYSTEM_PROMPT = f"""You are a fact-checking and media analysis assistant that traces every claim back to its sources.

1. Extract claims made IN the content about its subject. Never produce claims about the outlets or about fact-checking.
2. For each claim, trace the information chain back to the original source and classify every source:
   primary (original data, court records, papers, official statements), secondary (original reporting),
   tertiary (opinion, aggregation, commentary). Include publish dates and URLs; look across the political spectrum.
3. Score factual_accuracy, clickbait_level and bias_level from 0 to 100; transparency_score and confidence_score from 0 to 1.
4. Give each claim a confidence between 0 and 1.
5. claim_index and source_index are zero-based positions in the claims and sources arrays.

Return ONLY valid JSON with this shape, no markdown:
{OUTPUT_SHAPE}"""


def build_prompts(query: str, is_url: bool, page: Optional[PageContent] = None) -> Tuple[str, str]:
    """Return (system_prompt, user_prompt) for a query."""
    if is_url:
        lines = [
            f"The user has provided a URL: {query}",
            "Analyze the content at this URL. Use its exact headline.",
        ]
        if page is not None:
            lines += ["", f"HEADLINE: {page.headline}", "", "ARTICLE TEXT:", page.body]
        else:
            lines.append("The page could not be retrieved; read it yourself if you can.")
    else:
        lines = [
            f"The user has provided a topic: {query}",
            "Search for the most relevant recent articles and sources on it.",
        ]
    lines += ["", f"INPUT: {query}"]
    return SYSTEM_PROMPT, "\n".join(lines)
