import copy

import pytest

from provenance_system.api.limiting import limiter
from provenance_system.config import get_settings


SAMPLE_PAYLOAD = {
    "topic": "UK voting intention",
    "headline": "Labour lead narrows in latest poll",
    "summary": "Most claims trace back to a single YouGov survey.",
    "claims": [
        {
            "claim_text": "Labour's lead fell to 5 points.",
            "confidence": 0.8,
            "confidence_explanation": "Reported by two outlets from the same poll.",
            "position": 1,
            "source_chain": "The Guardian (secondary) [https://theguardian.com/poll] → YouGov (primary) [https://yougov.co.uk/poll]",
        },
        {
            "claim_text": "Turnout intention is at a ten year low.",
            "confidence": 0.55,
            "position": 2,
            "source_chain": "Random unstructured text",
        },
    ],
    "sources": [
        {"outlet_name": "The Guardian", "url": "https://theguardian.com/poll",
         "source_type": "secondary", "political_lean": "left", "category": "news outlet"},
        {"outlet_name": "YouGov", "url": "https://yougov.co.uk/poll", "source_type": "primary"},
        {"outlet_name": "BBC News", "url": "https://bbc.co.uk/a", "source_type": "secondary"},
        {"outlet_name": "bbc news", "url": "", "source_type": "secondary",
         "political_lean": "center", "image_url": "https://bbc.co.uk/img.png"},
    ],
    "citations": [
        {"claim_index": 0, "source_index": 0, "excerpt": "Labour's lead is now five points."},
        {"claim_index": 0, "source_index": 1, "excerpt": "Lab 38, Con 33."},
        {"claim_index": 1, "source_index": 3, "excerpt": "Fewer say they will vote.", "page_number": 4},
        {"claim_index": 7, "source_index": 0, "excerpt": "out of range claim"},
    ],
    "edges": [
        {"source_index": 0, "target_index": 1, "edge_type": "derives_from"},
        {"source_index": 2, "target_index": 2, "edge_type": "cites"},
        {"source_index": 3, "target_index": 1, "edge_type": "cites"},
    ],
    "metrics": {
        "factual_accuracy": 78,
        "clickbait_level": 20,
        "bias_level": 35,
        "transparency_score": 0.8,
        "confidence_score": 0.7,
        "spectrum_coverage": "partial",
        "political_distribution": {"left": 1, "center": 1, "right": 0},
    },
}


@pytest.fixture
def raw_payload():
    """Fresh copy of a realistic provider payload with a few defects baked in."""
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture(autouse=True)
def _isolated_settings():
    get_settings.cache_clear()
    limiter.enabled = False
    yield
    get_settings.cache_clear()
