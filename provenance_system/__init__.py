"""
Provenance System - claims, sources and provenance graphs from research payloads
"""

__version__ = "1.0.0"

__all__ = [
    "AnalysisResult",
    "Orchestrator",
    "OrchestratorSettings",
    "Settings",
    "__version__",
]

def __getattr__(name: str):
    """Lazy import to avoid import-time side effects."""
    if name == "AnalysisResult":
        from .models import AnalysisResult
        return AnalysisResult
    elif name == "Orchestrator":
        from .orchestrator import Orchestrator
        return Orchestrator
    elif name == "OrchestratorSettings":
        from .orchestrator import OrchestratorSettings
        return OrchestratorSettings
    elif name == "Settings":
        from provenance_system.config.settings import Settings
        return Settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
