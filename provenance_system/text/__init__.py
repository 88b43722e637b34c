"""Text parsing utilities."""

from provenance_system.text.chain import parse_chain, parse_chains, parse_segment, ARROW

__all__ = ["parse_chain", "parse_chains", "parse_segment", "ARROW"]
