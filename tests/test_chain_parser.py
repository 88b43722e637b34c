"""Tests for the inline source-chain grammar."""

import pytest

from provenance_system.models import ChainLink, Claim, SourceType
from provenance_system.text.chain import parse_chain, parse_chains, parse_segment


class TestParseChain:

    def test_typed_links_with_and_without_url(self):
        links = parse_chain("The Guardian (secondary) [https://x] → YouGov (primary)")
        assert links == [
            ChainLink(name="The Guardian", type=SourceType.SECONDARY, url="https://x"),
            ChainLink(name="YouGov", type=SourceType.PRIMARY, url=None),
        ]

    def test_unstructured_text_falls_back(self):
        assert parse_chain("Random unstructured text") == [
            ChainLink(name="Random unstructured text", type=SourceType.SECONDARY, url=None)
        ]

    @pytest.mark.parametrize("raw", ["", None, "   "])
    def test_empty_input(self, raw):
        assert parse_chain(raw) == []

    def test_order_is_preserved(self):
        links = parse_chain("A (tertiary) → B (secondary) → C (primary)")
        assert [l.name for l in links] == ["A", "B", "C"]
        assert [l.type for l in links] == [SourceType.TERTIARY, SourceType.SECONDARY, SourceType.PRIMARY]

    def test_one_bad_segment_does_not_spoil_the_rest(self):
        links = parse_chain("Daily Mail (tertiary) → some blog post → ONS (primary) [https://ons.gov.uk]")
        assert links[1] == ChainLink(name="some blog post", type=SourceType.SECONDARY)
        assert links[2].url == "https://ons.gov.uk"

    def test_unknown_type_uses_fallback(self):
        assert parse_segment("Reddit (social)") == ChainLink(name="Reddit (social)", type=SourceType.SECONDARY)

    def test_type_is_case_insensitive(self):
        assert parse_segment("WHO (Primary)").type == SourceType.PRIMARY

    def test_names_with_parentheses(self):
        link = parse_segment("Office for National Statistics (ONS) (primary) [https://ons.gov.uk]")
        assert link.name == "Office for National Statistics (ONS)"
        assert link.type == SourceType.PRIMARY

    def test_empty_segments_are_skipped(self):
        assert len(parse_chain("A (primary) →  → B (secondary) →")) == 2


def test_parse_chains_one_list_per_claim():
    claims = [
        Claim(claim_text="a", confidence=0.5, position=1, source_chain="X (primary)"),
        Claim(claim_text="b", confidence=0.5, position=2),
    ]
    chains = parse_chains(claims)
    assert len(chains) == 2
    assert chains[0][0].name == "X"
    assert chains[1] == []
