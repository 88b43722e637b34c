"""Tests for source deduplication and index remapping."""

from provenance_system.models import Citation, Edge, PoliticalLean, Source
from provenance_system.tools.source_norm import (merge_sources, normalize_sources, remap_payload,
                                                 source_keys)
from provenance_system.tools.url_norm import is_well_formed_url, url_quality
from provenance_system.validation.schema import validate_payload


def _src(name, url="", **kw):
    kw.setdefault("source_type", "secondary")
    return Source(outlet_name=name, url=url, **kw)


class TestNormalizeSources:

    def test_bbc_merge_keeps_non_empty_url(self):
        sources = [_src("BBC News", "https://bbc.co.uk/a"), _src("bbc news", "")]
        canonical, index_map = normalize_sources(sources)
        assert len(canonical) == 1
        assert canonical[0].url == "https://bbc.co.uk/a"
        assert index_map == {0: 0, 1: 0}

    def test_url_filled_from_later_duplicate(self):
        sources = [_src("bbc news", ""), _src("  BBC News ", "https://bbc.co.uk/a")]
        canonical, _ = normalize_sources(sources)
        assert canonical[0].outlet_name == "bbc news"
        assert canonical[0].url == "https://bbc.co.uk/a"

    def test_well_formed_url_beats_malformed(self):
        sources = [_src("Reuters", "reuters dot com"), _src("reuters", "https://reuters.com/x")]
        canonical, _ = normalize_sources(sources)
        assert canonical[0].url == "https://reuters.com/x"

    def test_match_by_url_only(self):
        sources = [_src("AP", "https://apnews.com/1"), _src("Associated Press", "HTTPS://APNEWS.COM/1 ")]
        canonical, index_map = normalize_sources(sources)
        assert len(canonical) == 1
        assert index_map[1] == 0

    def test_transitive_merge(self):
        # C joins A's group by name; B joins by URL; D bridges through C's URL
        sources = [
            _src("Reuters", "https://reuters.com/a"),
            _src("Other", ""),
            _src("reuters", "https://reuters.com/b"),
            _src("Wire", "https://reuters.com/b"),
        ]
        canonical, index_map = normalize_sources(sources)
        assert [s.outlet_name for s in canonical] == ["Reuters", "Other"]
        assert index_map == {0: 0, 1: 1, 2: 0, 3: 0}

    def test_late_bridge_unifies_two_groups(self):
        sources = [
            _src("Alpha", "https://alpha.com"),
            _src("Beta", "https://beta.com"),
            _src("alpha", "https://beta.com"),
        ]
        canonical, index_map = normalize_sources(sources)
        assert len(canonical) == 1
        assert index_map == {0: 0, 1: 0, 2: 0}

    def test_non_null_fields_fill_gaps(self):
        sources = [
            _src("BBC News", "https://bbc.co.uk/a"),
            _src("bbc news", "", political_lean="center", category="news outlet",
                 image_url="https://bbc.co.uk/img.png", publish_date="2025-01-01T00:00:00Z"),
        ]
        canonical, _ = normalize_sources(sources)
        merged = canonical[0]
        assert merged.political_lean == PoliticalLean.CENTER
        assert merged.category == "news outlet"
        assert merged.image_url == "https://bbc.co.uk/img.png"
        assert merged.publish_date == "2025-01-01T00:00:00Z"

    def test_existing_image_is_kept(self):
        merged = merge_sources(_src("X", image_url="https://x.com/1.png"),
                               _src("x", image_url="https://x.com/2.png"))
        assert merged.image_url == "https://x.com/1.png"

    def test_order_is_first_occurrence(self):
        sources = [_src("A"), _src("B"), _src("a"), _src("C")]
        canonical, _ = normalize_sources(sources)
        assert [s.outlet_name for s in canonical] == ["A", "B", "C"]

    def test_nameless_sources_without_url_stay_separate(self):
        sources = [_src(""), _src(""), _src("Named")]
        canonical, index_map = normalize_sources(sources)
        assert len(canonical) == 3
        assert index_map == {0: 0, 1: 1, 2: 2}

    def test_idempotent(self, raw_payload):
        payload = validate_payload(raw_payload)
        once, _ = normalize_sources(payload.sources)
        twice, index_map = normalize_sources(once)
        assert len(twice) == len(once)
        assert [source_keys(s) for s in twice] == [source_keys(s) for s in once]
        assert index_map == {i: i for i in range(len(once))}

    def test_empty_input(self):
        assert normalize_sources([]) == ([], {})


class TestRemapPayload:

    def test_citations_and_edges_follow_canonical_indices(self, raw_payload):
        payload = validate_payload(raw_payload)
        canonical, index_map = normalize_sources(payload.sources)
        remapped, warnings = remap_payload(payload, index_map, canonical)
        assert warnings == []
        assert len(remapped.sources) == 3
        assert [c.source_index for c in remapped.citations] == [0, 1, 2, 0]
        assert [(e.source_index, e.target_index) for e in remapped.edges] == [(0, 1), (2, 2), (2, 1)]

    def test_unmapped_indices_are_dropped_with_warning(self, raw_payload):
        payload = validate_payload(raw_payload)
        payload = payload.model_copy(update={
            "citations": [Citation(claim_index=0, source_index=9, excerpt="ghost")],
            "edges": [Edge(source_index=0, target_index=-1, type="cites")],
        })
        canonical, index_map = normalize_sources(payload.sources)
        remapped, warnings = remap_payload(payload, index_map, canonical)
        assert remapped.citations == []
        assert remapped.edges == []
        assert [(w.kind, w.index) for w in warnings] == [("citation", 0), ("edge", 0)]


class TestUrlShape:

    def test_well_formed(self):
        assert is_well_formed_url("https://example.com/path?q=1")
        assert is_well_formed_url("http://sub.example.co.uk")

    def test_malformed(self):
        for bad in ["", "example.com", "ftp://example.com", "https://localhost",
                    "https://exa mple.com", "https://", "javascript:alert(1)"]:
            assert not is_well_formed_url(bad), bad

    def test_quality_ranking(self):
        assert url_quality("https://a.com") > url_quality("not a url") > url_quality("")
