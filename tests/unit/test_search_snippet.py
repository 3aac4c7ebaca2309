"""Unit tests for highlighting."""

import pytest

from record_search.search.snippet import build_highlights, extract_fragments, highlight_tags, highlight_terms


@pytest.mark.unit
class TestHighlightTerms:
    def test_wraps_case_insensitively(self):
        assert highlight_terms("Gizlilik Maddesi", ["gizlilik"]) == "<mark>Gizlilik</mark> Maddesi"

    def test_wraps_every_occurrence(self):
        assert highlight_terms("veri ve Veri", ["veri"]) == "<mark>veri</mark> ve <mark>Veri</mark>"

    def test_longer_match_wins_at_same_start(self):
        assert highlight_terms("gizlilik", ["gizli", "gizlilik"]) == "<mark>gizlilik</mark>"

    def test_overlapping_matches_are_not_nested(self):
        assert highlight_terms("abcd", ["abc", "bcd"]) == "<mark>abc</mark>d"

    def test_terms_are_literal(self):
        assert highlight_terms("a.b axb", ["a.b"]) == "<mark>a.b</mark> axb"

    def test_no_terms_or_no_match(self):
        assert highlight_terms("metin", []) == "metin"
        assert highlight_terms("metin", ["yok"]) == "metin"
        assert highlight_terms("", ["yok"]) == ""

    def test_dotted_capital_i_matches_folded_term(self):
        assert highlight_terms("GİZLİLİK Maddesi", ["gizlilik"]) == "<mark>GİZLİLİK</mark> Maddesi"
        assert highlight_terms("İade şartları", ["iade"]) == "<mark>İade</mark> şartları"

    def test_empty_terms_are_ignored(self):
        assert highlight_terms("metin", ["", "met"]) == "<mark>met</mark>in"


@pytest.mark.unit
class TestExtractFragments:
    def test_window_around_match(self):
        text = "x" * 100 + " gizlilik " + "y" * 100

        fragments = extract_fragments(text, ["gizlilik"], context_chars=5)

        assert fragments == ["xxxx <mark>gizlilik</mark> yyyy"]

    def test_fragments_are_capped(self):
        text = " ... ".join(["veri"] * 10)

        fragments = extract_fragments(text, ["veri"], context_chars=0, max_fragments=3)

        assert fragments == ["<mark>veri</mark>"] * 3

    def test_nearby_matches_share_a_window(self):
        fragments = extract_fragments("veri ve veri", ["veri"], context_chars=50)

        assert fragments == ["<mark>veri</mark> ve <mark>veri</mark>"]

    def test_no_match(self):
        assert extract_fragments("metin", ["yok"]) == []


@pytest.mark.unit
def test_highlight_tags_keeps_matching_tags_only():
    assert highlight_tags(["gizlilik", "finans", "Veri"], ["veri", "gizli"]) == [
        "<mark>gizli</mark>lik",
        "<mark>Veri</mark>",
    ]


@pytest.mark.unit
def test_highlight_tags_fold_dotted_capital_i():
    assert highlight_tags(["İADE", "finans"], ["iade"]) == ["<mark>İADE</mark>"]


@pytest.mark.unit
class TestBuildHighlights:
    def test_all_fields(self, make_document):
        document = make_document("C", "Gizlilik Maddesi", "Bu madde gizlilik hakkındadır", tags=["gizlilik", "veri"])

        highlights = build_highlights(document, ["gizlilik"])

        assert highlights is not None
        assert highlights.title == ["<mark>Gizlilik</mark> Maddesi"]
        assert highlights.content == ["Bu madde <mark>gizlilik</mark> hakkındadır"]
        assert highlights.tags == ["<mark>gizlilik</mark>"]

    def test_nothing_matched(self, make_document):
        assert build_highlights(make_document("A", "Ödeme", "şartlar"), ["gizlilik"]) is None

    def test_serializes_with_camel_case_keys(self, make_document):
        highlights = build_highlights(make_document("A", "Ödeme"), ["ödem"])

        assert highlights.model_dump(by_alias=True, exclude_none=True) == {"title": ["<mark>Ödem</mark>e"]}
