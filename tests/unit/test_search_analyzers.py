"""Unit tests for the analysis pipeline."""

import pytest

from record_search.search.analyzers import (
    DEFAULT_STOPWORDS,
    AnalyzerPipeline,
    CharacterClassTokenizer,
    KeywordAnalyzer,
    LowercaseFilter,
    MinLengthFilter,
    StandardAnalyzer,
    StopFilter,
    SuffixStripStemmer,
    Token,
    get_analyzer,
    register_analyzer,
)


@pytest.mark.unit
class TestCharacterClassTokenizer:
    def test_punctuation_becomes_a_separator(self):
        tokens = list(CharacterClassTokenizer()("ödeme,şartları;(madde-3)"))

        assert [token.text for token in tokens] == ["ödeme", "şartları", "madde", "3"]

    def test_offsets_point_into_original_text(self):
        text = "Hello, world!"
        tokens = list(CharacterClassTokenizer()(text))

        assert [text[token.start_char : token.end_char] for token in tokens] == ["Hello", "world"]
        assert [token.position for token in tokens] == [0, 1]

    def test_turkish_letters_are_word_characters(self):
        tokens = list(CharacterClassTokenizer()("çğıöşü ÇĞİÖŞÜ"))

        assert [token.text for token in tokens] == ["çğıöşü", "ÇĞİÖŞÜ"]


@pytest.mark.unit
class TestFilters:
    def test_lowercase_folds_dotted_capital_i(self):
        tokens = list(LowercaseFilter()([Token(text="İSTANBUL", position=0)]))

        assert tokens[0].text == "istanbul"

    def test_min_length_drops_single_characters(self):
        tokens = [Token(text="a", position=0), Token(text="ab", position=1)]

        assert [token.text for token in MinLengthFilter(2)(tokens)] == ["ab"]

    def test_stop_filter_uses_default_list(self):
        tokens = [Token(text=word, position=idx) for idx, word in enumerate(["ve", "sözleşme", "the"])]

        assert [token.text for token in StopFilter()(tokens)] == ["sözleşme"]

    def test_pipeline_renumbers_positions_after_filtering(self):
        pipeline = AnalyzerPipeline(CharacterClassTokenizer(), [LowercaseFilter(), StopFilter()])

        tokens = pipeline("Gizlilik ve Veri")

        assert [(token.text, token.position) for token in tokens] == [("gizlilik", 0), ("veri", 1)]


@pytest.mark.unit
class TestSuffixStripStemmer:
    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("veriler", "veri"),
            ("ödeme", "ödem"),
            ("maddesi", "maddes"),
            ("gizlilik", "gizlilik"),
            ("sözleşmeden", "sözleşme"),
        ],
    )
    def test_turkish_suffixes(self, word, expected):
        assert SuffixStripStemmer()(word) == expected

    def test_short_words_are_untouched(self):
        assert SuffixStripStemmer()("ada") == "ada"

    def test_keeps_minimum_stem_length(self):
        # "evde" would lose "de" but only two characters would remain
        assert SuffixStripStemmer()("evde") == "evd"

    def test_first_matching_suffix_wins(self):
        stemmer = SuffixStripStemmer(("ler", "r"))

        assert stemmer("kitapler") == "kitap"


@pytest.mark.unit
class TestStandardAnalyzer:
    def test_full_pipeline(self):
        analyzer = StandardAnalyzer()

        assert analyzer.terms("Bu Gizlilik Maddesi, veriler için!") == ["gizlilik", "maddes", "veri"]

    def test_empty_text(self):
        assert StandardAnalyzer()("") == []

    def test_is_stopword_is_case_insensitive(self):
        analyzer = StandardAnalyzer()

        assert analyzer.is_stopword("The")
        assert not analyzer.is_stopword("sözleşme")

    def test_custom_stopwords_replace_defaults(self):
        analyzer = StandardAnalyzer(stopwords=["sözleşme"])

        assert analyzer.terms("sözleşme ve madde") == ["ve", "mad"]

    def test_stem_delegates_to_stemmer(self):
        assert StandardAnalyzer().stem("veriler") == "veri"


@pytest.mark.unit
class TestKeywordAnalyzer:
    def test_whole_input_is_one_token(self):
        tokens = KeywordAnalyzer()("  Gizlilik Sözleşmesi ")

        assert [token.text for token in tokens] == ["gizlilik sözleşmesi"]

    def test_empty_text(self):
        assert KeywordAnalyzer()("   ") == []


@pytest.mark.unit
class TestAnalyzerRegistry:
    def test_default_is_turkish(self):
        assert get_analyzer().terms("veriler") == ["veri"]
        assert get_analyzer("turkish").terms("veriler") == ["veri"]

    def test_english_stems_plurals(self):
        assert get_analyzer("english").terms("contracts signed") == ["contract", "sign"]

    def test_simple_does_not_stem(self):
        assert get_analyzer("simple").terms("veriler") == ["veriler"]

    def test_names_are_case_insensitive(self):
        assert isinstance(get_analyzer("KEYWORD"), KeywordAnalyzer)

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown analyzer"):
            get_analyzer("klingon")

    def test_stopword_override(self):
        analyzer = get_analyzer("simple", stopwords=["madde"])

        assert analyzer.terms("madde ve gizlilik") == ["ve", "gizlilik"]

    def test_stopword_override_does_not_leak_between_instances(self):
        get_analyzer("simple", stopwords=["madde"])

        assert get_analyzer("simple").terms("madde") == ["madde"]
        assert "ve" in DEFAULT_STOPWORDS

    def test_register_analyzer(self):
        register_analyzer("Upper-Keyword", KeywordAnalyzer)

        assert isinstance(get_analyzer("upper-keyword"), KeywordAnalyzer)
