"""Unit tests for title normalization and matching."""

import pytest

from cinecatalog.core.titles import extract_title_number, normalize_title, titles_similar

SAMPLE_TITLES = [
    "Attack on Titan Season 2",
    "Naruto: Shippuden (2007)",
    "One Piece Movie 14",
    "Show S2",
    "Dragon Ball Z - Part 3",
    "هجوم العمالقة الموسم الثاني",
    "season season 1 1",
    "  Spaced   Out  ",
    "[OVA] Hellsing",
    "",
]


class TestNormalizeTitle:
    """Test title normalization rules."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Attack on Titan Season 2", "attack on titan"),
            ("Naruto: Shippuden (2007)", "naruto shippuden"),
            ("One Piece Movie 14", "one piece"),
            ("Show S2", "show"),
            ("Dragon Ball Z - Part 3", "dragon ball z"),
            ("هجوم العمالقة الموسم الثاني", "هجوم العمالقة"),
            ("ون بيس فيلم 3", "ون بيس"),
            ("Fullmetal Alchemist Special", "fullmetal alchemist"),
            ("  Spaced   Out  ", "spaced out"),
        ],
    )
    def test_strips_noise(self, title, expected):
        """Should remove season, part, movie markers and years."""
        assert normalize_title(title) == expected

    @pytest.mark.parametrize("title", SAMPLE_TITLES)
    def test_idempotent(self, title):
        """Normalizing twice should equal normalizing once."""
        once = normalize_title(title)

        assert normalize_title(once) == once

    def test_nested_markers_reach_fixed_point(self):
        """Should remove markers exposed by an earlier removal."""
        assert normalize_title("season season 1 1") == ""

    def test_none_is_empty(self):
        """Should treat None as an empty title."""
        assert normalize_title(None) == ""

    def test_keeps_plain_numbers(self):
        """Should keep numbers that are not markers or years."""
        assert normalize_title("Anime X 2") == "anime x 2"


class TestTitlesSimilar:
    """Test fuzzy title matching."""

    def test_equal_after_normalization(self):
        """Should match titles that normalize to the same key."""
        assert titles_similar("Show Season 1", "Show (2019)")

    def test_word_overlap(self):
        """Should match when most words of the shorter title appear in the other."""
        assert titles_similar("Attack on Titan", "Attack on Titan: Final Season")

    def test_substring_words_match(self):
        """Should match words contained in each other."""
        assert titles_similar("Hunter", "Hunter x Hunter")

    def test_unrelated_titles(self):
        """Should not match unrelated titles."""
        assert not titles_similar("Naruto", "Bleach")

    def test_threshold(self):
        """Should respect the overlap threshold."""
        assert not titles_similar("Dragon Ball Super", "Dragon Quest Adventure")
        assert titles_similar("Dragon Ball Super", "Dragon Quest Adventure", threshold=0.3)

    def test_short_titles_never_similar(self):
        """Should not fuzzy-match very short normalized titles."""
        assert not titles_similar("Up", "Upgrade")


class TestExtractTitleNumber:
    """Test sequence number extraction."""

    def test_trailing_digits(self):
        """Should use trailing digits first."""
        assert extract_title_number("Anime X 3") == 3

    def test_english_season(self):
        """Should read English season markers."""
        assert extract_title_number("Season 4 Final") == 4

    def test_arabic_ordinal_season(self):
        """Should read Arabic ordinal season markers."""
        assert extract_title_number("هجوم العمالقة الموسم الثالث") == 3

    def test_arabic_digit_season(self):
        """Should read Arabic season markers with digits."""
        assert extract_title_number("الموسم 5 من العرض") == 5

    def test_part_marker(self):
        """Should read part markers."""
        assert extract_title_number("The Saga Part 2 Finale") == 2

    def test_no_number(self):
        """Should return None when the title carries no number."""
        assert extract_title_number("Naruto") is None
        assert extract_title_number("") is None
