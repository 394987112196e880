"""Unit tests for the lenient catalog parser."""

from cinecatalog.core.parser import (
    has_identity,
    iter_object_fragments,
    parse_lenient,
    parse_lenient_records,
)


class TestParseLenient:
    """Test whole-document and fragment parsing."""

    def test_three_bracketless_js_objects(self):
        """Should recover exactly three records from JS-style concatenated objects."""
        text = (
            "{id: 1, title: 'First', type: movie,},\n"
            "{id: 2, title: 'Second', type: movie,},\n"
            "{id: 3, title: 'Third', type: series,},"
        )

        records = parse_lenient_records(text)

        assert len(records) == 3
        assert [r["title"] for r in records] == ["First", "Second", "Third"]
        assert records[2]["type"] == "series"

    def test_unquoted_url_values(self):
        """Should keep unquoted URLs instead of cutting them as comments."""
        text = "{id: 1, title: 'A', poster: https://img.example/a.jpg} // cover\n"

        records = parse_lenient_records(text)

        assert len(records) == 1
        assert records[0]["poster"] == "https://img.example/a.jpg"

    def test_valid_json_array(self):
        """Should parse valid JSON without falling back."""
        result = parse_lenient('[{"id": "1", "title": "A"}, {"id": "2", "title": "B"}]')

        assert len(result) == 2
        assert result.diagnostics.used_fallback is False
        assert result.diagnostics.skipped == 0

    def test_single_object_becomes_one_record(self):
        """Should wrap a lone object into a one-element list."""
        records = parse_lenient_records('{"id": "1", "title": "Solo"}')

        assert records == [{"id": "1", "title": "Solo"}]

    def test_scraper_dump(self, malformed_dump):
        """Should parse a commented scraper dump and keep URLs intact."""
        records = parse_lenient_records(malformed_dump)

        assert [r["id"] for r in records] == [101, 102, 103]
        assert records[1]["title"] == "Naruto: Shippuden"
        assert records[1]["poster"] == "https://img.example/shippuden.jpg"
        assert records[0]["category"] == "Action, Adventure"

    def test_fallback_drops_only_broken_fragment(self):
        """Should keep good objects when one object cannot be repaired."""
        text = (
            '{"id": "1", "title": "Good"}\n'
            '{"id": "2", "title": "Missing comma" "type": "movie"}\n'
            '{"id": "3", "title": "Also good"}\n'
        )

        result = parse_lenient(text)

        assert [r["id"] for r in result.records] == ["1", "3"]
        assert result.diagnostics.used_fallback is True
        assert result.diagnostics.fragments == 3
        assert result.diagnostics.failed == 1
        assert len(result.diagnostics.reasons) == 1
        assert result.diagnostics.reasons[0].startswith("Fragment 2:")

    def test_objects_without_separators(self):
        """Should split objects written back to back on one line."""
        records = parse_lenient_records('{"id": "1", "title": "A"}{"id": "2", "title": "B"}')

        assert [r["id"] for r in records] == ["1", "2"]

    def test_truncated_last_object(self):
        """Should close an object cut off by the scraper."""
        text = (
            '{"id": "1", "title": "A"},\n'
            '{"id": "2", "title": "B", "description": "Long text...[Truncated]'
        )

        records = parse_lenient_records(text)

        assert len(records) == 2
        assert records[1]["description"] == "Long text..."

    def test_rejects_records_without_identity(self):
        """Should drop records with neither id nor title."""
        result = parse_lenient('[{"id": "1", "title": "A"}, {"poster": "x.jpg"}, {"title": "  "}]')

        assert len(result.records) == 1
        assert result.diagnostics.rejected == 2
        assert result.diagnostics.skipped == 2

    def test_rejects_non_objects(self):
        """Should drop array items that are not objects."""
        result = parse_lenient('[{"id": "1"}, 42, "text"]')

        assert result.records == [{"id": "1"}]
        assert result.diagnostics.rejected == 2

    def test_preserves_input_order(self):
        """Should keep records in input order."""
        text = "\n".join(f"{{id: {i}, title: 'T{i}'}}," for i in range(10))

        records = parse_lenient_records(text)

        assert [r["id"] for r in records] == list(range(10))

    def test_empty_input(self):
        """Should return nothing for empty input."""
        assert parse_lenient_records("") == []
        assert parse_lenient_records("   \n ") == []

    def test_garbage_never_raises(self):
        """Should return an empty result for unparseable text."""
        assert parse_lenient_records("not json at all {{{ ]]]") == []

    def test_non_string_input(self):
        """Should treat non-text input as empty."""
        assert parse_lenient_records(None) == []

    def test_byte_order_mark(self):
        """Should ignore a leading byte order mark."""
        assert parse_lenient_records('\ufeff[{"id": "1", "title": "A"}]') == [{"id": "1", "title": "A"}]


class TestIterObjectFragments:
    """Test the brace-depth fragment scanner."""

    def test_nested_objects_stay_together(self):
        """Should yield nested objects as part of their parent."""
        text = '{"id": "1", "servers": [{"name": "a", "url": "u"}]},\n{"id": "2"}'

        fragments = list(iter_object_fragments(text))

        assert fragments == ['{"id": "1", "servers": [{"name": "a", "url": "u"}]}', '{"id": "2"}']

    def test_braces_inside_strings_ignored(self):
        """Should not count braces inside string literals."""
        fragments = list(iter_object_fragments('{"title": "A {weird} title"}'))

        assert fragments == ['{"title": "A {weird} title"}']

    def test_multiline_object(self):
        """Should join an object spread over several lines."""
        text = "[\n  {\n    id: 1,\n    title: 'A'\n  },\n]"

        fragments = list(iter_object_fragments(text))

        assert len(fragments) == 1
        assert fragments[0].startswith("{") and fragments[0].endswith("}")


class TestHasIdentity:
    """Test the identity check."""

    def test_id_or_title_required(self):
        """Should accept either a non-empty id or a non-empty title."""
        assert has_identity({"id": 0})
        assert has_identity({"title": "A"})
        assert not has_identity({"id": "", "title": None})
        assert not has_identity(["id"])
