# tests/test_csv_parser.py

"""Tests for the quote-aware CSV tokenizer and streaming parser."""

import unittest
from collections.abc import Iterator

from src.models.errors import ParseError
from src.parsers.csv_parser import (
    parse_csv_stream,
    parse_csv_text,
    split_csv_line,
)


def _counting_chunks(
    chunks: list[bytes], consumed: list[bytes],
) -> Iterator[bytes]:
    """Yield chunks while recording how many were pulled."""
    for chunk in chunks:
        consumed.append(chunk)
        yield chunk


class TestSplitCsvLine(unittest.TestCase):
    """split_csv_line tokenizing rules."""

    def test_plain_fields(self) -> None:
        """Unquoted fields split on commas and are trimmed."""
        self.assertEqual(
            split_csv_line(" a , b,c "), ["a", "b", "c"]
        )

    def test_comma_inside_quotes_does_not_split(self) -> None:
        """A quoted comma stays in the field; wrapping quotes drop."""
        self.assertEqual(
            split_csv_line('"A","B, C",5,10'),
            ["A", "B, C", "5", "10"],
        )

    def test_embedded_double_quotes_not_unescaped(self) -> None:
        """RFC 4180 ``""`` escapes are left verbatim."""
        self.assertEqual(
            split_csv_line('"say ""hi""",x'),
            ['say ""hi""', "x"],
        )

    def test_wrapping_quotes_stripped_after_trim(self) -> None:
        """Whitespace outside the quotes is trimmed first."""
        self.assertEqual(split_csv_line('  "padded"  ,x'), ["padded", "x"])

    def test_empty_fields_preserved(self) -> None:
        """Consecutive commas produce empty values."""
        self.assertEqual(split_csv_line("a,,c,"), ["a", "", "c", ""])

    def test_unterminated_quote_raises(self) -> None:
        """A line ending inside quotes is rejected."""
        with self.assertRaises(ValueError):
            split_csv_line('"open,ended')


class TestParseCsvText(unittest.TestCase):
    """Buffered whole-document parsing."""

    def test_round_trip_quoted_row(self) -> None:
        """The embedded comma inside quotes must not split the field."""
        result = parse_csv_text(
            'name,desc,popularity,feedback\n"A","B, C",5,10\n'
        )
        self.assertEqual(
            result.records,
            [
                {
                    "name": "A",
                    "desc": "B, C",
                    "popularity": "5",
                    "feedback": "10",
                    "originalIndex": 0,
                }
            ],
        )

    def test_blank_lines_are_not_records(self) -> None:
        """Empty and whitespace-only lines are skipped entirely."""
        text = "name,price\n\nA,1\n   \nB,2\n\n"
        result = parse_csv_text(text)
        self.assertEqual(len(result.records), 2)
        self.assertEqual(
            [r["originalIndex"] for r in result.records], [0, 1]
        )

    def test_leading_blank_lines_before_header(self) -> None:
        """The first non-blank line is the header."""
        result = parse_csv_text("\n\nname\nWidget\n")
        self.assertEqual(result.records[0]["name"], "Widget")

    def test_short_row_padded_with_empty_strings(self) -> None:
        """Missing trailing values become empty strings, not absent."""
        result = parse_csv_text("a,b,c\n1\n")
        record = result.records[0]
        self.assertEqual(record["a"], "1")
        self.assertEqual(record["b"], "")
        self.assertEqual(record["c"], "")

    def test_extra_values_ignored(self) -> None:
        """Values beyond the header width are dropped."""
        result = parse_csv_text("a\n1,2,3\n")
        self.assertEqual(
            result.records[0], {"a": "1", "originalIndex": 0}
        )

    def test_quoted_headers_lose_quotes(self) -> None:
        """Header names have every double quote removed."""
        result = parse_csv_text('"name","price"\nA,1\n')
        self.assertIn("name", result.records[0])
        self.assertIn("price", result.records[0])

    def test_crlf_line_endings(self) -> None:
        """Windows line endings are trimmed with the whitespace."""
        result = parse_csv_text("name,price\r\nA,1\r\nB,2\r\n")
        self.assertEqual(result.records[1]["price"], "2")

    def test_malformed_row_skipped_not_fatal(self) -> None:
        """One bad row is dropped and the rest still parse."""
        result = parse_csv_text('name,desc\n"A,broken\nB,ok\n')
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.records[0]["name"], "B")
        self.assertEqual(result.records[0]["originalIndex"], 0)
        self.assertEqual(result.skipped, 1)

    def test_header_only_raises(self) -> None:
        """A header with no data rows is a parse error."""
        with self.assertRaises(ParseError):
            parse_csv_text("name,price\n\n")

    def test_empty_document_raises(self) -> None:
        """An empty document is a parse error."""
        with self.assertRaises(ParseError):
            parse_csv_text("   \n")

    def test_record_cap(self) -> None:
        """Buffered parsing honours max_records too."""
        text = "n\n" + "\n".join(str(i) for i in range(5))
        result = parse_csv_text(text, max_records=2)
        self.assertEqual(len(result.records), 2)
        self.assertTrue(result.truncated)


class TestParseCsvStream(unittest.TestCase):
    """Chunked streaming parsing and the record cap."""

    def test_lines_spanning_chunks(self) -> None:
        """A partial line is buffered until its newline arrives."""
        chunks = [b"name,pri", b"ce\nWid", b"get,9\nGad", b"get,4"]
        result = parse_csv_stream(chunks, max_records=100)
        self.assertEqual(
            [(r["name"], r["price"]) for r in result.records],
            [("Widget", "9"), ("Gadget", "4")],
        )
        self.assertFalse(result.truncated)

    def test_multibyte_character_split_across_chunks(self) -> None:
        """UTF-8 sequences cut by a chunk boundary decode intact."""
        chunks = [b"name\nCaf\xc3", b"\xa9\n"]
        result = parse_csv_stream(chunks, max_records=10)
        self.assertEqual(result.records[0]["name"], "Café")

    def test_byte_order_mark_dropped(self) -> None:
        """A UTF-8 BOM does not leak into the first header name."""
        result = parse_csv_stream(
            [b"\xef\xbb\xbfname\nA\n"], max_records=10
        )
        self.assertEqual(result.records[0]["name"], "A")

    def test_stops_consuming_at_cap(self) -> None:
        """With more rows than the cap, no further chunks are pulled."""
        rows = [b"name\n"] + [f"item{i}\n".encode() for i in range(10)]
        consumed: list[bytes] = []
        stream = _counting_chunks(rows, consumed)

        result = parse_csv_stream(stream, max_records=3)

        self.assertEqual(len(result.records), 3)
        self.assertTrue(result.truncated)
        self.assertEqual(len(consumed), 4)  # header + 3 rows
        # The abandoned generator has been closed
        self.assertEqual(list(stream), [])

    def test_exactly_cap_rows(self) -> None:
        """N == max_records returns exactly max_records records."""
        rows = [b"name\n"] + [f"item{i}\n".encode() for i in range(5)]
        result = parse_csv_stream(rows, max_records=5)
        self.assertEqual(len(result.records), 5)

    def test_fewer_rows_than_cap(self) -> None:
        """Below the cap every row is returned and nothing is truncated."""
        result = parse_csv_stream([b"name\nA\nB\n"], max_records=1000)
        self.assertEqual(len(result.records), 2)
        self.assertFalse(result.truncated)

    def test_header_only_stream_raises(self) -> None:
        """A stream with only a header is a parse error."""
        with self.assertRaises(ParseError):
            parse_csv_stream([b"name,price\n"], max_records=10)


if __name__ == "__main__":
    unittest.main()
