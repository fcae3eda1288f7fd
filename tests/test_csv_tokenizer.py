"""Unit tests for the quote-aware CSV tokenizer."""

import unittest

from rampart.services.csv_tokenizer import decode_text, parse_row, split_records, tokenize
from rampart.services.errors import MalformedInput


class TestParseRow(unittest.TestCase):
    def test_plain_fields_are_trimmed(self) -> None:
        self.assertEqual(parse_row("a, b ,c"), ["a", "b", "c"])

    def test_comma_inside_quotes_does_not_split(self) -> None:
        self.assertEqual(parse_row('x,"hello, world",y'), ["x", "hello, world", "y"])

    def test_backslash_escaped_quote(self) -> None:
        self.assertEqual(parse_row('"say \\"hi\\"",2'), ['say "hi"', "2"])

    def test_doubled_quote(self) -> None:
        self.assertEqual(parse_row('"say ""hi""",2'), ['say "hi"', "2"])

    def test_json_fragment_kept_whole(self) -> None:
        row = parse_row('ctrl-1,{"a": 1, "b": 2},[80, 443],end')
        self.assertEqual(row, ["ctrl-1", '{"a": 1, "b": 2}', "[80, 443]", "end"])

    def test_trailing_empty_field(self) -> None:
        self.assertEqual(parse_row("a,b,"), ["a", "b", ""])


class TestSplitRecords(unittest.TestCase):
    def test_newline_inside_quotes_stays_in_record(self) -> None:
        text = 'h1,h2\n"line one\nline two",x\nlast,y\n'
        self.assertEqual(
            split_records(text),
            ["h1,h2", '"line one\nline two",x', "last,y"],
        )

    def test_crlf_and_blank_lines(self) -> None:
        self.assertEqual(split_records("a,b\r\n\r\n1,2\r\n"), ["a,b", "1,2"])

    def test_lines_policy_ignores_quotes(self) -> None:
        self.assertEqual(split_records('a\n"b\nc"\n', "lines"), ["a", '"b', 'c"'])


class TestTokenize(unittest.TestCase):
    def test_header_and_rows(self) -> None:
        doc = tokenize("Name,Severity\nalpha,High\nbeta,Low\n")
        self.assertEqual(doc.header, ["Name", "Severity"])
        self.assertEqual(len(doc), 2)
        self.assertEqual(list(doc.numbered_rows())[1], (2, ["beta", "Low"]))

    def test_bom_is_stripped(self) -> None:
        doc = tokenize("\ufeffName,Severity\nalpha,High\n")
        self.assertEqual(doc.header[0], "Name")

    def test_short_rows_are_padded(self) -> None:
        doc = tokenize("a,b,c,d\n1,2\n1,2,3,4\n")
        self.assertEqual(doc.rows[0], ["1", "2", "", ""])
        self.assertEqual(doc.padded_rows, 1)
        self.assertEqual(doc.padded_row_numbers, [1])

    def test_long_rows_are_kept(self) -> None:
        doc = tokenize("a,b\n1,2,3\n")
        self.assertEqual(doc.rows[0], ["1", "2", "3"])

    def test_header_only_is_empty(self) -> None:
        with self.assertRaises(MalformedInput) as ctx:
            tokenize("a,b,c\n")
        self.assertTrue(ctx.exception.empty)

    def test_blank_file_is_empty(self) -> None:
        with self.assertRaises(MalformedInput) as ctx:
            tokenize("\n\n")
        self.assertTrue(ctx.exception.empty)


class TestDecodeText(unittest.TestCase):
    def test_utf8_with_bom(self) -> None:
        self.assertEqual(decode_text("\ufeffa,b".encode("utf-8")), "a,b")

    def test_cp1252_fallback(self) -> None:
        self.assertEqual(decode_text("caf\xe9,1".encode("cp1252")), "café,1")

    def test_binary_rejected(self) -> None:
        with self.assertRaises(MalformedInput) as ctx:
            decode_text(b"PK\x03\x04\x00\x00")
        self.assertFalse(ctx.exception.empty)


if __name__ == "__main__":
    unittest.main()
