"""
Unit tests for the naive delimited-text parser.
"""
from app.ingestion.parser import parse_records


class TestLines:
    def test_blank_lines_dropped(self):
        text = "name,amount\n\n   \nAlice,10\n\t\nBob,20\n"
        parsed = parse_records(text)
        assert [r.cells[0] for r in parsed.rows] == ["Alice", "Bob"]

    def test_windows_line_endings(self):
        parsed = parse_records("name,amount\r\nAlice,10\r\n")
        assert parsed.headers == ["name", "amount"]
        assert parsed.rows[0].cells == ["Alice", "10"]

    def test_unicode_separators_stay_inside_cell(self):
        text = "name,amount,days\nAnna\u2028Lee,12000,95\nNo\x85el,1,1\nBob\x0c,2,2\n"
        parsed = parse_records(text)
        assert [r.cells[0] for r in parsed.rows] == ["Anna\u2028Lee", "No\x85el", "Bob\x0c"]
        assert parsed.skipped_row_count == 0
        assert [r.row_index for r in parsed.rows] == [1, 2, 3]

    def test_empty_input(self):
        parsed = parse_records("")
        assert parsed.headers == []
        assert parsed.rows == []
        assert parsed.skipped_row_count == 0

    def test_header_only(self):
        parsed = parse_records("name,email\n")
        assert parsed.headers == ["name", "email"]
        assert parsed.rows == []


class TestHeader:
    def test_header_trimmed_and_lowercased(self):
        parsed = parse_records(" Name , EMAIL ,Days_Overdue\nA,b,1")
        assert parsed.headers == ["name", "email", "days_overdue"]


class TestShortRows:
    def test_short_row_skipped_silently(self):
        text = "name,email,phone,outstanding_amount,days_overdue\nAlice,a@x.com,555\nBob,b@x.com,556,100,5"
        parsed = parse_records(text)
        assert len(parsed.rows) == 1
        assert parsed.rows[0].cells[0] == "Bob"
        assert parsed.skipped_row_count == 1

    def test_output_never_exceeds_input(self):
        text = "a,b,c\n1,2,3\n1,2\n1\n1,2,3,4"
        parsed = parse_records(text)
        assert len(parsed.rows) <= 4
        assert parsed.data_line_count == 4

    def test_wider_row_kept(self):
        parsed = parse_records("a,b\n1,2,3")
        assert parsed.rows[0].cells == ["1", "2", "3"]

    def test_row_index_counts_skipped_lines(self):
        parsed = parse_records("a,b\n1\n2,2\n3,3")
        assert [r.row_index for r in parsed.rows] == [2, 3]


class TestNoQuoting:
    def test_embedded_comma_splits_cell(self):
        # Known limitation: quotes are not honoured
        parsed = parse_records('name,amount\n"Smith, John",100')
        assert parsed.rows[0].cells == ['"Smith', ' John"', "100"]
