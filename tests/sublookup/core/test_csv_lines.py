from sublookup.core.csv_lines import parse_csv_line


def test_plain_fields_are_trimmed():
    assert parse_csv_line(" a , b,c ") == ["a", "b", "c"]


def test_quoted_field_keeps_commas():
    assert parse_csv_line('x@y.com,"Plan A, Plan B",3') == ["x@y.com", "Plan A, Plan B", "3"]


def test_doubled_quotes_become_one_quote():
    assert parse_csv_line('"say ""hi""",2') == ['say "hi"', "2"]


def test_trailing_empty_field_is_kept():
    assert parse_csv_line("a,b,") == ["a", "b", ""]


def test_unterminated_quote_degrades_to_single_field():
    assert parse_csv_line('a,"b,c') == ["a", "b,c"]


def test_empty_line_yields_one_empty_field():
    assert parse_csv_line("") == [""]
