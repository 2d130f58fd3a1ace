import logging

from sublookup.core.tabular import (
    ADDITIONAL_HEADERS,
    MAIN_HEADERS,
    PAYMENT_HEADERS,
    load_rows,
)


def test_rows_are_keyed_by_header():
    text = "Email,Product Configurations\nbob@x.com, All Apps \n"
    rows = load_rows(text, "alpha.csv", MAIN_HEADERS)
    assert rows == [{"Email": "bob@x.com", "Product Configurations": "All Apps"}]


def test_bom_and_crlf_are_handled():
    text = "\ufeffEmail,Product Configurations\r\nbob@x.com,Plan\r\n"
    rows = load_rows(text, "alpha.csv", MAIN_HEADERS)
    assert [r["Email"] for r in rows] == ["bob@x.com"]


def test_headers_match_case_insensitively():
    text = "EMAIL,product configurations\nbob@x.com,Plan\n"
    rows = load_rows(text, "alpha.csv", MAIN_HEADERS)
    assert rows == [{"EMAIL": "bob@x.com", "product configurations": "Plan"}]


def test_missing_required_header_skips_file(caplog):
    caplog.set_level(logging.WARNING)
    rows = load_rows("Email\nbob@x.com\n", "alpha.csv", MAIN_HEADERS)
    assert rows == []
    assert "missing_headers" in caplog.text


def test_org_header_is_optional_for_additional_file():
    text = "Email,Approver,rat,pov\nbob@x.com,carol,20240101,12m\n"
    rows = load_rows(text, "additional.csv", ADDITIONAL_HEADERS, org_optional=True)
    assert rows[0]["Approver"] == "carol"


def test_org_optional_does_not_excuse_other_headers():
    text = "Email,Approver,rat\nbob@x.com,carol,20240101\n"
    assert load_rows(text, "additional.csv", ADDITIONAL_HEADERS, org_optional=True) == []


def test_org_header_required_without_flag():
    text = "Email,Approver,rat,pov\nbob@x.com,carol,20240101,12m\n"
    assert load_rows(text, "additional.csv", ADDITIONAL_HEADERS) == []


def test_short_lines_blank_lines_and_empty_emails_are_skipped(caplog):
    caplog.set_level(logging.WARNING)
    text = (
        "Email,PaymentDate,Approver,pov\n"
        "a@x.com,20250101,carol,12m\n"
        ",,,\n"
        "   \n"
        "b@x.com,20250101\n"
        ",20250101,carol,12m\n"
        "c@x.com,,,\n"
    )
    rows = load_rows(text, "payment.csv", PAYMENT_HEADERS)
    assert [r["Email"] for r in rows] == ["a@x.com", "c@x.com"]
    assert "line=5" in caplog.text


def test_empty_or_headerless_text_returns_nothing():
    assert load_rows("", "x.csv", MAIN_HEADERS) == []
    assert load_rows("\n\n", "x.csv", MAIN_HEADERS) == []
    assert load_rows(",,\nbob@x.com,Plan\n", "x.csv", MAIN_HEADERS) == []


def test_header_only_file_returns_nothing():
    assert load_rows("Email,Product Configurations\n", "x.csv", MAIN_HEADERS) == []
