import pytest

from statement_ingest.cleanup import cleanup_transactions
from statement_ingest.errors import RowParseSkipped
from statement_ingest.extractor import parse_matrix, parse_source, parse_with_mapping
from statement_ingest.models import (ColumnRole, HeaderDetectionFailed, NoTransactionsParsed,
                                     NormalizedTransaction, ParseSuccess, TransactionType)
from statement_ingest.parsers.generic import parse_row

DUAL_HEADER = ("Date", "Narration", "Debit", "Credit", "Balance")
DUAL_MAPPING = {ColumnRole.DATE: 0, ColumnRole.DESCRIPTION: 1, ColumnRole.DEBIT: 2,
                ColumnRole.CREDIT: 3, ColumnRole.BALANCE: 4}


def test_dual_column_statement(dual_column_matrix):
    result = parse_matrix(dual_column_matrix)

    assert isinstance(result, ParseSuccess)
    assert result.header_row_index == 2
    first = result.transactions[0]
    assert first.date == "2024-01-01"
    assert first.description == "Salary Credit"
    assert first.amount == 50000.0
    assert first.type is TransactionType.INCOME
    assert first.balance == 50000.0


def test_summary_and_separator_rows_are_skipped(dual_column_matrix):
    result = parse_matrix(dual_column_matrix)

    assert len(result.transactions) == 3
    assert result.skipped_rows == 2
    assert all(t.description != "Total" for t in result.transactions)


def test_transactions_are_sorted_by_date(dual_column_matrix):
    result = parse_matrix(dual_column_matrix)
    assert [t.date for t in result.transactions] == ["2024-01-01", "2024-01-02", "2024-01-03"]


def test_single_amount_statement(single_amount_matrix):
    result = parse_matrix(single_amount_matrix)

    atm, refund, coffee = result.transactions
    assert (atm.date, atm.amount, atm.type) == ("2024-01-02", 500.0, TransactionType.EXPENSE)
    assert refund.type is TransactionType.INCOME
    assert coffee.type is TransactionType.EXPENSE
    assert coffee.confidence == 0.5


def test_parsing_is_repeatable(dual_column_matrix):
    assert parse_matrix(dual_column_matrix) == parse_matrix(dual_column_matrix)


def test_unrecognized_header_then_manual_mapping():
    matrix = (
        ("When", "What", "How much"),
        ("01/02/2024", "Groceries", "-82.10"),
    )
    assert isinstance(parse_matrix(matrix), HeaderDetectionFailed)

    mapping = {ColumnRole.DATE: 0, ColumnRole.DESCRIPTION: 1, ColumnRole.AMOUNT: 2}
    result = parse_with_mapping(matrix, 0, mapping)

    assert isinstance(result, ParseSuccess)
    assert result.transactions[0].amount == 82.10
    assert result.column_mapping == mapping


def test_no_valid_rows():
    matrix = (
        ("Date", "Description", "Amount"),
        ("not a date", "Bad", "10"),
        ("01/01/2024", "Zero", "0.00"),
    )
    result = parse_matrix(matrix)

    assert isinstance(result, NoTransactionsParsed)
    assert result.header_row_index == 0
    assert result.skipped_rows == 2
    assert result.ok is False


def test_header_row_out_of_range():
    with pytest.raises(ValueError):
        parse_with_mapping((("a", "b"),), 3, {ColumnRole.DATE: 0})


def test_parse_source_with_delimited_bytes(statement_csv):
    result = parse_source(statement_csv, filename="statement.csv")

    assert isinstance(result, ParseSuccess)
    salary, rent = result.transactions
    assert salary.amount == 50000.0
    assert salary.type is TransactionType.INCOME
    assert rent.description == "Rent, January"
    assert rent.type is TransactionType.EXPENSE


def test_row_without_description_is_skipped():
    with pytest.raises(RowParseSkipped) as excinfo:
        parse_row(("02/01/2024", "   ", "", "100.00", "600.00"), DUAL_MAPPING)
    assert excinfo.value.reason == "empty description"

    matrix = (
        DUAL_HEADER,
        ("01/01/2024", "Salary", "", "500.00", "500.00"),
        ("02/01/2024", "", "", "100.00", "600.00"),
    )
    result = parse_matrix(matrix)
    assert [t.description for t in result.transactions] == ["Salary"]
    assert result.skipped_rows == 1


def test_row_whose_description_opens_with_summary_word_is_skipped():
    with pytest.raises(RowParseSkipped) as excinfo:
        parse_row(("04/01/2024", "Closing Balance", "", "48000.00", "48000.00"), DUAL_MAPPING)
    assert "summary description" in excinfo.value.reason


def test_summary_word_later_in_description_is_kept():
    matrix = (
        DUAL_HEADER,
        ("05/01/2024", "MIN BALANCE CHG", "100.00", "", "47900.00"),
    )
    result = parse_matrix(matrix)

    assert isinstance(result, ParseSuccess)
    assert result.transactions[0].description == "MIN BALANCE CHG"
    assert result.transactions[0].type is TransactionType.EXPENSE


def test_description_whitespace_is_collapsed():
    matrix = (
        DUAL_HEADER,
        ("06/01/2024", "UPI   /  PAYTM\n  store ", "50.00", "", "47850.00"),
    )
    result = parse_matrix(matrix)
    assert result.transactions[0].description == "UPI / PAYTM store"


def test_cleanup_drops_summary_and_empty_entries():
    transactions = [
        NormalizedTransaction("2024-01-03", "NEFT   Transfer ", 10.0, TransactionType.INCOME),
        NormalizedTransaction("2024-01-02", "Total   charges", 5.0, TransactionType.EXPENSE),
        NormalizedTransaction("2024-01-01", "Refund", 0.0, TransactionType.INCOME),
        NormalizedTransaction("", "Undated", 7.0, TransactionType.EXPENSE),
    ]
    cleaned = cleanup_transactions(transactions)

    assert [t.description for t in cleaned] == ["NEFT Transfer"]
