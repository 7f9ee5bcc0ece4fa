import pytest

from statement_ingest.settings import Settings


@pytest.fixture
def dual_column_matrix():
    # Bank letterhead above the real header, as exported by most banks.
    return (
        ("ABC Bank Statement", "", "", "", ""),
        ("Account No: 1234567890", "", "", "", ""),
        ("Date", "Narration", "Debit", "Credit", "Balance"),
        ("01/01/2024", "Salary Credit", "", "50000.00", "50000.00"),
        ("03/01/2024", "UPI/SWIGGY/Dinner", "450.00", "", "49550.00"),
        ("02/01/2024", "ATM WDL", "2,000.00", "", "48000.00"),
        ("*****", "", "", "", ""),
        ("Total", "", "2450.00", "50000.00", ""),
    )


@pytest.fixture
def single_amount_matrix():
    return (
        ("Date", "Description", "Amount"),
        ("02/01/2024", "ATM WDL", "-500"),
        ("05/01/2024", "Refund 1234", "120.00 Cr"),
        ("06/01/2024", "Coffee", "80"),
    )


@pytest.fixture
def statement_csv():
    return (
        b"ABC Bank\n"
        b"\n"
        b"Date,Narration,Debit,Credit,Balance\n"
        b"01/01/2024,Salary Credit,,\"50,000.00\",\"50,000.00\"\n"
        b"02/01/2024,\"Rent, January\",\"15,000.00\",,\"35,000.00\"\n"
    )


@pytest.fixture
def columnar_document_text():
    return (
        "XYZ Bank\n"
        "Account No: 123456789012\n"
        "Opening Balance: 10,000.00\n"
        "Date Narration Value Date Amount Balance\n"
        "01/04/2024 ATM WITHDRAWAL 01/04/2024 1,500.00 8,500.00\n"
        "MUMBAI BRANCH\n"
        "02/04/2024 SALARY ACME CORP 02/04/2024 20,000.00 28,500.00\n"
        "Closing Balance: 28,500.00\n"
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(log_dir=str(tmp_path / "logs"))
