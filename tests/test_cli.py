import json

import openpyxl
import pytest

from statement_ingest import cli


@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv('STATEMENT_LOG_DIR', str(tmp_path / 'logs'))


@pytest.fixture
def csv_path(tmp_path, statement_csv):
    path = tmp_path / 'statement.csv'
    path.write_bytes(statement_csv)
    return path


def test_json_output(csv_path, tmp_path):
    out = tmp_path / 'out.json'
    assert cli.main_cli([str(csv_path), '-o', str(out)]) == cli.EXIT_OK

    body = json.loads(out.read_text(encoding='utf-8'))
    assert body['status'] == 'success'
    assert len(body['transactions']) == 2


def test_excel_output(csv_path, tmp_path):
    out = tmp_path / 'out.xlsx'
    assert cli.main_cli([str(csv_path), '--output', str(out)]) == cli.EXIT_OK

    ws = openpyxl.load_workbook(out)['Transactions']
    assert ws['A1'].value == 'Date'
    assert ws['A2'].value == '2024-01-01'
    assert ws['C2'].value == 'income'


def test_stdout_output(csv_path, capsys):
    assert cli.main_cli([str(csv_path)]) == cli.EXIT_OK
    assert json.loads(capsys.readouterr().out)['transactions_count'] == 2


def test_missing_input(tmp_path):
    assert cli.main_cli([str(tmp_path / 'nope.csv')]) == cli.EXIT_NOT_FOUND


def test_header_not_found_prints_preview(tmp_path, capsys):
    path = tmp_path / 'odd.csv'
    path.write_bytes(b"When,What,How much\n01/02/2024,Groceries,-82.10\n")

    assert cli.main_cli([str(path)]) == cli.EXIT_NO_TRANSACTIONS
    assert 'How much' in capsys.readouterr().err


def test_manual_mapping(tmp_path, capsys):
    path = tmp_path / 'odd.csv'
    path.write_bytes(b"When,What,How much\n01/02/2024,Groceries,-82.10\n")
    mapping = json.dumps({'date': 0, 'description': 1, 'amount': 2})

    assert cli.main_cli([str(path), '--header-row', '0', '--mapping', mapping]) == cli.EXIT_OK
    assert json.loads(capsys.readouterr().out)['transactions'][0]['description'] == 'Groceries'


def test_mapping_requires_header_row(csv_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main_cli([str(csv_path), '--mapping', '{"date": 0}'])

    assert excinfo.value.code == 2
    assert '--header-row is required' in capsys.readouterr().err


def test_unsupported_input(tmp_path):
    path = tmp_path / 'old.xls'
    path.write_bytes(b'\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1' + b'\x00' * 32)
    assert cli.main_cli([str(path)]) == cli.EXIT_UNSUPPORTED
