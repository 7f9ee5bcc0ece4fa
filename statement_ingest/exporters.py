"""Export module: write parse results as JSON or an Excel workbook.

Used by the CLI and the HTTP API; the parsing core never writes files.
"""
import json
import logging
from typing import Any, Dict, List

import openpyxl
from openpyxl.styles import Font

from .models import (HeaderDetectionFailed, NoTransactionsParsed, NormalizedTransaction,
                     ParseResult, ParseSuccess, mapping_to_dict)

logger = logging.getLogger(__name__)

TRANSACTION_HEADERS = ['Date', 'Description', 'Type', 'Amount', 'Balance', 'Category', 'Confidence']


def to_records(transactions: List[NormalizedTransaction]) -> List[Dict[str, Any]]:
    return [t.to_dict() for t in transactions]


def result_to_dict(result: ParseResult) -> Dict[str, Any]:
    """JSON-ready view of any parse result."""
    if isinstance(result, ParseSuccess):
        return {
            'status': 'success',
            'header_row_index': result.header_row_index,
            'column_mapping': mapping_to_dict(result.column_mapping),
            'skipped_rows': result.skipped_rows,
            'summary': result.summary.to_dict() if result.summary else None,
            'transactions_count': len(result.transactions),
            'transactions': to_records(result.transactions),
        }
    if isinstance(result, HeaderDetectionFailed):
        return {
            'status': 'header_detection_failed',
            'error': result.reason,
            'preview_rows': result.preview_rows,
        }
    if isinstance(result, NoTransactionsParsed):
        return {
            'status': 'no_transactions',
            'error': result.reason,
            'header_row_index': result.header_row_index,
            'column_mapping': mapping_to_dict(result.column_mapping),
            'skipped_rows': result.skipped_rows,
        }
    raise TypeError(f"Unknown parse result: {result!r}")


def export_json(result: ParseResult, output_path: str) -> None:
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(result_to_dict(result), f, ensure_ascii=False, indent=4)
    logger.info(f"JSON written to {output_path}")


def export_excel(result: ParseSuccess, output_path: str) -> None:
    """Write transactions (and statement details, if any) to an .xlsx file."""
    wb = openpyxl.Workbook()
    if "Sheet" in wb.sheetnames:
        wb.remove(wb["Sheet"])

    header_font = Font(bold=True)

    ws = wb.create_sheet("Transactions")
    ws.column_dimensions['A'].width = 12
    ws.column_dimensions['B'].width = 50
    ws.column_dimensions['C'].width = 10
    ws.column_dimensions['D'].width = 15
    ws.column_dimensions['E'].width = 15

    for col, header in enumerate(TRANSACTION_HEADERS, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font

    for row_idx, trans in enumerate(result.transactions, 2):
        ws.cell(row=row_idx, column=1, value=trans.date)
        ws.cell(row=row_idx, column=2, value=trans.description)
        ws.cell(row=row_idx, column=3, value=trans.type.value)
        ws.cell(row=row_idx, column=4, value=trans.amount).number_format = '#,##0.00'
        if trans.balance is not None:
            ws.cell(row=row_idx, column=5, value=trans.balance).number_format = '#,##0.00'
        ws.cell(row=row_idx, column=6, value=trans.category)
        ws.cell(row=row_idx, column=7, value=trans.confidence)

    if result.summary is not None:
        info_ws = wb.create_sheet("Statement")
        info_ws.column_dimensions['A'].width = 20
        info_ws.column_dimensions['B'].width = 40
        for row_idx, (key, value) in enumerate(result.summary.to_dict().items(), 1):
            info_ws.cell(row=row_idx, column=1, value=key.replace('_', ' ').title()).font = header_font
            info_ws.cell(row=row_idx, column=2, value=value)

    wb.save(output_path)
    logger.info(f"Excel workbook written to {output_path}")
