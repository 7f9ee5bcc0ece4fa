"""Source readers: turn statement bytes into a raw matrix or text fragments.

This is the only module that touches file formats. Everything downstream
works on plain strings.
"""
import csv
import io
import logging
import os
import zipfile
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd
import pdfplumber
import xlrd
from pdfminer.pdfdocument import PDFPasswordIncorrect
from xlrd.compdoc import CompDocError

from .errors import IncorrectPassword, PasswordRequired, StatementIngestError, UnsupportedSourceFormat
from .models import RawMatrix, TextFragment
from .utils import cell_text

logger = logging.getLogger(__name__)

WORKBOOK = 'workbook'
DELIMITED = 'delimited'
DOCUMENT = 'document'

_PDF_MAGIC = b'%PDF'
_ZIP_MAGIC = b'PK\x03\x04'
_OLE2_MAGIC = b'\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1'
# Directory entry (UTF-16LE) present in OLE2 containers wrapping an encrypted workbook.
_ENCRYPTION_INFO = 'EncryptionInfo'.encode('utf-16-le')

EXTENSION_FORMATS = {
    '.pdf': DOCUMENT,
    '.xlsx': WORKBOOK,
    '.xlsm': WORKBOOK,
    '.xls': WORKBOOK,
    '.csv': DELIMITED,
    '.txt': DELIMITED,
    '.tsv': DELIMITED,
}
SNIFF_DELIMITERS = ',;\t|'


def detect_source_format(data: bytes, filename: Optional[str] = None) -> str:
    """Classify input bytes as workbook, delimited text or document.

    Content signatures win over the file extension. Raises
    UnsupportedSourceFormat for anything else.
    """
    if data.startswith(_PDF_MAGIC):
        return DOCUMENT
    if data.startswith(_ZIP_MAGIC):
        return WORKBOOK
    if data.startswith(_OLE2_MAGIC):
        if _ENCRYPTION_INFO in data:
            raise UnsupportedSourceFormat("Password-protected workbooks are not supported")
        return WORKBOOK

    ext = os.path.splitext(filename or '')[1].lower()
    if ext in EXTENSION_FORMATS and EXTENSION_FORMATS[ext] != DELIMITED:
        raise UnsupportedSourceFormat(f"File content does not match its {ext} extension")

    if not data.strip() or b'\x00' in data[:4096]:
        raise UnsupportedSourceFormat(f"Unrecognized statement format: {filename or 'unnamed input'}")
    return DELIMITED


def _rectangular(rows: Iterable[Sequence[Any]]) -> RawMatrix:
    text_rows = [[cell_text(c) for c in row] for row in rows]
    width = max((len(r) for r in text_rows), default=0)
    return tuple(tuple(r + [''] * (width - len(r))) for r in text_rows)


def read_workbook(data: bytes) -> RawMatrix:
    """First worksheet of an .xlsx or legacy .xls workbook as a raw matrix."""
    engine = 'xlrd' if data.startswith(_OLE2_MAGIC) else 'openpyxl'
    try:
        df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object, engine=engine)
    except (ValueError, KeyError, OSError, zipfile.BadZipFile, xlrd.XLRDError, CompDocError) as e:
        raise UnsupportedSourceFormat(f"Could not read workbook: {e}") from e
    logger.info(f"Workbook read: {len(df)} rows x {len(df.columns)} columns")
    return _rectangular(df.itertuples(index=False, name=None))


def decode_text(data: bytes) -> str:
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError:
        logger.info("Delimited input is not UTF-8, decoding as Latin-1")
        return data.decode('latin-1')


def read_delimited(data: bytes, delimiter: Optional[str] = None) -> RawMatrix:
    """Delimited text as a raw matrix; quoting is honored, blank lines dropped."""
    text = decode_text(data)
    if delimiter is None:
        try:
            delimiter = csv.Sniffer().sniff(text[:4096], delimiters=SNIFF_DELIMITERS).delimiter
        except csv.Error:
            delimiter = ','
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    logger.info(f"Delimited text read: {len(rows)} rows (delimiter {delimiter!r})")
    return _rectangular(rows)


def _is_password_error(exc: BaseException) -> bool:
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, PDFPasswordIncorrect):
            return True
        nested = [a for a in exc.args if isinstance(a, BaseException)]
        exc = nested[0] if nested else (exc.__cause__ or exc.__context__)
    return False


def open_pdf(data: bytes, password: Optional[str] = None):
    """Open PDF bytes with pdfplumber, translating decryption failures."""
    try:
        if password:
            return pdfplumber.open(io.BytesIO(data), password=password)
        return pdfplumber.open(io.BytesIO(data))
    except Exception as e:
        if _is_password_error(e):
            if password:
                logger.error("Incorrect password provided for encrypted PDF.")
                raise IncorrectPassword("Incorrect password for encrypted PDF") from e
            logger.warning("PDF is encrypted and no password was provided.")
            raise PasswordRequired("PDF is encrypted and requires a password") from e
        raise StatementIngestError(f"Could not open PDF document: {e}") from e


def page_fragments(page) -> List[TextFragment]:
    """Words on a pdfplumber page as fragments in PDF coordinates."""
    fragments = []
    for word in page.extract_words():
        fragments.append(TextFragment(
            text=word['text'],
            x=float(word['x0']),
            y=float(page.height) - float(word['bottom']),
            height=float(word['bottom']) - float(word['top']),
        ))
    return fragments


def read_document(data: bytes, password: Optional[str] = None) -> List[List[TextFragment]]:
    """Positioned text fragments for every page of a PDF."""
    pdf = open_pdf(data, password=password)
    try:
        pages = [page_fragments(page) for page in pdf.pages]
    finally:
        pdf.close()
    logger.info(f"Document read: {len(pages)} pages, {sum(len(p) for p in pages)} fragments")
    return pages
