import logging
import pandas as pd
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional
from openpyxl import load_workbook
from app.core.config import get_settings
from app.core.errors import AppError, ErrorCodes
from app.core.performance import track_performance
from app.core.sanitization import sanitize_column_name, sanitize_for_logging

logger = logging.getLogger(__name__)

Records = List[Dict[str, Any]]

ALLOWED_EXTENSIONS = {'.csv', '.xlsx', '.xls'}

# Encodings tried in order for CSV files
CSV_ENCODINGS = ('utf-8-sig', 'latin1')


def validate_file_extension(filename: str) -> str:
    """
    Return the lower-cased extension of filename.

    Raises:
        AppError: If the file has no extension or an unsupported one
    """
    file_ext = Path(filename or "").suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        raise AppError(
            ErrorCodes.INVALID_FILE_TYPE,
            400,
            f"Got '{file_ext or 'no extension'}'."
        )
    return file_ext


def _unique_headers(raw_headers) -> List[str]:
    """Sanitize header cells, naming blanks and de-duplicating repeats."""
    headers = []
    seen: Dict[str, int] = {}
    for i, raw in enumerate(raw_headers):
        name = sanitize_column_name(raw) or f"column_{i + 1}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        headers.append(name)
    return headers


def read_csv_records(contents: bytes) -> Records:
    """
    Parse CSV bytes into records of raw strings.

    No type coercion happens here: empty cells stay '' and numbers stay text,
    typing is left to dataset ingestion.
    """
    df: Optional[pd.DataFrame] = None
    for encoding in CSV_ENCODINGS:
        try:
            df = pd.read_csv(BytesIO(contents), dtype=str, keep_default_na=False, encoding=encoding)
            break
        except UnicodeDecodeError:
            logger.debug(f"CSV is not {encoding}, trying next encoding")
        except pd.errors.EmptyDataError:
            raise AppError(ErrorCodes.FILE_EMPTY, 400)
        except pd.errors.ParserError as e:
            raise AppError(ErrorCodes.PARSE_ERROR, 400, str(e))

    if df is None:
        raise AppError(ErrorCodes.PARSE_ERROR, 400, "Unknown text encoding.")

    df.columns = _unique_headers(df.columns)
    return df.to_dict(orient='records')


def _read_xlsx_rows(contents: bytes) -> Optional[List[tuple]]:
    """
    Read the first worksheet with openpyxl, filling merged cells with their top-left value.

    Returns None if openpyxl cannot read the file.
    """
    try:
        wb = load_workbook(BytesIO(contents), data_only=True)
    except Exception as e:
        logger.warning(f"openpyxl parsing failed, falling back to pandas: {e}")
        return None

    ws = wb.worksheets[0]
    merged_ranges = list(ws.merged_cells.ranges)
    for merged_range in merged_ranges:
        top_left_value = ws.cell(merged_range.min_row, merged_range.min_col).value
        ws.unmerge_cells(str(merged_range))
        for row in range(merged_range.min_row, merged_range.max_row + 1):
            for col in range(merged_range.min_col, merged_range.max_col + 1):
                ws.cell(row, col, top_left_value)

    if merged_ranges:
        logger.info(f"Unmerged {len(merged_ranges)} cell ranges in sheet '{ws.title}'")

    return list(ws.values)


def _read_excel_rows_with_pandas(contents: bytes) -> List[tuple]:
    try:
        df = pd.read_excel(BytesIO(contents), sheet_name=0, header=None)
    except Exception as e:
        logger.error(f"Error parsing Excel file: {e}")
        raise AppError(ErrorCodes.PARSE_ERROR, 400, "The spreadsheet could not be opened.")
    df = df.astype(object).where(pd.notna(df), None)
    return [tuple(row) for row in df.itertuples(index=False, name=None)]


def read_excel_records(contents: bytes, file_ext: str) -> Records:
    """Parse the first sheet of a workbook into records, using its first row as header."""
    rows = _read_xlsx_rows(contents) if file_ext == '.xlsx' else None
    if rows is None:
        rows = _read_excel_rows_with_pandas(contents)

    # Fully empty rows carry no data
    rows = [row for row in rows if any(value is not None and value != "" for value in row)]
    if not rows:
        return []

    headers = _unique_headers(rows[0])
    return [dict(zip(headers, row)) for row in rows[1:]]


@track_performance("parse_file")
def parse_file(contents: bytes, filename: str) -> Records:
    """
    Parse an uploaded CSV or Excel file into records.

    Args:
        contents: Raw file bytes
        filename: Original file name, used to pick the format

    Returns:
        List of row dicts keyed by column name

    Raises:
        AppError: For unsupported, empty, oversized or unreadable files
    """
    settings = get_settings()
    file_ext = validate_file_extension(filename)

    if len(contents) == 0:
        raise AppError(ErrorCodes.FILE_EMPTY, 400)

    if file_ext == '.csv':
        records = read_csv_records(contents)
    else:
        records = read_excel_records(contents, file_ext)

    if records and len(records[0]) > settings.max_file_columns:
        raise AppError(
            ErrorCodes.PROCESSING_ERROR,
            400,
            f"The file has {len(records[0])} columns, the maximum is {settings.max_file_columns}."
        )
    if len(records) > settings.max_file_rows:
        raise AppError(
            ErrorCodes.PROCESSING_ERROR,
            400,
            f"The file has {len(records):,} rows, the maximum is {settings.max_file_rows:,}."
        )

    logger.info(f"Parsed {sanitize_for_logging(filename)}: {len(records)} rows")
    return records
