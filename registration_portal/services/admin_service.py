"""Admin read-side operations: view, count, search, filter, export, clear."""
import csv
import io
import json
import logging
from typing import Dict, List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from registration_portal.models.registration_record import FIELD_KEYS, RegistrationRecord
from registration_portal.services.persistence_gateway import PersistenceGateway
from registration_portal.utils.date_utils import export_date_stamp, to_iso_timestamp, utc_now
from registration_portal.utils.exceptions import RemoteUnavailable, StorageUnavailable

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = list(FIELD_KEYS.values())
EXPORT_SHEET_TITLE = "AIMS Students"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Leading characters spreadsheet apps evaluate as a formula
FORMULA_PREFIXES = ("=", "+", "-", "@")

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", start_color="0066CC", end_color="0066CC")


async def view_all_records(gateway: PersistenceGateway) -> List[RegistrationRecord]:
    """
    Load every record for display.

    Returns:
        List[RegistrationRecord]: Remote records if reachable, local otherwise
    """
    records = await gateway.fetch_records()
    logger.info(f"Loaded {len(records)} records for admin view")
    return records


async def get_record_count(gateway: PersistenceGateway, last_known: int = 0) -> int:
    """
    Count registered records.

    Args:
        gateway: Persistence gateway
        last_known: Last total the caller displayed

    Returns:
        int: Remote count when reachable; otherwise the larger of last_known
        and the local record count
    """
    if not gateway.remote_configured:
        return gateway.store.count()

    try:
        records = await gateway.remote.fetch_all()
    except RemoteUnavailable as e:
        fallback = max(last_known, gateway.store.count())
        logger.warning(f"Remote count failed, using last known local total {fallback}: {e}")
        return fallback

    return len(records)


def search_records(records: List[RegistrationRecord], term: str) -> List[RegistrationRecord]:
    """
    Case-insensitive substring search on name, email and student ID.

    Args:
        records: Records to search
        term: Search text; blank returns all records

    Returns:
        Matching records in original order
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(records)

    return [
        record for record in records
        if needle in record.full_name.lower()
        or needle in record.email.lower()
        or needle in record.student_id.lower()
    ]


def filter_by_department(records: List[RegistrationRecord], department: str) -> List[RegistrationRecord]:
    """Case-insensitive substring match on department; blank returns all records."""
    needle = (department or "").strip().lower()
    if not needle:
        return list(records)
    return [record for record in records if needle in record.department.lower()]


def list_departments(records: List[RegistrationRecord]) -> List[str]:
    """Distinct non-blank departments, sorted."""
    return sorted({record.department for record in records if record.department})


def escape_cell(value: str) -> str:
    """Quote a value that a spreadsheet would otherwise run as a formula."""
    if value and value.startswith(FORMULA_PREFIXES):
        return f"'{value}"
    return value


def _tabular_row(record: RegistrationRecord) -> Dict[str, str]:
    return {key: escape_cell(value) for key, value in record.to_dict().items()}


def export_records_xlsx(records: List[RegistrationRecord]) -> bytes:
    """
    Render records as an Excel workbook.

    Args:
        records: Records to export, one row each

    Returns:
        bytes: .xlsx file content

    Behavior:
        - Single sheet titled "AIMS Students"
        - Bold white header row on a #0066CC fill
        - Formula-like cell values are quoted
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = EXPORT_SHEET_TITLE

    sheet.append(EXPORT_COLUMNS)
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL

    for record in records:
        row = _tabular_row(record)
        sheet.append([row[column] for column in EXPORT_COLUMNS])

    for column_cells in sheet.columns:
        width = max(len(str(cell.value or "")) for cell in column_cells)
        sheet.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 50)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_records_csv(records: List[RegistrationRecord]) -> str:
    """Render records as CSV text with a header row, one row per record."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for record in records:
        writer.writerow(_tabular_row(record))
    return buffer.getvalue()


def export_records_json(records: List[RegistrationRecord]) -> str:
    """Render records as a pretty-printed JSON array."""
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2)


def export_filename(kind: str, scope: str = "") -> str:
    """
    Dated download file name.

    Args:
        kind: "xlsx", "csv" or "json"
        scope: Optional qualifier inserted before the date, e.g. "filtered"

    Returns:
        e.g. "AIMS_Students_2026-10-19.xlsx", "AIMS_Students_filtered_2026-10-19.csv"
        or "aims_students_2026-10-19.json"
    """
    stamp = f"{scope}_{export_date_stamp()}" if scope else export_date_stamp()
    if kind == "json":
        return f"aims_students_{stamp}.json"
    if kind == "xlsx":
        return f"AIMS_Students_{stamp}.xlsx"
    return f"AIMS_Students_{stamp}.csv"


def clear_local_records(gateway: PersistenceGateway, confirmed: bool) -> Tuple[bool, str]:
    """
    Clear the local record store.

    Returns:
        Tuple of (success: bool, message: str)
    """
    if not confirmed:
        return False, "Clearing local data requires confirmation"

    try:
        gateway.store.clear(confirmed=True)
    except StorageUnavailable as e:
        logger.error(f"Failed to clear local records: {e}")
        return False, "Could not clear local data, please try again"

    return True, "Local data cleared"


def backend_label(gateway: PersistenceGateway) -> str:
    """Human-readable name of the active backend."""
    return "Google Sheets" if gateway.remote_configured else "Local Storage"


async def check_backend_connection(gateway: PersistenceGateway) -> Tuple[bool, str]:
    """
    Send a test payload to the remote endpoint. Nothing is stored locally.

    Returns:
        Tuple of (success: bool, message: str)
    """
    if not gateway.remote_configured:
        return False, "Remote endpoint not configured, data is saved locally only"

    payload = {
        "test": True,
        "timestamp": to_iso_timestamp(utc_now()),
        "message": "Test connection to Google Sheets",
    }
    try:
        response = await gateway.remote.post_payload(payload)
    except RemoteUnavailable as e:
        return False, f"Backend unreachable: {e}"

    logger.info(f"Backend test succeeded: {response!r}")
    return True, "Backend connection OK"
