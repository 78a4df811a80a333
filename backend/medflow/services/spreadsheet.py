"""
Spreadsheet import/export for patient records.

Import reads the first worksheet (or a CSV file) and turns each row into a
candidate ``PatientBase``. Rows without a name, a positive age or a diagnosis
are dropped. Export writes an xlsx workbook with a fixed column order.
"""

import io
from datetime import date
from typing import Any, Iterable, Optional
import pandas as pd
from openpyxl.utils import get_column_letter
from medflow.exceptions import FileFormatInvalid
from medflow.schemas.patient import Gender, Patient, PatientBase
from medflow.utils.logger import get_logger

logger = get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MEDIA_TYPE = "application/vnd.ms-excel"
CSV_MEDIA_TYPE = "text/csv"
ALLOWED_MEDIA_TYPES = (XLSX_MEDIA_TYPE, XLS_MEDIA_TYPE, CSV_MEDIA_TYPE)

# column name -> width
EXPORT_COLUMNS = {
    "Patient ID": 15,
    "Name": 20,
    "Age": 8,
    "Gender": 10,
    "Diagnosis": 30,
    "Prescription": 30,
    "Created By": 15,
    "Created Date": 15,
    "Last Updated": 15,
}
EXPORT_SHEET = "Patients"

TEMPLATE_COLUMNS = {
    "Name": 20,
    "Age": 8,
    "Gender": 10,
    "Diagnosis": 30,
    "Prescription": 40,
}
TEMPLATE_SHEET = "Patient Template"
TEMPLATE_FILENAME = "medflow-patient-template.xlsx"
TEMPLATE_ROWS = [
    {"Name": "John Smith", "Age": 45, "Gender": "Male",
     "Diagnosis": "Hypertension", "Prescription": "Lisinopril 10mg daily"},
    {"Name": "Sarah Johnson", "Age": 32, "Gender": "Female",
     "Diagnosis": "Type 2 Diabetes", "Prescription": "Metformin 500mg twice daily"},
    {"Name": "Michael Brown", "Age": 28, "Gender": "Male",
     "Diagnosis": "Asthma", "Prescription": "Albuterol inhaler as needed"},
]


def _base_media_type(media_type: Optional[str]) -> str:
    return (media_type or "").split(";")[0].strip().lower()


def validate_media_type(media_type: Optional[str]) -> bool:
    return _base_media_type(media_type) in ALLOWED_MEDIA_TYPES


def _text(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value)


def _age(value: Any) -> int:
    if value is None:
        return 0
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return 0
    return int(number)


def _gender(value: Any) -> Gender:
    text = _text(value).strip().lower()
    for gender in Gender:
        if gender.value.lower() == text:
            return gender
    return Gender.OTHER


def _read_frame(content: bytes, media_type: str) -> pd.DataFrame:
    if media_type == CSV_MEDIA_TYPE:
        return pd.read_csv(io.BytesIO(content), keep_default_na=False, na_values=[""])
    return pd.read_excel(io.BytesIO(content), sheet_name=0, keep_default_na=False, na_values=[""])


def rows_to_patients(rows: Iterable[dict]) -> list[PatientBase]:
    patients = []
    for row in rows:
        candidate = PatientBase(
            name=_text(row.get("Name")),
            age=_age(row.get("Age")),
            gender=_gender(row.get("Gender")),
            diagnosis=_text(row.get("Diagnosis")),
            prescription=_text(row.get("Prescription")),
        )
        if candidate.name.strip() and candidate.age > 0 and candidate.diagnosis.strip():
            patients.append(candidate)
    return patients


def import_patients(content: bytes, media_type: Optional[str]) -> list[PatientBase]:
    """Parse an uploaded spreadsheet into candidate patient records.

    Raises FileFormatInvalid when the media type is not allowed or the file
    cannot be parsed.
    """
    if not validate_media_type(media_type):
        logger.warning(f"Rejected spreadsheet with media type {media_type!r}")
        raise FileFormatInvalid(
            "Please select a valid Excel file (.xlsx, .xls) or CSV file.",
            {"media_type": media_type},
        )
    try:
        frame = _read_frame(content, _base_media_type(media_type))
    except Exception as e:
        logger.warning(f"Failed to parse spreadsheet: {e}")
        raise FileFormatInvalid(
            "Failed to parse Excel file. Please check the file format.",
            {"error": str(e)},
        ) from e

    patients = rows_to_patients(frame.to_dict(orient="records"))
    logger.info(f"Parsed {len(patients)} of {len(frame)} spreadsheet rows")
    return patients


def _write_workbook(frame: pd.DataFrame, sheet_name: str, widths: Iterable[int]) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        for i, width in enumerate(widths, start=1):
            worksheet.column_dimensions[get_column_letter(i)].width = width
    return buffer.getvalue()


def patients_to_frame(patients: Iterable[Patient]) -> pd.DataFrame:
    rows = [
        {
            "Patient ID": p.id,
            "Name": p.name,
            "Age": p.age,
            "Gender": p.gender.value,
            "Diagnosis": p.diagnosis,
            "Prescription": p.prescription,
            "Created By": p.created_by,
            "Created Date": p.created_at.date().isoformat(),
            "Last Updated": p.updated_at.date().isoformat(),
        }
        for p in patients
    ]
    return pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))


def export_patients(
    patients: Iterable[Patient],
    filename_stem: str = "patients-data",
    today: Optional[date] = None,
) -> tuple[str, bytes]:
    """Return ``(filename, xlsx bytes)``; the filename carries today's date."""
    today = today or date.today()
    content = _write_workbook(patients_to_frame(patients), EXPORT_SHEET, EXPORT_COLUMNS.values())
    return f"{filename_stem}-{today.isoformat()}.xlsx", content


def export_selected(
    patients: Iterable[Patient],
    selected_ids: Iterable[str],
    filename_stem: str = "selected-patients",
    today: Optional[date] = None,
) -> tuple[str, bytes]:
    selected = set(selected_ids)
    return export_patients([p for p in patients if p.id in selected], filename_stem, today)


def build_template() -> tuple[str, bytes]:
    frame = pd.DataFrame(TEMPLATE_ROWS, columns=list(TEMPLATE_COLUMNS))
    return TEMPLATE_FILENAME, _write_workbook(frame, TEMPLATE_SHEET, TEMPLATE_COLUMNS.values())
