"""Tests for spreadsheet import/export."""
import io
from datetime import date

import pandas as pd
import pytest

from medflow.exceptions import FileFormatInvalid
from medflow.schemas.patient import Gender, PatientBase
from medflow.services import spreadsheet


def _xlsx(rows):
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def test_validate_media_type():
    assert spreadsheet.validate_media_type(spreadsheet.XLSX_MEDIA_TYPE)
    assert spreadsheet.validate_media_type("application/vnd.ms-excel")
    assert spreadsheet.validate_media_type("text/csv; charset=utf-8")
    assert not spreadsheet.validate_media_type("application/pdf")
    assert not spreadsheet.validate_media_type(None)


def test_import_rejects_unsupported_type():
    with pytest.raises(FileFormatInvalid):
        spreadsheet.import_patients(b"Name,Age\n", "application/json")


def test_import_rejects_unparsable_workbook():
    with pytest.raises(FileFormatInvalid) as exc_info:
        spreadsheet.import_patients(b"not a zip file", spreadsheet.XLSX_MEDIA_TYPE)
    assert "Failed to parse" in exc_info.value.reason


def test_import_csv_filters_incomplete_rows():
    content = (
        "Name,Age,Gender,Diagnosis,Prescription\n"
        "Jane Roe,52,Female,Asthma,Inhaler\n"
        ",40,Male,Flu,Rest\n"
        "No Age,abc,Male,Flu,Rest\n"
        "No Diagnosis,30,Male,,Rest\n"
        "Odd Gender,29,robot,Cold,\n"
    ).encode()

    patients = spreadsheet.import_patients(content, "text/csv")

    assert [p.name for p in patients] == ["Jane Roe", "Odd Gender"]
    assert patients[0].age == 52
    assert patients[0].gender == Gender.FEMALE
    assert patients[1].gender == Gender.OTHER
    assert patients[1].prescription == ""


def test_import_xlsx_reads_first_sheet():
    content = _xlsx([
        {"Name": "Tom", "Age": 70, "Gender": "male", "Diagnosis": "COPD", "Prescription": "Tiotropium"},
    ])
    patients = spreadsheet.import_patients(content, spreadsheet.XLSX_MEDIA_TYPE)
    assert len(patients) == 1
    assert patients[0].gender == Gender.MALE
    assert patients[0].age == 70


def test_export_columns_and_filename(patient_store, ann, bob):
    patients = [patient_store.create(ann, "owner-1"), patient_store.create(bob, "owner-1")]

    filename, content = spreadsheet.export_patients(patients, "medflow-patients", today=date(2026, 3, 9))

    assert filename == "medflow-patients-2026-03-09.xlsx"
    frame = pd.read_excel(io.BytesIO(content), sheet_name="Patients")
    assert list(frame.columns) == list(spreadsheet.EXPORT_COLUMNS)
    assert list(frame["Name"]) == ["Ann", "Bob"]
    assert list(frame["Created By"]) == ["owner-1", "owner-1"]


def test_export_then_import_roundtrip(patient_store, ann, bob):
    patients = [patient_store.create(ann, "owner-1"), patient_store.create(bob, "owner-1")]
    _, content = spreadsheet.export_patients(patients)

    imported = spreadsheet.import_patients(content, spreadsheet.XLSX_MEDIA_TYPE)

    fields = ("name", "age", "gender", "diagnosis", "prescription")
    assert [tuple(getattr(p, f) for f in fields) for p in imported] == [
        tuple(getattr(p, f) for f in fields) for p in patients
    ]


def test_placeholder_like_text_survives_roundtrip(patient_store):
    patients = [
        patient_store.create(PatientBase(name="NULL", age=40, gender=Gender.MALE,
                                         diagnosis="None", prescription="N/A"), "owner-1"),
        patient_store.create(PatientBase(name="Nan Perez", age=58, gender=Gender.FEMALE,
                                         diagnosis="NA", prescription="nan"), "owner-1"),
    ]
    _, content = spreadsheet.export_patients(patients)

    imported = spreadsheet.import_patients(content, spreadsheet.XLSX_MEDIA_TYPE)

    assert [(p.name, p.diagnosis, p.prescription) for p in imported] == [
        ("NULL", "None", "N/A"),
        ("Nan Perez", "NA", "nan"),
    ]


def test_csv_keeps_placeholder_like_text():
    content = (
        "Name,Age,Gender,Diagnosis,Prescription\n"
        "Jane Roe,52,Female,None,N/A\n"
        "John Roe,47,Male,Flu,\n"
    ).encode()

    patients = spreadsheet.import_patients(content, "text/csv")

    assert [(p.diagnosis, p.prescription) for p in patients] == [("None", "N/A"), ("Flu", "")]


def test_export_selected(patient_store, ann, bob):
    a = patient_store.create(ann, "owner-1")
    b = patient_store.create(bob, "owner-1")

    filename, content = spreadsheet.export_selected([a, b], [b.id], today=date(2026, 1, 2))

    assert filename == "selected-patients-2026-01-02.xlsx"
    frame = pd.read_excel(io.BytesIO(content))
    assert list(frame["Patient ID"]) == [b.id]


def test_template_imports_cleanly():
    filename, content = spreadsheet.build_template()
    assert filename == "medflow-patient-template.xlsx"
    frame = pd.read_excel(io.BytesIO(content), sheet_name="Patient Template")
    assert list(frame.columns) == list(spreadsheet.TEMPLATE_COLUMNS)
    assert len(spreadsheet.import_patients(content, spreadsheet.XLSX_MEDIA_TYPE)) == 3
