import io
from typing import Literal, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse
from medflow.auth import get_current_user, get_patients_context
from medflow.contexts.patients_context import PatientsContext
from medflow.exceptions import FileFormatInvalid
from medflow.schemas.account import Account
from medflow.schemas.patient import ImportPreviewResponse, ImportResponse, PatientBase
from medflow.services import spreadsheet

router = APIRouter()


def _workbook_response(filename: str, content: bytes) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=spreadsheet.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


async def _parse_upload(file: UploadFile) -> list[PatientBase]:
    content = await file.read()
    try:
        candidates = spreadsheet.import_patients(content, file.content_type)
    except FileFormatInvalid as e:
        raise HTTPException(status_code=400, detail=e.reason)
    if not candidates:
        raise HTTPException(
            status_code=400,
            detail="No valid patient data found in the file. Please check the format.",
        )
    return candidates


@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(...),
    current_user: Account = Depends(get_current_user),
):
    """Parse an upload without saving anything."""
    candidates = await _parse_upload(file)
    return ImportPreviewResponse(patients=candidates, total=len(candidates))


@router.post("/import", response_model=ImportResponse, status_code=201)
async def import_spreadsheet(
    file: UploadFile = File(...),
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    candidates = await _parse_upload(file)
    state = patients.import_patients(candidates)
    imported = list(state.patients[-len(candidates):])
    return ImportResponse(imported=len(imported), patients=imported)


@router.get("/export")
def export_spreadsheet(
    scope: Literal["all", "filtered"] = Query("all"),
    ids: Optional[list[str]] = Query(None, description="Export only these patient ids"),
    patients: PatientsContext = Depends(get_patients_context),
    current_user: Account = Depends(get_current_user),
):
    state = patients.state
    if ids:
        filename, content = spreadsheet.export_selected(state.patients, ids)
    elif scope == "filtered":
        filename, content = spreadsheet.export_patients(state.filtered_patients, "medflow-patients-filtered")
    else:
        filename, content = spreadsheet.export_patients(state.patients, "medflow-patients")
    return _workbook_response(filename, content)


@router.get("/template")
def download_template():
    filename, content = spreadsheet.build_template()
    return _workbook_response(filename, content)
