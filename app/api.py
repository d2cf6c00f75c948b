"""
FastAPI app for ChronoCost.

Endpoints:
- GET  /health
- GET  /form-options
- POST /risk/estimate
- POST /projects
- GET  /projects
- GET  /projects/{project_id}

This is what you deploy to Azure App Service / Container Apps.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# --- Make src/ importable ----------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import structlog
from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Response, UploadFile
from pydantic import BaseModel

from chronocost.config import Config, get_config
from chronocost.csv_ingest import decode_csv_bytes, ensure_csv_content_type, parse_historical_csv
from chronocost.document_store import DocumentStore, get_document_store
from chronocost.errors import DocumentNotFound, InvalidFileType, SubmissionFailure
from chronocost.logging_config import configure_logging
from chronocost.risk_model import estimate_risk, summarize_history
from chronocost.schema import (
    Category,
    FormInput,
    Location,
    ProjectType,
    allowed_terrains,
)
from chronocost.submission import CsvUpload, detail_path, submit_project

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="ChronoCost API")


# --- Dependencies ------------------------------------------------------------


def get_settings() -> Config:
    return get_config()


def get_store(config: Config = Depends(get_settings)) -> DocumentStore:
    return get_document_store(config)


def form_input(
    company_name: str = Form("", alias="companyName"),
    project_name: str = Form("", alias="projectName"),
    project_type: str = Form(ProjectType.CONSTRUCTION.value, alias="projectType"),
    location: str = Form("", alias="location"),
    terrain: str = Form("flat", alias="terrain"),
    estimated_budget: float = Form(..., alias="estimatedBudget"),
    estimated_duration: float = Form(..., alias="estimatedDuration"),
    scope_description: str = Form("", alias="scopeDescription"),
    risk_factors: str = Form("", alias="riskFactors"),
    has_historical_data: bool = Form(False, alias="hasHistoricalData"),
    categories: str = Form("", alias="categories"),
) -> FormInput:
    """
    Multipart form fields, named as in the stored document.

    Picklist / range / terrain-vs-type problems come back as 422.
    """
    try:
        return FormInput(
            company_name=company_name,
            project_name=project_name,
            project_type=project_type,
            location=location,
            terrain=terrain,
            estimated_budget=estimated_budget,
            estimated_duration=estimated_duration,
            scope_description=scope_description,
            risk_factors=risk_factors,
            has_historical_data=has_historical_data,
            categories=categories,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


async def read_csv_upload(
    csv_file: Optional[UploadFile] = File(None, alias="csvFile"),
) -> Optional[CsvUpload]:
    """
    Read the optional historical CSV. Non-CSV uploads are refused before
    their content is read.
    """
    if csv_file is None or not csv_file.filename:
        return None
    try:
        ensure_csv_content_type(csv_file.content_type)
    except InvalidFileType as e:
        raise HTTPException(status_code=400, detail=str(e))
    data = await csv_file.read()
    return CsvUpload(
        filename=csv_file.filename,
        content_type=csv_file.content_type,
        data=data,
    )


# --- Request / Response schemas ----------------------------------------------


class FormOptionsResponse(BaseModel):
    project_types: List[str]
    terrains: Dict[str, List[str]]
    locations: List[str]
    categories: List[str]


class RiskResponse(BaseModel):
    risk_score: float
    basis: str
    summary: Optional[Dict[str, Any]] = None


class ProjectResponse(BaseModel):
    project: Dict[str, Any]
    detail_path: str


# --- Endpoints ---------------------------------------------------------------


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/form-options", response_model=FormOptionsResponse)
def form_options() -> FormOptionsResponse:
    """Picklists for the submission form."""
    return FormOptionsResponse(
        project_types=[p.value for p in ProjectType],
        terrains={
            p.value: [t.value for t in allowed_terrains(p.value)] for p in ProjectType
        },
        locations=[loc.value for loc in Location],
        categories=[c.value for c in Category],
    )


@app.post("/risk/estimate", response_model=RiskResponse)
def estimate(
    form: FormInput = Depends(form_input),
    upload: Optional[CsvUpload] = Depends(read_csv_upload),
) -> RiskResponse:
    """
    Score a project without storing anything.

    With a CSV the score comes from its delay / overrun history, otherwise
    from the terrain and project type.
    """
    rows = parse_historical_csv(decode_csv_bytes(upload.data)) if upload else []
    result = estimate_risk(form, rows)
    summary = summarize_history(rows)
    return RiskResponse(
        risk_score=result.score,
        basis=result.basis,
        summary=summary.to_dict() if summary else None,
    )


@app.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(
    response: Response,
    form: FormInput = Depends(form_input),
    upload: Optional[CsvUpload] = Depends(read_csv_upload),
    x_user_id: Optional[str] = Header(None),
    store: DocumentStore = Depends(get_store),
    config: Config = Depends(get_settings),
) -> ProjectResponse:
    """
    Score and store a project.

    Body: multipart form with the fields of FormInput (camelCase names) and
    an optional `csvFile` of historical projects. The caller's id can be
    passed in the X-User-Id header.
    """
    if form.has_historical_data and upload is None:
        raise HTTPException(
            status_code=422,
            detail="hasHistoricalData is set but no csvFile was uploaded",
        )
    try:
        document = submit_project(
            form,
            upload,
            store,
            config=config,
            user_id=x_user_id,
        )
    except SubmissionFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    path = detail_path(document)
    response.headers["Location"] = path
    return ProjectResponse(project=document, detail_path=path)


@app.get("/projects", response_model=List[Dict[str, Any]])
def list_projects(
    store: DocumentStore = Depends(get_store),
    config: Config = Depends(get_settings),
) -> List[Dict[str, Any]]:
    return store.list_documents(config.database_id, config.projects_collection_id)


@app.get("/projects/{project_id}")
def get_project(
    project_id: str,
    store: DocumentStore = Depends(get_store),
    config: Config = Depends(get_settings),
) -> Dict[str, Any]:
    try:
        return store.get_document(
            config.database_id, config.projects_collection_id, project_id
        )
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


# Convenience for local dev:
# uvicorn app.api:app --reload
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.api:app", host="0.0.0.0", port=8000, reload=True)
