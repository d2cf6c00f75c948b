"""
Project submission flow.

submit_project runs the whole pipeline once:
    CSV (optional) -> risk estimate -> historical summary -> record -> store

FormSession holds the state of one form being filled in: raw field values,
the selected CSV, and a loading flag that blocks a second submit while the
first one is still running.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import structlog

from .config import Config, get_config
from .csv_ingest import decode_csv_bytes, ensure_csv_content_type, parse_historical_csv
from .document_store import Document, DocumentStore, new_document_id
from .errors import SubmissionFailure, SubmissionInProgress
from .risk_model import estimate_risk, summarize_history
from .schema import (
    FormInput,
    HistoricalRow,
    ProjectRecord,
    ProjectType,
    SOFTWARE_LIKE_TYPES,
    Terrain,
)

logger = structlog.get_logger(__name__)


@dataclass
class CsvUpload:
    """A file picked by the user, before it has been parsed."""

    filename: str
    content_type: Optional[str]
    data: bytes


def detail_path(document: Document) -> str:
    """Where the user lands after a successful submit."""
    return f"/projects/{document['id']}"


def build_record(
    form: FormInput,
    rows: list[HistoricalRow],
    user_id: Optional[str] = None,
) -> ProjectRecord:
    estimate = estimate_risk(form, rows)
    return ProjectRecord(
        form=form,
        risk_score=estimate.score,
        user_id=user_id,
        summary=summarize_history(rows),
    )


def submit_project(
    form: FormInput,
    csv_upload: Optional[CsvUpload],
    store: DocumentStore,
    *,
    config: Optional[Config] = None,
    user_id: Optional[str] = None,
) -> Document:
    """
    Score the project and create its document.

    Every failure along the way (CSV decoding, scoring, the store call) is
    logged with its traceback and re-raised as a single SubmissionFailure.
    Nothing is retried; the document either exists afterwards or it does not.
    """
    cfg = config or get_config()
    log = logger.bind(project_name=form.project_name, user_id=user_id)

    try:
        rows: list[HistoricalRow] = []
        if csv_upload is not None:
            rows = parse_historical_csv(decode_csv_bytes(csv_upload.data))

        record = build_record(form, rows, user_id=user_id)

        document = store.create_document(
            cfg.database_id,
            cfg.projects_collection_id,
            new_document_id(),
            record.to_document(),
        )
    except Exception as e:
        log.exception("Failed to submit project")
        raise SubmissionFailure() from e

    log.info(
        "Project submitted",
        document_id=document["id"],
        risk_score=record.risk_score,
        historical_rows=len(rows),
    )
    return document


def _initial_values() -> Dict[str, Any]:
    return {
        "companyName": "",
        "projectName": "",
        "projectType": ProjectType.CONSTRUCTION.value,
        "location": "",
        "terrain": Terrain.FLAT.value,
        "estimatedBudget": "",
        "estimatedDuration": "",
        "scopeDescription": "",
        "riskFactors": "",
        "hasHistoricalData": False,
        "categories": "",
    }


@dataclass
class FormSession:
    """
    State of one submission form, owned by whoever renders it.

    Values are kept raw (as typed) under their document keys and only turned
    into a FormInput on submit.
    """

    values: Dict[str, Any] = field(default_factory=_initial_values)
    csv_upload: Optional[CsvUpload] = None
    loading: bool = False

    def update_field(self, name: str, value: Any) -> None:
        previous_terrain = self.values.get("terrain")
        self.values[name] = value

        # Terrain follows the project type: software has no site.
        if name == "projectType":
            if value in SOFTWARE_LIKE_TYPES:
                self.values["terrain"] = Terrain.NOT_APPLICABLE.value
            elif previous_terrain == Terrain.NOT_APPLICABLE.value:
                self.values["terrain"] = Terrain.FLAT.value

    def select_file(self, upload: CsvUpload) -> None:
        """Keep the upload if it is a CSV; otherwise raise InvalidFileType."""
        ensure_csv_content_type(upload.content_type)
        self.csv_upload = upload

    @property
    def can_submit(self) -> bool:
        if self.loading:
            return False
        return not (self.values.get("hasHistoricalData") and self.csv_upload is None)

    def submit(
        self,
        store: DocumentStore,
        *,
        config: Optional[Config] = None,
        user_id: Optional[str] = None,
    ) -> Document:
        """
        Submit the form once. Values are left untouched on failure so the
        user can fix them and submit again.
        """
        if self.loading:
            raise SubmissionInProgress("A submission is already in progress")
        if not self.can_submit:
            raise ValueError("Historical data was requested but no CSV file was selected")

        self.loading = True
        try:
            try:
                form = FormInput.from_mapping(self.values)
            except (TypeError, ValueError) as e:
                logger.exception("Invalid form values")
                raise SubmissionFailure() from e
            return submit_project(
                form,
                self.csv_upload,
                store,
                config=config,
                user_id=user_id,
            )
        finally:
            self.loading = False
