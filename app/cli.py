"""
CLI for ChronoCost.

Usage examples:

    # Risk score for a project described in JSON, optionally with history
    python -m app.cli estimate project.json --csv data/samples/history.csv

    # Summary statistics of a historical-projects CSV
    python -m app.cli summarize data/samples/history.csv

    # Score and store a project in the configured document store
    python -m app.cli submit project.json --csv data/samples/history.csv
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# --- Make src/ importable ----------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from chronocost.config import get_config
from chronocost.csv_ingest import load_historical_csv
from chronocost.document_store import get_document_store
from chronocost.errors import SubmissionFailure
from chronocost.logging_config import configure_logging
from chronocost.risk_model import estimate_risk, summarize_history
from chronocost.schema import FormInput
from chronocost.submission import CsvUpload, detail_path, submit_project


# --- Helpers -----------------------------------------------------------------


def _load_form(path_str: str) -> FormInput:
    form_path = Path(path_str).resolve()
    if not form_path.exists():
        raise SystemExit(f"Form JSON file not found: {form_path}")
    data = json.loads(form_path.read_text(encoding="utf-8"))
    try:
        return FormInput.from_mapping(data)
    except ValueError as e:
        raise SystemExit(f"Invalid project form {form_path}: {e}")


def _require_file(path_str: str, label: str) -> Path:
    path = Path(path_str).resolve()
    if not path.exists():
        raise SystemExit(f"[{label}] CSV file not found: {path}")
    return path


# --- Commands ----------------------------------------------------------------


def cmd_estimate(args: argparse.Namespace) -> None:
    """
    Print the risk score for one project.
    """
    form = _load_form(args.form_json_path)
    rows = load_historical_csv(_require_file(args.csv, "estimate")) if args.csv else []

    result = estimate_risk(form, rows)
    summary = summarize_history(rows)

    print(f"[estimate] Basis: {result.basis}")
    print(f"[estimate] Risk score: {result.score:.4f}")
    if summary is not None:
        print("[estimate] Historical summary:")
        print(json.dumps(summary.to_dict(), indent=2))


def cmd_summarize(args: argparse.Namespace) -> None:
    csv_path = _require_file(args.csv_path, "summarize")
    rows = load_historical_csv(csv_path)
    summary = summarize_history(rows)
    if summary is None:
        raise SystemExit(f"[summarize] No data rows in {csv_path}")
    print(json.dumps(summary.to_dict(), indent=2))


def cmd_submit(args: argparse.Namespace) -> None:
    """
    Score a project and store it in the configured document store.
    """
    config = get_config()
    form = _load_form(args.form_json_path)

    upload = None
    if args.csv:
        csv_path = _require_file(args.csv, "submit")
        upload = CsvUpload(
            filename=csv_path.name,
            content_type="text/csv",
            data=csv_path.read_bytes(),
        )

    store = get_document_store(config)
    try:
        document = submit_project(
            form,
            upload,
            store,
            config=config,
            user_id=args.user_id,
        )
    except SubmissionFailure as e:
        raise SystemExit(f"[submit] {e}")

    print(f"[submit] Risk score: {document['riskScore']:.4f}")
    print(f"[submit] Stored project at {detail_path(document)}")


# --- Main --------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ChronoCost CLI – estimate risk, summarize history, submit projects."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # estimate
    est_p = subparsers.add_parser(
        "estimate",
        help="Estimate the risk score of a project described in a JSON file.",
    )
    est_p.add_argument(
        "form_json_path",
        help="Path to JSON with the form fields (camelCase or snake_case keys).",
    )
    est_p.add_argument(
        "--csv",
        default=None,
        help="Optional CSV of historical projects.",
    )
    est_p.set_defaults(func=cmd_estimate)

    # summarize
    sum_p = subparsers.add_parser(
        "summarize",
        help="Print summary statistics of a historical-projects CSV.",
    )
    sum_p.add_argument("csv_path", help="Path to the historical-projects CSV.")
    sum_p.set_defaults(func=cmd_summarize)

    # submit
    sub_p = subparsers.add_parser(
        "submit",
        help="Score a project and store it in the configured document store.",
    )
    sub_p.add_argument("form_json_path", help="Path to JSON with the form fields.")
    sub_p.add_argument(
        "--csv",
        default=None,
        help="Optional CSV of historical projects.",
    )
    sub_p.add_argument(
        "--user-id",
        default=None,
        help="Id of the submitting user, stored as userId.",
    )
    sub_p.set_defaults(func=cmd_submit)

    return parser


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
