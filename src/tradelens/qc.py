"""Ingest report and run manifest persistence."""

from __future__ import annotations

from pathlib import Path

from tradelens.io import write_json
from tradelens.models import IngestReport, RunManifest


def write_ingest_report(out_dir: Path, report: IngestReport) -> Path:
    """Write ``ingest_report.json`` into *out_dir* and return the path."""
    return write_json(out_dir / "ingest_report.json", report.to_dict())


def write_run_manifest(out_dir: Path, manifest: RunManifest) -> Path:
    """Write ``run_manifest.json`` into *out_dir* and return the path."""
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())
