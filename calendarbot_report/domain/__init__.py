"""Occurrence resolution, organization attribution and row projection."""

from .occurrence_resolver import OccurrenceResolver, resolve_occurrences
from .org_classifier import OrganizationClassifier
from .pipeline import ReportPipeline, ReportResult, run_pipeline
from .record_projector import RecordProjector

__all__ = [
    "OccurrenceResolver",
    "OrganizationClassifier",
    "RecordProjector",
    "ReportPipeline",
    "ReportResult",
    "resolve_occurrences",
    "run_pipeline",
]
