"""CSV-driven document generation: normalize, render, generate, reconcile, delete."""

from pagegen.generation.deleter import DeletionEngine
from pagegen.generation.fingerprint import row_fingerprint
from pagegen.generation.generator import GenerationEngine
from pagegen.generation.normalizer import Row, normalize_value, parse_csv
from pagegen.generation.preferences import GeneratorPreferences, PreferencesService
from pagegen.generation.reconciler import ReconciliationEngine
from pagegen.generation.renderer import render_template, sanitize_html
from pagegen.generation.results import BatchReport, DeletionReport, RowOutcome

__all__ = [
    "BatchReport",
    "DeletionEngine",
    "DeletionReport",
    "GenerationEngine",
    "GeneratorPreferences",
    "PreferencesService",
    "ReconciliationEngine",
    "Row",
    "RowOutcome",
    "normalize_value",
    "parse_csv",
    "render_template",
    "row_fingerprint",
    "sanitize_html",
]
