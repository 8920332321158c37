"""Workflow layer for autostore.

Contains the archiving pipeline:
- Selection: property lookup and filter rule matching
- Paging: lazy enumeration of a document tray
- Suggestions: reconciliation of intelligent-indexing suggestions
- Transfer: per-task orchestration and the whole-run retry
"""

from .properties import MISSING, resolve_property, split_path
from .matcher import coerce_value, glob_match, regex_match, rule_matches, matches
from .pager import iter_pages, iter_documents
from .suggestions import (
    ReconciledField,
    has_prefilled_value,
    reconcile_field,
    reconcile,
    build_index_update,
)
from .transfer import (
    TaskReport,
    reintellix_if_failed,
    apply_suggestions,
    run_task,
)
from .runner import credentials_from_config, run_once, run_autostore


__all__ = [
    # Selection
    'MISSING',
    'resolve_property',
    'split_path',
    'coerce_value',
    'glob_match',
    'regex_match',
    'rule_matches',
    'matches',

    # Paging
    'iter_pages',
    'iter_documents',

    # Suggestions
    'ReconciledField',
    'has_prefilled_value',
    'reconcile_field',
    'reconcile',
    'build_index_update',

    # Transfer
    'TaskReport',
    'reintellix_if_failed',
    'apply_suggestions',
    'run_task',

    # Run
    'credentials_from_config',
    'run_once',
    'run_autostore',
]
