"""Reconciliation of intelligent-indexing suggestions.

Decides, per suggested field, whether the suggestion is written to the
document, written as an empty value (left for manual entry), or dropped.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from autostore.config import Task
from docuware import Document, SuggestionField
from .matcher import matches


@dataclass(frozen=True)
class ReconciledField:
    """An index value ready to be written.

    Attributes:
        name: Index field name
        value: Chosen value (None = cleared for manual entry)
        item_element_name: Type tag of the value (e.g. 'String', 'Decimal')
        confidence: Confidence reported for the suggestion, for display
    """
    name: str
    value: Any
    item_element_name: Optional[str]
    confidence: Optional[Any] = None


def has_prefilled_value(document: Document, field_name: str) -> bool:
    """True if the document already has a non-empty value for the field."""
    value = document.fields.get(field_name)
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


def _keep(field: SuggestionField, with_value: bool) -> ReconciledField:
    top = field.top
    return ReconciledField(
        name=field.name,
        value=top.item if (top and with_value) else None,
        item_element_name=top.item_element_name if top else None,
        confidence=field.confidence,
    )


def reconcile_field(document: Document, field: SuggestionField,
                    task: Task) -> Optional[ReconciledField]:
    """Decide the fate of one suggested field; None means dropped."""
    if task.keep_prefilled_indexes and has_prefilled_value(document, field.name):
        return None

    policy = task.policy_for(field.name)
    if policy is None:
        if task.restrict_suggestions:
            return None
        return _keep(field, with_value=False)

    if policy.filters:
        if matches(policy.filters, field):
            return _keep(field, with_value=True)
        return None

    return _keep(field, with_value=True)


def reconcile(document: Document, suggestions: List[SuggestionField],
              task: Task) -> List[ReconciledField]:
    """Reconcile a document's suggestions against the task's policies.

    Pure: the document and suggestions are not modified. When the service
    suggests a field name more than once, only the first is considered.
    """
    result = []
    seen = set()
    for field in suggestions:
        if field.name in seen:
            continue
        seen.add(field.name)
        reconciled = reconcile_field(document, field, task)
        if reconciled is not None:
            result.append(reconciled)
    return result


def build_index_update(fields: List[ReconciledField]) -> Dict[str, Any]:
    """Render reconciled fields as a DocuWare field list payload."""
    return {
        "Field": [
            {
                "FieldName": f.name,
                "Item": f.value,
                "ItemElementName": f.item_element_name,
            }
            for f in fields
        ]
    }
