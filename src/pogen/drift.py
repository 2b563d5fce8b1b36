from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .models import (
    ChangeReport,
    ModifiedElement,
    RefactorAction,
    RefactorPlan,
    ResolvedBatch,
    ResolvedElement,
)


class DiffMode(str, Enum):
    LOCATOR = "locator"
    DESCRIPTOR = "descriptor"


def compare_batches(
    old: ResolvedBatch,
    new: ResolvedBatch,
    mode: DiffMode = DiffMode.LOCATOR,
) -> ChangeReport:
    """Classify every identifier of ``old`` and ``new``.

    Elements are matched by identifier. In ``LOCATOR`` mode only the locator
    expression decides between modified and unchanged, so an attribute change
    that does not move the winning locator is not reported. ``DESCRIPTOR``
    mode also reports elements whose source descriptor changed.
    """
    mode = DiffMode(mode)
    old_by_name = old.by_identifier()
    new_names = set(new.identifiers())

    added: list[ResolvedElement] = []
    modified: list[ModifiedElement] = []
    unchanged: list[ResolvedElement] = []
    for new_element in new:
        old_element = old_by_name.get(new_element.identifier)
        if old_element is None:
            added.append(new_element)
        elif _differs(old, old_element, new, new_element, mode):
            modified.append(ModifiedElement(old=old_element, new=new_element))
        else:
            unchanged.append(new_element)

    removed = [element for element in old if element.identifier not in new_names]

    return ChangeReport(
        added=tuple(added),
        removed=tuple(removed),
        modified=tuple(modified),
        unchanged=tuple(unchanged),
        mode=mode.value,
    )


def has_changes(report: ChangeReport) -> bool:
    return bool(report.added or report.removed or report.modified)


def summary_counts(report: ChangeReport) -> dict[str, int]:
    return {
        "added": len(report.added),
        "removed": len(report.removed),
        "modified": len(report.modified),
        "unchanged": len(report.unchanged),
    }


def format_report(report: ChangeReport) -> str:
    lines: list[str] = []

    if report.added:
        lines.append("Added elements:")
        lines.extend(f"  + {element.identifier} ({element.strategy.value})" for element in report.added)

    if report.removed:
        lines.append("Removed elements:")
        lines.extend(f"  - {element.identifier} ({element.strategy.value})" for element in report.removed)

    if report.modified:
        lines.append("Modified elements:")
        for pair in report.modified:
            lines.append(f"  ~ {pair.old.identifier}:")
            lines.append(f"    old: {pair.old.locator}")
            lines.append(f"    new: {pair.new.locator}")

    if not lines:
        return "No changes detected."

    counts = summary_counts(report)
    lines.insert(
        0,
        f"Summary: +{counts['added']} -{counts['removed']} ~{counts['modified']} ={counts['unchanged']}",
    )
    return "\n".join(lines)


def element_to_dict(element: ResolvedElement) -> dict[str, Any]:
    return {
        "identifier": element.identifier,
        "locator": element.locator,
        "strategy": element.strategy.value,
        "category": element.category.value,
    }


def report_to_dict(report: ChangeReport) -> dict[str, Any]:
    return {
        "mode": report.mode,
        "has_changes": has_changes(report),
        "summary": summary_counts(report),
        "added": [element_to_dict(element) for element in report.added],
        "removed": [element_to_dict(element) for element in report.removed],
        "modified": [
            {"old": element_to_dict(pair.old), "new": element_to_dict(pair.new)} for pair in report.modified
        ],
        "unchanged": [element_to_dict(element) for element in report.unchanged],
    }


def build_refactor_plan(report: ChangeReport, page_name: str, generated_at: datetime | None = None) -> RefactorPlan:
    actions: list[RefactorAction] = []
    for element in report.added:
        actions.append(
            RefactorAction(
                type="add",
                element_name=element.identifier,
                element_type=element.category.value,
                locator=element.locator,
            )
        )
    for element in report.removed:
        actions.append(
            RefactorAction(
                type="remove",
                element_name=element.identifier,
                element_type=element.category.value,
                locator=element.locator,
            )
        )
    for pair in report.modified:
        actions.append(
            RefactorAction(
                type="modify",
                element_name=pair.old.identifier,
                element_type=pair.new.category.value,
                old_locator=pair.old.locator,
                new_locator=pair.new.locator,
            )
        )

    timestamp = (generated_at or datetime.now(timezone.utc)).isoformat()
    return RefactorPlan(
        page_name=page_name,
        generated_at=timestamp,
        summary=summary_counts(report),
        actions=tuple(actions),
    )


def refactor_plan_to_dict(plan: RefactorPlan) -> dict[str, Any]:
    actions: list[dict[str, Any]] = []
    for action in plan.actions:
        entry: dict[str, Any] = {
            "type": action.type,
            "element_name": action.element_name,
            "element_type": action.element_type,
        }
        if action.type == "modify":
            entry["old_locator"] = action.old_locator
            entry["new_locator"] = action.new_locator
        else:
            entry["locator"] = action.locator
        actions.append(entry)
    return {
        "page_name": plan.page_name,
        "generated_at": plan.generated_at,
        "summary": dict(plan.summary),
        "actions": actions,
    }


def _differs(
    old: ResolvedBatch,
    old_element: ResolvedElement,
    new: ResolvedBatch,
    new_element: ResolvedElement,
    mode: DiffMode,
) -> bool:
    if old_element.locator != new_element.locator:
        return True
    if mode is DiffMode.DESCRIPTOR:
        return old.descriptor_for(old_element) != new.descriptor_for(new_element)
    return False
