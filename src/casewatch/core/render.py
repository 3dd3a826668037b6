"""纯文本渲染 -- CLI 展示案件与变更标注

只消费 CaseRecord 与 ChangeAnnotation，不持有任何状态。
新案件 / 字段变更的案件和新事件以 "*" 标记。
"""

from collections.abc import Mapping

from .models.case import CaseRecord
from .models.change import ChangeAnnotation
from .reconciler import parse_timestamp

CHANGE_MARK = "*"


def format_timestamp(value: str | None) -> str:
    """格式化时间戳，如 "Jan 5, 2025, 09:30 AM"

    空值返回 "Unknown"，无法解析时原样返回。
    """
    if not value:
        return "Unknown"
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}, {parsed:%I:%M %p}"


def _render_case(record: CaseRecord, annotation: ChangeAnnotation | None) -> list[str]:
    changed = annotation is not None and (annotation.is_new or annotation.field_changed)
    header = f"{record.id} - {record.form_type or 'Unknown'}"
    if changed:
        header = f"{header} {CHANGE_MARK}"

    current_action = "None"
    if record.current_action_code is not None:
        current_action = f"{record.current_action_code} - {record.current_action_desc}"

    lines = [
        header,
        f"  Form: {record.form_name or 'Unknown'}",
        f"  Last Updated: {format_timestamp(record.updated_at_timestamp)}",
        f"  Current Action: {current_action}",
        f"  Events ({len(record.events)}):",
    ]

    new_positions = annotation.new_event_positions if annotation else frozenset()
    for index, event in enumerate(record.events):
        mark = CHANGE_MARK if index in new_positions else " "
        lines.append(
            f"    {mark} {event.code} - {event.description}"
            f" ({format_timestamp(event.timestamp)})"
        )
    return lines


def render_cases(
    cases: Mapping[str, CaseRecord],
    annotations: Mapping[str, ChangeAnnotation] | None = None,
) -> str:
    """渲染全部案件，按案件编号升序

    Args:
        cases: 案件编号 -> CaseRecord
        annotations: 案件编号 -> ChangeAnnotation，None 表示不标记变更

    Returns:
        多行文本
    """
    annotations = annotations or {}
    lines = ["USCIS Case Status", ""]
    for case_id in sorted(cases):
        lines.extend(_render_case(cases[case_id], annotations.get(case_id)))
        lines.append("")
    return "\n".join(lines).rstrip("\n")
