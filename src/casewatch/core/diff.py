"""Diff Engine -- 上一快照与新快照的变更标注

纯函数，不修改输入，不访问 HistoryStore；
读取历史 -> 规范化 -> 比较 -> 写入历史 的编排由调用方负责。

比较规则：
- 新案件：is_new=True, field_changed=True, 全部事件下标
- 已知案件：updated_at / updated_at_timestamp 按字面值比较（不做日期语义比较）
- 新事件：(code, timestamp) 复合键不在上一记录中的事件下标
- 从新快照中消失的案件不产生标注
"""

from collections.abc import Mapping

from .models.case import CaseRecord
from .models.change import CaseChange, ChangeAnnotation
from .models.enums import ChangeType


def annotate_case(prior: CaseRecord | None, new: CaseRecord) -> ChangeAnnotation:
    """计算单个案件的变更标注

    Args:
        prior: 上一快照中的记录，不存在时为 None
        new: 新快照中的记录

    Returns:
        ChangeAnnotation
    """
    if prior is None:
        return ChangeAnnotation(
            is_new=True,
            field_changed=True,
            new_event_positions=frozenset(range(len(new.events))),
        )

    field_changed = (
        prior.updated_at != new.updated_at
        or prior.updated_at_timestamp != new.updated_at_timestamp
    )

    prior_keys = {event.key for event in prior.events}
    new_positions = frozenset(
        index for index, event in enumerate(new.events) if event.key not in prior_keys
    )

    return ChangeAnnotation(
        is_new=False,
        field_changed=field_changed,
        new_event_positions=new_positions,
    )


def compute_annotations(
    prior_cases: Mapping[str, CaseRecord],
    new_cases: Mapping[str, CaseRecord],
) -> dict[str, ChangeAnnotation]:
    """为新快照中的每个案件计算变更标注

    Args:
        prior_cases: 上一快照（可为空）
        new_cases: 新快照

    Returns:
        案件编号 -> ChangeAnnotation，仅包含 new_cases 中的案件
    """
    return {
        case_id: annotate_case(prior_cases.get(case_id), record)
        for case_id, record in new_cases.items()
    }


def summarize_changes(
    prior_cases: Mapping[str, CaseRecord],
    new_cases: Mapping[str, CaseRecord],
    annotations: Mapping[str, ChangeAnnotation],
) -> list[CaseChange]:
    """将变更标注转换为可读的变更摘要，按案件编号升序

    Args:
        prior_cases: 上一快照
        new_cases: 新快照
        annotations: compute_annotations() 的结果

    Returns:
        CaseChange 列表；无变更的案件不出现
    """
    changes: list[CaseChange] = []

    for case_id in sorted(annotations):
        annotation = annotations[case_id]
        record = new_cases[case_id]

        if annotation.is_new:
            changes.append(
                CaseChange(
                    case_id=case_id,
                    type=ChangeType.NEW,
                    details="New case added",
                )
            )
            continue

        prior = prior_cases[case_id]
        if annotation.field_changed:
            # updatedAtTimestamp 未变化时说明是 updatedAt 变了
            if prior.updated_at_timestamp != record.updated_at_timestamp:
                old_value, new_value = prior.updated_at_timestamp, record.updated_at_timestamp
            else:
                old_value, new_value = prior.updated_at, record.updated_at
            changes.append(
                CaseChange(
                    case_id=case_id,
                    type=ChangeType.UPDATED,
                    details=f"Case updated from {old_value} to {new_value}",
                    old_value=old_value,
                    new_value=new_value,
                )
            )

        if annotation.new_event_positions:
            new_events = tuple(
                record.events[i] for i in sorted(annotation.new_event_positions)
            )
            changes.append(
                CaseChange(
                    case_id=case_id,
                    type=ChangeType.NEW_EVENTS,
                    details=f"{len(new_events)} new event(s) added",
                    new_events=new_events,
                )
            )

    return changes
