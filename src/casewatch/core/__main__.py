"""CLI 入口模块 -- python -m casewatch.core <command>

支持的命令：
  track <案件编号|文本文件>...  抓取案件、比较上一快照并追加新快照
  history                       查看快照历史
  clear-history                 清空快照历史（不可恢复）
"""

import asyncio
import sys
from pathlib import Path

from .config import get_db_path, get_history_max_bytes
from .discovery import extract_case_numbers
from .logging_config import setup_logging

_USAGE = """用法: python -m casewatch.core <command>
命令:
  track <案件编号|文本文件>...  抓取案件、比较上一快照并追加新快照
  history                       查看快照历史
  clear-history                 清空快照历史（不可恢复）"""


def collect_case_ids(args: list[str]) -> list[str]:
    """解析 track 参数：文件按文本提取案件编号，其余参数视为案件编号"""
    case_ids: list[str] = []
    for arg in args:
        path = Path(arg)
        if path.is_file():
            case_ids.extend(extract_case_numbers(path.read_text(encoding="utf-8")))
        else:
            case_ids.extend(extract_case_numbers(arg) or [arg])
    return list(dict.fromkeys(case_ids))


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]

    if command == "track":
        case_ids = collect_case_ids(sys.argv[2:])
        if not case_ids:
            print("未找到案件编号")
            sys.exit(1)
        sys.exit(asyncio.run(track(case_ids)))
    elif command == "history":
        asyncio.run(show_history())
    elif command == "clear-history":
        sys.exit(asyncio.run(clear_history()))
    else:
        print(f"未知命令: {command}")
        print("可用命令: track, history, clear-history")
        sys.exit(1)


async def track(case_ids: list[str]) -> int:
    """执行一轮追踪并打印结果，返回退出码"""
    from casewatch.provider import create_case_source, load_provider_config

    from .event_codes import DEFAULT_EVENT_CODES
    from .render import render_cases
    from .store import create_store_group
    from .tracker import CaseTracker

    provider_config = load_provider_config()
    store_group = await create_store_group(get_db_path(), get_history_max_bytes())

    try:
        tracker = CaseTracker(
            source=create_case_source(provider_config),
            history=store_group.history_store,
            code_table=DEFAULT_EVENT_CODES,
            fetch_timeout_s=provider_config.timeout_s,
            concurrency=provider_config.concurrency,
        )
        result = await tracker.track(case_ids)
    finally:
        await store_group.conn.close()

    print(render_cases(result.cases, result.annotations))
    if result.changes:
        print()
        print("变更:")
        for change in result.changes:
            print(f"  {change.case_id} [{change.type}] {change.details}")
    for failure in result.failures:
        print(f"失败: {failure.case_id} ({failure.stage}) {failure.error}")
    if result.persist_error:
        print(f"快照未保存: {result.persist_error}")
        return 1
    return 0


async def show_history() -> None:
    """打印快照历史概要"""
    from .store import create_store_group

    store_group = await create_store_group(get_db_path(), get_history_max_bytes())
    try:
        snapshots = await store_group.history_store.snapshots()
        last_fetch = await store_group.history_store.last_fetch()
    finally:
        await store_group.conn.close()

    print(f"数据库路径: {get_db_path()}")
    print(f"快照数量: {len(snapshots)}")
    print(f"最近抓取: {last_fetch.isoformat() if last_fetch else '无'}")
    for index, snapshot in enumerate(snapshots, start=1):
        print(f"  #{index} {snapshot.saved_at.isoformat()}  {len(snapshot.cases)} 个案件")


async def clear_history() -> int:
    """清空快照历史，返回退出码"""
    from .exceptions import HistoryWriteError
    from .store import create_store_group

    store_group = await create_store_group(get_db_path(), get_history_max_bytes())
    try:
        await store_group.history_store.clear()
    except HistoryWriteError as e:
        print(str(e))
        return 1
    finally:
        await store_group.conn.close()

    print("快照历史已清空")
    return 0


if __name__ == "__main__":
    main()
