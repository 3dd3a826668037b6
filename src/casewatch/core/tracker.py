"""CaseTracker -- 一轮追踪的编排

流程：
1. 从 HistoryStore 读取上一快照
2. 逐个抓取案件（每个抓取都有超时，失败只影响该案件）
3. 规范化 -> 计算变更标注 -> 生成变更摘要
4. 追加新快照；写入失败时仍返回已计算的结果
"""

import asyncio
import time
from collections.abc import Iterable
from typing import Protocol

import structlog

from .diff import compute_annotations, summarize_changes
from .event_codes import DEFAULT_EVENT_CODES, EventCodeTable
from .exceptions import HistoryWriteError
from .models.change import CaseFailure, TrackResult
from .models.enums import FailureStage
from .models.raw import RawCaseFetch
from .reconciler import reconcile_batch
from .store.protocols import SnapshotHistory

log = structlog.get_logger()

# 单个案件抓取超时（秒）
DEFAULT_FETCH_TIMEOUT_S = 30.0


class CaseSource(Protocol):
    """案件数据源接口"""

    async def fetch_case(self, case_id: str) -> RawCaseFetch:
        """抓取单个案件的原始数据，失败时抛出异常"""
        ...


class CaseTracker:
    """案件追踪器

    单写者：同一份历史同一时间只能有一个 CaseTracker 在运行。
    """

    def __init__(
        self,
        source: CaseSource,
        history: SnapshotHistory,
        code_table: EventCodeTable = DEFAULT_EVENT_CODES,
        fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
        concurrency: int = 1,
    ) -> None:
        """
        Args:
            source: 案件数据源
            history: 快照历史存储
            code_table: 事件代码表
            fetch_timeout_s: 单个案件抓取超时（秒）
            concurrency: 并发抓取数，1 表示逐个抓取
        """
        self._source = source
        self._history = history
        self._code_table = code_table
        self._fetch_timeout_s = fetch_timeout_s
        self._concurrency = max(1, concurrency)

    async def _fetch_one(self, case_id: str) -> RawCaseFetch | CaseFailure:
        try:
            return await asyncio.wait_for(
                self._source.fetch_case(case_id),
                timeout=self._fetch_timeout_s,
            )
        except TimeoutError:
            log.warning(
                "case_fetch_timeout",
                case_id=case_id,
                timeout_s=self._fetch_timeout_s,
            )
            return CaseFailure(
                case_id=case_id,
                stage=FailureStage.FETCH,
                error=f"抓取超时（{self._fetch_timeout_s}s）",
            )
        except Exception as e:
            log.warning(
                "case_fetch_failed",
                case_id=case_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CaseFailure(
                case_id=case_id,
                stage=FailureStage.FETCH,
                error=str(e),
            )

    async def _fetch_all(self, case_ids: list[str]) -> list[RawCaseFetch | CaseFailure]:
        """抓取全部案件，结果按输入顺序排列"""
        if self._concurrency == 1:
            return [await self._fetch_one(case_id) for case_id in case_ids]

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(case_id: str) -> RawCaseFetch | CaseFailure:
            async with semaphore:
                return await self._fetch_one(case_id)

        return list(await asyncio.gather(*(_bounded(case_id) for case_id in case_ids)))

    async def track(self, case_ids: Iterable[str]) -> TrackResult:
        """执行一轮追踪

        Args:
            case_ids: 要追踪的案件编号（重复编号只追踪一次）

        Returns:
            TrackResult；persisted=False 时新快照未写入历史
        """
        start_time = time.monotonic()
        ids = list(dict.fromkeys(case_ids))

        prior = await self._history.latest_cases()

        outcomes = await self._fetch_all(ids)
        fetches = [o for o in outcomes if isinstance(o, RawCaseFetch)]
        failures = [o for o in outcomes if isinstance(o, CaseFailure)]

        cases, reconcile_failures = reconcile_batch(fetches, self._code_table)
        failures.extend(reconcile_failures)

        annotations = compute_annotations(prior, cases)
        changes = summarize_changes(prior, cases, annotations)
        if changes:
            log.info(
                "case_changes_detected",
                change_count=len(changes),
                changes=[f"{c.case_id}:{c.type}" for c in changes],
            )

        result = TrackResult(
            cases=cases,
            annotations=annotations,
            changes=changes,
            failures=failures,
        )

        if ids and not cases:
            # 全部失败时不写入空快照，保留上一快照作为比较基准
            log.warning("snapshot_skipped_all_cases_failed", case_count=len(ids))
        else:
            try:
                await self._history.append(cases)
                result.persisted = True
            except HistoryWriteError as e:
                log.error("snapshot_append_failed", error=str(e))
                result.persist_error = str(e)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        log.info(
            "track_completed",
            case_count=len(cases),
            failure_count=len(failures),
            persisted=result.persisted,
            elapsed_ms=elapsed_ms,
        )
        return result
