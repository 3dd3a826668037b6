"""FileCaseSource -- 从本地 JSON 文件读取案件数据

离线模式与测试使用，接口与 HttpCaseSource 一致：
    <directory>/<case_id>.json            状态 payload（必需）
    <directory>/<case_id>.documents.json  文档 payload（可选）
"""

import json
from pathlib import Path

from casewatch.core.models.raw import RawCaseFetch

from .exceptions import CaseFetchError


class FileCaseSource:
    """本地文件数据源"""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _read_json(self, case_id: str, path: Path):
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CaseFetchError(case_id, f"{path.name} 不是合法 JSON") from e
        except OSError as e:
            raise CaseFetchError(case_id, f"无法读取 {path}: {e}") from e

    async def fetch_case(self, case_id: str) -> RawCaseFetch:
        """读取单个案件

        Raises:
            CaseFetchError: 编号含路径成分、状态文件缺失或不是合法 JSON
        """
        if case_id in ("", ".", "..") or Path(case_id).name != case_id or "\\" in case_id:
            raise CaseFetchError(case_id, "非法案件编号")
        status_path = self._directory / f"{case_id}.json"
        if not status_path.is_file():
            raise CaseFetchError(case_id, f"文件不存在: {status_path}")
        status = self._read_json(case_id, status_path)

        documents = None
        documents_path = self._directory / f"{case_id}.documents.json"
        if documents_path.is_file():
            documents = self._read_json(case_id, documents_path)

        return RawCaseFetch(case_id=case_id, status=status, documents=documents)
