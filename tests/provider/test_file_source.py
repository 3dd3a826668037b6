"""FileCaseSource 单元测试"""

import json
from pathlib import Path

import pytest
from casewatch.provider import CaseFetchError, FileCaseSource


class TestFileCaseSource:
    """本地文件数据源"""

    async def test_reads_status_and_documents(self, tmp_path: Path):
        (tmp_path / "IOE1.json").write_text(json.dumps({"data": {"formType": "I-130"}}))
        (tmp_path / "IOE1.documents.json").write_text(json.dumps({"data": []}))

        raw = await FileCaseSource(tmp_path).fetch_case("IOE1")

        assert raw.case_id == "IOE1"
        assert raw.status == {"data": {"formType": "I-130"}}
        assert raw.documents == {"data": []}

    async def test_documents_optional(self, tmp_path: Path):
        (tmp_path / "IOE1.json").write_text(json.dumps({"data": {}}))
        raw = await FileCaseSource(str(tmp_path)).fetch_case("IOE1")
        assert raw.documents is None

    async def test_missing_status_file(self, tmp_path: Path):
        with pytest.raises(CaseFetchError) as exc_info:
            await FileCaseSource(tmp_path).fetch_case("IOE404")
        assert "文件不存在" in exc_info.value.reason

    async def test_invalid_json(self, tmp_path: Path):
        (tmp_path / "IOE1.json").write_text("{broken")
        with pytest.raises(CaseFetchError) as exc_info:
            await FileCaseSource(tmp_path).fetch_case("IOE1")
        assert "JSON" in exc_info.value.reason

    @pytest.mark.parametrize("case_id", ["../x", "a/b", "..", "a\\b", ""])
    async def test_rejects_path_components(self, tmp_path: Path, case_id: str):
        """编号不能跳出数据目录"""
        source_dir = tmp_path / "cases"
        source_dir.mkdir()
        (tmp_path / "x.json").write_text(json.dumps({"data": {"formType": "I-130"}}))

        with pytest.raises(CaseFetchError) as exc_info:
            await FileCaseSource(source_dir).fetch_case(case_id)
        assert exc_info.value.reason == "非法案件编号"
