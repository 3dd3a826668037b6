"""EventCodeTable 单元测试

测试内容：
1. 大小写不敏感查询
2. 未知代码返回 "Unknown"
3. 代码表只读
"""

import pytest
from casewatch.core.event_codes import (
    DEFAULT_EVENT_CODES,
    UNKNOWN_EVENT_DESCRIPTION,
    EventCodeTable,
)


class TestEventCodeTable:
    """事件代码表测试"""

    def test_known_code(self):
        """已知代码返回描述"""
        assert DEFAULT_EVENT_CODES.describe("IAF") == "Receipt letter emailed"
        assert DEFAULT_EVENT_CODES.describe("H008") == "Case Approved"

    def test_lowercase_lookup(self):
        """小写代码与大写代码解析结果一致"""
        assert DEFAULT_EVENT_CODES.describe("iaf") == DEFAULT_EVENT_CODES.describe("IAF")
        assert DEFAULT_EVENT_CODES["fta0"] == "Biometrics / database checks received"

    def test_unknown_code(self):
        """未知代码返回 Unknown，不报错"""
        assert DEFAULT_EVENT_CODES.describe("ZZZ") == UNKNOWN_EVENT_DESCRIPTION
        assert UNKNOWN_EVENT_DESCRIPTION == "Unknown"

    def test_getitem_unknown_raises_key_error(self):
        """映射接口对未知代码抛 KeyError"""
        with pytest.raises(KeyError):
            DEFAULT_EVENT_CODES["ZZZ"]

    def test_contains_case_insensitive(self):
        assert "ika" in DEFAULT_EVENT_CODES
        assert "ZZZ" not in DEFAULT_EVENT_CODES
        assert 42 not in DEFAULT_EVENT_CODES

    def test_keys_are_normalized(self):
        """构造时 key 统一转大写"""
        table = EventCodeTable({"abc": "Lower", "Def": "Mixed"})
        assert sorted(table) == ["ABC", "DEF"]
        assert len(table) == 2
        assert table.describe("aBc") == "Lower"

    def test_source_mapping_changes_do_not_leak(self):
        """构造后修改源 dict 不影响代码表"""
        source = {"X1": "First"}
        table = EventCodeTable(source)
        source["X2"] = "Second"
        assert table.describe("X2") == UNKNOWN_EVENT_DESCRIPTION

    def test_default_table_codes(self):
        """默认代码表包含全部已知代码"""
        assert set(DEFAULT_EVENT_CODES) == {"IAF", "FTA0", "SA", "LDF", "H008", "H016", "IKA"}
