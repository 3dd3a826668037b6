"""事件代码表 -- 事件代码到可读描述的静态映射

代码表以不可变映射的形式注入 Reconciler，不作为隐藏的模块状态使用。
查询大小写不敏感，未知代码返回 "Unknown"，从不报错。
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType

UNKNOWN_EVENT_DESCRIPTION = "Unknown"


class EventCodeTable(Mapping[str, str]):
    """大小写不敏感的只读事件代码表"""

    def __init__(self, codes: Mapping[str, str]) -> None:
        self._codes = MappingProxyType({k.upper(): v for k, v in codes.items()})

    def __getitem__(self, code: str) -> str:
        return self._codes[code.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._codes

    def describe(self, code: str) -> str:
        """返回事件代码的描述，未知代码返回 "Unknown" """
        return self._codes.get(code.upper(), UNKNOWN_EVENT_DESCRIPTION)


DEFAULT_EVENT_CODES = EventCodeTable(
    {
        "IAF": "Receipt letter emailed",
        "FTA0": "Biometrics / database checks received",
        "SA": "Status Adjusted",
        "LDF": "Card Produced",
        "H008": "Case Approved",
        "H016": "Case Denied",
        "IKA": "RFE issued",
    }
)
