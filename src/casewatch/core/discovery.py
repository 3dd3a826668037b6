"""案件编号发现 -- 从文本中提取案件编号"""

import re

# 在线账户的案件编号格式：IOE + 数字
CASE_NUMBER_PATTERN = re.compile(r"IOE\d+")


def extract_case_numbers(text: str, pattern: re.Pattern[str] = CASE_NUMBER_PATTERN) -> list[str]:
    """提取文本中的案件编号，去重并保持首次出现的顺序"""
    return list(dict.fromkeys(pattern.findall(text)))
