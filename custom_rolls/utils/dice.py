import re
import random
from typing import Any, Optional
from custom_rolls.models.types import DieFormula


# 只匹配開頭的 NdF，忽略後面的修正值，例如 "2d10+1" 或 "1d20kh1"
DIE_FORMULA_PATTERN = re.compile(r"^(\d+)d(\d+)", re.IGNORECASE)
INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def parse_die_formula(text: Optional[str]) -> Optional[DieFormula]:
    """
    解析骰子公式，比如 "2d10" 或 "1d20+5"
    無效或空白輸入時返回 None（而不是 0）
    """
    if not text or not isinstance(text, str):
        return None

    match = DIE_FORMULA_PATTERN.match(text.strip())
    if not match:
        return None

    number = int(match.group(1))
    faces = int(match.group(2))

    if number < 1 or faces < 1:
        return None

    return DieFormula(number=number, faces=faces)


def is_2d10_formula(text: Optional[str]) -> bool:
    """檢查骰子公式是否為 2d10"""
    parts = parse_die_formula(text)
    return parts is not None and parts.number == 2 and parts.faces == 10


def parse_int(value: Any) -> Optional[int]:
    """
    以十進位解析字串開頭的整數：
    "15" -> 15, " 12abc" -> 12, "abc" -> None, 15.7 -> 15
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = INT_PATTERN.match(value)
        return int(match.group(1)) if match else None
    return None


def roll_single_dice(sides: int) -> int:
    """擲單個骰子"""
    return random.randint(1, sides)
