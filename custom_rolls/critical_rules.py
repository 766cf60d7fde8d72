"""
暴擊判定規則

三種規則：
- normal: 使用預設的暴擊判定（d20 結果 >= 暴擊門檻）
- equalDice: 只適用於 2d10，兩顆有效骰子點數相同即為暴擊
- window: 有效骰子總和 >= 設定的下限即為暴擊
"""

from typing import Any, Iterable, List, Optional

from custom_rolls.models.types import CriticalRule, DEFAULT_CRITICAL_LOWER_BOUND
from custom_rolls.utils.dice import is_2d10_formula, parse_int


ALTERNATIVE_RULES = (CriticalRule.EQUAL_DICE.value, CriticalRule.WINDOW.value)


def clamp_lower_bound(value: Any) -> int:
    """將暴擊下限限制在 1 到 19 之間，無效值返回 19"""
    parsed = parse_int(value)
    if parsed is None:
        return DEFAULT_CRITICAL_LOWER_BOUND
    return min(max(parsed, 1), DEFAULT_CRITICAL_LOWER_BOUND)


def _field(result: Any, name: str, default: Any = None) -> Any:
    if isinstance(result, dict):
        return result.get(name, default)
    return getattr(result, name, default)


def active_results(results: Optional[Iterable[Any]]) -> List[int]:
    """
    取出有效的骰子結果
    active 明確為 False 的結果會被排除，無法解析成整數的結果也會被丟棄
    """
    values = []
    for result in results or []:
        if result is None or _field(result, "active") is False:
            continue
        value = parse_int(_field(result, "result"))
        if value is not None:
            values.append(value)
    return values


def active_d20_results(roll: Any) -> List[int]:
    """取出擲骰中 d20 骰項的有效結果"""
    d20 = getattr(roll, "d20", None)
    return active_results(getattr(d20, "results", None))


def _roll_options(roll: Any) -> Any:
    return getattr(roll, "options", None)


def is_equal_dice(results: Iterable[int], die: Optional[str]) -> bool:
    if not is_2d10_formula(die):
        return False
    results = list(results)
    return len(results) == 2 and results[0] == results[1]


def is_window(results: Iterable[int], threshold: Any) -> bool:
    results = list(results)
    if not results:
        return False
    return sum(results) >= clamp_lower_bound(threshold)


def is_equal_dice_critical_roll(roll: Any) -> bool:
    """檢查擲骰是否為 2d10 同點暴擊"""
    options = _roll_options(roll)
    return is_equal_dice(active_d20_results(roll), getattr(options, "custom_die", None))


def is_window_critical_roll(roll: Any) -> bool:
    """檢查擲骰總和是否落在暴擊區間"""
    options = _roll_options(roll)
    return is_window(active_d20_results(roll), getattr(options, "critical_lower_bound", None))


def uses_alternative_2d10_rule(roll: Any) -> bool:
    """檢查擲骰是否對 2d10 自訂骰子使用替代暴擊規則"""
    options = _roll_options(roll)
    rule = getattr(options, "critical_rule", None)
    return rule in ALTERNATIVE_RULES and is_2d10_formula(getattr(options, "custom_die", None))


def meets_2d10_critical_window(roll: Any) -> bool:
    """2d10 專用的暴擊區間判定"""
    options = _roll_options(roll)
    if len(active_d20_results(roll)) != 2:
        return False
    if not is_2d10_formula(getattr(options, "custom_die", None)):
        return False
    threshold = clamp_lower_bound(getattr(options, "critical_lower_bound", None))
    if options is not None:
        options.critical_lower_bound = threshold
    return is_window_critical_roll(roll)


def is_alternative_2d10_critical(roll: Any) -> bool:
    """以 2d10 替代規則判定暴擊"""
    rule = getattr(_roll_options(roll), "critical_rule", None)
    if rule == CriticalRule.EQUAL_DICE.value:
        return is_equal_dice_critical_roll(roll)
    if rule == CriticalRule.WINDOW.value:
        return meets_2d10_critical_window(roll)
    return False


def is_alternative_critical_roll(roll: Any) -> bool:
    """
    聊天訊息用的替代暴擊判定
    window 規則不限於 2d10，任何骰數都可以使用
    """
    rule = getattr(_roll_options(roll), "critical_rule", None)
    if rule not in ALTERNATIVE_RULES:
        return False

    if rule == CriticalRule.EQUAL_DICE.value:
        return is_equal_dice_critical_roll(roll)

    return is_window_critical_roll(roll)
