from typing import Any, Dict, Mapping, Optional

from custom_rolls.constants import CRITICAL_RULE_CHOICES, ROLL_MODE_CHOICES, WEAPON_TYPES
from custom_rolls.critical_rules import clamp_lower_bound
from custom_rolls.models.types import CriticalRule, DEFAULT_DIE, RollMode
from custom_rolls.rolls import default_rolls_settings
from custom_rolls.utils.config import ConfigManager
from custom_rolls.utils.dice import is_2d10_formula
from custom_rolls.utils.logger import get_logger


logger = get_logger()


def set_property(target: Dict[str, Any], key: str, value: Any):
    """以點號路徑設定巢狀字典的值，例如 "rolls.attack.die" """
    parts = key.split(".")
    current = target
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def can_use_equal_dice(die: Optional[str]) -> bool:
    """同點暴擊只能用於 2d10"""
    return is_2d10_formula(die.strip() if isinstance(die, str) else die)


def lower_bound_visible(critical_rule: Optional[str]) -> bool:
    """只有暴擊區間規則需要下限欄位"""
    return critical_rule == CriticalRule.WINDOW.value


class RollsForm:
    """擲骰設定表單"""
    def __init__(self, config_manager: ConfigManager, guild_id: int,
                 weapon_types: Optional[Mapping[str, str]] = None):
        self.config_manager = config_manager
        self.guild_id = guild_id
        self.weapon_types = dict(weapon_types if weapon_types is not None else WEAPON_TYPES)

    def prepare_context(self) -> Dict[str, Any]:
        """準備表單顯示用的資料"""
        rolls = dict(self.config_manager.get_guild_config(self.guild_id).rolls or {})
        stored_weapon_types = rolls.get("weaponTypes") or {}

        weapon_types = {}
        for key, label in self.weapon_types.items():
            stored = stored_weapon_types.get(key) or {}
            weapon_types[key] = self._row(stored, label=label)

        rolls["attack"] = self._row(rolls.get("attack") or {})
        rolls["weaponTypes"] = weapon_types

        return {
            "rolls": rolls,
            "selects": {
                "criticalLowerBound": {"choices": {value: value for value in range(1, 20)}},
                "criticalRule": {"choices": dict(CRITICAL_RULE_CHOICES)},
                "rollMode": {"choices": dict(ROLL_MODE_CHOICES)},
            },
        }

    def current_settings(self) -> Dict[str, Any]:
        """目前保存的設定，補上每個武器類型的默認值"""
        rolls = self.config_manager.get_rolls(self.guild_id).to_dict()
        weapon_types = rolls.get("weaponTypes", {})
        for key in self.weapon_types:
            weapon_types.setdefault(key, {
                "die": DEFAULT_DIE,
                "rollMode": RollMode.DEFAULT.value,
                "criticalRule": CriticalRule.NORMAL.value,
                "criticalLowerBound": clamp_lower_bound(None),
            })
        rolls["weaponTypes"] = weapon_types
        return rolls

    @staticmethod
    def _row(stored: Mapping[str, Any], label: Optional[str] = None) -> Dict[str, Any]:
        die = stored.get("die") or DEFAULT_DIE
        critical_rule = stored.get("criticalRule") or CriticalRule.NORMAL.value
        row = {
            "die": die,
            "rollMode": stored.get("rollMode") or RollMode.DEFAULT.value,
            "criticalRule": critical_rule,
            "criticalLowerBound": clamp_lower_bound(stored.get("criticalLowerBound")),
            "equalDiceAvailable": can_use_equal_dice(die),
            "lowerBoundVisible": lower_bound_visible(critical_rule),
        }
        if label is not None:
            row["label"] = label
        return row

    def submit(self, form_data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        提交表單資料
        "rolls.attack.die" 之類的扁平欄位會展開成巢狀設定後保存
        """
        expanded: Dict[str, Any] = {}
        for key, value in form_data.items():
            if key.startswith("rolls"):
                set_property(expanded, key, value)

        rolls = expanded.get("rolls") or {}
        for settings in self._iter_rows(rolls):
            self._normalize_row(settings)

        # 先清空再寫入，避免殘留舊的欄位
        self.config_manager.set_rolls(self.guild_id, {})
        self.config_manager.set_rolls(self.guild_id, rolls)
        logger.info(f"公會 {self.guild_id} 提交了擲骰設定表單")
        return rolls

    def reset(self) -> Dict[str, Any]:
        """重置為默認設定"""
        rolls = default_rolls_settings()
        self.config_manager.set_rolls(self.guild_id, rolls)
        logger.info(f"公會 {self.guild_id} 的擲骰設定已重置")
        return rolls

    @staticmethod
    def _iter_rows(rolls: Dict[str, Any]):
        for key, value in rolls.items():
            if key == "weaponTypes" and isinstance(value, dict):
                for weapon in value.values():
                    if isinstance(weapon, dict):
                        yield weapon
            elif isinstance(value, dict):
                yield value

    @staticmethod
    def _normalize_row(settings: Dict[str, Any]):
        die = settings.get("die")
        if isinstance(die, str):
            settings["die"] = die.strip() or DEFAULT_DIE

        if "criticalLowerBound" in settings:
            settings["criticalLowerBound"] = clamp_lower_bound(settings["criticalLowerBound"])

        rule = settings.get("criticalRule")
        if rule is not None and rule not in CRITICAL_RULE_CHOICES:
            settings["criticalRule"] = CriticalRule.NORMAL.value
        elif rule == CriticalRule.EQUAL_DICE.value and not can_use_equal_dice(settings.get("die")):
            settings["criticalRule"] = CriticalRule.NORMAL.value

        if settings.get("rollMode") not in (None, *ROLL_MODE_CHOICES):
            settings["rollMode"] = RollMode.DEFAULT.value


def to_form_data(rolls: Mapping[str, Any], prefix: str = "rolls") -> Dict[str, Any]:
    """將巢狀設定攤平成表單欄位，submit 的反向操作"""
    form_data: Dict[str, Any] = {}
    for key, value in rolls.items():
        path = f"{prefix}.{key}"
        if isinstance(value, Mapping):
            form_data.update(to_form_data(value, path))
        else:
            form_data[path] = value
    return form_data
