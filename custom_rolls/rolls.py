"""
擲骰設定與擲骰流程的 hook

- on_pre_roll: 擲骰前依照公會設定替換主骰、暴擊門檻和擲骰模式
- highlight_alternative_critical_chat: 在聊天訊息中標示替代規則的暴擊
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import discord

from custom_rolls.constants import (
    COLOR_CRITICAL, CRITICAL_ICONS, CRITICAL_MARKER, FUMBLE_MARKER,
    HOOK_ABILITY_CHECK, HOOK_ATTACK, HOOK_CONCENTRATION, HOOK_INITIATIVE,
    HOOK_SAVING_THROW, HOOK_SKILL, HOOK_TOOL,
)
from custom_rolls.critical_rules import clamp_lower_bound, is_alternative_critical_roll
from custom_rolls.models.types import (
    CriticalRule, DEFAULT_CRITICAL_LOWER_BOUND, DEFAULT_DIE, DieFormula,
    MessageConfig, RollCategory, RollMode, RollOptions, RollProcessConfig,
    RollSettings, RollsSettings,
)
from custom_rolls.utils.chat import FAILURE_MARKER
from custom_rolls.utils.dice import parse_die_formula
from custom_rolls.utils.logger import get_logger


logger = get_logger()

ROLL_MODES = (RollMode.PUBLIC.value, RollMode.GM.value, RollMode.BLIND.value, RollMode.SELF.value)


def default_rolls_settings() -> Dict[str, Any]:
    """默認的擲骰設定"""
    defaults = {category.value: {"die": DEFAULT_DIE, "rollMode": RollMode.DEFAULT.value}
                for category in RollCategory}
    defaults[RollCategory.ATTACK.value] = default_attack_roll_settings()
    return defaults


def default_attack_roll_settings() -> Dict[str, Any]:
    """默認的攻擊擲骰設定"""
    return {
        "die": DEFAULT_DIE,
        "rollMode": RollMode.DEFAULT.value,
        "criticalRule": CriticalRule.NORMAL.value,
        "criticalLowerBound": DEFAULT_CRITICAL_LOWER_BOUND,
    }


def select_roll_settings(process: RollProcessConfig, rolls: RollsSettings,
                         skill_roll_modes: Optional[Dict[str, str]] = None,
                         ability_roll_modes: Optional[Dict[str, str]] = None
                         ) -> Tuple[Optional[RollSettings], Optional[str], bool]:
    """
    依照 hook 名稱選出對應的擲骰設定
    返回: (設定, 覆蓋用的擲骰模式, 是否為攻擊擲骰)
    """
    hook_names = process.hook_names
    skill_roll_modes = skill_roll_modes or {}
    ability_roll_modes = ability_roll_modes or {}

    if HOOK_CONCENTRATION in hook_names:
        return rolls.get(RollCategory.CONCENTRATION.value), None, False
    if HOOK_INITIATIVE in hook_names:
        return rolls.get(RollCategory.INITIATIVE.value), None, False
    if HOOK_ATTACK in hook_names:
        weapon = rolls.weapon_types.get(process.weapon_type) if process.weapon_type else None
        settings = weapon if weapon is not None and weapon.die else rolls.attack
        if weapon is not None and weapon.roll_mode and weapon.roll_mode != RollMode.DEFAULT.value:
            roll_mode = weapon.roll_mode
        else:
            roll_mode = rolls.attack.roll_mode
        return settings, roll_mode, True
    if HOOK_SKILL in hook_names:
        return rolls.get(RollCategory.SKILL.value), skill_roll_modes.get(process.skill), False
    if HOOK_TOOL in hook_names:
        return rolls.get(RollCategory.TOOL.value), None, False
    if HOOK_ABILITY_CHECK in hook_names:
        return rolls.get(RollCategory.ABILITY.value), ability_roll_modes.get(process.ability), False
    if HOOK_SAVING_THROW in hook_names:
        return rolls.get(RollCategory.SAVING_THROW.value), ability_roll_modes.get(process.ability), False

    return None, None, False


def on_pre_roll(process: RollProcessConfig, message: MessageConfig, rolls: RollsSettings,
                is_gm: bool, skill_roll_modes: Optional[Dict[str, str]] = None,
                ability_roll_modes: Optional[Dict[str, str]] = None) -> bool:
    """
    擲骰前的 hook，修改擲骰配置和訊息配置
    GM 的擲骰或無法對應類別時不做任何修改，返回 False
    """
    settings, roll_mode, is_attack_roll = select_roll_settings(
        process, rolls, skill_roll_modes, ability_roll_modes
    )

    if settings is None or is_gm or not process.rolls:
        return False

    options = process.rolls[0].options
    die_parts = parse_die_formula(settings.die)
    if settings.die != DEFAULT_DIE and die_parts:
        options.custom_die = settings.die
        options.critical_success = die_parts.number * die_parts.faces
        options.critical_failure = die_parts.number

    # 在默認暴擊門檻設定之後才套用攻擊暴擊規則，避免暴擊區間被覆蓋
    if is_attack_roll:
        apply_attack_critical_rule(options, settings, die_parts)

    if roll_mode in ROLL_MODES:
        message.roll_mode = roll_mode
    elif settings.roll_mode in ROLL_MODES:
        message.roll_mode = settings.roll_mode

    logger.debug(
        f"擲骰設定已套用: hooks={process.hook_names} die={options.custom_die} "
        f"rule={options.critical_rule} mode={message.roll_mode}"
    )
    return True


def apply_attack_critical_rule(options: RollOptions, settings: Optional[RollSettings],
                               die_parts: Optional[DieFormula]):
    """套用攻擊擲骰的暴擊規則"""
    critical_rule = (settings.critical_rule if settings else None) or CriticalRule.NORMAL.value
    if critical_rule == CriticalRule.NORMAL.value:
        return

    threshold = clamp_lower_bound(settings.critical_lower_bound)

    options.critical_rule = critical_rule
    options.critical_lower_bound = threshold

    if critical_rule == CriticalRule.WINDOW.value:
        options.critical_success = threshold
        return

    # 同點暴擊只適用於 2d10
    if critical_rule == CriticalRule.EQUAL_DICE.value and not (
        die_parts is not None and die_parts.number == 2 and die_parts.faces == 10
    ):
        options.critical_rule = None
        options.critical_lower_bound = None


def highlight_alternative_critical_chat(rolls: Sequence[Any], embed: discord.Embed) -> List[int]:
    """
    在擲骰結果訊息中標示替代規則的暴擊
    每個擲骰對應 embed 中相同位置的欄位，返回被標示的擲骰索引
    """
    if not rolls:
        return []

    critical_indices = [index for index, roll in enumerate(rolls) if is_alternative_critical_roll(roll)]
    if not critical_indices:
        return []

    fields = embed.fields
    for index in critical_indices:
        if index >= len(fields):
            continue
        field = fields[index]
        value = field.value or ""
        value = value.replace(f" {FUMBLE_MARKER}", "").replace(f" {FAILURE_MARKER}", "")
        if CRITICAL_MARKER not in value:
            value = f"{value} {CRITICAL_MARKER}"
        embed.set_field_at(index, name=inject_critical_icons(field.name or ""), value=value,
                           inline=bool(field.inline))

    embed.colour = COLOR_CRITICAL
    return critical_indices


def inject_critical_icons(text: str) -> str:
    """在欄位標題加上暴擊圖示，已有圖示時不重複添加"""
    if CRITICAL_ICONS in text:
        return text
    return f"{text} {CRITICAL_ICONS}".strip()


def is_custom_roll(rolls: Optional[RollsSettings]) -> bool:
    """檢查是否有任何類別使用了自訂骰子"""
    if rolls is None:
        return False

    dice = [settings.die for settings in rolls.categories.values()]
    dice.extend(settings.die for settings in rolls.weapon_types.values())
    return any(die and die != DEFAULT_DIE for die in dice)
