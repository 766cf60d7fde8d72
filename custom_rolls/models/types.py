from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class DieFormula:
    """骰子公式，例如 2d10 -> number=2, faces=10"""
    number: int
    faces: int


@dataclass
class DieResult:
    """單顆骰子結果"""
    result: Union[int, str]
    active: bool = True  # 被 kh/kl 丟棄的結果為 False


class RollMode(str, Enum):
    DEFAULT = "default"
    BLIND = "blindroll"
    GM = "gmroll"
    PUBLIC = "publicroll"
    SELF = "selfroll"


class CriticalRule(str, Enum):
    NORMAL = "normal"
    EQUAL_DICE = "equalDice"
    WINDOW = "window"


class AdvantageMode(IntEnum):
    DISADVANTAGE = -1
    NORMAL = 0
    ADVANTAGE = 1


class RollCategory(str, Enum):
    ABILITY = "ability"
    ATTACK = "attack"
    CONCENTRATION = "concentration"
    INITIATIVE = "initiative"
    SAVING_THROW = "savingThrow"
    SKILL = "skill"
    TOOL = "tool"


DEFAULT_DIE = "1d20"
DEFAULT_CRITICAL_LOWER_BOUND = 19


@dataclass
class RollSettings:
    """單一擲骰類別的設定"""
    # 武器類型未設定骰子時為 None，改用攻擊設定
    die: Optional[str] = DEFAULT_DIE
    roll_mode: str = RollMode.DEFAULT.value
    # 只有攻擊和武器類型才有暴擊規則
    critical_rule: Optional[str] = None
    critical_lower_bound: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], with_critical: bool = False,
                  default_die: Optional[str] = DEFAULT_DIE) -> "RollSettings":
        if not isinstance(data, dict):
            data = {}
        settings = cls(
            die=data.get("die") if data.get("die") is not None else default_die,
            roll_mode=data.get("rollMode") or RollMode.DEFAULT.value,
            critical_rule=data.get("criticalRule"),
            critical_lower_bound=data.get("criticalLowerBound")
        )
        if with_critical:
            if settings.critical_rule is None:
                settings.critical_rule = CriticalRule.NORMAL.value
            if settings.critical_lower_bound is None:
                settings.critical_lower_bound = DEFAULT_CRITICAL_LOWER_BOUND
        return settings

    def to_dict(self) -> Dict[str, Any]:
        data = {"rollMode": self.roll_mode}
        if self.die is not None:
            data["die"] = self.die
        if self.critical_rule is not None:
            data["criticalRule"] = self.critical_rule
        if self.critical_lower_bound is not None:
            data["criticalLowerBound"] = self.critical_lower_bound
        return data


@dataclass
class RollsSettings:
    """公會的全部擲骰設定"""
    categories: Dict[str, RollSettings] = field(default_factory=dict)
    weapon_types: Dict[str, RollSettings] = field(default_factory=dict)

    def __post_init__(self):
        # 補上缺少的類別
        for category in RollCategory:
            if category.value not in self.categories:
                self.categories[category.value] = RollSettings.from_dict(
                    None, with_critical=category is RollCategory.ATTACK
                )

    def get(self, category: str) -> Optional[RollSettings]:
        return self.categories.get(category)

    @property
    def attack(self) -> RollSettings:
        return self.categories[RollCategory.ATTACK.value]

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RollsSettings":
        if not isinstance(data, dict):
            data = {}
        categories = {}
        for category in RollCategory:
            categories[category.value] = RollSettings.from_dict(
                data.get(category.value), with_critical=category is RollCategory.ATTACK
            )

        weapon_types = {}
        stored_weapon_types = data.get("weaponTypes")
        if not isinstance(stored_weapon_types, dict):
            stored_weapon_types = {}
        for key, value in stored_weapon_types.items():
            if isinstance(value, dict):
                weapon_types[key] = RollSettings.from_dict(value, with_critical=True, default_die=None)

        return cls(categories=categories, weapon_types=weapon_types)

    def to_dict(self) -> Dict[str, Any]:
        data = {key: value.to_dict() for key, value in self.categories.items()}
        if self.weapon_types:
            data["weaponTypes"] = {key: value.to_dict() for key, value in self.weapon_types.items()}
        return data


@dataclass
class RollOptions:
    """單次擲骰的選項"""
    custom_die: Optional[str] = None
    critical_success: Optional[int] = None
    critical_failure: Optional[int] = None
    critical_rule: Optional[str] = None
    critical_lower_bound: Optional[int] = None
    advantage_mode: Optional[int] = None
    advantage: bool = False
    disadvantage: bool = False
    elven_accuracy: bool = False
    target: Optional[int] = None


@dataclass
class RollConfig:
    """擲骰前的配置，對應一顆 d20 擲骰"""
    parts: List[str] = field(default_factory=list)
    options: RollOptions = field(default_factory=RollOptions)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RollProcessConfig:
    """整個擲骰流程的配置"""
    hook_names: List[str]
    rolls: List[RollConfig] = field(default_factory=lambda: [RollConfig()])
    weapon_type: Optional[str] = None
    skill: Optional[str] = None
    ability: Optional[str] = None
    target: Optional[int] = None


@dataclass
class MessageConfig:
    """聊天訊息配置"""
    roll_mode: Optional[str] = None
