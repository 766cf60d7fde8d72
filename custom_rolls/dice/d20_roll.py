from dataclasses import replace
from typing import List, Optional

from custom_rolls.critical_rules import is_alternative_2d10_critical, uses_alternative_2d10_rule
from custom_rolls.dice.d20_die import D20Die
from custom_rolls.dice.terms import (
    DiceTerm, OperatorTerm, Roller, Term,
    evaluate_total, format_terms, parse_dice_term, parse_formula,
)
from custom_rolls.models.types import AdvantageMode, DEFAULT_DIE, RollConfig, RollOptions
from custom_rolls.utils.dice import is_2d10_formula, roll_single_dice
from custom_rolls.utils.logger import get_logger


logger = get_logger()

DEFAULT_CRITICAL_SUCCESS = 20
DEFAULT_CRITICAL_FAILURE = 1


def get_advantage_mode(options: RollOptions) -> AdvantageMode:
    """從擲骰選項取得優勢模式"""
    if isinstance(options.advantage_mode, int) and not isinstance(options.advantage_mode, bool):
        return AdvantageMode(options.advantage_mode)
    if options.advantage is True:
        return AdvantageMode.ADVANTAGE
    if options.disadvantage is True:
        return AdvantageMode.DISADVANTAGE
    return AdvantageMode.NORMAL


class D20Roll:
    """d20 檢定擲骰，支援自訂主骰（例如 2d10）"""
    def __init__(self, formula: str, data: Optional[dict] = None, options: Optional[RollOptions] = None):
        self.data = data or {}
        self.options = options or RollOptions()
        self.terms: List[Term] = parse_formula(formula)
        # 2d10 優勢/劣勢家規是否已套用，每個擲骰最多套用一次
        self.house_rule_applied = False
        self._formula = format_terms(self.terms)

        # 第一個骰項作為主骰
        for index, term in enumerate(self.terms):
            if isinstance(term, DiceTerm):
                if not isinstance(term, D20Die):
                    self.terms[index] = D20Die(
                        number=term.number, faces=term.faces, modifiers=term.modifiers,
                        options=RollOptions(elven_accuracy=self.options.elven_accuracy)
                    )
                break

    @classmethod
    def from_config(cls, config: RollConfig, target: Optional[int] = None) -> "D20Roll":
        """依照擲骰配置建立擲骰"""
        base_die = config.options.custom_die or DEFAULT_DIE
        formula = " + ".join([base_die] + [str(part) for part in config.parts])
        if config.options.target is None:
            config.options.target = target
        return cls(formula, config.data, config.options)

    @property
    def d20(self) -> Optional[D20Die]:
        for term in self.terms:
            if isinstance(term, D20Die):
                return term
        return None

    @property
    def formula(self) -> str:
        return self._formula

    def reset_formula(self):
        self._formula = format_terms(self.terms)

    @property
    def valid_d20_roll(self) -> bool:
        return bool(self.options.custom_die) or (isinstance(self.d20, D20Die) and self.d20.is_valid)

    @property
    def evaluated(self) -> bool:
        return all(term.evaluated for term in self.terms if isinstance(term, DiceTerm))

    def configure_modifiers(self):
        """設定主骰的暴擊門檻和優勢模式"""
        d20 = self.d20
        if d20 is None:
            return

        if self.options.custom_die:
            d20.options.custom_die = self.options.custom_die

        d20.options.critical_success = self.options.critical_success or DEFAULT_CRITICAL_SUCCESS
        d20.options.critical_failure = self.options.critical_failure or DEFAULT_CRITICAL_FAILURE
        d20.options.elven_accuracy = self.options.elven_accuracy
        d20.apply_advantage(get_advantage_mode(self.options))
        self.reset_formula()

        self.apply_2d10_advantage_house_rule()

    def apply_2d10_advantage_house_rule(self):
        """
        2d10 家規：優勢改為 +1d6，劣勢改為 -1d6
        """
        if self.house_rule_applied or not is_2d10_formula(self.options.custom_die):
            return

        d20 = self.d20
        merged = self.options
        if d20 is not None:
            merged = replace(self.options, advantage_mode=d20.options.advantage_mode
                             if d20.options.advantage_mode is not None else self.options.advantage_mode)
        advantage_mode = get_advantage_mode(merged)
        if advantage_mode not in (AdvantageMode.ADVANTAGE, AdvantageMode.DISADVANTAGE):
            return

        self.house_rule_applied = True
        self.options.advantage_mode = AdvantageMode.NORMAL
        self.options.advantage = False
        self.options.disadvantage = False
        if d20 is not None:
            d20.options.advantage_mode = AdvantageMode.NORMAL

        sign = "+" if advantage_mode == AdvantageMode.ADVANTAGE else "-"
        self.terms.append(OperatorTerm(sign))
        self.terms.append(parse_dice_term("1d6"))
        self.reset_formula()
        logger.debug(f"2d10 家規已套用: {self.formula}")

    def evaluate(self, roller: Roller = roll_single_dice) -> "D20Roll":
        """擲出所有骰項"""
        for term in self.terms:
            if isinstance(term, DiceTerm):
                term.evaluate(roller)
        return self

    @property
    def total(self) -> Optional[int]:
        if not self.evaluated:
            return None
        return evaluate_total(self.terms)

    @property
    def is_critical(self) -> bool:
        """是否暴擊"""
        if not self.valid_d20_roll or self.d20 is None or not self.d20.evaluated:
            return False
        if uses_alternative_2d10_rule(self):
            return is_alternative_2d10_critical(self)
        threshold = self.d20.options.critical_success or self.options.critical_success or DEFAULT_CRITICAL_SUCCESS
        return self.d20.total >= threshold

    @property
    def is_fumble(self) -> bool:
        """是否大失敗"""
        if not self.valid_d20_roll or self.d20 is None or not self.d20.evaluated:
            return False
        threshold = self.d20.options.critical_failure or self.options.critical_failure or DEFAULT_CRITICAL_FAILURE
        return self.d20.total <= threshold

    @property
    def is_success(self) -> Optional[bool]:
        """有目標值時判定是否成功"""
        if self.options.target is None or self.total is None:
            return None
        return self.total >= self.options.target

    def __repr__(self):
        return f"D20Roll({self.formula!r})"
