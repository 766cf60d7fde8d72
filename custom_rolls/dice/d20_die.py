from typing import List, Optional

from custom_rolls.dice.terms import DiceTerm
from custom_rolls.models.types import AdvantageMode, DieResult, RollOptions
from custom_rolls.utils.dice import parse_die_formula


class D20Die(DiceTerm):
    """
    主骰骰項
    預設為 1d20，設定了自訂骰子（例如 2d10）時以自訂骰子為基礎
    """
    def __init__(self, number: int = 1, faces: int = 20, modifiers: Optional[List[str]] = None,
                 results: Optional[List[DieResult]] = None, options: Optional[RollOptions] = None):
        super().__init__(number=number, faces=faces, modifiers=modifiers, results=results)
        self.options = options or RollOptions()

    @property
    def is_valid(self) -> bool:
        return self.faces == 20 and self.number in (1, 2, 3)

    def apply_advantage(self, advantage_mode: int):
        """套用優勢或劣勢"""
        custom_die_parts = parse_die_formula(self.options.custom_die)
        base_number = custom_die_parts.number if custom_die_parts else 1
        is_2d10_custom_die = (
            custom_die_parts is not None
            and custom_die_parts.number == 2
            and custom_die_parts.faces == 10
        )

        self.options.advantage_mode = advantage_mode
        self.modifiers = [m for m in self.modifiers if not m.startswith(("kh", "kl"))]

        # 2d10 的優勢/劣勢由 D20Roll 的家規處理，不額外擲骰
        if advantage_mode == AdvantageMode.NORMAL or is_2d10_custom_die:
            self.number = base_number
            return

        is_advantage = advantage_mode == AdvantageMode.ADVANTAGE
        if is_advantage and self.options.elven_accuracy:
            self.number = base_number * 3
        else:
            self.number = base_number * 2
        self.modifiers.append(f"kh{base_number}" if is_advantage else f"kl{base_number}")
