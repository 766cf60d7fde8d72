import re
from typing import Callable, List, Optional, Union

from custom_rolls.models.types import DieResult
from custom_rolls.utils.dice import roll_single_dice


Roller = Callable[[int], int]

# 骰項：2d10, d20, 2d20kh1, 2d20kl
DICE_TERM_PATTERN = re.compile(r"^(\d*)d(\d+)((?:kh|kl)\d*)*$", re.IGNORECASE)
MODIFIER_PATTERN = re.compile(r"(kh|kl)(\d*)", re.IGNORECASE)
TOKEN_PATTERN = re.compile(r"\s*([+-]|[^\s+-]+)")


class DiceTerm:
    """骰項，例如 2d10 或 2d20kh1"""
    def __init__(self, number: int = 1, faces: int = 20, modifiers: Optional[List[str]] = None,
                 results: Optional[List[DieResult]] = None):
        self.number = number
        self.faces = faces
        self.modifiers = list(modifiers or [])
        self.results = list(results or [])

    @property
    def evaluated(self) -> bool:
        return len(self.results) > 0

    @property
    def formula(self) -> str:
        return f"{self.number}d{self.faces}{''.join(self.modifiers)}"

    @property
    def total(self) -> int:
        return sum(int(r.result) for r in self.results if r.active)

    def evaluate(self, roller: Roller = roll_single_dice) -> "DiceTerm":
        """擲骰並套用 kh/kl 修正"""
        self.results = [DieResult(result=roller(self.faces)) for _ in range(self.number)]
        for modifier in self.modifiers:
            self._apply_keep(modifier)
        return self

    def _apply_keep(self, modifier: str):
        match = MODIFIER_PATTERN.fullmatch(modifier)
        if not match:
            return
        keep = int(match.group(2)) if match.group(2) else 1
        highest = match.group(1).lower() == "kh"

        active = [r for r in self.results if r.active]
        ordered = sorted(active, key=lambda r: int(r.result), reverse=highest)
        for result in ordered[keep:]:
            result.active = False

    def __repr__(self):
        return f"{type(self).__name__}({self.formula!r})"


class OperatorTerm:
    """運算符骰項"""
    def __init__(self, operator: str):
        if operator not in ("+", "-"):
            raise ValueError(f"不支援的運算符: {operator}")
        self.operator = operator

    @property
    def formula(self) -> str:
        return self.operator

    def __repr__(self):
        return f"OperatorTerm({self.operator!r})"


class NumericTerm:
    """數字骰項"""
    def __init__(self, number: int):
        self.number = number

    @property
    def formula(self) -> str:
        return str(self.number)

    @property
    def total(self) -> int:
        return self.number

    def __repr__(self):
        return f"NumericTerm({self.number})"


Term = Union[DiceTerm, OperatorTerm, NumericTerm]


def parse_dice_term(token: str, term_class=DiceTerm) -> Optional[DiceTerm]:
    """解析單個骰項，無法解析時返回 None"""
    match = DICE_TERM_PATTERN.match(token)
    if not match:
        return None

    number = int(match.group(1)) if match.group(1) else 1
    faces = int(match.group(2))
    if number < 1 or faces < 1:
        raise ValueError("骰子數量和面數必須至少為1")

    modifiers = [m.group(0).lower() for m in MODIFIER_PATTERN.finditer(token[match.end(2):])]
    return term_class(number=number, faces=faces, modifiers=modifiers)


def parse_formula(formula: str) -> List[Term]:
    """
    解析擲骰公式，比如 "2d10 + 5 - 1d6"
    """
    tokens = TOKEN_PATTERN.findall(formula.strip())
    if not tokens:
        raise ValueError("擲骰公式不能為空")

    terms: List[Term] = []
    for token in tokens:
        if token in ("+", "-"):
            # 連續的運算符合併，"+ -" 視為 "-"
            if terms and isinstance(terms[-1], OperatorTerm):
                if token == "-":
                    previous = terms[-1].operator
                    terms[-1] = OperatorTerm("+" if previous == "-" else "-")
                continue
            terms.append(OperatorTerm(token))
        elif token.isdigit():
            terms.append(NumericTerm(int(token)))
        else:
            term = parse_dice_term(token)
            if term is None:
                raise ValueError(f"無效的擲骰公式: {token}")
            terms.append(term)

    if isinstance(terms[-1], OperatorTerm):
        raise ValueError("擲骰公式不能以運算符結尾")

    return terms


def evaluate_total(terms: List[Term]) -> int:
    """計算骰項總和"""
    total = 0
    sign = 1
    for term in terms:
        if isinstance(term, OperatorTerm):
            sign = -1 if term.operator == "-" else 1
            continue
        total += sign * term.total
        sign = 1
    return total


def format_terms(terms: List[Term]) -> str:
    """將骰項格式化為公式字串"""
    return " ".join(term.formula for term in terms)
