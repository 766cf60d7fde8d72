from typing import List, Optional, Sequence

import discord

from custom_rolls.constants import COLOR_DEFAULT, COLOR_FUMBLE, CRITICAL_MARKER, FUMBLE_MARKER
from custom_rolls.dice.d20_roll import D20Roll
from custom_rolls.dice.terms import DiceTerm, OperatorTerm


SUCCESS_MARKER = "✔️ 成功"
FAILURE_MARKER = "❌ 失敗"


def format_term_results(roll: D20Roll) -> str:
    """格式化骰項結果，被丟棄的骰子以刪除線顯示"""
    parts: List[str] = []
    for term in roll.terms:
        if isinstance(term, OperatorTerm):
            parts.append(term.operator)
        elif isinstance(term, DiceTerm):
            values = [str(r.result) if r.active else f"~~{r.result}~~" for r in term.results]
            parts.append(f"[{', '.join(values)}]")
        else:
            parts.append(term.formula)
    return " ".join(parts)


def format_roll_result(roll: D20Roll) -> str:
    """格式化單個擲骰結果"""
    result = f"{format_term_results(roll)} = **{roll.total}**"

    if roll.is_critical:
        result += f" {CRITICAL_MARKER}"
    elif roll.is_fumble:
        result += f" {FUMBLE_MARKER}"

    if roll.is_success is True:
        result += f" {SUCCESS_MARKER}"
    elif roll.is_success is False:
        result += f" {FAILURE_MARKER}"

    return result


def build_roll_embed(rolls: Sequence[D20Roll], title: str, description: Optional[str] = None) -> discord.Embed:
    """建立擲骰結果訊息，每個擲骰佔一個欄位"""
    color = COLOR_DEFAULT
    if any(roll.is_fumble and not roll.is_critical for roll in rolls):
        color = COLOR_FUMBLE

    embed = discord.Embed(title=title, description=description, color=color)
    for roll in rolls:
        embed.add_field(name=roll.formula, value=format_roll_result(roll), inline=False)
    return embed
