import discord
from discord.ext import commands
from typing import List, Optional, Tuple

from custom_rolls.constants import CATEGORY_HOOK_NAMES, CATEGORY_LABELS, COLOR_ERROR, PRIVATE_ROLL_MODES, WEAPON_TYPES
from custom_rolls.dice.d20_roll import D20Roll
from custom_rolls.dice.terms import Roller
from custom_rolls.models.types import MessageConfig, RollConfig, RollOptions, RollProcessConfig, RollsSettings
from custom_rolls.rolls import highlight_alternative_critical_chat, on_pre_roll
from custom_rolls.utils.chat import build_roll_embed
from custom_rolls.utils.dice import roll_single_dice
from custom_rolls.utils.logger import get_logger
from custom_rolls.utils.permissions import is_gm


logger = get_logger()

ADVANTAGE_CHOICES = ("normal", "advantage", "disadvantage")


def build_process_config(category: str, modifier: int = 0, advantage: str = "normal",
                         weapon_type: Optional[str] = None, target: Optional[int] = None) -> RollProcessConfig:
    """建立擲骰流程配置"""
    if category not in CATEGORY_HOOK_NAMES:
        raise ValueError(f"未知的擲骰類別: {category}")
    if advantage not in ADVANTAGE_CHOICES:
        raise ValueError("優勢參數必須是 'normal', 'advantage' 或 'disadvantage'")
    if weapon_type is not None and weapon_type not in WEAPON_TYPES:
        raise ValueError(f"未知的武器類型: {weapon_type}")

    options = RollOptions(
        advantage=advantage == "advantage",
        disadvantage=advantage == "disadvantage"
    )
    parts = [str(modifier)] if modifier else []
    return RollProcessConfig(
        hook_names=list(CATEGORY_HOOK_NAMES[category]),
        rolls=[RollConfig(parts=parts, options=options)],
        weapon_type=weapon_type if category == "attack" else None,
        target=target
    )


def perform_check(process: RollProcessConfig, rules: RollsSettings, gm: bool,
                  roller: Roller = roll_single_dice) -> Tuple[List[D20Roll], MessageConfig]:
    """執行擲骰流程：套用設定、建立擲骰、擲骰"""
    message = MessageConfig()
    on_pre_roll(process, message, rules, gm)

    rolls = []
    for config in process.rolls:
        roll = D20Roll.from_config(config, target=process.target)
        roll.configure_modifiers()
        roll.evaluate(roller)
        rolls.append(roll)
    return rolls, message


class DiceCog(commands.Cog, name="Dice"):
    """骰子相關指令"""
    def __init__(self, bot, config_manager):
        self.bot = bot
        self.config_manager = config_manager

    @commands.hybrid_command(name="check", description="d20 檢定擲骰")
    async def check_command(self, ctx, category: str, modifier: int = 0, advantage: str = "normal",
                            weapon_type: Optional[str] = None, target: Optional[int] = None):
        """d20 檢定指令"""
        if ctx.guild:
            rules = self.config_manager.get_rolls(ctx.guild.id)
            gm = is_gm(ctx.author, self.config_manager.get_guild_config(ctx.guild.id))
        else:
            rules = RollsSettings()  # 使用默認配置
            gm = False

        try:
            process = build_process_config(category, modifier, advantage.lower(), weapon_type, target)
            rolls, message = perform_check(process, rules, gm)
        except ValueError as e:
            embed = discord.Embed(
                title="擲骰錯誤",
                description=f"錯誤: {str(e)}",
                color=COLOR_ERROR
            )
            await ctx.send(embed=embed)
            return

        title = f"{CATEGORY_LABELS[category]}擲骰結果"
        embed = build_roll_embed(rolls, title=title)
        highlighted = highlight_alternative_critical_chat(rolls, embed)
        if highlighted:
            logger.info(f"{ctx.author} 的{CATEGORY_LABELS[category]}擲骰觸發替代暴擊規則")

        ephemeral = message.roll_mode in PRIVATE_ROLL_MODES
        await ctx.send(embed=embed, ephemeral=ephemeral)
