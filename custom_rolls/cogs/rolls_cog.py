import discord
from discord.ext import commands
from typing import Optional

from custom_rolls.constants import (
    CATEGORY_LABELS, COLOR_CRITICAL, COLOR_DEFAULT, COLOR_ERROR, COLOR_WARNING,
    CRITICAL_RULE_CHOICES, ROLL_MODE_CHOICES, WEAPON_TYPES,
)
from custom_rolls.forms.rolls_form import RollsForm, to_form_data
from custom_rolls.models.types import CriticalRule
from custom_rolls.rolls import is_custom_roll
from custom_rolls.utils.dice import parse_die_formula
from custom_rolls.utils.logger import get_logger
from custom_rolls.utils.permissions import is_gm


logger = get_logger()


def error_embed(description: str) -> discord.Embed:
    return discord.Embed(title="錯誤", description=description, color=COLOR_ERROR)


def format_settings_row(row: dict) -> str:
    """格式化單一類別的設定"""
    text = f"骰子: `{row.get('die')}`\n模式: {ROLL_MODE_CHOICES.get(row.get('rollMode'), row.get('rollMode'))}"
    rule = row.get("criticalRule")
    if rule:
        text += f"\n暴擊: {CRITICAL_RULE_CHOICES.get(rule, rule)}"
        if rule == CriticalRule.WINDOW.value:
            text += f" (>= {row.get('criticalLowerBound')})"
    return text


def build_settings_embed(context: dict, custom: bool) -> discord.Embed:
    """建立擲骰設定顯示訊息"""
    rolls = context["rolls"]
    embed = discord.Embed(
        title="擲骰設定",
        description="目前使用自訂骰子" if custom else "目前所有擲骰皆為 1d20",
        color=COLOR_DEFAULT
    )
    for category, label in CATEGORY_LABELS.items():
        row = rolls.get(category) or {"die": "1d20", "rollMode": "default"}
        embed.add_field(name=label, value=format_settings_row(row), inline=True)
    for key, row in rolls.get("weaponTypes", {}).items():
        embed.add_field(name=f"武器: {row.get('label', key)}", value=format_settings_row(row), inline=True)
    return embed


class RollsCog(commands.Cog, name="Rolls"):
    """擲骰設定相關指令"""
    def __init__(self, bot, config_manager):
        self.bot = bot
        self.config_manager = config_manager

    @commands.hybrid_command(name="rolls", description="擲骰設定")
    async def rolls_command(self, ctx, action: str, target: Optional[str] = None,
                            die: Optional[str] = None, roll_mode: Optional[str] = None,
                            critical_rule: Optional[str] = None,
                            critical_lower_bound: Optional[commands.Range[int, 1, 19]] = None):
        """擲骰設定指令"""
        if not ctx.guild:
            await ctx.send(embed=error_embed("此指令僅能在服務器中使用"))
            return

        guild_config = self.config_manager.get_guild_config(ctx.guild.id)
        if not is_gm(ctx.author, guild_config):
            await ctx.send("您沒有權限執行此操作！")
            return

        form = RollsForm(self.config_manager, ctx.guild.id)
        action = action.lower()

        if action == "show":
            context = form.prepare_context()
            custom = is_custom_roll(self.config_manager.get_rolls(ctx.guild.id))
            await ctx.send(embed=build_settings_embed(context, custom))

        elif action == "set":
            try:
                form_data = self.build_form_data(form, target, die, roll_mode, critical_rule,
                                                 critical_lower_bound)
            except ValueError as e:
                await ctx.send(embed=error_embed(str(e)))
                return

            rolls = form.submit(form_data)
            logger.info(f"{ctx.author} 更新了公會 {ctx.guild.id} 的 {target} 擲骰設定")
            key = target if target in CATEGORY_LABELS else None
            row = rolls.get(key) if key else rolls.get("weaponTypes", {}).get(target)
            embed = discord.Embed(
                title="擲骰設定已更新",
                description=format_settings_row(row or {}),
                color=COLOR_CRITICAL
            )
            if critical_rule == CriticalRule.EQUAL_DICE.value and row and row.get("criticalRule") != critical_rule:
                embed.add_field(name="注意", value="同點暴擊只能用於 2d10，已改為一般暴擊", inline=False)
            await ctx.send(embed=embed)

        elif action == "reset":
            view = ResetConfirmView(ctx.author.id, form)
            embed = discord.Embed(
                title="確認重置",
                description="確認將所有擲骰設定重置為默認值？",
                color=COLOR_WARNING
            )
            await ctx.send(embed=embed, view=view, ephemeral=True)

        else:
            await ctx.send(embed=error_embed("無效的操作。支持的操作：show, set, reset"))

    @staticmethod
    def build_form_data(form: RollsForm, target: Optional[str], die: Optional[str],
                        roll_mode: Optional[str], critical_rule: Optional[str],
                        critical_lower_bound: Optional[int]) -> dict:
        """將指令參數合併到目前的設定中，產生完整的表單資料"""
        if target in CATEGORY_LABELS:
            prefix = f"rolls.{target}"
        elif target in WEAPON_TYPES:
            prefix = f"rolls.weaponTypes.{target}"
        else:
            raise ValueError(f"未知的擲骰類別: {target}")

        if die is not None and parse_die_formula(die) is None:
            raise ValueError(f"無效的骰子公式: {die}")
        if roll_mode is not None and roll_mode not in ROLL_MODE_CHOICES:
            raise ValueError(f"無效的擲骰模式: {roll_mode}")
        if critical_rule is not None and critical_rule not in CRITICAL_RULE_CHOICES:
            raise ValueError(f"無效的暴擊規則: {critical_rule}")
        if (critical_rule is not None or critical_lower_bound is not None) and \
                target not in WEAPON_TYPES and target != "attack":
            raise ValueError("只有攻擊和武器類型可以設定暴擊規則")

        form_data = to_form_data(form.current_settings())
        for field, value in (("die", die), ("rollMode", roll_mode), ("criticalRule", critical_rule),
                             ("criticalLowerBound", critical_lower_bound)):
            if value is not None:
                form_data[f"{prefix}.{field}"] = value
        return form_data


class ResetConfirmView(discord.ui.View):
    """重置確認視圖"""
    def __init__(self, author_id: int, form: RollsForm):
        super().__init__(timeout=30)
        self.author_id = author_id
        self.form = form

    @discord.ui.button(label="確認", style=discord.ButtonStyle.danger)
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button):
        if interaction.user.id != self.author_id:
            await interaction.response.send_message("只有執行此操作的用戶可以確認。", ephemeral=True)
            return

        self.form.reset()
        embed = discord.Embed(
            title="已重置",
            description="擲骰設定已重置為默認值",
            color=COLOR_CRITICAL
        )
        await interaction.response.edit_message(embed=embed, view=None)

    @discord.ui.button(label="取消", style=discord.ButtonStyle.secondary)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button):
        if interaction.user.id != self.author_id:
            await interaction.response.send_message("只有執行此操作的用戶可以取消。", ephemeral=True)
            return

        embed = discord.Embed(
            title="操作已取消",
            description="操作已取消",
            color=COLOR_WARNING
        )
        await interaction.response.edit_message(embed=embed, view=None)
