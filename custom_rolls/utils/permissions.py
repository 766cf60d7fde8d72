from typing import Any

from custom_rolls.utils.config import GuildConfig


def is_gm(member: Any, guild_config: GuildConfig) -> bool:
    """擁有「管理伺服器」權限或 GM 身分組的成員視為 GM"""
    permissions = getattr(member, "guild_permissions", None)
    if permissions is not None and permissions.manage_guild:
        return True

    if guild_config.gm_role is None:
        return False
    return any(role.id == guild_config.gm_role for role in getattr(member, "roles", []))
