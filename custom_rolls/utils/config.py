import json
import os
from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict, field

from custom_rolls.models.types import RollsSettings
from custom_rolls.utils.logger import get_logger


logger = get_logger()


@dataclass
class GuildConfig:
    """公會配置"""
    # GM 身分組，擁有此身分組或「管理伺服器」權限的成員視為 GM
    gm_role: Optional[int] = None
    # 擲骰設定，以 JSON 形式保存
    rolls: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """配置管理器"""
    def __init__(self, config_path: str = "config.json"):
        self.config_path = config_path
        self.guild_configs: Dict[int, GuildConfig] = {}
        self.load_config()

    def load_config(self):
        """加載配置"""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                # 配置文件損壞時使用默認配置，不覆蓋原文件
                logger.error(f"無法解析配置文件 {self.config_path}: {e}")
                return

            guild_data = data.get('guilds', {}) if isinstance(data, dict) else None
            if not isinstance(guild_data, dict):
                logger.warning(f"配置文件 {self.config_path} 格式不正確，使用默認配置")
                return

            for guild_id, cfg in guild_data.items():
                try:
                    key = int(guild_id)
                except ValueError:
                    logger.warning(f"忽略無效的公會 ID: {guild_id}")
                    continue
                if not isinstance(cfg, dict):
                    logger.warning(f"公會 {guild_id} 的配置格式不正確，使用默認配置")
                    continue

                rolls = cfg.get('rolls')
                self.guild_configs[key] = GuildConfig(
                    gm_role=cfg.get('gm_role'),
                    rolls=rolls if isinstance(rolls, dict) else {}
                )
            logger.info(f"已加載 {len(self.guild_configs)} 個公會的配置")
        else:
            # 如果配置文件不存在，創建默認配置
            self.save_config()

    def save_config(self):
        """保存配置"""
        data = {
            'guilds': {str(guild_id): asdict(config)
                       for guild_id, config in self.guild_configs.items()}
        }

        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get_guild_config(self, guild_id: int) -> GuildConfig:
        """獲取公會配置"""
        return self.guild_configs.get(guild_id, GuildConfig())

    def set_guild_config(self, guild_id: int, config: GuildConfig):
        """設置公會配置"""
        self.guild_configs[guild_id] = config
        self.save_config()

    def get_rolls(self, guild_id: int) -> RollsSettings:
        """獲取公會的擲骰設定，缺少的欄位使用默認值"""
        return RollsSettings.from_dict(self.get_guild_config(guild_id).rolls)

    def set_rolls(self, guild_id: int, rolls: Optional[Dict[str, Any]]):
        """設置公會的擲骰設定"""
        config = self.get_guild_config(guild_id)
        config.rolls = dict(rolls or {})
        self.set_guild_config(guild_id, config)
        logger.info(f"公會 {guild_id} 的擲骰設定已更新")
