import discord
from discord.ext import commands
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from custom_rolls.utils.config import ConfigManager
from custom_rolls.utils.logger import get_logger


logger = get_logger()


class CustomRollsBot:
    """自訂擲骰機器人類"""
    def __init__(self):
        root_dir = self.find_project_root()

        # 查找環境變量文件
        env_file = self.find_env_file(root_dir)
        if env_file:
            load_dotenv(dotenv_path=env_file)

        # 從環境變量獲取token
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            logger.error("未找到 DISCORD_TOKEN 環境變量")
            logger.error("請在項目根目錄創建 .env 文件，並添加 DISCORD_TOKEN=your_token_here")
            raise ValueError("未找到 DISCORD_TOKEN 環境變量")

        self.token = token

        config_path = os.getenv("CUSTOM_ROLLS_CONFIG") or str(root_dir / "config.json")
        self.config_manager = ConfigManager(config_path=config_path)

        intents = discord.Intents.default()
        intents.message_content = True  # 需要讀取消息內容
        intents.guilds = True  # 需要訪問服務器信息

        self.bot = commands.Bot(
            command_prefix="!",
            intents=intents,
            description="自訂 d20 擲骰規則的機器人"
        )

        self.setup_events()

    def find_project_root(self) -> Path:
        """查找項目根目錄"""
        current_path = Path(__file__).resolve()

        # 搜索包含 pyproject.toml 或 .git 的父目錄
        for parent in current_path.parents:
            if (parent / 'pyproject.toml').exists() or (parent / '.git').exists():
                return parent

        return Path.cwd()

    def find_env_file(self, root_dir: Path) -> Optional[Path]:
        """查找環境變量文件"""
        for name in ('.env', '.env.local'):
            env_file = root_dir / name
            if env_file.is_file():
                logger.info(f"找到環境變量文件: {env_file}")
                return env_file

        logger.warning(f"在 {root_dir} 中未找到環境變量文件")
        return None

    def setup_events(self):
        """設置事件處理器"""
        @self.bot.event
        async def on_ready():
            logger.info(f'{self.bot.user} 已經上線!')
            logger.info(f'已連接到 {len(self.bot.guilds)} 個服務器')

            # 同步應用命令
            try:
                await self.bot.tree.sync()
                logger.info("應用命令已同步")
            except discord.HTTPException as e:
                logger.error(f"同步應用命令時出錯: {e}")

        @self.bot.event
        async def on_guild_join(guild):
            """當機器人加入服務器時的處理"""
            logger.info(f'加入了服務器: {guild.name} (ID: {guild.id})')

    async def add_cogs(self):
        """添加Cog模塊"""
        from custom_rolls.cogs.dice_cog import DiceCog
        from custom_rolls.cogs.rolls_cog import RollsCog

        await self.bot.add_cog(DiceCog(self.bot, self.config_manager))
        await self.bot.add_cog(RollsCog(self.bot, self.config_manager))

    async def start(self):
        """啟動機器人"""
        await self.add_cogs()
        await self.bot.start(self.token)

    async def close(self):
        """關閉機器人"""
        await self.bot.close()
