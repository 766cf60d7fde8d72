#!/usr/bin/env python3
"""
Custom Rolls Discord Bot
自訂 d20 擲骰規則（2d10 主骰、同點暴擊、暴擊區間）的 Discord 機器人
"""

import asyncio
import sys

from dotenv import load_dotenv

from custom_rolls.bot import CustomRollsBot
from custom_rolls.utils.logger import get_logger


def main():
    """主函數"""
    load_dotenv()
    logger = get_logger()

    logger.info("正在啟動 Custom Rolls Bot...")

    try:
        bot = CustomRollsBot()
    except ValueError as e:
        logger.error(f"錯誤：{e}")
        sys.exit(1)

    async def runner():
        try:
            await bot.start()
        finally:
            await bot.close()

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        logger.info("收到中斷信號，正在關閉機器人...")
    finally:
        logger.info("機器人已關閉")


if __name__ == "__main__":
    main()
