# run_polling.py
import asyncio
import logging
from sitevisits.core.config import settings
from sitevisits.bot.instance import initialize_bot

log_level = settings.LOGGING_LEVEL.upper()
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logging.getLogger("aiogram").setLevel(logging.INFO)

logger = logging.getLogger(__name__)

async def start_bot_polling():
    """
    Запуск skill-issue бота в режиме Long Polling.
    """
    bot, dp = await initialize_bot(settings)

    # Если где-то остался вебхук, getUpdates работать не будет
    try:
        webhook_info = await bot.get_webhook_info()
        if webhook_info.url:
            logger.warning(f"Webhook is active ({webhook_info.url}). Deleting it before starting polling...")
            await bot.delete_webhook(drop_pending_updates=True)
    except Exception as e:
        logger.error(f"Error deleting webhook: {e}")

    logger.info("Starting bot in Long Polling mode...")
    try:
        await dp.start_polling(bot)
    finally:
        logger.info("Stopping bot...")
        await bot.session.close()
        logger.info("Bot stopped.")


if __name__ == "__main__":
    try:
        asyncio.run(start_bot_polling())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Polling stopped by user.")
