# sitevisits/bot/instance.py
import logging
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from sitevisits.core.config import Settings
from sitevisits.bot.handlers import get_skill_issue_router
from sitevisits.bot.middleware import SkillIssueAuditMiddleware
from sitevisits.bot.skill_issue import SkillIssue, SkillIssueConfig

logger = logging.getLogger(__name__)


def create_dispatcher(skill_issue: SkillIssue) -> Dispatcher:
    """
    Диспетчер с зарегистрированным skill-issue; объект навыка доступен хендлерам как `skill_issue`,
    счетчики ответов как `skill_issue_audit`.
    """
    audit = SkillIssueAuditMiddleware()
    dp = Dispatcher(skill_issue=skill_issue, skill_issue_audit=audit)
    dp.message.outer_middleware(audit)
    dp.include_router(get_skill_issue_router())
    return dp


async def initialize_bot(settings: Settings) -> tuple[Bot, Dispatcher]:
    if not settings.TELEGRAM_BOT_TOKEN:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")

    bot = Bot(token=settings.TELEGRAM_BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    config = SkillIssueConfig.from_settings(settings)
    dp = create_dispatcher(SkillIssue(config))
    logger.info(f"Skill-issue handler registered: enabled={config.enabled}, chance={config.chance}, cooldown={config.cooldown_minutes}m")

    try:
        bot_info = await bot.get_me()
        logger.info(f"Bot initialized: ID={bot_info.id}, Username='{bot_info.username}'")
    except Exception as e:
        logger.exception(f"Failed to connect to Telegram API: {e}")
        await bot.session.close()
        raise RuntimeError("Could not initialize Telegram Bot connection") from e

    return bot, dp
