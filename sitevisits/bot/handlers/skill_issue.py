# sitevisits/bot/handlers/skill_issue.py
import logging
from aiogram import Router, F
from aiogram.types import Message
from aiogram.exceptions import TelegramAPIError

from sitevisits.bot.skill_issue import SkillIssue, SKILL_ID

logger = logging.getLogger(__name__)


async def handle_skill_issue(message: Message, skill_issue: SkillIssue):
    """
    Проверяет каждое текстовое сообщение.
    skill_issue прокидывается aiogram'ом из workflow data диспетчера.
    Возвращает текст ответа, если он был отправлен.
    """
    response = skill_issue.check(message.text)
    if response is None:
        return None

    try:
        await message.reply(response)
    except TelegramAPIError as e:
        logger.warning(f"Failed to reply in chat {message.chat.id}: {e}")
        return None
    return response


def get_skill_issue_router() -> Router:
    # Роутер можно подключить только к одному родителю, поэтому каждый раз новый
    router = Router(name=SKILL_ID)
    router.message.register(handle_skill_issue, F.text)
    return router
