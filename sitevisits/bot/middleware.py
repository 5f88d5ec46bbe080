# sitevisits/bot/middleware.py
import logging
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import Message

logger = logging.getLogger(__name__)


class SkillIssueAuditMiddleware(BaseMiddleware):
    """
    Внешний middleware для сообщений: считает, сколько текстов проверено и на сколько навык ответил.
    Хендлер возвращает текст отправленного ответа или None.
    """

    def __init__(self):
        self.checked = 0
        self.replied = 0

    async def __call__(
        self,
        handler: Callable[[Message, Dict[str, Any]], Awaitable[Any]],
        event: Message,
        data: Dict[str, Any]
    ) -> Any:
        if not event.text:
            return await handler(event, data)

        self.checked += 1
        result = await handler(event, data)

        if isinstance(result, str):
            self.replied += 1
            logger.info(f"Skill issue replied in chat {event.chat.id} ({self.replied}/{self.checked} messages so far)")
        else:
            logger.debug(f"Skill issue stayed quiet in chat {event.chat.id}")
        return result
