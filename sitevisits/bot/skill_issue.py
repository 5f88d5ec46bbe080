# sitevisits/bot/skill_issue.py
import logging
import random
import re
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern
from pydantic import BaseModel, Field

from sitevisits.core.config import Settings

logger = logging.getLogger(__name__)

SKILL_ID = "skill-issue"


class SkillIssueConfig(BaseModel):
    enabled: bool = False
    chance: float = Field(0.3, ge=0.0, le=1.0)
    cooldown_minutes: float = Field(5, ge=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SkillIssueConfig":
        return cls(
            enabled=settings.SKILL_ISSUE_ENABLED,
            chance=settings.SKILL_ISSUE_CHANCE,
            cooldown_minutes=settings.SKILL_ISSUE_COOLDOWN_MINUTES,
        )


@dataclass(frozen=True)
class TriggerPattern:
    pattern: Pattern[str]
    # Множитель к chance; проверяются по порядку, срабатывает первый совпавший
    weight: float = 1.0


def _p(text: str, weight: float = 1.0) -> TriggerPattern:
    return TriggerPattern(re.compile(text, re.IGNORECASE), weight)


# Фразы, в которых пользователь признается в бессилии или раздражении
TRIGGER_PATTERNS: List[TriggerPattern] = [
    _p(r"i don't know how to"),
    _p(r"i can't figure out"),
    _p(r"i've been stuck"),
    _p(r"this is too hard"),
    _p(r"i don't understand"),
    _p(r"how do i"),
    _p(r"can you help me with"),
    _p(r"i don't get it"),
    _p(r"this is frustrating"),
    _p(r"i've tried everything"),
    _p(r"i don't know what to do"),
]

RESPONSES = [
    "skill issue",
    "that's a skill issue",
    "major skill issue",
    "straight up skill issue",
    "huge skill issue energy",
]


class SkillIssue:
    """
    Иногда отвечает "skill issue" на жалобы пользователя.

    Таймер кулдауна один на весь процесс (не на пользователя) и живет в этом объекте.
    Часы и генератор случайных чисел подменяются в тестах.
    """

    def __init__(
        self,
        config: SkillIssueConfig,
        patterns: Optional[List[TriggerPattern]] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.patterns = patterns if patterns is not None else TRIGGER_PATTERNS
        self._rng = rng or random.Random()
        self._clock = clock
        self.last_trigger_time: Optional[float] = None

    def match(self, text: str) -> Optional[TriggerPattern]:
        text = (text or "").lower()
        for trigger in self.patterns:
            if trigger.pattern.search(text):
                return trigger
        return None

    def in_cooldown(self, now: float) -> bool:
        if self.last_trigger_time is None:
            return False
        minutes_since_last = (now - self.last_trigger_time) / 60
        return minutes_since_last < self.config.cooldown_minutes

    def check(self, text: Optional[str]) -> Optional[str]:
        """Ответ, если нужно подколоть пользователя, иначе None."""
        if not self.config.enabled:
            return None

        trigger = self.match(text or "")
        if trigger is None:
            return None

        now = self._clock()
        if self.in_cooldown(now):
            return None

        if self._rng.random() > self.config.chance * trigger.weight:
            return None

        self.last_trigger_time = now
        response = self._rng.choice(RESPONSES)
        logger.info(f"{SKILL_ID} triggered by pattern '{trigger.pattern.pattern}'")
        return response
