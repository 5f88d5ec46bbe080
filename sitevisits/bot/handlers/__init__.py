# sitevisits/bot/handlers/__init__.py
from .skill_issue import get_skill_issue_router

__all__ = ["get_skill_issue_router"]
