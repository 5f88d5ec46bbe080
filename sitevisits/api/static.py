# sitevisits/api/static.py
import os
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.types import Scope


class SiteStaticFiles(StaticFiles):
    """
    StaticFiles с чистыми URL: если /about не найден, отдается about.html.
    index.html для каталогов по-прежнему обслуживает html=True.
    """

    async def get_response(self, path: str, scope: Scope):
        try:
            response = await super().get_response(path, scope)
        except HTTPException as e:
            if e.status_code != 404 or not self._has_html_fallback(path):
                raise
            return await super().get_response(path + ".html", scope)

        # С 404.html в каталоге StaticFiles не бросает исключение, а отдает его со статусом 404
        if response.status_code == 404 and self._has_html_fallback(path):
            try:
                return await super().get_response(path + ".html", scope)
            except HTTPException:
                return response
        return response

    @staticmethod
    def _has_html_fallback(path: str) -> bool:
        return path not in ("", ".") and not os.path.splitext(path)[1]
