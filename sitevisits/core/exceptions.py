# sitevisits/core/exceptions.py

BASIC_CHALLENGE = 'Basic realm="Admin"'


class OperatorAuthError(Exception):
    """Ошибка доступа к /admin. Отдается клиенту plain-text'ом, а не JSON."""

    def __init__(self, status_code: int, message: str, challenge: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.challenge = challenge

    @property
    def headers(self) -> dict:
        # Заголовок нужен, чтобы браузер показал окно ввода пароля
        return {"WWW-Authenticate": BASIC_CHALLENGE} if self.challenge else {}
