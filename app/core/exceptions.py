class AppError(Exception):
    """Базовая ошибка приложения"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Некорректные входные данные (индекс, идентификатор, тело запроса)"""


class NotFoundError(AppError):
    """Документ или версия не найдены"""


class ConflictError(AppError):
    """Документ был изменен параллельным запросом"""
