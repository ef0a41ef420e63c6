class DomainError(Exception):
    """Базовое исключение для нарушений бизнес-правил."""


class InvalidSettings(DomainError):
    """Пороги или стоимости отрицательные либо не являются конечными числами."""


class AnalysisUnavailable(DomainError):
    """Внешний сервис генерации текста не ответил или вернул некорректный ответ."""
