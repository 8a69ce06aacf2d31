"""
Исключения ядра заказов.
"""


class OrderingError(Exception):
    """Базовое исключение для оформления и обработки заказов."""
    pass


class EmptyCart(OrderingError):
    """Попытка оформить заказ с пустой корзиной."""

    def __init__(self, message=None):
        super().__init__(message or "Your cart is empty!")


class OrdersClosed(OrderingError):
    """Приём заказов выключен администратором."""

    def __init__(self, message=None):
        super().__init__(message or "We are not accepting orders right now.")


class ConfigReadFailed(OrderingError):
    """Не удалось прочитать system/config, оформление блокируется."""

    def __init__(self, cause=None, message=None):
        self.cause = cause
        super().__init__(message or f"Unable to check whether orders are open: {cause}")


class NumberingFailed(OrderingError):
    """Транзакция счётчика номеров не прошла."""

    def __init__(self, cause=None, message=None):
        self.cause = cause
        super().__init__(message or f"Order number transaction failed: {cause}")


class PersistenceFailed(OrderingError):
    """Запись заказа не удалась. Корзина сохраняется, можно повторить."""

    def __init__(self, cause=None, message=None):
        self.cause = cause
        super().__init__(message or "Something went wrong. Try again!")


class OrderNotFound(OrderingError):

    def __init__(self, order_id, message=None):
        self.order_id = order_id
        super().__init__(message or f"Order '{order_id}' not found")


class InvalidTransition(OrderingError):
    """Переход статуса не разрешён (например, из served или cancelled)."""

    def __init__(self, order_id, current, target, message=None):
        self.order_id = order_id
        self.current = current
        self.target = target
        if message is None:
            message = f"Order '{order_id}' cannot move from '{current}' to '{target}'"
        super().__init__(message)
