"""
Исключения ребалансера.

Ошибки ядра (тики, цены, ликвидность) детерминированы входными данными
и никогда не ретраятся внутри ядра. Ошибки RPC относятся к внешнему
сборщику снапшотов.
"""


class RebalancerError(Exception):
    """Базовая ошибка ребалансера."""
    pass


class ClmmMathError(RebalancerError):
    """Базовая ошибка CLMM математики."""
    pass


class OutOfBoundsError(ClmmMathError, ValueError):
    """Тик (или производное значение) вне [lower, upper]."""

    def __init__(self, value, lower, upper, what: str = "Tick"):
        self.value = value
        self.lower = lower
        self.upper = upper
        super().__init__(f"{what} {value} is out of bounds [{lower}, {upper}]")


class InvalidRangeError(ClmmMathError, ValueError):
    """Диапазон тиков некорректен: tick_lower >= tick_upper или не выравнивается в границах."""

    def __init__(self, message: str, tick_lower: int = None, tick_upper: int = None):
        self.tick_lower = tick_lower
        self.tick_upper = tick_upper
        super().__init__(message)


class DivisionDomainError(ClmmMathError, ZeroDivisionError):
    """Формула вызвана с нулевой шириной диапазона или нулевой ценой."""
    pass


class ConfigError(RebalancerError, ValueError):
    """Невалидная конфигурация процесса."""
    pass


class SuiRpcError(RebalancerError):
    """Ошибка Sui JSON-RPC (HTTP, JSON или error-объект в ответе)."""

    def __init__(self, message: str, code: int = None):
        self.code = code
        if code is not None:
            message = f"Sui RPC error {code}: {message}"
        super().__init__(message)


class SuiRpcTimeoutError(SuiRpcError):
    """Таймаут запроса к RPC."""
    pass


class SuiObjectError(SuiRpcError):
    """Объект не найден или имеет неожиданную структуру."""
    pass
