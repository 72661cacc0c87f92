"""Entry session — конечный автомат ввода числа.

- Цифры, десятичный разделитель, знак, стирание
- Плоское вычисление слева направо с одним ожидающим оператором
- Состояния ошибок (деление на ноль, выход за границы, неверный знак)
"""

from .state_machine import EntrySession, ValueCallback

__all__ = [
    "EntrySession",
    "ValueCallback",
]
