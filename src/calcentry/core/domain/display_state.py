"""
DisplayState — исходящий контракт калькулятора

Immutable Pydantic снапшот того, что должен отрисовать слой представления:
текст дисплея, разрешено ли подтверждение, ключ сообщения об ошибке.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from calcentry.core.math.arithmetic import Operator


class ErrorKind(str, Enum):
    """
    Ошибка взаимодействия (состояние, не исключение).

    WRONG_SIGN_POSITIVE: подтверждается положительное значение,
    а знак зафиксирован как -1. WRONG_SIGN_NEGATIVE — наоборот.
    """

    DIVISION_BY_ZERO = "DIVISION_BY_ZERO"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    WRONG_SIGN_POSITIVE = "WRONG_SIGN_POSITIVE"
    WRONG_SIGN_NEGATIVE = "WRONG_SIGN_NEGATIVE"

    @property
    def message_key(self) -> str:
        """Ключ локализованного сообщения для слоя представления."""
        return _MESSAGE_KEYS[self]


_MESSAGE_KEYS = {
    ErrorKind.DIVISION_BY_ZERO: "division-by-zero",
    ErrorKind.OUT_OF_BOUNDS: "out-of-bounds",
    ErrorKind.WRONG_SIGN_POSITIVE: "wrong-sign-negative-required",
    ErrorKind.WRONG_SIGN_NEGATIVE: "wrong-sign-positive-required",
}


class DisplayState(BaseModel):
    """
    Состояние для отрисовки после обработки события.

    При ошибке text пустой, confirm_allowed=False, message_key задан.
    """

    text: str = Field(..., description="Текст дисплея (с группами и локальным разделителем)")
    confirm_allowed: bool = Field(..., description="Разрешено ли подтверждение (OK)")
    error: Optional[ErrorKind] = Field(None, description="Текущая ошибка")
    pending_operator: Optional[Operator] = Field(None, description="Ожидающий оператор")
    accumulator: Optional[Decimal] = Field(None, description="Аккумулятор")

    model_config = {"frozen": True}

    @property
    def message_key(self) -> Optional[str]:
        return self.error.message_key if self.error is not None else None
