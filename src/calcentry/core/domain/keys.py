"""
Key Events — входящий контракт калькулятора

Дискретные события клавиатуры, которые получает EntrySession:
digit(0-9), decimal point, toggle sign, operator(+,-,×,÷), equals,
erase, confirm, clear, cancel.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

from calcentry.core.math.arithmetic import Operator


class Key(str, Enum):
    """Тип клавиши."""

    DIGIT = "DIGIT"
    DECIMAL = "DECIMAL"
    SIGN = "SIGN"
    OPERATOR = "OPERATOR"
    EQUALS = "EQUALS"
    ERASE = "ERASE"
    CONFIRM = "CONFIRM"
    CLEAR = "CLEAR"
    CANCEL = "CANCEL"


@dataclass(frozen=True)
class KeyEvent:
    """Событие нажатия клавиши."""

    key: Key
    digit: Optional[int] = None
    operator: Optional[Operator] = None

    def __post_init__(self):
        if self.key == Key.DIGIT:
            if self.digit is None or not 0 <= self.digit <= 9:
                raise ValueError(f"Digit key requires a digit 0-9, got {self.digit}")
        elif self.digit is not None:
            raise ValueError(f"Only digit keys carry a digit, got {self.key.value}")

        if self.key == Key.OPERATOR:
            if self.operator is None:
                raise ValueError("Operator key requires an operator")
        elif self.operator is not None:
            raise ValueError(f"Only operator keys carry an operator, got {self.key.value}")

    @classmethod
    def digit_key(cls, digit: int) -> "KeyEvent":
        return cls(Key.DIGIT, digit=digit)

    @classmethod
    def operator_key(cls, operator: Operator) -> "KeyEvent":
        return cls(Key.OPERATOR, operator=operator)

    @classmethod
    def of(cls, key: Key) -> "KeyEvent":
        """Событие клавиши без параметров (DECIMAL, SIGN, EQUALS, ...)."""
        return cls(key)


# =============================================================================
# РАЗБОР СТРОКИ НАЖАТИЙ
# =============================================================================

_OPERATOR_CHARS: Final[dict[str, Operator]] = {
    "+": Operator.ADD,
    "-": Operator.SUB,
    "*": Operator.MUL,
    "×": Operator.MUL,
    "/": Operator.DIV,
    "÷": Operator.DIV,
}

_SIMPLE_CHARS: Final[dict[str, Key]] = {
    ".": Key.DECIMAL,
    ",": Key.DECIMAL,
    "~": Key.SIGN,
    "±": Key.SIGN,
    "=": Key.EQUALS,
    "<": Key.ERASE,
    "\n": Key.CONFIRM,
    "C": Key.CLEAR,
    "X": Key.CANCEL,
    "\x1b": Key.CANCEL,
}


def parse_keys(keys: str) -> list[KeyEvent]:
    """
    Строка нажатий → список событий.

    Символы:
        0-9        цифры
        . ,        десятичный разделитель
        + - * /    операторы (также × и ÷)
        ~ ±        смена знака
        =          равно
        <          стереть
        \\n         подтвердить (OK)
        C          очистить
        X, Esc     отменить
    Пробелы игнорируются.

    Raises:
        ValueError: Неизвестный символ

    Examples:
        >>> [e.key.value for e in parse_keys("1+=")]
        ['DIGIT', 'OPERATOR', 'EQUALS']
    """
    events = []
    for ch in keys:
        if ch == " ":
            continue
        if ch.isdigit() and ch.isascii():
            events.append(KeyEvent.digit_key(int(ch)))
        elif ch in _OPERATOR_CHARS:
            events.append(KeyEvent.operator_key(_OPERATOR_CHARS[ch]))
        elif ch in _SIMPLE_CHARS:
            events.append(KeyEvent.of(_SIMPLE_CHARS[ch]))
        else:
            raise ValueError(f"Unknown key character: {ch!r}")
    return events
