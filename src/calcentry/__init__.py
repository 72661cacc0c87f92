"""
calcentry — движок ввода числа для калькуляторного виджета

Превращает поток дискретных событий клавиш (цифры, разделитель, знак,
операторы, равно, стереть, очистить) в проверенное, точно округлённое
десятичное значение. Отрисовка, раскладка и локализация подписей —
внешние по отношению к пакету.
"""

from calcentry.core.config import (
    FORMAT_CHAR_DEFAULT,
    MAX_DIGITS_UNLIMITED,
    CalcConfig,
    InvalidArgument,
    RoundingMode,
)
from calcentry.core.domain.display_state import DisplayState, ErrorKind
from calcentry.core.domain.keys import Key, KeyEvent, parse_keys
from calcentry.core.math.arithmetic import Operator
from calcentry.session.state_machine import EntrySession

__all__ = [
    # Config
    "CalcConfig",
    "RoundingMode",
    "InvalidArgument",
    "MAX_DIGITS_UNLIMITED",
    "FORMAT_CHAR_DEFAULT",
    # Events
    "Key",
    "KeyEvent",
    "Operator",
    "parse_keys",
    # Outbound state
    "DisplayState",
    "ErrorKind",
    # Session
    "EntrySession",
]
