"""EntrySession — конечный автомат ввода числа.

Состояния:
- ENTERING: обычный ввод, строятся буфер и аккумулятор
- ERROR(kind): подтверждение заблокировано, буфер и аккумулятор сброшены

Переходы выполняются дискретными событиями клавиш (см. KeyEvent).
Из ERROR выводят только цифра, десятичный разделитель, очистка и отмена.
Исключения вычислений (DivisionByZeroError, OutOfBoundsError) никогда
не выходят за границу сессии — они превращаются в состояние ошибки.
"""

import logging
import uuid
from decimal import Decimal
from typing import Callable, Optional, Union

from calcentry.core.config import CalcConfig
from calcentry.core.domain.display_state import DisplayState, ErrorKind
from calcentry.core.domain.keys import Key, KeyEvent, parse_keys
from calcentry.core.math.arithmetic import (
    ArithmeticEngine,
    DivisionByZeroError,
    Operator,
    OutOfBoundsError,
)
from calcentry.core.math.decimal_format import DecimalFormatter

logger = logging.getLogger(__name__)

ValueCallback = Callable[[Decimal], None]


class EntrySession:
    """Сессия ввода одного числа.

    Единственные источники истины:
    - buffer: текст вводимого операнда (локальный десятичный разделитель,
      без разделителей групп)
    - accumulator: подтверждённый промежуточный результат (или None)

    Инварианты:
    - в buffer не более одного десятичного разделителя
    - в buffer нет лишнего ведущего нуля перед цифрой
    - при ошибке buffer пуст, accumulator is None, оператор сброшен
    """

    def __init__(
        self,
        config: Optional[CalcConfig] = None,
        initial_value: Optional[Union[Decimal, int, str]] = None,
        on_value_entered: Optional[ValueCallback] = None,
        session_id: Optional[str] = None,
    ):
        """
        Args:
            config: конфигурация (по умолчанию CalcConfig())
            initial_value: начальное значение; ограничивается границами
            on_value_entered: callback для подтверждённого значения
            session_id: идентификатор для логов
        """
        self.config = config or CalcConfig()
        self.formatter = DecimalFormatter(self.config)
        self.engine = ArithmeticEngine(self.config)
        self.on_value_entered = on_value_entered
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self._reset()

        if initial_value is not None:
            self._seed(initial_value)

    # =========================================================================
    # Состояние
    # =========================================================================

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def accumulator(self) -> Optional[Decimal]:
        return self._accumulator

    @property
    def pending_operator(self) -> Optional[Operator]:
        return self._pending_operator

    @property
    def error(self) -> Optional[ErrorKind]:
        return self._error

    @property
    def confirm_allowed(self) -> bool:
        return self._error is None

    @property
    def display_text(self) -> str:
        """Текст дисплея для слоя представления."""
        if self._error is not None:
            return ""
        if self._held_text is not None:
            return self._held_text
        return self._render_buffer()

    def state(self) -> DisplayState:
        return DisplayState(
            text=self.display_text,
            confirm_allowed=self.confirm_allowed,
            error=self._error,
            pending_operator=self._pending_operator,
            accumulator=self._accumulator,
        )

    # =========================================================================
    # Диспетчеризация событий
    # =========================================================================

    def handle(self, event: KeyEvent) -> DisplayState:
        """Обработка одного события клавиши."""
        logger.debug(
            "Key %s", event.key.value,
            extra={"session_id": self.session_id, "key": event.key.value},
        )

        if event.key == Key.DIGIT:
            self.press_digit(event.digit)
        elif event.key == Key.DECIMAL:
            self.press_decimal()
        elif event.key == Key.SIGN:
            self.toggle_sign()
        elif event.key == Key.OPERATOR:
            self.press_operator(event.operator)
        elif event.key == Key.EQUALS:
            self.equals()
        elif event.key == Key.ERASE:
            self.erase()
        elif event.key == Key.CONFIRM:
            self.confirm()
        elif event.key == Key.CLEAR:
            self.clear()
        elif event.key == Key.CANCEL:
            self.cancel()
        return self.state()

    def feed(self, keys: str) -> DisplayState:
        """Обработка строки нажатий, например "12+3=" (см. parse_keys)."""
        for event in parse_keys(keys):
            self.handle(event)
        return self.state()

    # =========================================================================
    # Клавиши ввода
    # =========================================================================

    def press_digit(self, digit: int) -> DisplayState:
        """Цифра 0-9.

        "0" (или "-0") заменяется цифрой. Цифра игнорируется, если превышен
        лимит цифр целой части (до разделителя) или дробной части (после).
        """
        if not 0 <= digit <= 9:
            raise ValueError(f"Digit must be 0-9, got {digit}")
        self._leave_error()
        self._held_text = None

        buffer = self._buffer
        if buffer in ("0", "-0"):
            buffer = buffer[:-1]

        point_pos = buffer.find(self.formatter.decimal_sep)
        if point_pos == -1:
            int_digits = len(buffer) - (1 if buffer.startswith("-") else 0)
            allowed = self.config.int_digits_unlimited or int_digits < self.config.max_int_digits
        else:
            frac_digits = len(buffer) - point_pos - 1
            allowed = self.config.frac_digits_unlimited or frac_digits < self.config.max_frac_digits

        if allowed:
            self._buffer = buffer + str(digit)
        return self.state()

    def press_decimal(self) -> DisplayState:
        """Десятичный разделитель. Пустой буфер → "0" + разделитель."""
        self._leave_error()

        sep = self.formatter.decimal_sep
        if sep in self._buffer or self.config.max_frac_digits == 0:
            return self.state()

        self._held_text = None
        if self._buffer in ("", "-"):
            self._buffer += "0"
        self._buffer += sep
        return self.state()

    def toggle_sign(self) -> DisplayState:
        """Смена знака. Пустой буфер, "0" и "0" + разделитель не меняются."""
        if self._error is not None:
            return self.state()

        if self._buffer in ("", "0", "0" + self.formatter.decimal_sep):
            return self.state()

        self._held_text = None
        if self._buffer.startswith("-"):
            self._buffer = self._buffer[1:]
        else:
            self._buffer = "-" + self._buffer
        return self.state()

    def erase(self) -> DisplayState:
        """Удаление последнего символа без висящих '-' или разделителя."""
        if self._error is not None:
            return self.state()

        self._held_text = None
        if self._buffer:
            buffer = self._buffer[:-1]
            if buffer and buffer[-1] in (self.formatter.decimal_sep, "-"):
                buffer = buffer[:-1]
            self._buffer = buffer
        return self.state()

    # =========================================================================
    # Операции
    # =========================================================================

    def press_operator(self, operator: Operator) -> DisplayState:
        """Оператор +, -, ×, ÷.

        Непустой буфер: ожидающий оператор сначала вычисляется (неявное "="),
        иначе буфер становится аккумулятором. Затем буфер очищается.
        """
        if self._error is not None:
            return self.state()

        if self._buffer:
            if self._pending_operator is not None:
                if not self._resolve():
                    return self.state()
            else:
                self._accumulator = self.formatter.buffer_to_canonical(self._buffer)

        # Без очистки дисплей показывает прежний текст до следующей клавиши
        held = None if self.config.clear_display_on_operator else self.display_text
        self._pending_operator = operator
        self._buffer = ""
        self._held_text = held
        return self.state()

    def equals(self) -> DisplayState:
        """Вычисление ожидающего оператора (или финализация буфера)."""
        if self._error is not None:
            return self.state()

        self._held_text = None
        self._resolve()
        return self.state()

    def confirm(self) -> Optional[Decimal]:
        """Подтверждение (OK).

        Выполняет "=", проверяет ограничение знака (ноль допустим),
        передаёт значение в callback и сбрасывает сессию.

        Returns:
            подтверждённое значение или None, если подтверждение невозможно
        """
        if self._error is not None:
            return None

        self._held_text = None
        if not self._resolve():
            return None

        value = self._accumulator
        fixed_sign = self.config.fixed_sign
        if fixed_sign is not None and not value.is_zero():
            sign = -1 if value.is_signed() else 1
            if sign != fixed_sign:
                self._set_error(
                    ErrorKind.WRONG_SIGN_POSITIVE if sign == 1 else ErrorKind.WRONG_SIGN_NEGATIVE
                )
                return None

        self._emit(value)
        self._reset()
        return value

    def clear(self) -> DisplayState:
        """Сброс в начальное состояние (из любого состояния)."""
        self._reset()
        return self.state()

    def cancel(self) -> DisplayState:
        """Отмена: сброс без передачи значения."""
        logger.debug("Session cancelled", extra={"session_id": self.session_id})
        self._reset()
        return self.state()

    # =========================================================================
    # Внутренние переходы
    # =========================================================================

    def _resolve(self) -> bool:
        """Вычисление "=". Возвращает False при переходе в ERROR."""
        try:
            if self._pending_operator is None:
                raw = self.formatter.buffer_to_canonical(self._buffer)
            else:
                if self._buffer:
                    operand = self.formatter.buffer_to_canonical(self._buffer)
                else:
                    # Оператор сразу перед "=": операнд равен аккумулятору
                    operand = self._accumulator if self._accumulator is not None else Decimal(0)
                left = self._accumulator if self._accumulator is not None else Decimal(0)
                raw = self.engine.apply(left, operand, self._pending_operator)
            final = self.engine.finalize(raw)
        except DivisionByZeroError:
            self._set_error(ErrorKind.DIVISION_BY_ZERO)
            return False
        except OutOfBoundsError:
            self._set_error(ErrorKind.OUT_OF_BOUNDS)
            return False

        self._accumulator = final
        self._buffer = self.formatter.canonical_to_buffer(final)
        self._pending_operator = None
        return True

    def _seed(self, initial_value: Union[Decimal, int, str]) -> None:
        value = initial_value if isinstance(initial_value, Decimal) else Decimal(str(initial_value))
        value = self.engine.finalize(self.engine.clamp_to_bounds(value))
        self._accumulator = value
        self._buffer = self.formatter.canonical_to_buffer(value)

    def _set_error(self, kind: ErrorKind) -> None:
        logger.info(
            "Session error: %s", kind.value,
            extra={"session_id": self.session_id, "error_kind": kind.value},
        )
        self._reset()
        self._error = kind

    def _leave_error(self) -> None:
        if self._error is not None:
            self._reset()

    def _reset(self) -> None:
        self._buffer = ""
        self._accumulator: Optional[Decimal] = None
        self._pending_operator: Optional[Operator] = None
        self._error: Optional[ErrorKind] = None
        self._held_text: Optional[str] = None

    def _render_buffer(self) -> str:
        if not self._buffer:
            return self.formatter.zero_text() if self.config.show_zero_when_empty else ""
        return self.formatter.to_display(self._buffer)

    def _emit(self, value: Decimal) -> None:
        if self.on_value_entered is None:
            logger.debug("No value handler registered", extra={"session_id": self.session_id})
            return
        try:
            self.on_value_entered(value)
        except Exception:
            # Взаимодействие завершается независимо от ошибки обработчика
            logger.exception(
                "Value handler failed", extra={"session_id": self.session_id}
            )
