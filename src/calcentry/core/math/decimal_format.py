"""
Decimal Format — Преобразования между значением, буфером ввода и дисплеем

Три представления числа:
- canonical: decimal.Decimal без форматирования
- buffer: текст в процессе ввода (цифры, один десятичный разделитель,
  опциональный ведущий '-'), без разделителей групп
- display: buffer/значение с локальным десятичным разделителем
  и разделителями групп

ИНВАРИАНТЫ:
1. Разделитель групп никогда не отделяет знак '-' от первой цифры
2. buffer_to_canonical(canonical_to_display(v)) == v для любого v,
   уже округлённого до дробной точности сессии
3. Все функции чистые (без состояния)
"""

from decimal import Decimal, InvalidOperation
from typing import Final, Optional

from calcentry.core.config import CalcConfig, resolve_format_chars

CANONICAL_DECIMAL_POINT: Final[str] = "."


# =============================================================================
# ГРУППИРОВКА
# =============================================================================


def insert_group_separators(
    text: str,
    decimal_sep: str,
    group_sep: str,
    group_size: int,
) -> str:
    """
    Вставка разделителей групп в целую часть числа.

    Начальная позиция = (позиция десятичного разделителя или длина строки)
    минус group_size, далее шаг влево на group_size. Позиция 1 пропускается,
    если text начинается с '-'.

    Args:
        text: Строка без разделителей групп (например, "-1234.5")
        decimal_sep: Десятичный разделитель в text
        group_sep: Вставляемый разделитель групп
        group_size: Размер группы (0 — без группировки)

    Returns:
        Строка с разделителями групп

    Examples:
        >>> insert_group_separators("10000000", ".", ",", 3)
        '10,000,000'
        >>> insert_group_separators("-123456.5", ".", ",", 3)
        '-123,456.5'
    """
    if group_size <= 0:
        return text

    point_pos = text.find(decimal_sep)
    int_end = point_pos if point_pos != -1 else len(text)
    negative = text.startswith("-")

    chars = list(text)
    for i in range(int_end - group_size, 0, -group_size):
        if i == 1 and negative:
            break
        chars.insert(i, group_sep)
    return "".join(chars)


def remove_group_separators(text: str, group_sep: str) -> str:
    """10,000,000 → 10000000"""
    return text.replace(group_sep, "")


# =============================================================================
# ПРЕОБРАЗОВАНИЯ ЗНАЧЕНИЙ
# =============================================================================


def to_plain_string(value: Decimal) -> str:
    """
    Строка без экспоненты: Decimal("1E+1") → "10", Decimal("1.50") → "1.50".
    """
    return format(value, "f")


def parse_canonical(text: str) -> Decimal:
    """
    Точный разбор канонической строки ("-12.5", "0.", "").

    Пустая строка и одиночный '-' дают точный ноль.

    Raises:
        ValueError: Если строка не является десятичным числом
    """
    if text in ("", "-"):
        return Decimal(0)
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal number: {text!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not a finite decimal number: {text!r}")
    return value


# =============================================================================
# FORMATTER
# =============================================================================


class DecimalFormatter:
    """
    Форматирование для одной сессии.

    Символы форматирования разрешаются из локали один раз в конструкторе,
    после чего объект не меняется.
    """

    def __init__(
        self,
        config: CalcConfig,
        format_chars: Optional[tuple[str, str]] = None,
    ):
        """
        Args:
            config: Конфигурация сессии
            format_chars: Уже разрешённые (decimal, group) символы;
                          по умолчанию — resolve_format_chars(config)
        """
        self.config = config
        self.decimal_sep, self.group_sep = format_chars or resolve_format_chars(config)

    def buffer_to_canonical(self, buffer: str) -> Decimal:
        """
        Буфер (или текст дисплея) → точное значение.

        Удаляет разделители групп, заменяет десятичный разделитель на '.'.
        Пустой буфер → точный ноль.
        """
        text = remove_group_separators(buffer, self.group_sep)
        if self.decimal_sep != CANONICAL_DECIMAL_POINT:
            text = text.replace(self.decimal_sep, CANONICAL_DECIMAL_POINT)
        return parse_canonical(text)

    def canonical_to_buffer(self, value: Decimal) -> str:
        """Значение → буфер без разделителей групп."""
        text = to_plain_string(value)
        if self.decimal_sep != CANONICAL_DECIMAL_POINT:
            text = text.replace(CANONICAL_DECIMAL_POINT, self.decimal_sep)
        return text

    def canonical_to_display(self, value: Decimal) -> str:
        """
        Значение → строка дисплея.

        Examples (группы по 3, ',' и '.'):
            Decimal("10000000") → "10,000,000"
            Decimal("-1234.5") → "-1,234.5"
        """
        return self.to_display(self.canonical_to_buffer(value))

    def to_display(self, buffer: str) -> str:
        """Буфер в процессе ввода → строка дисплея ("1234." → "1,234.")."""
        return insert_group_separators(
            buffer, self.decimal_sep, self.group_sep, self.config.group_size
        )

    def zero_text(self) -> str:
        """
        Текст нуля для пустого буфера.

        Без удаления хвостовых нулей ноль показывается с полной дробной
        точностью: max_frac_digits=2 → "0.00".
        """
        zero = Decimal(0)
        if not self.config.strip_trailing_zeroes and not self.config.frac_digits_unlimited:
            zero = zero.quantize(Decimal(1).scaleb(-self.config.max_frac_digits))
        return self.canonical_to_display(zero)
