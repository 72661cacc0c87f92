"""
CalcConfig — Политика сессии ввода числа

Immutable Pydantic модель с настройками калькулятора:
- Ограничения количества цифр (целая / дробная часть)
- Режим округления и удаление хвостовых нулей
- Максимальное значение (симметрично для отрицательных)
- Ограничение знака (свободный или фиксированный +1/-1)
- Символы форматирования (десятичный разделитель, разделитель групп)
- Поведение дисплея

Вся валидация выполняется при построении/изменении конфигурации,
никогда во время ввода. Любая ошибка — InvalidArgument.
"""

import locale
from decimal import Decimal
from enum import Enum
from typing import Any, Final, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Значение для with_max_digits: без ограничения для части числа
MAX_DIGITS_UNLIMITED: Final[int] = -1

# Значение для with_format_chars: использовать символ текущей локали
FORMAT_CHAR_DEFAULT: Final[str] = ""

DEFAULT_MAX_VALUE: Final[Decimal] = Decimal("1E10")
DEFAULT_MAX_INT_DIGITS: Final[int] = 10
DEFAULT_MAX_FRAC_DIGITS: Final[int] = 8
DEFAULT_GROUP_SIZE: Final[int] = 3

_FORBIDDEN_SEPARATORS: Final[str] = "0123456789-"


# =============================================================================
# ИСКЛЮЧЕНИЯ
# =============================================================================


class InvalidArgument(ValueError):
    """
    Некорректный параметр конфигурации.

    Выбрасывается синхронно при построении или изменении конфигурации.
    """
    pass


# =============================================================================
# ENUMS
# =============================================================================


class RoundingMode(str, Enum):
    """
    Режим округления.

    Значения совпадают с константами модуля decimal, кроме UNNECESSARY
    ("округление не требуется, ошибка если неточно"), который запрещён.
    """

    UP = "ROUND_UP"
    DOWN = "ROUND_DOWN"
    CEILING = "ROUND_CEILING"
    FLOOR = "ROUND_FLOOR"
    HALF_UP = "ROUND_HALF_UP"
    HALF_DOWN = "ROUND_HALF_DOWN"
    HALF_EVEN = "ROUND_HALF_EVEN"
    UNNECESSARY = "UNNECESSARY"


# =============================================================================
# CONFIG MODEL
# =============================================================================


class CalcConfig(BaseModel):
    """
    Конфигурация сессии калькулятора.

    Immutable модель (frozen=True). Значения по умолчанию:
    - 10 цифр целой части, 8 цифр дробной
    - max_value = 1E10, округление HALF_UP, хвостовые нули удаляются
    - разделители берутся из локали, группы по 3 цифры
    """

    max_int_digits: int = Field(
        DEFAULT_MAX_INT_DIGITS, description="Макс. цифр целой части (-1 = без ограничения)"
    )
    max_frac_digits: int = Field(
        DEFAULT_MAX_FRAC_DIGITS, description="Макс. цифр дробной части (-1 = без ограничения)"
    )
    max_value: Optional[Decimal] = Field(
        DEFAULT_MAX_VALUE, description="Макс. модуль значения (None = без ограничения)"
    )
    rounding_mode: RoundingMode = Field(RoundingMode.HALF_UP, description="Режим округления")
    strip_trailing_zeroes: bool = Field(True, description="Удалять хвостовые нули")
    fixed_sign: Optional[int] = Field(
        None, description="Фиксированный знак (+1 / -1), None = знак свободный"
    )
    decimal_separator: str = Field(FORMAT_CHAR_DEFAULT, description="Десятичный разделитель")
    group_separator: str = Field(FORMAT_CHAR_DEFAULT, description="Разделитель групп")
    group_size: int = Field(DEFAULT_GROUP_SIZE, description="Размер группы (0 = без групп)")
    clear_display_on_operator: bool = Field(
        False, description="Очищать дисплей сразу при нажатии оператора"
    )
    show_zero_when_empty: bool = Field(
        True, description="Показывать 0 при пустом вводе"
    )

    model_config = {"frozen": True}

    # -------------------------------------------------------------------------
    # Валидаторы полей
    # -------------------------------------------------------------------------

    @field_validator("max_int_digits")
    @classmethod
    def _check_max_int_digits(cls, v: int) -> int:
        if v != MAX_DIGITS_UNLIMITED and v < 1:
            raise ValueError("Max integer part must be at least 1.")
        return v

    @field_validator("max_frac_digits")
    @classmethod
    def _check_max_frac_digits(cls, v: int) -> int:
        if v != MAX_DIGITS_UNLIMITED and v < 0:
            raise ValueError("Max fractional part must be at least 0.")
        return v

    @field_validator("max_value")
    @classmethod
    def _normalize_max_value(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return None
        if not v.is_finite():
            raise ValueError(f"Max value must be finite, got {v}")
        # Граница хранится как модуль
        return v.copy_abs()

    @field_validator("rounding_mode")
    @classmethod
    def _check_rounding_mode(cls, v: RoundingMode) -> RoundingMode:
        if v == RoundingMode.UNNECESSARY:
            raise ValueError("Cannot use UNNECESSARY as a rounding mode.")
        return v

    @field_validator("fixed_sign")
    @classmethod
    def _check_fixed_sign(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v not in (-1, 1):
            raise ValueError(f"Fixed sign must be -1 or 1, got {v}")
        return v

    @field_validator("decimal_separator", "group_separator")
    @classmethod
    def _check_separator(cls, v: str) -> str:
        if v == FORMAT_CHAR_DEFAULT:
            return v
        if len(v) != 1:
            raise ValueError(f"Separator must be a single character, got {v!r}")
        if v in _FORBIDDEN_SEPARATORS:
            raise ValueError(f"Separator cannot be a digit or '-', got {v!r}")
        return v

    @field_validator("group_size")
    @classmethod
    def _check_group_size(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Group size must be positive")
        return v

    @model_validator(mode="after")
    def _check_separators_differ(self) -> "CalcConfig":
        if (
            self.decimal_separator != FORMAT_CHAR_DEFAULT
            and self.decimal_separator == self.group_separator
        ):
            raise ValueError("Decimal separator cannot be the same as grouping separator.")
        return self

    # -------------------------------------------------------------------------
    # Построение
    # -------------------------------------------------------------------------

    @classmethod
    def build(cls, **fields: Any) -> "CalcConfig":
        """
        Построение конфигурации с валидацией.

        Raises:
            InvalidArgument: Если хотя бы одно поле некорректно
        """
        try:
            return cls.model_validate(fields)
        except ValidationError as e:
            raise InvalidArgument(_describe(e)) from e

    def _replace(self, **changes: Any) -> "CalcConfig":
        # model_copy(update=...) не валидирует, поэтому строим заново
        return self.build(**{**self.model_dump(), **changes})

    # -------------------------------------------------------------------------
    # Setters (каждый возвращает новую конфигурацию)
    # -------------------------------------------------------------------------

    def with_max_digits(self, int_part: int, frac_part: int) -> "CalcConfig":
        """
        Ограничение количества вводимых цифр.

        Args:
            int_part: Макс. цифр целой части (>= 1 или MAX_DIGITS_UNLIMITED)
            frac_part: Макс. цифр дробной части (>= 0 или MAX_DIGITS_UNLIMITED).
                       0 означает, что дробная часть невозможна.
        """
        return self._replace(max_int_digits=int_part, max_frac_digits=frac_part)

    def with_rounding_mode(self, rounding_mode: RoundingMode) -> "CalcConfig":
        """Режим округления (любой, кроме UNNECESSARY)."""
        return self._replace(rounding_mode=rounding_mode)

    def with_max_value(self, max_value: Optional[Decimal]) -> "CalcConfig":
        """
        Максимальное значение (действует для обоих знаков).

        Отрицательное значение молча заменяется модулем. None — без ограничения.
        """
        return self._replace(max_value=max_value)

    def with_strip_trailing_zeroes(self, strip: bool) -> "CalcConfig":
        return self._replace(strip_trailing_zeroes=strip)

    def with_sign_constraint(self, sign: Optional[int]) -> "CalcConfig":
        """
        Ограничение знака подтверждаемого значения.

        Args:
            sign: None — знак свободный; +1 / -1 — значение другого знака
                  (кроме нуля) не может быть подтверждено
        """
        return self._replace(fixed_sign=sign)

    def with_format_chars(self, decimal_sep: str, group_sep: str) -> "CalcConfig":
        """
        Символы форматирования. FORMAT_CHAR_DEFAULT — символ текущей локали.
        """
        return self._replace(decimal_separator=decimal_sep, group_separator=group_sep)

    def with_group_size(self, size: int) -> "CalcConfig":
        """Размер группы: 3 → 000,000,000; 4 → 0,0000,0000; 0 — без групп."""
        return self._replace(group_size=size)

    def with_clear_display_on_operator(self, clear: bool) -> "CalcConfig":
        return self._replace(clear_display_on_operator=clear)

    def with_show_zero_when_empty(self, show: bool) -> "CalcConfig":
        return self._replace(show_zero_when_empty=show)

    # -------------------------------------------------------------------------
    # Производные свойства
    # -------------------------------------------------------------------------

    @property
    def frac_digits_unlimited(self) -> bool:
        return self.max_frac_digits == MAX_DIGITS_UNLIMITED

    @property
    def int_digits_unlimited(self) -> bool:
        return self.max_int_digits == MAX_DIGITS_UNLIMITED

    @property
    def decimal_rounding(self) -> str:
        """Константа округления для модуля decimal."""
        return self.rounding_mode.value


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "config"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


# =============================================================================
# LOCALE
# =============================================================================


def resolve_format_chars(config: CalcConfig) -> tuple[str, str]:
    """
    Разрешение символов форматирования с учётом локали.

    Вызывается один раз при старте сессии.

    Returns:
        (decimal_separator, group_separator), гарантированно различные
    """
    conv = locale.localeconv()

    decimal_sep = config.decimal_separator
    if decimal_sep == FORMAT_CHAR_DEFAULT:
        decimal_sep = _usable_char(conv.get("decimal_point")) or "."

    group_sep = config.group_separator
    fallback_group = "." if decimal_sep == "," else ","
    if group_sep == FORMAT_CHAR_DEFAULT:
        group_sep = _usable_char(conv.get("thousands_sep")) or fallback_group

    if group_sep == decimal_sep:
        # Явно заданный символ имеет приоритет над символом локали
        if config.group_separator == FORMAT_CHAR_DEFAULT:
            group_sep = fallback_group
        else:
            decimal_sep = "," if group_sep == "." else "."

    return decimal_sep, group_sep


def _usable_char(value: Optional[str]) -> Optional[str]:
    if value and len(value) == 1 and value not in _FORBIDDEN_SEPARATORS:
        return value
    return None
