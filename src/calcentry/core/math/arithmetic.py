"""
Arithmetic Engine — Точная десятичная арифметика сессии

Модуль выполняет одну бинарную операцию между аккумулятором и операндом
и финализирует результат (границы, масштаб, хвостовые нули).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Сложение, вычитание и умножение точные (контекст подбирается по операндам)
2. Деление округляется ровно один раз: до max_frac_digits знаков
   с режимом округления конфигурации
3. Деление на точный ноль → DivisionByZeroError (никогда не fallback)
4. Ноль после удаления хвостовых нулей — всегда Decimal(0), без масштаба и знака
"""

from decimal import Context, Decimal, Inexact, ROUND_DOWN, localcontext
from enum import Enum
from typing import Final

from calcentry.core.config import CalcConfig

# Точность деления (значащих цифр) при неограниченной дробной части
UNLIMITED_DIVISION_PRECISION: Final[int] = 34

# Запас точности для промежуточных вычислений
_GUARD_DIGITS: Final[int] = 4


# =============================================================================
# ИСКЛЮЧЕНИЯ
# =============================================================================


class CalcArithmeticError(Exception):
    """Базовая ошибка вычисления. Сессия превращает её в состояние ошибки."""
    pass


class DivisionByZeroError(CalcArithmeticError):
    """Делитель точно равен нулю."""
    pass


class OutOfBoundsError(CalcArithmeticError):
    """Модуль результата превышает max_value конфигурации."""

    def __init__(self, value: Decimal, max_value: Decimal):
        super().__init__(f"Value {value} is out of bounds (max {max_value})")
        self.value = value
        self.max_value = max_value


# =============================================================================
# ОПЕРАТОРЫ
# =============================================================================


class Operator(str, Enum):
    """Бинарный оператор калькулятора."""

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"


# =============================================================================
# УТИЛИТЫ
# =============================================================================


def strip_trailing_zeroes(value: Decimal) -> Decimal:
    """
    Удаление хвостовых нулей дробной части.

    Любой ноль (0.000, -0, 0E+3) → Decimal(0).

    Examples:
        >>> strip_trailing_zeroes(Decimal("12.340000"))
        Decimal('12.34')
        >>> strip_trailing_zeroes(Decimal("0.00"))
        Decimal('0')
    """
    if value.is_zero():
        return Decimal(0)
    stripped = value.normalize(Context(prec=max(len(value.as_tuple().digits), 1)))
    # normalize() превращает 100 в 1E+2; целые значения возвращаем с нулевым масштабом
    if stripped.as_tuple().exponent > 0:
        return stripped.quantize(Decimal(1), context=Context(prec=stripped.adjusted() + 1))
    return stripped


def _exact_context(*values: Decimal) -> Context:
    # Точности достаточно для точного сложения/умножения этих значений
    digits = sum(len(v.as_tuple().digits) for v in values)
    exponents = [v.as_tuple().exponent for v in values]
    adjusted = [v.adjusted() for v in values]
    span = max(adjusted) - min(exponents) + 1
    return Context(prec=max(digits, span) + _GUARD_DIGITS)


# =============================================================================
# ENGINE
# =============================================================================


class ArithmeticEngine:
    """
    Арифметика с округлением и границами конфигурации.

    Stateless: все параметры берутся из CalcConfig.
    """

    def __init__(self, config: CalcConfig):
        self.config = config

    def apply(self, accumulator: Decimal, operand: Decimal, operator: Operator) -> Decimal:
        """
        Применение оператора: accumulator <op> operand.

        Args:
            accumulator: Левый операнд (аккумулятор или 0)
            operand: Правый операнд
            operator: Оператор

        Returns:
            Сырой (не финализированный) результат

        Raises:
            DivisionByZeroError: Деление на точный ноль
        """
        if operator == Operator.DIV:
            return self.divide(accumulator, operand)

        ctx = _exact_context(accumulator, operand)
        if operator == Operator.ADD:
            return ctx.add(accumulator, operand)
        if operator == Operator.SUB:
            return ctx.subtract(accumulator, operand)
        if operator == Operator.MUL:
            return ctx.multiply(accumulator, operand)
        raise ValueError(f"Unknown operator: {operator}")

    def divide(self, dividend: Decimal, divisor: Decimal) -> Decimal:
        """
        Деление с масштабом max_frac_digits и режимом округления конфигурации.

        Частное сначала усекается с запасом цифр; если деление неточное,
        добавляется "липкая" единица в последний разряд. Затем выполняется
        единственное округление до нужного масштаба.
        """
        if divisor.is_zero():
            raise DivisionByZeroError(f"Division of {dividend} by zero")

        if self.config.frac_digits_unlimited:
            ctx = Context(
                prec=UNLIMITED_DIVISION_PRECISION, rounding=self.config.decimal_rounding
            )
            return ctx.divide(dividend, divisor)

        scale = self.config.max_frac_digits
        quotient_int_digits = max(dividend.adjusted() - divisor.adjusted() + 2, 1)
        prec = quotient_int_digits + scale + _GUARD_DIGITS

        with localcontext(Context(prec=prec, rounding=ROUND_DOWN)) as ctx:
            raw = dividend / divisor
            inexact = bool(ctx.flags[Inexact])

        guard_exp = -(scale + _GUARD_DIGITS)
        truncated = raw.quantize(
            Decimal(1).scaleb(guard_exp), rounding=ROUND_DOWN, context=Context(prec=prec + 2)
        )
        if inexact or truncated != raw:
            # Истинное значение строго дальше от нуля, чем truncated
            sticky = Decimal(1).scaleb(guard_exp - 1)
            sticky_ctx = Context(prec=prec + _GUARD_DIGITS)
            if dividend.is_signed() != divisor.is_signed():
                truncated = sticky_ctx.subtract(truncated, sticky)
            else:
                truncated = sticky_ctx.add(truncated, sticky)

        return self._quantize(truncated, scale)

    def finalize(self, value: Decimal) -> Decimal:
        """
        Финализация результата.

        1. Проверка границ (симметрично для знака)
        2. Масштабирование до max_frac_digits с режимом округления
        3. Удаление хвостовых нулей (если включено)

        Raises:
            OutOfBoundsError: Если |value| > max_value
        """
        if self.is_out_of_bounds(value):
            raise OutOfBoundsError(value, self.config.max_value)

        if not self.config.frac_digits_unlimited:
            value = self._quantize(value, self.config.max_frac_digits)

        if self.config.strip_trailing_zeroes:
            return strip_trailing_zeroes(value)
        if value.is_zero():
            # -0.00 → 0.00
            return value.copy_abs()
        return value

    def is_out_of_bounds(self, value: Decimal) -> bool:
        max_value = self.config.max_value
        return max_value is not None and value.copy_abs() > max_value

    def clamp_to_bounds(self, value: Decimal) -> Decimal:
        """
        Ограничение значения границами: +max / -max.

        Используется при начальном заполнении сессии.
        """
        if not self.is_out_of_bounds(value):
            return value
        max_value = self.config.max_value
        return max_value if value > 0 else max_value.copy_negate()

    def _quantize(self, value: Decimal, scale: int) -> Decimal:
        exp = Decimal(1).scaleb(-scale)
        prec = max(value.adjusted(), 0) + 1 + scale + _GUARD_DIGITS
        return value.quantize(
            exp, rounding=self.config.decimal_rounding, context=Context(prec=prec)
        )
