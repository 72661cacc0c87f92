"""Тесты для EntrySession.

Coverage:
- Ввод цифр, разделителя, знака, стирание
- Плоское вычисление слева направо с одним ожидающим оператором
- Оператор сразу перед "=" (операнд — сам аккумулятор)
- Ошибки: деление на ноль, выход за границы, неверный знак
- Подтверждение, callback, сброс
- Начальное значение
- Поведение дисплея
"""

import logging
from decimal import Decimal

import pytest

from calcentry.core.config import CalcConfig, RoundingMode
from calcentry.core.domain.display_state import DisplayState, ErrorKind
from calcentry.core.domain.keys import Key, KeyEvent
from calcentry.core.math.arithmetic import Operator
from calcentry.session.state_machine import EntrySession


@pytest.fixture
def config() -> CalcConfig:
    return CalcConfig().with_format_chars(".", ",")


@pytest.fixture
def session(config: CalcConfig) -> EntrySession:
    return EntrySession(config)


class Recorder:
    """Собирает подтверждённые значения."""

    def __init__(self):
        self.values = []

    def __call__(self, value: Decimal) -> None:
        self.values.append(value)


# =============================================================================
# ВВОД ЦИФР
# =============================================================================


class TestDigits:
    """Ввод цифр"""

    def test_digits_append(self, session: EntrySession):
        state = session.feed("123")
        assert session.buffer == "123"
        assert state.text == "123"

    def test_display_is_grouped(self, session: EntrySession):
        assert session.feed("1234567").text == "1,234,567"
        assert session.buffer == "1234567"

    def test_leading_zero_replaced(self, session: EntrySession):
        session.feed("0")
        assert session.buffer == "0"
        session.feed("5")
        assert session.buffer == "5"

    def test_repeated_zero(self, session: EntrySession):
        session.feed("000")
        assert session.buffer == "0"

    def test_max_int_digits(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(3, 2))
        session.feed("12345")
        assert session.buffer == "123"

    def test_sign_not_counted_as_digit(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(3, 2))
        session.feed("12~3")
        assert session.buffer == "-123"
        session.feed("4")
        assert session.buffer == "-123"

    def test_max_frac_digits(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(3, 2))
        session.feed("1.234")
        assert session.buffer == "1.23"

    def test_int_limit_not_applied_after_separator(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(1, 3))
        session.feed("9.999")
        assert session.buffer == "9.999"

    def test_unlimited_digits(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(-1, -1))
        session.feed("123456789012345.123456789012")
        assert session.buffer == "123456789012345.123456789012"

    def test_digit_via_handle(self, session: EntrySession):
        state = session.handle(KeyEvent.digit_key(7))
        assert isinstance(state, DisplayState)
        assert state.text == "7"

    def test_invalid_digit(self, session: EntrySession):
        with pytest.raises(ValueError):
            session.press_digit(12)

    def test_buffer_parses_to_typed_value(self, session: EntrySession):
        session.feed("98765.4321")
        assert session.formatter.buffer_to_canonical(session.display_text) == Decimal("98765.4321")


# =============================================================================
# РАЗДЕЛИТЕЛЬ, ЗНАК, СТИРАНИЕ
# =============================================================================


class TestDecimalPoint:
    """Десятичный разделитель"""

    def test_empty_buffer_gets_zero(self, session: EntrySession):
        assert session.feed(".").text == "0."
        assert session.buffer == "0."

    def test_only_one_separator(self, session: EntrySession):
        session.feed("1.5.2")
        assert session.buffer == "1.52"

    def test_ignored_without_fraction(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(5, 0))
        session.feed("1.2")
        assert session.buffer == "12"

    def test_custom_separator(self):
        session = EntrySession(CalcConfig().with_format_chars(",", "."))
        assert session.feed("1234.5").text == "1.234,5"
        assert session.buffer == "1234,5"


class TestToggleSign:
    """Смена знака"""

    @pytest.mark.parametrize("keys,buffer", [("", ""), ("0", "0"), (".", "0.")])
    def test_zero_not_negated(self, session: EntrySession, keys: str, buffer: str):
        session.feed(keys + "~")
        assert session.buffer == buffer

    def test_toggle_on_and_off(self, session: EntrySession):
        session.feed("5~")
        assert session.buffer == "-5"
        session.feed("~")
        assert session.buffer == "5"

    def test_negative_fraction(self, session: EntrySession):
        session.feed("0.5~")
        assert session.buffer == "-0.5"

    def test_grouped_negative(self, session: EntrySession):
        assert session.feed("1234~").text == "-1,234"


class TestErase:
    """Стирание"""

    def test_erase_last_digit(self, session: EntrySession):
        session.feed("12<")
        assert session.buffer == "1"

    def test_erase_drops_dangling_separator(self, session: EntrySession):
        session.feed("1.5<")
        assert session.buffer == "1"

    def test_erase_drops_lone_sign(self, session: EntrySession):
        session.feed("5~<")
        assert session.buffer == ""

    def test_erase_empty_is_noop(self, session: EntrySession):
        before = session.state()
        session.feed("<")
        assert session.state() == before

    def test_no_leading_zero_after_erase(self, session: EntrySession):
        """-0.5 → "-0" после стирания; следующая цифра заменяет ноль"""
        session.feed("0.5~<")
        assert session.buffer == "-0"
        session.feed("3")
        assert session.buffer == "-3"


# =============================================================================
# ОПЕРАЦИИ
# =============================================================================


class TestOperations:
    """Плоское вычисление слева направо"""

    def test_chained_without_precedence(self, session: EntrySession):
        """2 + 3 × 4 = 20, а не 14"""
        state = session.feed("2+3*4=")
        assert state.text == "20"
        assert session.accumulator == Decimal(20)
        assert session.pending_operator is None

    def test_operator_sets_accumulator(self, session: EntrySession):
        state = session.feed("12+")
        assert session.accumulator == Decimal(12)
        assert session.pending_operator == Operator.ADD
        assert session.buffer == ""
        assert state.pending_operator == Operator.ADD

    def test_subtraction(self, session: EntrySession):
        assert session.feed("10-4=").text == "6"

    def test_division_fraction(self, session: EntrySession):
        assert session.feed("7/2=").text == "3.5"

    def test_operator_replaces_pending(self, session: EntrySession):
        assert session.feed("5+-3=").text == "2"

    def test_equals_without_operator(self, session: EntrySession):
        assert session.feed("1.50=").text == "1.5"

    def test_equals_on_empty_session(self, session: EntrySession):
        assert session.feed("=").text == "0"
        assert session.accumulator == Decimal(0)

    def test_result_grouped(self, session: EntrySession):
        assert session.feed("1000*1000=").text == "1,000,000"

    def test_digit_after_equals_continues_result(self, session: EntrySession):
        session.feed("2+3=1")
        assert session.buffer == "51"

    def test_custom_separator_arithmetic(self):
        session = EntrySession(CalcConfig().with_format_chars(",", "."))
        assert session.feed("1234,5*2=").text == "2.469"


class TestOperatorThenEquals:
    """Оператор сразу перед "=": операнд — сам аккумулятор"""

    @pytest.mark.parametrize(
        "keys,expected",
        [("5+=", "10"), ("5*=", "25"), ("5-=", "0"), ("5/=", "1")],
    )
    def test_operates_against_accumulator(self, session: EntrySession, keys: str, expected: str):
        assert session.feed(keys).text == expected

    def test_fresh_operator_then_equals(self, session: EntrySession):
        assert session.feed("+=").text == "0"


class TestRoundingAndStripping:
    """Округление и удаление хвостовых нулей"""

    @pytest.fixture
    def session(self, config: CalcConfig) -> EntrySession:
        return EntrySession(
            config.with_max_digits(10, 2).with_rounding_mode(RoundingMode.HALF_UP)
        )

    def test_one_third(self, session: EntrySession):
        assert session.feed("1/3=").text == "0.33"

    def test_exact_division_stripped(self, session: EntrySession):
        assert session.feed("6/3=").text == "2"

    def test_no_strip_keeps_scale(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(10, 2).with_strip_trailing_zeroes(False))
        assert session.feed("6/3=").text == "2.00"


# =============================================================================
# ОШИБКИ
# =============================================================================


class TestDivisionByZero:
    """Деление на ноль"""

    def test_error_state(self, session: EntrySession):
        state = session.feed("5/0=")
        assert state.error == ErrorKind.DIVISION_BY_ZERO
        assert state.message_key == "division-by-zero"
        assert state.confirm_allowed is False
        assert state.text == ""
        assert session.buffer == ""
        assert session.accumulator is None
        assert session.pending_operator is None

    def test_error_on_chained_operator(self, session: EntrySession):
        assert session.feed("5/0+").error == ErrorKind.DIVISION_BY_ZERO

    def test_error_is_logged(self, session: EntrySession, caplog):
        caplog.set_level(logging.INFO, logger="calcentry.session.state_machine")
        session.feed("5/0=")
        assert any("DIVISION_BY_ZERO" in r.getMessage() for r in caplog.records)

    def test_digit_recovers(self, session: EntrySession):
        session.feed("5/0=")
        state = session.feed("7")
        assert state.error is None
        assert state.confirm_allowed is True
        assert session.buffer == "7"

    def test_decimal_recovers(self, session: EntrySession):
        session.feed("5/0=")
        assert session.feed(".").text == "0."
        assert session.error is None

    def test_clear_recovers(self, session: EntrySession):
        session.feed("5/0=")
        assert session.feed("C").error is None

    @pytest.mark.parametrize("keys", ["~", "<", "+", "="])
    def test_other_keys_keep_error(self, session: EntrySession, keys: str):
        session.feed("5/0=")
        state = session.feed(keys)
        assert state.error == ErrorKind.DIVISION_BY_ZERO
        assert session.pending_operator is None

    def test_confirm_blocked(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config, on_value_entered=recorder)
        session.feed("5/0=")
        assert session.confirm() is None
        assert recorder.values == []


class TestOutOfBounds:
    """Выход за границы"""

    def test_equals_out_of_bounds(self, session: EntrySession):
        state = session.feed("20000*1000000=")
        assert state.error == ErrorKind.OUT_OF_BOUNDS
        assert state.message_key == "out-of-bounds"

    def test_negative_out_of_bounds(self, session: EntrySession):
        assert session.feed("20000~*1000000=").error == ErrorKind.OUT_OF_BOUNDS

    def test_confirm_out_of_bounds(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config, on_value_entered=recorder)
        session.feed("20000*1000000")
        assert session.confirm() is None
        assert session.error == ErrorKind.OUT_OF_BOUNDS
        assert recorder.values == []

    def test_bound_inclusive(self, session: EntrySession):
        assert session.feed("10000*1000000=").text == "10,000,000,000"


class TestSignConstraint:
    """Фиксированный знак"""

    def test_negative_rejected_when_positive_required(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config.with_sign_constraint(1), on_value_entered=recorder)
        session.feed("5~")
        assert session.confirm() is None
        assert session.error == ErrorKind.WRONG_SIGN_NEGATIVE
        assert session.state().message_key == "wrong-sign-positive-required"
        assert session.buffer == ""
        assert recorder.values == []

    def test_positive_accepted(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config.with_sign_constraint(1), on_value_entered=recorder)
        session.feed("5")
        assert session.confirm() == Decimal(5)
        assert recorder.values == [Decimal(5)]
        assert session.buffer == ""
        assert session.accumulator is None

    def test_positive_rejected_when_negative_required(self, config: CalcConfig):
        session = EntrySession(config.with_sign_constraint(-1))
        session.feed("5")
        assert session.confirm() is None
        assert session.error == ErrorKind.WRONG_SIGN_POSITIVE
        assert session.state().message_key == "wrong-sign-negative-required"

    def test_zero_exempt(self, config: CalcConfig):
        session = EntrySession(config.with_sign_constraint(-1))
        assert session.confirm() == Decimal(0)


# =============================================================================
# ПОДТВЕРЖДЕНИЕ / СБРОС
# =============================================================================


class TestConfirm:
    """Подтверждение и callback"""

    def test_confirm_empty_is_zero(self, session: EntrySession):
        assert session.confirm() == Decimal(0)

    def test_confirm_resolves_pending(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config, on_value_entered=recorder)
        session.feed("2+3*4")
        assert session.confirm() == Decimal(20)
        assert recorder.values == [Decimal(20)]

    def test_confirm_via_key(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config, on_value_entered=recorder)
        state = session.feed("1.5\n")
        assert recorder.values == [Decimal("1.5")]
        assert state.text == "0"

    def test_confirm_keeps_scale_without_strip(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(10, 2).with_strip_trailing_zeroes(False))
        session.feed("1.5")
        assert str(session.confirm()) == "1.50"

    def test_no_handler_is_noop(self, session: EntrySession):
        session.feed("42")
        assert session.confirm() == Decimal(42)
        assert session.buffer == ""

    def test_failing_handler_swallowed(self, config: CalcConfig, caplog):
        def handler(value: Decimal) -> None:
            raise RuntimeError("boom")

        session = EntrySession(config, on_value_entered=handler)
        session.feed("7")
        with caplog.at_level(logging.ERROR, logger="calcentry.session.state_machine"):
            assert session.confirm() == Decimal(7)
        assert session.buffer == ""
        assert any(r.exc_info for r in caplog.records)


class TestClearCancel:
    """Очистка и отмена"""

    def test_clear_resets(self, session: EntrySession):
        session.feed("12+3")
        state = session.clear()
        assert state.text == "0"
        assert session.accumulator is None
        assert session.pending_operator is None

    def test_clear_idempotent(self, session: EntrySession):
        session.feed("12+3")
        once = session.feed("C")
        twice = session.feed("C")
        assert once == twice

    def test_cancel_emits_nothing(self, config: CalcConfig):
        recorder = Recorder()
        session = EntrySession(config, on_value_entered=recorder)
        session.feed("12")
        session.handle(KeyEvent.of(Key.CANCEL))
        assert recorder.values == []
        assert session.buffer == ""


# =============================================================================
# НАЧАЛЬНОЕ ЗНАЧЕНИЕ
# =============================================================================


class TestSeed:
    """Начальное значение"""

    def test_seed_displayed(self, config: CalcConfig):
        session = EntrySession(config, initial_value=Decimal("1234.5"))
        assert session.display_text == "1,234.5"
        assert session.accumulator == Decimal("1234.5")

    def test_seed_clamped_positive(self, config: CalcConfig):
        session = EntrySession(config, initial_value=Decimal("2E10"))
        assert session.display_text == "10,000,000,000"

    def test_seed_clamped_negative(self, config: CalcConfig):
        session = EntrySession(config, initial_value=-20000000000)
        assert session.display_text == "-10,000,000,000"

    def test_seed_rounded(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(10, 2), initial_value="1.005")
        assert session.buffer == "1.01"

    def test_seed_confirmed(self, config: CalcConfig):
        session = EntrySession(config, initial_value=Decimal("3.25"))
        assert session.confirm() == Decimal("3.25")

    def test_seed_not_restored_after_clear(self, config: CalcConfig):
        session = EntrySession(config, initial_value=Decimal("3.25"))
        session.clear()
        assert session.buffer == ""


# =============================================================================
# ДИСПЛЕЙ
# =============================================================================


class TestDisplay:
    """Поведение дисплея"""

    def test_zero_shown_when_empty(self, session: EntrySession):
        assert session.display_text == "0"

    def test_nothing_shown_when_empty(self, config: CalcConfig):
        session = EntrySession(config.with_show_zero_when_empty(False))
        assert session.display_text == ""

    def test_scaled_zero_without_strip(self, config: CalcConfig):
        session = EntrySession(config.with_max_digits(10, 2).with_strip_trailing_zeroes(False))
        assert session.display_text == "0.00"

    def test_operator_holds_display(self, session: EntrySession):
        assert session.feed("1234+").text == "1,234"
        assert session.buffer == ""
        assert session.feed("5").text == "5"

    def test_operator_holds_intermediate_result(self, session: EntrySession):
        assert session.feed("2+3*").text == "5"

    def test_operator_clears_display(self, config: CalcConfig):
        session = EntrySession(config.with_clear_display_on_operator(True))
        assert session.feed("1234+").text == "0"

    def test_operator_clears_to_blank(self, config: CalcConfig):
        session = EntrySession(
            config.with_clear_display_on_operator(True).with_show_zero_when_empty(False)
        )
        assert session.feed("1234+").text == ""

    def test_erase_releases_held_display(self, session: EntrySession):
        assert session.feed("12+<").text == "0"

    def test_state_is_frozen(self, session: EntrySession):
        state = session.state()
        with pytest.raises(Exception):
            state.text = "1"
