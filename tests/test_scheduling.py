"""Tests for the pure date/amount helpers in spese.utils.scheduling."""

import math
from datetime import datetime

import pytest

from conftest import ms
from spese.exceptions import InvalidArgumentError, UnsupportedFrequencyError
from spese.services import get_month_window
from spese.utils.scheduling import (
    calculate_next_due_date_for_payment_type,
    initialize_next_due_date,
    installment_due_dates,
    next_occurrence,
    split_amount_into_installments,
    step_date_by_frequency,
    to_millis,
)


class TestSplitAmountIntoInstallments:
    """Tests for cent-exact installment splitting."""

    def test_remainder_goes_to_first_installments(self):
        assert split_amount_into_installments(100, 3) == [33.34, 33.33, 33.33]

    def test_even_split(self):
        assert split_amount_into_installments(100, 4) == [25.0, 25.0, 25.0, 25.0]

    def test_single_installment(self):
        assert split_amount_into_installments(19.99, 1) == [19.99]

    def test_sum_is_cent_exact(self):
        parts = split_amount_into_installments(1234.57, 7)
        assert round(sum(parts) * 100) == 123457
        assert max(parts) - min(parts) <= 0.011

    @pytest.mark.parametrize('count', [0, -1, 1.5, True])
    def test_invalid_installment_count(self, count):
        with pytest.raises(InvalidArgumentError):
            split_amount_into_installments(100, count)

    @pytest.mark.parametrize('amount', [math.nan, math.inf])
    def test_non_finite_amount(self, amount):
        with pytest.raises(InvalidArgumentError):
            split_amount_into_installments(amount, 2)


class TestStepDateByFrequency:
    """Tests for the shared occurrence stepper."""

    def test_monthly_clamps_then_recovers_anchor(self):
        start = ms(2024, 1, 31)
        feb = next_occurrence(start, 'monthly', start)
        mar = next_occurrence(feb, 'monthly', start)

        assert feb == ms(2024, 2, 29)
        assert mar == ms(2024, 3, 31)

    def test_semestrally_keeps_anchor(self):
        start = ms(2024, 1, 7)
        jul = next_occurrence(start, 'semestrally', start)
        jan = next_occurrence(jul, 'semestrally', start)

        assert jul == ms(2024, 7, 7)
        assert jan == ms(2025, 1, 7)

    def test_yearly_leap_day(self):
        start = ms(2024, 2, 29)
        dates = [start]
        for _ in range(4):
            dates.append(next_occurrence(dates[-1], 'yearly', start))

        assert dates[1:] == [ms(2025, 2, 28), ms(2026, 2, 28), ms(2027, 2, 28), ms(2028, 2, 29)]

    def test_daily_and_weekly(self):
        assert step_date_by_frequency(ms(2024, 3, 30), 'daily') == ms(2024, 3, 31)
        assert step_date_by_frequency(ms(2024, 10, 26), 'weekly') == ms(2024, 11, 2)

    def test_result_is_normalized_to_noon(self):
        stepped = step_date_by_frequency(ms(2024, 5, 10, hour=0, minute=5), 'daily')
        assert stepped == ms(2024, 5, 11)

    def test_without_anchor_uses_current_day(self):
        assert step_date_by_frequency(ms(2024, 1, 15), 'monthly') == ms(2024, 2, 15)

    def test_unsupported_frequency(self):
        with pytest.raises(UnsupportedFrequencyError) as excinfo:
            step_date_by_frequency(ms(2024, 1, 1), 'fortnightly')

        assert excinfo.value.frequency == 'fortnightly'
        assert isinstance(excinfo.value, InvalidArgumentError)
        assert isinstance(excinfo.value, ValueError)

    def test_invalid_anchor_day(self):
        with pytest.raises(InvalidArgumentError):
            step_date_by_frequency(ms(2024, 1, 1), 'monthly', anchor_day=32)


class TestInitializeNextDueDate:
    """Tests for the first-occurrence-after-now search."""

    def test_future_start_is_returned_unchanged(self):
        start = ms(2024, 6, 1, hour=9)
        assert initialize_next_due_date(start, ms(2024, 1, 1), 'monthly') == start

    def test_past_start_steps_forward(self):
        start = ms(2024, 1, 15, hour=10)
        assert initialize_next_due_date(start, ms(2024, 3, 20), 'monthly') == ms(2024, 4, 15)

    def test_past_start_keeps_anchor(self):
        start = ms(2024, 1, 31)
        assert initialize_next_due_date(start, ms(2024, 3, 1), 'monthly') == ms(2024, 3, 31)

    def test_unsupported_frequency(self):
        with pytest.raises(UnsupportedFrequencyError):
            initialize_next_due_date(ms(2024, 1, 1), ms(2024, 2, 1), 'hourly')


class TestCreditCycleDueDate:
    """Tests for calculate_next_due_date_for_payment_type."""

    card = {'is_credit': True, 'closing_day': 25, 'due_day': 10}

    def test_after_closing_day_rolls_to_next_cycle(self):
        due = calculate_next_due_date_for_payment_type(ms(2024, 1, 26), self.card)
        assert due == to_millis(datetime(2024, 3, 11))

    def test_due_day_in_same_month_as_closing(self):
        card = {'is_credit': True, 'closing_day': 25, 'due_day': 28}
        due = calculate_next_due_date_for_payment_type(ms(2024, 1, 20), card)
        assert due == to_millis(datetime(2024, 1, 29))

    def test_closing_day_midnight_belongs_to_current_cycle(self):
        due = calculate_next_due_date_for_payment_type(ms(2024, 1, 25, hour=0), self.card)
        assert due == to_millis(datetime(2024, 2, 11))

    def test_closing_day_after_midnight_rolls_to_next_cycle(self):
        """Una transazione a mezzogiorno del giorno di chiusura va nell'estratto successivo."""
        due = calculate_next_due_date_for_payment_type(ms(2024, 1, 25), self.card)
        assert due == to_millis(datetime(2024, 3, 11))

    def test_closing_day_rolls_over_year_end(self):
        due = calculate_next_due_date_for_payment_type(ms(2024, 12, 25), self.card)
        assert due == to_millis(datetime(2025, 2, 11))

    def test_camel_case_keys(self):
        card = {'isCredit': True, 'closingDay': 25, 'dueDay': 10}
        due = calculate_next_due_date_for_payment_type(ms(2024, 1, 26), card)
        assert due == to_millis(datetime(2024, 3, 11))

    def test_non_credit_returns_transaction_date(self):
        date = ms(2024, 1, 26)
        assert calculate_next_due_date_for_payment_type(date, {'is_credit': False}) == date

    def test_credit_without_days_returns_transaction_date(self):
        date = ms(2024, 1, 26)
        assert calculate_next_due_date_for_payment_type(date, {'is_credit': True, 'closing_day': 25}) == date

    def test_out_of_range_day(self):
        with pytest.raises(InvalidArgumentError):
            calculate_next_due_date_for_payment_type(
                ms(2024, 1, 26), {'is_credit': True, 'closing_day': 32, 'due_day': 10}
            )


class TestInstallmentDueDates:

    def test_monthly_spacing_clamped_from_first_date(self):
        dates = installment_due_dates(ms(2024, 1, 31), 3)
        assert dates == [ms(2024, 1, 31), ms(2024, 2, 29), ms(2024, 3, 31)]


class TestMonthWindow:

    def test_window_spans_current_month_and_following(self):
        start, end = get_month_window(ms(2024, 1, 15), months_ahead=4)

        assert start == to_millis(datetime(2024, 1, 1))
        assert end == to_millis(datetime(2024, 6, 1)) - 1
