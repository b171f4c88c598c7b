"""Tests for manual transactions and their payment schedules."""

from datetime import datetime

import pytest

from conftest import ms
from spese.models import PaymentSchedule
from spese.services.transazioni.transaction_service import TransactionService
from spese.utils.scheduling import to_millis


@pytest.fixture
def service(app):
    return TransactionService()


def active_schedules(transaction_id):
    return PaymentSchedule.query.filter_by(transaction_id=transaction_id, softdelete=False).order_by(
        PaymentSchedule.installment_number
    ).all()


class TestAdd:

    def test_cash_expense(self, service, user, category, cash):
        ok, message, transaction = service.add(
            user_id=user.id, description=' Spesa ', amount=12.5, category_id=category.id,
            transaction_type='expense', date=ms(2024, 1, 20), payment_type_id=cash.id,
        )

        assert ok, message
        assert transaction.description == 'Spesa'
        assert transaction.category == 'Vivienda'
        assert transaction.due_date == ms(2024, 1, 20)
        assert transaction.recurring_transaction_id is None
        assert active_schedules(transaction.id) == []

    def test_credit_installments_start_at_statement_due_date(self, service, user, category, credit_card):
        ok, _, transaction = service.add(
            user_id=user.id, description='Laptop', amount=1000.0, category_id=category.id,
            transaction_type='expense', date=ms(2024, 1, 26), payment_type_id=credit_card.id,
            installment_count=3,
        )

        assert ok
        assert transaction.due_date == to_millis(datetime(2024, 3, 11))
        schedules = active_schedules(transaction.id)
        assert [s.amount for s in schedules] == [333.34, 333.33, 333.33]
        assert [s.due_date for s in schedules] == [
            to_millis(datetime(2024, 3, 11)), to_millis(datetime(2024, 4, 11)), to_millis(datetime(2024, 5, 11)),
        ]

    def test_validation(self, service, user, category):
        ok, message, transaction = service.add(
            user_id=user.id, description='X', amount=10, category_id=category.id,
            transaction_type='loan', date=ms(2024, 1, 1),
        )

        assert not ok
        assert transaction is None
        assert "Il tipo deve essere" in message

    def test_unknown_payment_type(self, service, user, category):
        ok, message, _ = service.add(
            user_id=user.id, description='X', amount=10, category_id=category.id,
            transaction_type='expense', date=ms(2024, 1, 1), payment_type_id=777,
        )

        assert not ok
        assert 'non trovato' in message


class TestUpdateAndDelete:

    def test_update_rebuilds_schedule(self, service, user, category, credit_card):
        _, _, transaction = service.add(
            user_id=user.id, description='Laptop', amount=1000.0, category_id=category.id,
            transaction_type='expense', date=ms(2024, 1, 26), payment_type_id=credit_card.id,
            installment_count=3,
        )

        ok, message = service.update(transaction.id, user.id, installment_count=2, amount=500.0)

        assert ok, message
        schedules = active_schedules(transaction.id)
        assert [s.amount for s in schedules] == [250.0, 250.0]
        assert all(s.total_installments == 2 for s in schedules)
        assert PaymentSchedule.query.filter_by(transaction_id=transaction.id, softdelete=True).count() == 3

    def test_update_without_plan_change_keeps_schedule(self, service, user, category, credit_card):
        """Segnare come verificata non deve ricreare le rate."""
        _, _, transaction = service.add(
            user_id=user.id, description='Laptop', amount=1000.0, category_id=category.id,
            transaction_type='expense', date=ms(2024, 1, 26), payment_type_id=credit_card.id,
            installment_count=3,
        )
        schedule_ids = [s.id for s in active_schedules(transaction.id)]

        ok, message = service.update(transaction.id, user.id, verified=True, description='Laptop lavoro',
                                     amount=1000.0)

        assert ok, message
        assert transaction.verified is True
        assert transaction.due_date == to_millis(datetime(2024, 3, 11))
        assert [s.id for s in active_schedules(transaction.id)] == schedule_ids
        assert PaymentSchedule.query.filter_by(transaction_id=transaction.id, softdelete=True).count() == 0

    def test_soft_delete_cascades_to_schedules(self, service, user, category, credit_card):
        _, _, transaction = service.add(
            user_id=user.id, description='Laptop', amount=1000.0, category_id=category.id,
            transaction_type='expense', date=ms(2024, 1, 26), payment_type_id=credit_card.id,
            installment_count=3,
        )

        ok, _ = service.soft_delete(transaction.id, user.id, now=ms(2024, 2, 1))

        assert ok
        assert transaction.softdelete is True
        assert transaction.deleted_at == ms(2024, 2, 1)
        assert active_schedules(transaction.id) == []
        assert service.get_by_id(transaction.id) is None

    def test_delete_missing(self, service, user):
        ok, message = service.soft_delete(999, user.id)

        assert not ok
        assert 'non trovata' in message


class TestQueries:

    def test_list_and_last(self, service, user, category, income_category, cash):
        service.add(user_id=user.id, description='Affitto', amount=700, category_id=category.id,
                    transaction_type='expense', date=ms(2024, 1, 1), payment_type_id=cash.id)
        service.add(user_id=user.id, description='Stipendio', amount=2000, category_id=income_category.id,
                    transaction_type='income', date=ms(2024, 1, 27))

        assert [t.description for t in service.list_for_user(user.id)] == ['Stipendio', 'Affitto']
        assert [t.description for t in service.list_for_user(user.id, 'expense')] == ['Affitto']
        assert service.list_for_user(user.id, 'other') == []
        assert service.get_last(user.id).description == 'Stipendio'
        assert service.get_last(user.id, 'expense').description == 'Affitto'
