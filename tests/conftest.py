"""Pytest fixtures for the spese test suite."""

from datetime import datetime

import pytest

from spese import create_app, db
from spese.models import Category, PaymentType, RecurringTransaction, User
from spese.utils.scheduling import to_millis


def ms(year, month, day, hour=12, minute=0):
    """Local-time epoch milliseconds; noon by default like the stepped occurrences."""
    return to_millis(datetime(year, month, day, hour, minute))


@pytest.fixture
def app():
    """Flask app on a fresh in-memory SQLite database."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(auth_subject='google|1234', email='mario@example.com', softdelete=False)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(auth_subject='google|5678', email='luigi@example.com', softdelete=False)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def category(user):
    category = Category(user_id=user.id, name='Vivienda', transaction_type='expense', softdelete=False)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def income_category(user):
    category = Category(user_id=user.id, name='Stipendio', transaction_type='income', softdelete=False)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def cash(user):
    payment_type = PaymentType(user_id=user.id, name='Efectivo o Transferencia', is_credit=False, softdelete=False)
    db.session.add(payment_type)
    db.session.commit()
    return payment_type


@pytest.fixture
def credit_card(user):
    """Credit card closing on the 25th, due on the 10th of the following month."""
    payment_type = PaymentType(
        user_id=user.id, name='Tarjeta 1', is_credit=True, closing_day=25, due_day=10, softdelete=False,
    )
    db.session.add(payment_type)
    db.session.commit()
    return payment_type


@pytest.fixture
def make_template(user, category, cash):
    """Factory for recurring transactions stored directly in the database."""

    def _make(**overrides):
        values = {
            'user_id': user.id,
            'description': 'Affitto',
            'amount': 750.0,
            'category_id': category.id,
            'payment_type_id': cash.id,
            'transaction_type': 'expense',
            'frequency': 'monthly',
            'start_date': ms(2024, 1, 31),
            'end_date': None,
            'last_processed_date': None,
            'is_active': True,
            'installment_count': 1,
            'softdelete': False,
        }
        values.update(overrides)
        values.setdefault('next_due_date', values['start_date'])
        template = RecurringTransaction(**values)
        db.session.add(template)
        db.session.commit()
        return template

    return _make
