"""Tests for the JSON blueprints."""

from datetime import datetime, timedelta

import pytest

from conftest import ms
from spese.models import Transaction
from spese.utils.scheduling import to_millis


@pytest.fixture
def headers(user):
    return {'X-User-Id': str(user.id)}


def future(days):
    return to_millis(datetime.now().replace(hour=12, minute=0, second=0, microsecond=0) + timedelta(days=days))


class TestAuthAndHealth:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok'}

    @pytest.mark.parametrize('url', ['/recurring/', '/transactions/', '/projections/', '/settings/categories'])
    def test_missing_user_is_unauthorized(self, client, url):
        assert client.get(url).status_code == 401

    def test_session_user(self, client, user):
        with client.session_transaction() as sess:
            sess['user_id'] = user.id

        assert client.get('/recurring/').status_code == 200


class TestRecurringViews:

    def test_create_list_and_delete(self, client, headers, category, cash):
        payload = {
            'description': 'Netflix', 'amount': 12.99, 'category_id': category.id,
            'transaction_type': 'expense', 'frequency': 'monthly',
            'start_date': future(10), 'payment_type_id': cash.id,
        }

        created = client.post('/recurring/', json=payload, headers=headers)
        assert created.status_code == 201
        template_id = created.get_json()['data']['id']

        listed = client.get('/recurring/', headers=headers).get_json()['data']
        assert [t['id'] for t in listed] == [template_id]

        assert client.post(f'/recurring/{template_id}/toggle', headers=headers).status_code == 200
        assert client.delete(f'/recurring/{template_id}', headers=headers).status_code == 200
        assert client.get(f'/recurring/{template_id}', headers=headers).status_code == 404

    def test_invalid_create(self, client, headers, category, cash):
        response = client.post('/recurring/', json={'description': 'X'}, headers=headers)

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_update_missing_is_not_found(self, client, headers):
        response = client.put('/recurring/999', json={'amount': 10.0}, headers=headers)

        assert response.status_code == 404

    def test_generate_and_boundaries(self, client, headers, make_template):
        template = make_template(end_date=ms(2024, 3, 1))

        ok = client.post(f'/recurring/{template.id}/generate', json={'target_date': ms(2024, 1, 31)}, headers=headers)
        assert ok.status_code == 200
        assert Transaction.query.count() == 1

        before = client.post(f'/recurring/{template.id}/generate', json={'target_date': ms(2024, 1, 1)}, headers=headers)
        assert before.status_code == 409

        past = client.post(f'/recurring/{template.id}/generate', json={'target_date': ms(2024, 4, 30)}, headers=headers)
        assert past.status_code == 409

    def test_stats(self, client, headers, make_template):
        make_template(start_date=future(5))

        stats = client.get('/recurring/stats', headers=headers).get_json()['data']

        assert stats['totale'] == 1
        assert stats['num_uscite'] == 1


class TestOtherViews:

    def test_transactions_and_projection(self, client, headers, category, credit_card):
        created = client.post('/transactions/', json={
            'description': 'Frigorifero', 'amount': 600.0, 'category_id': category.id,
            'transaction_type': 'expense', 'date': future(0), 'payment_type_id': credit_card.id,
            'installment_count': 2,
        }, headers=headers)
        assert created.status_code == 201
        transaction_id = created.get_json()['data']['id']

        schedules = client.get(f'/transactions/{transaction_id}/schedules', headers=headers).get_json()['data']
        assert [s['amount'] for s in schedules] == [300.0, 300.0]

        projection = client.get('/projections/', headers=headers).get_json()['data']
        assert {i['type'] for i in projection} == {'installment'}
        assert all(i['original_expense_id'] == transaction_id for i in projection)

        assert client.delete(f'/transactions/{transaction_id}', headers=headers).status_code == 200
        assert client.get('/projections/', headers=headers).get_json()['data'] == []

    def test_settings_initialize(self, client, headers):
        response = client.post('/settings/initialize', headers=headers)
        assert response.status_code == 200

        categories = client.get('/settings/categories', headers=headers).get_json()['data']
        payment_types = client.get('/settings/payment-types', headers=headers).get_json()['data']
        assert len(categories) == 12
        assert len(payment_types) == 3

    def test_credit_payment_type_validation(self, client, headers):
        response = client.post('/settings/payment-types', json={
            'name': 'Visa', 'is_credit': True, 'closing_day': 40, 'due_day': 10,
        }, headers=headers)

        assert response.status_code == 400
