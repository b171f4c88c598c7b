"""Blueprint per le transazioni inserite manualmente."""
from flask import Blueprint, jsonify, request

from spese.services.transazioni.payment_schedule_service import PaymentScheduleService
from spese.services.transazioni.transaction_service import TransactionService
from spese.views import get_current_user_id, json_body, tuple_response, unauthorized

transactions_bp = Blueprint('transactions', __name__)
service = TransactionService()
schedule_service = PaymentScheduleService()


@transactions_bp.route('/', methods=['GET'])
def lista():
    """Transazioni dell'utente, filtrabili con ``?kind=expense|income``"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    transazioni = service.list_for_user(user_id, request.args.get('kind'))
    return jsonify({'success': True, 'data': [t.to_dict() for t in transazioni]})


@transactions_bp.route('/last', methods=['GET'])
def ultima():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    transazione = service.get_last(user_id, request.args.get('kind'))
    return jsonify({'success': True, 'data': transazione.to_dict() if transazione else None})


@transactions_bp.route('/<int:transaction_id>/schedules', methods=['GET'])
def rate(transaction_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    if not service.get_by_id(transaction_id, user_id):
        return jsonify({'success': False, 'message': 'Transazione non trovata'}), 404
    schedules = schedule_service.get_for_transaction(transaction_id)
    return jsonify({'success': True, 'data': [s.to_dict() for s in schedules]})


@transactions_bp.route('/', methods=['POST'])
def aggiungi():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    data = json_body()
    success, message, transazione = service.add(
        user_id=user_id,
        description=data.get('description'),
        amount=data.get('amount'),
        category_id=data.get('category_id'),
        transaction_type=data.get('transaction_type'),
        date=data.get('date'),
        payment_type_id=data.get('payment_type_id'),
        installment_count=data.get('installment_count', 1),
    )
    if not success:
        return tuple_response(success, message)
    return tuple_response(success, message, 201, data=transazione.to_dict())


@transactions_bp.route('/<int:transaction_id>', methods=['PUT', 'PATCH'])
def modifica(transaction_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = service.update(transaction_id, user_id, **json_body())
    return tuple_response(success, message)


@transactions_bp.route('/<int:transaction_id>', methods=['DELETE'])
def elimina(transaction_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = service.soft_delete(transaction_id, user_id)
    return tuple_response(success, message)
