"""Blueprint per la gestione delle transazioni ricorrenti."""
from flask import Blueprint, jsonify

from spese.services.ricorrenti.backfill_service import RecurringBackfillService
from spese.services.ricorrenti.generated_transaction_service import GeneratedTransactionService
from spese.services.ricorrenti.recurring_transaction_service import RecurringTransactionService
from spese.exceptions import SchedulingError
from spese.views import error_response, get_current_user_id, json_body, tuple_response, unauthorized

recurring_bp = Blueprint('recurring', __name__)
service = RecurringTransactionService()
generated_service = GeneratedTransactionService()
backfill_service = RecurringBackfillService(generated_service)


@recurring_bp.route('/', methods=['GET'])
def lista():
    """Lista delle transazioni ricorrenti dell'utente"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    ricorrenti = service.list_for_user(user_id)
    return jsonify({'success': True, 'data': [r.to_dict() for r in ricorrenti]})


@recurring_bp.route('/stats', methods=['GET'])
def stats():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    return jsonify({'success': True, 'data': service.get_stats(user_id)})


@recurring_bp.route('/<int:template_id>', methods=['GET'])
def dettaglio(template_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    ricorrente = service.get_by_id(template_id, user_id)
    if not ricorrente:
        return jsonify({'success': False, 'message': 'Transazione ricorrente non trovata'}), 404
    return jsonify({'success': True, 'data': ricorrente.to_dict()})


@recurring_bp.route('/', methods=['POST'])
def aggiungi():
    """Crea una ricorrenza; le occorrenze già scadute vengono generate subito"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    data = json_body()
    success, message, ricorrente = service.create(
        user_id=user_id,
        description=data.get('description'),
        amount=data.get('amount'),
        category_id=data.get('category_id'),
        transaction_type=data.get('transaction_type'),
        frequency=data.get('frequency', 'monthly'),
        start_date=data.get('start_date'),
        payment_type_id=data.get('payment_type_id'),
        end_date=data.get('end_date'),
        installment_count=data.get('installment_count', 1),
        is_active=data.get('is_active', True),
    )
    if not success:
        return tuple_response(success, message)
    return tuple_response(success, message, 201, data=ricorrente.to_dict())


@recurring_bp.route('/<int:template_id>', methods=['PUT', 'PATCH'])
def modifica(template_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = service.update(template_id, user_id, **json_body())
    return tuple_response(success, message)


@recurring_bp.route('/<int:template_id>/toggle', methods=['POST'])
def toggle(template_id):
    """Attiva / disattiva una ricorrenza"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = service.toggle_active(template_id, user_id)
    return tuple_response(success, message)


@recurring_bp.route('/<int:template_id>', methods=['DELETE'])
def elimina(template_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = service.soft_delete(template_id, user_id)
    return tuple_response(success, message)


@recurring_bp.route('/<int:template_id>/generate', methods=['POST'])
def genera(template_id):
    """Materializza a mano l'occorrenza ``target_date`` di una ricorrenza"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    if not service.get_by_id(template_id, user_id):
        return jsonify({'success': False, 'message': 'Transazione ricorrente non trovata'}), 404
    target_date = json_body().get('target_date')
    if isinstance(target_date, bool) or not isinstance(target_date, int):
        return jsonify({'success': False, 'message': 'target_date è obbligatorio'}), 400
    try:
        transaction_id = generated_service.generate(template_id, target_date)
    except SchedulingError as e:
        return error_response(e)
    return jsonify({'success': True, 'transaction_id': transaction_id})


@recurring_bp.route('/<int:template_id>/backfill', methods=['POST'])
def backfill(template_id):
    """Recupera le occorrenze scadute di una singola ricorrenza"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    if not service.get_by_id(template_id, user_id):
        return jsonify({'success': False, 'message': 'Transazione ricorrente non trovata'}), 404
    try:
        stats = backfill_service.backfill_template(template_id)
    except SchedulingError as e:
        return error_response(e)
    return jsonify({'success': True, 'data': stats})
