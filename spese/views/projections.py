"""Blueprint per la proiezione dei pagamenti futuri."""
from flask import Blueprint, jsonify, request

from spese.exceptions import SchedulingError
from spese.services.ricorrenti.projection_service import ProjectionService
from spese.views import error_response, get_current_user_id, unauthorized

projections_bp = Blueprint('projections', __name__)
service = ProjectionService()


@projections_bp.route('/', methods=['GET'])
def proiezione():
    """Rate e ricorrenze previste da inizio mese a ``months_ahead`` mesi"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    months_ahead = request.args.get('months_ahead', type=int)
    if months_ahead is not None and months_ahead < 0:
        return jsonify({'success': False, 'message': 'months_ahead non valido'}), 400
    try:
        items = service.get_projected_payments(user_id, months_ahead=months_ahead)
    except SchedulingError as e:
        return error_response(e)
    return jsonify({'success': True, 'data': items})
