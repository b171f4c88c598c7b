"""Helper comuni ai blueprint JSON."""
from flask import current_app, jsonify, request, session

from spese.exceptions import (
    BoundaryViolationError,
    DataIntegrityError,
    InvalidArgumentError,
    NotFoundError,
)


def get_current_user_id():
    """Utente corrente dall'header ``X-User-Id`` o dalla sessione; None se assente"""
    raw = request.headers.get('X-User-Id') or session.get('user_id')
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def unauthorized():
    return jsonify({'success': False, 'message': 'Utente non autenticato'}), 401


def tuple_response(success, message, status=200, **payload):
    """Risposta JSON per i servizi che restituiscono (success, message)"""
    if success:
        return jsonify({'success': True, 'message': message, **payload}), status
    code = 404 if 'non trovat' in message else 400
    return jsonify({'success': False, 'message': message}), code


def error_response(exc):
    """Traduce le eccezioni del motore di pianificazione in risposte HTTP"""
    if isinstance(exc, BoundaryViolationError):
        status = 409
    elif isinstance(exc, InvalidArgumentError):
        status = 400
    elif isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, DataIntegrityError):
        status = 500
    else:
        current_app.logger.exception('Unexpected error')
        return jsonify({'success': False, 'message': 'Errore interno'}), 500
    return jsonify({'success': False, 'message': str(exc)}), status


def json_body():
    return request.get_json(silent=True) or {}
