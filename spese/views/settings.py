"""Blueprint per categorie e tipi di pagamento."""
from flask import Blueprint, jsonify

from spese.services.categorie.categorie_service import CategorieService
from spese.services.categorie.tipi_pagamento_service import TipiPagamentoService
from spese.views import get_current_user_id, json_body, tuple_response, unauthorized

settings_bp = Blueprint('settings', __name__)
categorie_service = CategorieService()
tipi_service = TipiPagamentoService()


@settings_bp.route('/categories', methods=['GET'])
def lista_categorie():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    categorie = categorie_service.get_all_categories(user_id)
    return jsonify({'success': True, 'data': [c.to_dict() for c in categorie]})


@settings_bp.route('/categories', methods=['POST'])
def aggiungi_categoria():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    data = json_body()
    success, message, categoria = categorie_service.create_categoria(
        user_id, data.get('name'), data.get('transaction_type'), data.get('color'), data.get('icon'),
    )
    if not success:
        return tuple_response(success, message)
    return tuple_response(success, message, 201, data=categoria.to_dict())


@settings_bp.route('/categories/<int:categoria_id>', methods=['DELETE'])
def elimina_categoria(categoria_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = categorie_service.delete_categoria(categoria_id, user_id)
    return tuple_response(success, message)


@settings_bp.route('/payment-types', methods=['GET'])
def lista_tipi_pagamento():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    tipi = tipi_service.get_all(user_id)
    return jsonify({'success': True, 'data': [t.to_dict() for t in tipi]})


@settings_bp.route('/payment-types', methods=['POST'])
def aggiungi_tipo_pagamento():
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    data = json_body()
    success, message, tipo = tipi_service.create_tipo_pagamento(
        user_id,
        data.get('name'),
        is_credit=bool(data.get('is_credit', False)),
        closing_day=data.get('closing_day'),
        due_day=data.get('due_day'),
    )
    if not success:
        return tuple_response(success, message)
    return tuple_response(success, message, 201, data=tipo.to_dict())


@settings_bp.route('/payment-types/<int:tipo_id>', methods=['DELETE'])
def elimina_tipo_pagamento(tipo_id):
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    success, message = tipi_service.delete_tipo_pagamento(tipo_id, user_id)
    return tuple_response(success, message)


@settings_bp.route('/initialize', methods=['POST'])
def inizializza():
    """Crea categorie e tipi di pagamento predefiniti per l'utente"""
    user_id = get_current_user_id()
    if user_id is None:
        return unauthorized()
    ok_cat, msg_cat = categorie_service.initialize_defaults(user_id)
    ok_tipi, msg_tipi = tipi_service.initialize_defaults(user_id)
    return tuple_response(ok_cat and ok_tipi, f"{msg_cat}; {msg_tipi}")
