"""
Servizio per la gestione dei tipi di pagamento (contanti, carte di credito)
"""
from spese.defaults import TIPI_PAGAMENTO_DEFAULT
from spese.models.payment_types import PaymentType
from spese.services import BaseService


def _valid_day(value):
    return value is None or (not isinstance(value, bool) and isinstance(value, int) and 1 <= value <= 31)


class TipiPagamentoService(BaseService):
    """Servizio per la gestione dei tipi di pagamento"""

    def get_all(self, user_id):
        return PaymentType.query.filter_by(user_id=user_id, softdelete=False).order_by(PaymentType.name.asc()).all()

    def create_tipo_pagamento(self, user_id, name, is_credit=False, closing_day=None, due_day=None):
        """Crea un tipo di pagamento; per le carte di credito servono giorno di
        chiusura e di scadenza (1-31)"""
        if not name or not name.strip():
            return False, "Il nome del tipo di pagamento è obbligatorio", None
        if not _valid_day(closing_day) or not _valid_day(due_day):
            return False, "Il giorno di chiusura e di scadenza devono essere tra 1 e 31", None
        if is_credit and (closing_day is None or due_day is None):
            return False, "Le carte di credito richiedono giorno di chiusura e di scadenza", None

        name = name.strip()
        existing = PaymentType.query.filter_by(user_id=user_id, name=name, softdelete=False).first()
        if existing:
            return False, f"Tipo di pagamento '{name}' già esistente", None

        tipo = PaymentType(
            user_id=user_id,
            name=name,
            is_credit=bool(is_credit),
            closing_day=closing_day if is_credit else None,
            due_day=due_day if is_credit else None,
            softdelete=False,
        )
        success, message = self.save(tipo)
        if not success:
            return False, message, None
        return True, f"Tipo di pagamento '{name}' creato con successo", tipo

    def delete_tipo_pagamento(self, tipo_id, user_id, now=None):
        tipo = self.db.session.get(PaymentType, tipo_id)
        if not tipo or tipo.softdelete or tipo.user_id != user_id:
            return False, "Tipo di pagamento non trovato"
        return self.soft_delete(tipo, now=now)

    def initialize_defaults(self, user_id):
        """Crea i tipi di pagamento predefiniti mancanti per l'utente"""
        esistenti = {t.name for t in PaymentType.query.filter_by(user_id=user_id, softdelete=False)}
        creati = 0
        for name in TIPI_PAGAMENTO_DEFAULT:
            if name in esistenti:
                continue
            self.db.session.add(PaymentType(user_id=user_id, name=name, is_credit=False, softdelete=False))
            creati += 1
        try:
            self.db.session.commit()
        except Exception as e:
            self.db.session.rollback()
            return False, str(e)
        return True, f"{creati} tipi di pagamento predefiniti creati"
