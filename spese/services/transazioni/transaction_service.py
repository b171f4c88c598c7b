"""Servizio per la gestione delle transazioni inserite manualmente"""
import logging
import math

from spese.models.categories import Category
from spese.models.payment_types import PaymentType
from spese.models.transactions import Transaction
from spese.services import BaseService
from spese.services.transazioni.payment_schedule_service import PaymentScheduleService
from spese.utils.scheduling import calculate_next_due_date_for_payment_type, now_millis

logger = logging.getLogger(__name__)

TIPI_TRANSAZIONE = ('expense', 'income')


class TransactionService(BaseService):
    """Servizio per la gestione delle transazioni"""

    def __init__(self):
        super().__init__()
        self.schedule_service = PaymentScheduleService()

    def get_by_id(self, transaction_id, user_id=None):
        transaction = self.db.session.get(Transaction, transaction_id)
        if transaction is None or transaction.softdelete:
            return None
        if user_id is not None and transaction.user_id != user_id:
            return None
        return transaction

    def list_for_user(self, user_id, kind=None):
        """Transazioni non eliminate dell'utente, dalla più recente"""
        if kind is not None and kind not in TIPI_TRANSAZIONE:
            return []
        query = Transaction.query.filter_by(user_id=user_id, softdelete=False)
        if kind:
            query = query.filter_by(transaction_type=kind)
        return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()

    def get_last(self, user_id, kind=None):
        """Ultima transazione inserita (usata per precompilare i form)"""
        query = Transaction.query.filter_by(user_id=user_id, softdelete=False)
        if kind:
            query = query.filter_by(transaction_type=kind)
        return query.order_by(Transaction.id.desc()).first()

    def _lookup(self, user_id, category_id, payment_type_id):
        """Ritorna (errore, categoria, tipo di pagamento)"""
        category = self.db.session.get(Category, category_id) if category_id else None
        if category is None or category.softdelete or category.user_id != user_id:
            return f"Categoria con ID {category_id} non trovata", None, None
        payment_type = None
        if payment_type_id is not None:
            payment_type = self.db.session.get(PaymentType, payment_type_id)
            if payment_type is None or payment_type.softdelete or payment_type.user_id != user_id:
                return f"Tipo di pagamento con ID {payment_type_id} non trovato", None, None
        return None, category, payment_type

    @staticmethod
    def _check_values(description, amount, transaction_type, date, installment_count):
        if not description or not str(description).strip():
            return "La descrizione è obbligatoria"
        if transaction_type not in TIPI_TRANSAZIONE:
            return "Il tipo deve essere 'expense' o 'income'"
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount <= 0:
            return "L'importo deve essere un numero positivo"
        if isinstance(date, bool) or not isinstance(date, int):
            return "La data è obbligatoria"
        if isinstance(installment_count, bool) or not isinstance(installment_count, int) or installment_count < 1:
            return "Il numero di rate deve essere un intero >= 1"
        return None

    def _apply_payment_plan(self, transaction, payment_type):
        transaction.due_date = (
            calculate_next_due_date_for_payment_type(transaction.date, payment_type) if payment_type else None
        )
        if transaction.installment_count > 1 and payment_type is not None:
            self.schedule_service.add_schedules(transaction, payment_type.id, transaction.due_date)

    def add(self, user_id, description, amount, category_id, transaction_type, date,
            payment_type_id=None, installment_count=1):
        """Crea una transazione manuale; con più rate crea anche il piano di pagamento"""
        error = self._check_values(description, amount, transaction_type, date, installment_count)
        if error:
            return False, error, None
        error, category, payment_type = self._lookup(user_id, category_id, payment_type_id)
        if error:
            return False, error, None

        try:
            transaction = Transaction(
                user_id=user_id,
                description=description.strip(),
                amount=float(amount),
                category=category.name,
                category_id=category.id,
                payment_type_id=payment_type_id,
                transaction_type=transaction_type,
                date=date,
                installment_count=installment_count,
                verified=False,
                softdelete=False,
            )
            self.db.session.add(transaction)
            self.db.session.flush()
            self._apply_payment_plan(transaction, payment_type)
            self.db.session.commit()
            return True, "Transazione creata con successo", transaction
        except Exception as e:
            self.db.session.rollback()
            logger.exception('Creation of transaction failed')
            return False, f"Errore durante la creazione: {str(e)}", None

    def update(self, transaction_id, user_id, **fields):
        """Aggiorna una transazione; il piano di pagamento è ricostruito se cambiano
        importo, data, tipo di pagamento o numero di rate"""
        transaction = self.get_by_id(transaction_id, user_id)
        if not transaction:
            return False, "Transazione non trovata"

        values = {
            'description': transaction.description,
            'amount': transaction.amount,
            'category_id': transaction.category_id,
            'payment_type_id': transaction.payment_type_id,
            'transaction_type': transaction.transaction_type,
            'date': transaction.date,
            'installment_count': transaction.installment_count,
            'verified': bool(transaction.verified),
        }
        unknown = set(fields) - set(values)
        if unknown:
            return False, f"Campi non modificabili: {', '.join(sorted(unknown))}"
        values.update(fields)

        error = self._check_values(values['description'], values['amount'], values['transaction_type'],
                                   values['date'], values['installment_count'])
        if error:
            return False, error
        error, category, payment_type = self._lookup(user_id, values['category_id'], values['payment_type_id'])
        if error:
            return False, error

        plan_fields = ('amount', 'date', 'payment_type_id', 'installment_count')
        plan_changed = any(
            values[name] != getattr(transaction, name) for name in plan_fields if name in fields
        )

        try:
            transaction.description = values['description'].strip()
            transaction.amount = float(values['amount'])
            transaction.category_id = category.id
            transaction.category = category.name
            transaction.payment_type_id = values['payment_type_id']
            transaction.transaction_type = values['transaction_type']
            transaction.date = values['date']
            transaction.installment_count = values['installment_count']
            transaction.verified = bool(values['verified'])

            # le rate vengono ricostruite solo se cambia ciò da cui dipendono
            if plan_changed:
                self.schedule_service.soft_delete_for_transaction(transaction.id)
                self._apply_payment_plan(transaction, payment_type)
            self.db.session.commit()
            return True, "Transazione aggiornata con successo"
        except Exception as e:
            self.db.session.rollback()
            logger.exception('Update of transaction %s failed', transaction_id)
            return False, f"Errore durante l'aggiornamento: {str(e)}"

    def soft_delete(self, transaction_id, user_id, now=None):
        """Elimina la transazione e annulla le sue rate nella stessa operazione"""
        transaction = self.get_by_id(transaction_id, user_id)
        if not transaction:
            return False, "Transazione non trovata"
        try:
            transaction.softdelete = True
            transaction.deleted_at = now if now is not None else now_millis()
            cancelled = self.schedule_service.soft_delete_for_transaction(transaction.id)
            self.db.session.commit()
            logger.info('Transaction %s deleted with %d payment schedules', transaction_id, cancelled)
            return True, "Transazione eliminata con successo"
        except Exception as e:
            self.db.session.rollback()
            logger.exception('Deletion of transaction %s failed', transaction_id)
            return False, f"Errore durante l'eliminazione: {str(e)}"
