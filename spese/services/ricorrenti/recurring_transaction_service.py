"""
Service per la gestione delle transazioni ricorrenti.
Fornisce operazioni CRUD complete per RecurringTransaction.
"""
import logging
import math
from typing import List, Optional, Tuple

from spese import db
from spese.exceptions import SchedulingError
from spese.models.categories import Category
from spese.models.payment_types import PaymentType
from spese.models.recurring_transaction import RecurringTransaction
from spese.services.ricorrenti.backfill_service import RecurringBackfillService
from spese.utils.scheduling import FREQUENZE, initialize_next_due_date, now_millis

logger = logging.getLogger(__name__)

TIPI_TRANSAZIONE = ('expense', 'income')

_UPDATABLE_FIELDS = (
    'description', 'amount', 'category_id', 'payment_type_id', 'transaction_type',
    'frequency', 'start_date', 'end_date', 'installment_count',
)


class RecurringTransactionService:
    """Service per gestire le transazioni ricorrenti"""

    def __init__(self, backfill_service=None):
        self.backfill_service = backfill_service or RecurringBackfillService()

    def get_by_id(self, template_id: int, user_id: int = None) -> Optional[RecurringTransaction]:
        """
        Recupera una transazione ricorrente per ID

        Args:
            template_id: ID della transazione ricorrente
            user_id: se indicato, la ricorrenza deve appartenere all'utente

        Returns:
            RecurringTransaction o None (anche se eliminata)
        """
        template = db.session.get(RecurringTransaction, template_id)
        if template is None or template.softdelete:
            return None
        if user_id is not None and template.user_id != user_id:
            return None
        return template

    def list_for_user(self, user_id: int, only_active: bool = False) -> List[RecurringTransaction]:
        query = RecurringTransaction.query.filter_by(user_id=user_id, softdelete=False)
        if only_active:
            query = query.filter_by(is_active=True)
        return query.order_by(
            RecurringTransaction.next_due_date.asc(),
            RecurringTransaction.description.asc(),
        ).all()

    def _validate(self, user_id, values) -> Optional[str]:
        """Restituisce il messaggio di errore o None se i valori sono validi"""
        description = values.get('description')
        if not description or not str(description).strip():
            return "La descrizione è obbligatoria"

        if values.get('transaction_type') not in TIPI_TRANSAZIONE:
            return "Il tipo deve essere 'expense' o 'income'"

        if values.get('frequency') not in FREQUENZE:
            return f"Frequenza non supportata: {values.get('frequency')}"

        amount = values.get('amount')
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount <= 0:
            return "L'importo deve essere un numero positivo"

        installment_count = values.get('installment_count')
        if isinstance(installment_count, bool) or not isinstance(installment_count, int) or installment_count < 1:
            return "Il numero di rate deve essere un intero >= 1"

        start_date = values.get('start_date')
        if isinstance(start_date, bool) or not isinstance(start_date, int):
            return "La data di inizio è obbligatoria"
        end_date = values.get('end_date')
        if end_date is not None:
            if isinstance(end_date, bool) or not isinstance(end_date, int):
                return "La data di fine non è valida"
            if end_date < start_date:
                return "La data di fine non può precedere la data di inizio"

        category = db.session.get(Category, values.get('category_id')) if values.get('category_id') else None
        if category is None or category.softdelete or category.user_id != user_id:
            return f"Categoria con ID {values.get('category_id')} non trovata"

        payment_type_id = values.get('payment_type_id')
        if payment_type_id is not None:
            payment_type = db.session.get(PaymentType, payment_type_id)
            if payment_type is None or payment_type.softdelete or payment_type.user_id != user_id:
                return f"Tipo di pagamento con ID {payment_type_id} non trovato"
        elif values.get('transaction_type') == 'expense':
            return "Il tipo di pagamento è obbligatorio per le spese"

        return None

    def create(self, user_id: int, description: str, amount: float, category_id: int,
               transaction_type: str, frequency: str, start_date: int,
               payment_type_id: int = None, end_date: int = None, installment_count: int = 1,
               is_active: bool = True, now: int = None) -> Tuple[bool, str, Optional[RecurringTransaction]]:
        """
        Crea una nuova transazione ricorrente e recupera le occorrenze già scadute

        Args:
            user_id: proprietario
            description: Descrizione della transazione
            amount: Importo (positivo)
            category_id: ID della categoria
            transaction_type: 'expense' o 'income'
            frequency: 'daily', 'weekly', 'monthly', 'semestrally' o 'yearly'
            start_date: prima occorrenza (millisecondi epoch)
            payment_type_id: obbligatorio per le spese
            end_date: ultima data ammessa (opzionale)
            installment_count: rate generate per ogni occorrenza
            is_active: stato iniziale
            now: istante di riferimento

        Returns:
            Tuple (success: bool, message: str, ricorrente: RecurringTransaction)
        """
        if now is None:
            now = now_millis()
        values = {
            'description': description,
            'amount': amount,
            'category_id': category_id,
            'payment_type_id': payment_type_id,
            'transaction_type': transaction_type,
            'frequency': frequency,
            'start_date': start_date,
            'end_date': end_date,
            'installment_count': installment_count,
        }
        error = self._validate(user_id, values)
        if error:
            return False, error, None

        try:
            template = RecurringTransaction(
                user_id=user_id,
                description=description.strip(),
                amount=float(amount),
                category_id=category_id,
                payment_type_id=payment_type_id,
                transaction_type=transaction_type,
                frequency=frequency,
                start_date=start_date,
                end_date=end_date,
                last_processed_date=None,
                next_due_date=start_date,
                is_active=bool(is_active),
                installment_count=installment_count,
                softdelete=False,
            )
            db.session.add(template)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.exception('Creation of recurring transaction failed')
            return False, f"Errore durante la creazione: {str(e)}", None

        if template.is_active and start_date <= now:
            # le occorrenze rimaste oltre il limite verranno recuperate dal job giornaliero
            try:
                stats = self.backfill_service.backfill_template(template.id, now=now)
            except SchedulingError as e:
                logger.exception('Backfill of recurring transaction %s failed', template.id)
                return True, f"Transazione ricorrente creata, recupero non completato: {str(e)}", template
            db.session.refresh(template)
            if stats['generated_transactions']:
                return True, (
                    f"Transazione ricorrente creata con successo "
                    f"({stats['generated_transactions']} transazioni generate)"
                ), template

        return True, "Transazione ricorrente creata con successo", template

    def update(self, template_id: int, user_id: int, now: int = None, **fields) -> Tuple[bool, str]:
        """
        Aggiorna una transazione ricorrente esistente (aggiornamento parziale)

        Se cambiano data di inizio o frequenza il cursore ``next_due_date``
        viene ricalcolato come prima occorrenza >= now.
        """
        unknown = set(fields) - set(_UPDATABLE_FIELDS)
        if unknown:
            return False, f"Campi non modificabili: {', '.join(sorted(unknown))}"

        template = self.get_by_id(template_id, user_id)
        if not template:
            return False, "Transazione ricorrente non trovata"
        if now is None:
            now = now_millis()

        values = {name: getattr(template, name) for name in _UPDATABLE_FIELDS}
        values.update(fields)
        error = self._validate(user_id, values)
        if error:
            return False, error

        try:
            reschedule = (
                values['start_date'] != template.start_date or values['frequency'] != template.frequency
            )
            for name in _UPDATABLE_FIELDS:
                setattr(template, name, values[name])
            template.description = template.description.strip()
            template.amount = float(template.amount)

            if reschedule and template.is_active:
                template.next_due_date = initialize_next_due_date(template.start_date, now, template.frequency)
            if template.end_date is not None and template.next_due_date is not None \
                    and template.next_due_date > template.end_date:
                template.is_active = False
                template.next_due_date = None

            db.session.commit()
            return True, "Transazione ricorrente aggiornata con successo"
        except Exception as e:
            db.session.rollback()
            logger.exception('Update of recurring transaction %s failed', template_id)
            return False, f"Errore durante l'aggiornamento: {str(e)}"

    def toggle_active(self, template_id: int, user_id: int, now: int = None) -> Tuple[bool, str]:
        """Attiva / disattiva una ricorrenza"""
        template = self.get_by_id(template_id, user_id)
        if not template:
            return False, "Transazione ricorrente non trovata"
        if now is None:
            now = now_millis()

        try:
            if template.is_active:
                template.is_active = False
                message = "Transazione ricorrente disattivata"
            else:
                if template.next_due_date is None:
                    next_due = initialize_next_due_date(template.start_date, now, template.frequency)
                    if template.end_date is not None and next_due > template.end_date:
                        return False, "La transazione ricorrente è terminata e non può essere riattivata"
                    template.next_due_date = next_due
                template.is_active = True
                message = "Transazione ricorrente attivata"
            db.session.commit()
            return True, message
        except Exception as e:
            db.session.rollback()
            logger.exception('Toggle of recurring transaction %s failed', template_id)
            return False, f"Errore durante l'aggiornamento: {str(e)}"

    def deactivate(self, template_id: int, user_id: int) -> Tuple[bool, str]:
        template = self.get_by_id(template_id, user_id)
        if not template:
            return False, "Transazione ricorrente non trovata"
        try:
            template.is_active = False
            db.session.commit()
            return True, "Transazione ricorrente disattivata"
        except Exception as e:
            db.session.rollback()
            logger.exception('Deactivation of recurring transaction %s failed', template_id)
            return False, f"Errore durante l'aggiornamento: {str(e)}"

    def soft_delete(self, template_id: int, user_id: int, now: int = None) -> Tuple[bool, str]:
        """
        Elimina (soft delete) una transazione ricorrente. Le transazioni già
        generate restano invariate.
        """
        template = self.get_by_id(template_id, user_id)
        if not template:
            return False, "Transazione ricorrente non trovata"
        try:
            description = template.description
            template.softdelete = True
            template.is_active = False
            template.deleted_at = now if now is not None else now_millis()
            db.session.commit()
            return True, f"Transazione ricorrente '{description}' eliminata con successo"
        except Exception as e:
            db.session.rollback()
            logger.exception('Deletion of recurring transaction %s failed', template_id)
            return False, f"Errore durante l'eliminazione: {str(e)}"

    def get_stats(self, user_id: int) -> dict:
        """
        Restituisce statistiche sulle transazioni ricorrenti attive dell'utente

        Returns:
            Dict con statistiche
        """
        templates = self.list_for_user(user_id)
        active = [t for t in templates if t.is_active]
        entrate = [t for t in active if t.transaction_type == 'income']
        uscite = [t for t in active if t.transaction_type == 'expense']

        importo_entrate = sum(t.amount for t in entrate)
        importo_uscite = sum(t.amount for t in uscite)
        return {
            'totale': len(templates),
            'attive': len(active),
            'num_entrate': len(entrate),
            'num_uscite': len(uscite),
            'importo_entrate': importo_entrate,
            'importo_uscite': importo_uscite,
            'saldo': importo_entrate - importo_uscite,
        }
