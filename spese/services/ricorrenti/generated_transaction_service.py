"""
Servizio che materializza le occorrenze delle ricorrenze in transazioni.

Ogni chiamata a ``generate`` crea al più una transazione per la coppia
(ricorrenza, data) e avanza il cursore ``next_due_date`` della ricorrenza.
Transazione, rate e aggiornamento del cursore sono salvati con un unico commit.
"""
import logging

from spese.exceptions import BeforeStartDateError, DataIntegrityError, NotFoundError, PastEndDateError
from spese.models.categories import Category
from spese.models.payment_types import PaymentType
from spese.models.recurring_transaction import RecurringTransaction
from spese.models.transactions import Transaction
from spese.services import BaseService
from spese.services.transazioni.payment_schedule_service import PaymentScheduleService
from spese.utils.scheduling import calculate_next_due_date_for_payment_type, next_occurrence

logger = logging.getLogger(__name__)


class GeneratedTransactionService(BaseService):
    """Generatore delle transazioni a partire dalle ricorrenze."""

    def __init__(self):
        super().__init__()
        self.schedule_service = PaymentScheduleService()

    def get_template(self, template_id):
        template = self.db.session.get(RecurringTransaction, template_id)
        if template is None:
            raise NotFoundError(f"Recurring transaction {template_id} not found")
        return template

    def find_existing(self, template_id, target_date):
        """Transazione già generata per (ricorrenza, data), anche se eliminata."""
        return Transaction.query.filter_by(
            recurring_transaction_id=template_id, date=target_date
        ).first()

    def expire_if_past_end(self, template, target_date):
        """Disattiva la ricorrenza se ``target_date`` supera ``end_date``.

        Returns ``{'status': 'ok'}`` when the date is inside the window, or
        ``{'status': 'expired', 'deactivated': True}`` after committing the
        deactivation (``is_active=False``, ``next_due_date=None``).
        """
        if template.end_date is None or target_date <= template.end_date:
            return {'status': 'ok'}

        template.is_active = False
        template.next_due_date = None
        self.db.session.commit()
        logger.info(
            'Recurring transaction %s deactivated: %s is past end date %s',
            template.id, target_date, template.end_date,
        )
        return {'status': 'expired', 'deactivated': True}

    def generate(self, template_id, target_date):
        """Materializza l'occorrenza ``target_date`` e restituisce l'id della transazione.

        Idempotente: se la transazione per (ricorrenza, data) esiste già viene
        restituito il suo id senza altre scritture.
        """
        template = self.get_template(template_id)

        if target_date < template.start_date:
            raise BeforeStartDateError(
                f"Target date {target_date} before start date {template.start_date}"
            )
        if self.expire_if_past_end(template, target_date)['status'] == 'expired':
            raise PastEndDateError(template_id, target_date)

        existing = self.find_existing(template.id, target_date)
        if existing is not None:
            logger.debug('Occurrence %s of recurring %s already generated', target_date, template_id)
            return existing.id

        # Category snapshot: una categoria mancante indica un template corrotto
        category = self.db.session.get(Category, template.category_id)
        if category is None:
            raise DataIntegrityError(
                f"Category {template.category_id} of recurring transaction {template_id} not found"
            )

        try:
            transaction = self._materialize(template, category, target_date)
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

        logger.info(
            'Generated transaction %s from recurring %s at %s (next due %s)',
            transaction.id, template_id, target_date, template.next_due_date,
        )
        return transaction.id

    def _materialize(self, template, category, target_date):
        payment_type = None
        if template.payment_type_id is not None:
            payment_type = self.db.session.get(PaymentType, template.payment_type_id)
            if payment_type is None:
                raise DataIntegrityError(
                    f"Payment type {template.payment_type_id} of recurring transaction {template.id} not found"
                )

        transaction = Transaction(
            user_id=template.user_id,
            description=template.description,
            amount=template.amount,
            category=category.name,
            category_id=template.category_id,
            payment_type_id=template.payment_type_id,
            transaction_type=template.transaction_type,
            date=target_date,
            due_date=calculate_next_due_date_for_payment_type(target_date, payment_type) if payment_type else None,
            installment_count=template.installment_count or 1,
            verified=False,
            recurring_transaction_id=template.id,
            softdelete=False,
        )
        self.db.session.add(transaction)
        self.db.session.flush()

        # L'ancoraggio è sempre il giorno di start_date, mai quello dell'ultima occorrenza
        template.last_processed_date = target_date
        template.next_due_date = next_occurrence(target_date, template.frequency, template.start_date)
        if template.end_date is not None and template.next_due_date > template.end_date:
            template.is_active = False
            template.next_due_date = None
            logger.info('Recurring transaction %s reached its end date', template.id)

        if transaction.installment_count > 1 and payment_type is not None:
            self.schedule_service.add_schedules(transaction, payment_type.id, target_date)

        return transaction
