"""
Proiezione dei pagamenti futuri: rate in scadenza e occorrenze delle ricorrenze
attive nella finestra dal mese corrente ai ``months_ahead`` mesi successivi.
Solo lettura.
"""
import logging

from flask import current_app

from spese.defaults import DESCRIZIONE_SCONOSCIUTA
from spese.models.payment_schedule import PaymentSchedule
from spese.models.recurring_transaction import RecurringTransaction
from spese.models.transactions import Transaction
from spese.services import BaseService, get_month_window
from spese.utils.scheduling import next_occurrence, now_millis

logger = logging.getLogger(__name__)

# limite di passi per ricorrenza contro dati patologici (es. daily dal 1970)
MAX_STEPS_PER_TEMPLATE = 20000


def first_projected_occurrence(template):
    """Prima occorrenza non ancora materializzata.

    È il cursore ``next_due_date``, cioè la data che il catch-up genererà per
    prima; senza cursore si riparte dall'ultima occorrenza elaborata.
    """
    if template.next_due_date is not None:
        return max(template.next_due_date, template.start_date)
    if template.last_processed_date is not None and template.last_processed_date >= template.start_date:
        return next_occurrence(template.last_processed_date, template.frequency, template.start_date)
    return template.start_date


def occurrences_in_window(template, window_start, window_end, max_steps=MAX_STEPS_PER_TEMPLATE):
    """Occorrenze di ``template`` comprese tra ``window_start`` e il minimo fra
    ``end_date`` e ``window_end`` (estremi inclusi)."""
    limit = window_end if template.end_date is None else min(template.end_date, window_end)
    occurrence = first_projected_occurrence(template)

    dates = []
    steps = 0
    while occurrence <= limit:
        if occurrence >= window_start:
            dates.append(occurrence)
        following = next_occurrence(occurrence, template.frequency, template.start_date)
        steps += 1
        if following <= occurrence or steps >= max_steps:
            logger.warning('Projection of recurring transaction %s stopped after %d steps', template.id, steps)
            break
        occurrence = following
    return dates


class ProjectionService(BaseService):

    def get_projected_payments(self, user_id, now=None, months_ahead=None):
        """Pagamenti previsti per l'utente, ordinati per data.

        Le rate (type 'installment') vengono dalle payment schedule non eliminate;
        le occorrenze (type 'recurring') sono calcolate con lo stesso passo usato
        dal generatore, senza scrivere nulla sul database.
        """
        if now is None:
            now = now_millis()
        if months_ahead is None:
            months_ahead = current_app.config.get('PROJECTION_MONTHS_AHEAD', 4)
        window_start, window_end = get_month_window(now, months_ahead)

        items = self._installment_items(user_id, window_start, window_end)
        items.extend(self._recurring_items(user_id, window_start, window_end))

        # sorted() è stabile: a parità di data le rate precedono le ricorrenze
        return sorted(items, key=lambda item: item['date'])

    def _installment_items(self, user_id, window_start, window_end):
        schedules = PaymentSchedule.query.filter(
            PaymentSchedule.user_id == user_id,
            PaymentSchedule.softdelete.is_(False),
            PaymentSchedule.due_date >= window_start,
            PaymentSchedule.due_date <= window_end,
        ).order_by(PaymentSchedule.due_date.asc(), PaymentSchedule.id.asc()).all()

        items = []
        for schedule in schedules:
            transaction = self.db.session.get(Transaction, schedule.transaction_id)
            items.append({
                'date': schedule.due_date,
                'amount': schedule.amount,
                'description': transaction.description if transaction else DESCRIZIONE_SCONOSCIUTA,
                'type': 'installment',
                'original_expense_id': schedule.transaction_id,
                'recurring_transaction_id': None,
                'category_id': transaction.category_id if transaction else None,
                'payment_type_id': schedule.payment_type_id,
                'transaction_type': transaction.transaction_type if transaction else 'expense',
                'installment_number': schedule.installment_number,
                'total_installments': schedule.total_installments,
            })
        return items

    def _recurring_items(self, user_id, window_start, window_end):
        templates = RecurringTransaction.query.filter(
            RecurringTransaction.user_id == user_id,
            RecurringTransaction.is_active.is_(True),
            RecurringTransaction.softdelete.is_(False),
            RecurringTransaction.start_date <= window_end,
        ).order_by(RecurringTransaction.id.asc()).all()

        items = []
        for template in templates:
            for occurrence in occurrences_in_window(template, window_start, window_end):
                items.append({
                    'date': occurrence,
                    'amount': template.amount,
                    'description': template.description,
                    'type': 'recurring',
                    'original_expense_id': None,
                    'recurring_transaction_id': template.id,
                    'category_id': template.category_id,
                    'payment_type_id': template.payment_type_id,
                    'transaction_type': template.transaction_type,
                    'installment_number': None,
                    'total_installments': None,
                })
        return items
