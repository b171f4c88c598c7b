"""Servizio per le rate (payment schedule) delle transazioni pagate a rate."""
import logging

from spese.models.payment_schedule import PaymentSchedule
from spese.services import BaseService
from spese.utils.scheduling import installment_due_dates, split_amount_into_installments

logger = logging.getLogger(__name__)


class PaymentScheduleService(BaseService):
    """Creazione e annullamento delle rate. Non esegue commit: il chiamante
    include le rate nella propria transazione sul database."""

    def add_schedules(self, transaction, payment_type_id, first_due_date):
        """Aggiunge alla sessione le rate di ``transaction``.

        Gli importi sommano esattamente all'importo della transazione (al
        centesimo); la rata i scade i-1 mesi dopo ``first_due_date``.
        """
        total = transaction.installment_count
        amounts = split_amount_into_installments(transaction.amount, total)
        due_dates = installment_due_dates(first_due_date, total)

        schedules = []
        for index, (amount, due_date) in enumerate(zip(amounts, due_dates), start=1):
            schedule = PaymentSchedule(
                user_id=transaction.user_id,
                transaction_id=transaction.id,
                payment_type_id=payment_type_id,
                amount=amount,
                due_date=due_date,
                installment_number=index,
                total_installments=total,
                softdelete=False,
            )
            self.db.session.add(schedule)
            schedules.append(schedule)

        logger.debug('Added %d payment schedules for transaction %s', len(schedules), transaction.id)
        return schedules

    def soft_delete_for_transaction(self, transaction_id):
        """Annulla (soft delete) tutte le rate di una transazione"""
        schedules = PaymentSchedule.query.filter_by(transaction_id=transaction_id, softdelete=False).all()
        for schedule in schedules:
            schedule.softdelete = True
        return len(schedules)

    def get_for_transaction(self, transaction_id):
        return PaymentSchedule.query.filter_by(
            transaction_id=transaction_id, softdelete=False
        ).order_by(PaymentSchedule.installment_number.asc()).all()
