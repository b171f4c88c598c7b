"""Migrazione di manutenzione: ricalcola next_due_date delle ricorrenze attive"""
import logging
import time

from spese import db
from spese.models.recurring_transaction import RecurringTransaction
from spese.utils.scheduling import next_occurrence

logger = logging.getLogger(__name__)


class MigrationFailedError(RuntimeError):
    """Il driver ha esaurito i tentativi a disposizione."""


class RecurringMigrationService:
    """Ricalcola il cursore ``next_due_date`` a lotti, paginando per id.

    Il cursore diventa l'occorrenza successiva a ``last_processed_date``
    (oppure ``start_date`` se la ricorrenza non ha ancora generato nulla);
    se supera ``end_date`` la ricorrenza viene disattivata.
    """

    def __init__(self, sleep=time.sleep):
        self.sleep = sleep

    def migrate_next_due_date_batch(self, batch_size=100, last_processed_id=None):
        query = RecurringTransaction.query.filter(
            RecurringTransaction.is_active.is_(True),
            RecurringTransaction.softdelete.is_(False),
        )
        if last_processed_id is not None:
            query = query.filter(RecurringTransaction.id > last_processed_id)
        items = query.order_by(RecurringTransaction.id.asc()).limit(batch_size).all()

        result = {'processed': 0, 'updated': 0, 'errors': 0,
                  'has_more': len(items) == batch_size, 'last_processed_id': last_processed_id}
        for template in items:
            try:
                if template.last_processed_date is not None:
                    candidate = next_occurrence(
                        template.last_processed_date, template.frequency, template.start_date
                    )
                else:
                    candidate = template.start_date
            except Exception:
                logger.exception('Error migrating recurring transaction %s', template.id)
                result['errors'] += 1
                result['processed'] += 1
                result['last_processed_id'] = template.id
                continue

            if template.end_date is not None and candidate > template.end_date:
                template.is_active = False
                template.next_due_date = None
            else:
                template.next_due_date = candidate
            result['updated'] += 1
            result['processed'] += 1
            result['last_processed_id'] = template.id

        db.session.commit()
        return result

    def run_next_due_date_migration(self, max_retries=3, batch_size=100):
        """Esegue tutti i lotti; attende 2**tentativo secondi dopo un lotto fallito
        e si arrende dopo ``max_retries`` fallimenti consecutivi."""
        totals = {'total_processed': 0, 'total_updated': 0, 'total_errors': 0, 'last_processed_id': None}
        last_processed_id = None
        has_more = True
        retry_count = 0

        while has_more:
            try:
                batch = self.migrate_next_due_date_batch(batch_size, last_processed_id)
            except Exception:
                db.session.rollback()
                retry_count += 1
                logger.exception('Migration batch failed (attempt %d/%d)', retry_count, max_retries)
                if retry_count >= max_retries:
                    raise MigrationFailedError(f"Recurring migration failed after {max_retries} retries")
                self.sleep(2 ** retry_count)
                continue

            retry_count = 0
            totals['total_processed'] += batch['processed']
            totals['total_updated'] += batch['updated']
            totals['total_errors'] += batch['errors']
            has_more = batch['has_more']
            last_processed_id = batch['last_processed_id']
            totals['last_processed_id'] = last_processed_id

        logger.info('next_due_date migration completed: %s', totals)
        return totals
