"""
Recupero (catch-up) delle occorrenze scadute delle transazioni ricorrenti.

Un'unica routine, ``run_backfill``, serve sia il job giornaliero (cron) sia il
backfill eseguito alla creazione di una ricorrenza con data di inizio passata.
Ogni generazione è una transazione sul database indipendente: un errore su una
ricorrenza viene registrato nel log e il processo passa alla successiva.
"""
import logging

from flask import current_app

from spese.exceptions import InvalidArgumentError
from spese.models.recurring_transaction import RecurringTransaction
from spese.services import BaseService
from spese.services.ricorrenti.generated_transaction_service import GeneratedTransactionService
from spese.utils.scheduling import now_millis

logger = logging.getLogger(__name__)


def _check_positive_int(value, name):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(f"{name} must be an integer >= 1")


class RecurringBackfillService(BaseService):
    """Materializza le occorrenze con ``next_due_date <= now``."""

    def __init__(self, generator=None):
        super().__init__()
        self.generator = generator or GeneratedTransactionService()

    def get_due_batch(self, now, batch_size, exclude_ids=(), template_ids=None):
        query = RecurringTransaction.query.filter(
            RecurringTransaction.is_active.is_(True),
            RecurringTransaction.softdelete.is_(False),
            RecurringTransaction.next_due_date.isnot(None),
            RecurringTransaction.next_due_date <= now,
        )
        if template_ids is not None:
            query = query.filter(RecurringTransaction.id.in_(list(template_ids)))
        if exclude_ids:
            query = query.filter(RecurringTransaction.id.notin_(list(exclude_ids)))
        return query.order_by(
            RecurringTransaction.next_due_date.asc(), RecurringTransaction.id.asc()
        ).limit(batch_size).all()

    def run_backfill(self, batch_size, per_item_cap, max_batches, template_ids=None, now=None):
        """Esegue il recupero a lotti.

        Args:
            batch_size: ricorrenze lette per lotto
            per_item_cap: massimo di generazioni per ricorrenza in questa esecuzione
            max_batches: massimo di lotti per esecuzione
            template_ids: limita il recupero a queste ricorrenze
            now: istante di riferimento (millisecondi), fissato per tutta l'esecuzione

        Returns:
            dict con i contatori ``processed_recurring``, ``generated_transactions``,
            ``batches_run``, ``deactivated`` e ``failed``
        """
        _check_positive_int(batch_size, 'batch_size')
        _check_positive_int(per_item_cap, 'per_item_cap')
        _check_positive_int(max_batches, 'max_batches')
        if now is None:
            now = now_millis()

        stats = {
            'processed_recurring': 0,
            'generated_transactions': 0,
            'batches_run': 0,
            'deactivated': 0,
            'failed': 0,
        }
        # le ricorrenze già viste non vengono rilette nei lotti successivi
        seen_ids = set()

        while stats['batches_run'] < max_batches:
            batch = self.get_due_batch(now, batch_size, seen_ids, template_ids)
            if not batch:
                break
            stats['batches_run'] += 1

            for template in batch:
                seen_ids.add(template.id)
                stats['processed_recurring'] += 1
                try:
                    # i contatori vengono aggiornati a ogni commit, anche se poi la ricorrenza fallisce
                    deactivated = self._process_template(template.id, now, per_item_cap, stats)
                except Exception:
                    self.db.session.rollback()
                    stats['failed'] += 1
                    logger.exception('Catch-up failed for recurring transaction %s', template.id)
                    continue
                if deactivated:
                    stats['deactivated'] += 1

            if len(batch) < batch_size:
                break

        logger.info(
            'Catch-up completed: %(processed_recurring)d recurring processed, '
            '%(generated_transactions)d transactions generated, %(batches_run)d batches, '
            '%(deactivated)d deactivated, %(failed)d failed', stats,
        )
        return stats

    def _process_template(self, template_id, now, per_item_cap, stats):
        """Catch-up of a single template; returns True when it ended up deactivated.

        ``stats['generated_transactions']`` is incremented after every committed
        generation, so it stays exact when a later iteration raises.
        """
        template = self.generator.get_template(template_id)

        if template.next_due_date is not None and template.next_due_date < template.start_date:
            logger.warning(
                'Recurring transaction %s: next_due_date %s before start_date %s, clamped',
                template.id, template.next_due_date, template.start_date,
            )
            template.next_due_date = template.start_date
            self.db.session.commit()

        iterations = 0
        while (
            template.is_active
            and not template.softdelete
            and template.next_due_date is not None
            and template.next_due_date <= now
            and iterations < per_item_cap
        ):
            iterations += 1
            target_date = template.next_due_date

            result = self.generator.expire_if_past_end(template, target_date)
            if result['status'] == 'expired':
                return True

            already_generated = self.generator.find_existing(template.id, target_date) is not None
            transaction_id = self.generator.generate(template.id, target_date)
            if not already_generated:
                stats['generated_transactions'] += 1
            self.db.session.refresh(template)

            if template.next_due_date == target_date:
                logger.warning(
                    'Recurring transaction %s did not advance past %s (transaction %s), skipped',
                    template.id, target_date, transaction_id,
                )
                break

        if iterations >= per_item_cap and template.next_due_date is not None and template.next_due_date <= now:
            logger.info(
                'Recurring transaction %s reached the cap of %d generations, resumes next run',
                template.id, per_item_cap,
            )
        # la disattivazione può avvenire anche dentro generate, quando la prossima
        # occorrenza supera end_date
        return not template.is_active

    def backfill_template(self, template_id, now=None, per_item_cap=None):
        """Recupero eseguito alla creazione di una ricorrenza con inizio nel passato"""
        if per_item_cap is None:
            per_item_cap = current_app.config.get('CREATION_BACKFILL_CAP', 3660)
        return self.run_backfill(
            batch_size=1,
            per_item_cap=per_item_cap,
            max_batches=1,
            template_ids=[template_id],
            now=now,
        )

    def run_catchup(self, batch_size=None, per_item_cap=None, max_batches=None, now=None):
        """Job giornaliero: usa i limiti della configurazione se non specificati"""
        cfg = current_app.config
        return self.run_backfill(
            batch_size=batch_size if batch_size is not None else cfg.get('CATCHUP_BATCH_SIZE', 100),
            per_item_cap=per_item_cap if per_item_cap is not None else cfg.get('CATCHUP_PER_ITEM_CAP', 24),
            max_batches=max_batches if max_batches is not None else cfg.get('CATCHUP_MAX_BATCHES', 50),
            now=now,
        )
