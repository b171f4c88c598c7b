"""Catch-up giornaliero delle transazioni ricorrenti.

Genera le occorrenze scadute (next_due_date <= adesso) di tutte le ricorrenze
attive. Pensato per il cron:

    0 0 * * *  cd /path/to/spese && python scripts/run_catchup.py

Opzioni (default dalla configurazione):
  --batch-size N     : ricorrenze lette per lotto
  --per-item-cap N   : massimo di transazioni generate per ricorrenza
  --max-batches N    : massimo di lotti per esecuzione
"""
import argparse
import logging
import sys

from spese import create_app


def main(argv=None):
    parser = argparse.ArgumentParser(description='Catch-up delle transazioni ricorrenti scadute')
    parser.add_argument('--batch-size', type=int, default=None, help='Ricorrenze per lotto (default CATCHUP_BATCH_SIZE)')
    parser.add_argument('--per-item-cap', type=int, default=None, help='Generazioni massime per ricorrenza (default CATCHUP_PER_ITEM_CAP)')
    parser.add_argument('--max-batches', type=int, default=None, help='Lotti massimi (default CATCHUP_MAX_BATCHES)')
    args = parser.parse_args(argv)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app = create_app()
    with app.app_context():
        from spese.services.ricorrenti.backfill_service import RecurringBackfillService

        stats = RecurringBackfillService().run_catchup(
            batch_size=args.batch_size,
            per_item_cap=args.per_item_cap,
            max_batches=args.max_batches,
        )
        print(
            f"Processed {stats['processed_recurring']} recurring, generated "
            f"{stats['generated_transactions']} transactions in {stats['batches_run']} batch(es); "
            f"{stats['deactivated']} deactivated, {stats['failed']} failed"
        )
    return 1 if stats['failed'] else 0


if __name__ == '__main__':
    sys.exit(main())
