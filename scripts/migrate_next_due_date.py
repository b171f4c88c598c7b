"""Ricalcola next_due_date di tutte le ricorrenze attive.

Uso: eseguire nello stesso ambiente dell'app Flask (usa create_app()).
Opzioni:
  --max-retries N : tentativi per lotto fallito (default MIGRATION_MAX_RETRIES)
  --batch-size N  : ricorrenze per lotto (default MIGRATION_BATCH_SIZE)
"""
import argparse
import logging

from spese import create_app


def main(argv=None):
    parser = argparse.ArgumentParser(description='Migrazione next_due_date delle transazioni ricorrenti')
    parser.add_argument('--max-retries', type=int, default=None, help='Tentativi massimi consecutivi')
    parser.add_argument('--batch-size', type=int, default=None, help='Ricorrenze per lotto')
    args = parser.parse_args(argv)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app = create_app()
    with app.app_context():
        from spese.services.migrations.next_due_date_migration import RecurringMigrationService

        max_retries = args.max_retries or app.config.get('MIGRATION_MAX_RETRIES', 3)
        batch_size = args.batch_size or app.config.get('MIGRATION_BATCH_SIZE', 100)
        totals = RecurringMigrationService().run_next_due_date_migration(max_retries, batch_size)
        print(
            f"Processed {totals['total_processed']} recurring, updated {totals['total_updated']}, "
            f"errors {totals['total_errors']}"
        )


if __name__ == '__main__':
    main()
