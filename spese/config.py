"""Configurazione per l'applicazione di gestione spese e ricorrenze"""
import os


class Config:
    """Configurazione principale dell'applicazione"""

    # Database
    # Path assoluto verso la cartella `db/` nella root del repository,
    # sovrascrivibile con SPESE_DATABASE_URI.
    BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'SPESE_DATABASE_URI',
        f'sqlite:///{os.path.join(BASE_DIR, "db", "spese.db")}',
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Flask
    SECRET_KEY = os.environ.get('SPESE_SECRET_KEY', 'spese-dev-secret-key')
    JSON_SORT_KEYS = False

    # Server
    HOST = '0.0.0.0'
    PORT = 5001

    LOG_LEVEL = os.environ.get('SPESE_LOG_LEVEL', 'INFO')

    # Catch-up delle ricorrenze (job giornaliero)
    CATCHUP_BATCH_SIZE = 100
    CATCHUP_PER_ITEM_CAP = 24
    CATCHUP_MAX_BATCHES = 50
    # Backfill sincrono alla creazione: il resto lo recupera il job giornaliero
    CREATION_BACKFILL_CAP = 3660

    # Proiezione: mesi successivi a quello corrente
    PROJECTION_MONTHS_AHEAD = 4

    # Migrazione nextDueDate
    MIGRATION_BATCH_SIZE = 100
    MIGRATION_MAX_RETRIES = 3


class TestingConfig(Config):
    """Configurazione per i test: database SQLite in memoria"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'DEBUG'


config = {
    'default': Config,
    'testing': TestingConfig,
}
