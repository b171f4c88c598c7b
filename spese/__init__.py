"""Applicazione Flask per spese, entrate e transazioni ricorrenti"""

import logging
import os

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from spese.config import config

# Istanze globali
db = SQLAlchemy()


def create_app(config_name='default'):
    """Factory pattern per creare l'applicazione Flask"""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Il livello di log vale sia per app.logger sia per i logger `spese.*` dei servizi
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger('spese').setLevel(level)

    # Inizializza le estensioni
    db.init_app(app)

    # Importa e registra i blueprint
    from spese.views.recurring import recurring_bp
    from spese.views.transactions import transactions_bp
    from spese.views.projections import projections_bp
    from spese.views.settings import settings_bp

    app.register_blueprint(recurring_bp, url_prefix='/recurring')
    app.register_blueprint(transactions_bp, url_prefix='/transactions')
    app.register_blueprint(projections_bp, url_prefix='/projections')
    app.register_blueprint(settings_bp, url_prefix='/settings')

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    # Con SQLite creiamo le tabelle all'avvio se il database non esiste ancora
    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if db_uri.startswith('sqlite:///') and not app.config.get('TESTING'):
        db_path = db_uri[len('sqlite:///'):]
        if db_path and db_path != ':memory:':
            os.makedirs(os.path.dirname(db_path) or '.', exist_ok=True)
        with app.app_context():
            # registra i modelli nei metadata prima di create_all
            import spese.models  # noqa: F401
            db.create_all()

    return app
