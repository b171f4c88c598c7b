"""Entry point per l'applicazione.

Questo script avvia l'app Flask e può inizializzare il database se
la variabile d'ambiente `INIT_DB` è impostata (es. INIT_DB=1).
"""

import logging
import os

from spese import create_app, db


def init_database():
    """Crea le tabelle mancanti. Eseguita solo con INIT_DB=1."""
    import spese.models  # noqa: F401

    db.create_all()


def main():
    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app = create_app()

    # Optional DB init (usare solo in fase di provisioning)
    if os.environ.get('INIT_DB') == '1':
        with app.app_context():
            init_database()

    app.run(host=app.config.get('HOST', '0.0.0.0'), port=app.config.get('PORT', 5001))


if __name__ == '__main__':
    main()
