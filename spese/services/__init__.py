"""
Servizio base per la gestione della business logic
"""
import logging

from dateutil.relativedelta import relativedelta

from spese import db
from spese.utils.scheduling import from_millis, now_millis, to_millis

logger = logging.getLogger(__name__)

# Esporta le funzioni per l'import diretto
__all__ = ['BaseService', 'get_month_window']


class BaseService:
    """Classe base per i servizi con metodi comuni"""

    def __init__(self):
        self.db = db

    def save(self, obj):
        """Salva un oggetto nel database"""
        try:
            self.db.session.add(obj)
            self.db.session.commit()
            return True, "Operazione completata con successo"
        except Exception as e:
            self.db.session.rollback()
            logger.exception('save failed for %r', obj)
            return False, str(e)

    def soft_delete(self, obj, now=None):
        """Segna un oggetto come eliminato (i record non vengono mai cancellati)"""
        try:
            obj.softdelete = True
            if hasattr(obj, 'deleted_at'):
                obj.deleted_at = now if now is not None else now_millis()
            self.db.session.commit()
            return True, "Eliminazione completata con successo"
        except Exception as e:
            self.db.session.rollback()
            logger.exception('soft delete failed for %r', obj)
            return False, str(e)


def get_month_window(reference, months_ahead=4):
    """Finestra dal primo istante del mese di ``reference`` all'ultimo istante
    del mese che cade ``months_ahead`` mesi dopo (millisecondi epoch)."""
    ref = from_millis(reference)
    start = ref.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = start + relativedelta(months=months_ahead + 1)
    return to_millis(start), to_millis(end) - 1
