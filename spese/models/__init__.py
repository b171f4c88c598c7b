"""
Modelli del database

Import esplicito dei modelli per assicurare che siano registrati nei metadata
quando l'app esegue ``db.create_all()``.
"""
from spese.models.users import User  # noqa: F401
from spese.models.categories import Category  # noqa: F401
from spese.models.payment_types import PaymentType  # noqa: F401
from spese.models.recurring_transaction import RecurringTransaction  # noqa: F401
from spese.models.transactions import Transaction  # noqa: F401
from spese.models.payment_schedule import PaymentSchedule  # noqa: F401
