"""
Calcolo delle scadenze per transazioni ricorrenti, rate e carte di credito.

Funzioni pure, senza accesso al database: il generatore delle transazioni,
il backfill e la proiezione usano tutti questo modulo, così la sequenza delle
occorrenze di una ricorrenza è definita in un solo punto.

Tutte le date sono timestamp in millisecondi (epoch) interpretati in ora locale.
"""
import math
import time
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from spese.exceptions import InvalidArgumentError, UnsupportedFrequencyError

FREQUENZE = ('daily', 'weekly', 'monthly', 'semestrally', 'yearly')

# Frequenze basate sul mese: il giorno viene riportato sul giorno di ancoraggio
_MONTHS_BY_FREQUENCY = {
    'monthly': 1,
    'semestrally': 6,
    'yearly': 12,
}
_DAYS_BY_FREQUENCY = {
    'daily': 1,
    'weekly': 7,
}

# Statement convention: the payment is due the day after the nominal due day.
# Pending confirmation from the product owner, keep as is.
STATEMENT_DUE_OFFSET_DAYS = 1


def now_millis():
    return int(time.time() * 1000)


def to_millis(dt):
    """Converte un datetime naive (ora locale) in millisecondi epoch."""
    return int(round(dt.timestamp() * 1000))


def from_millis(ms):
    """Converte millisecondi epoch in un datetime naive in ora locale."""
    return datetime.fromtimestamp(ms / 1000)


def _at_local_noon(ms):
    return from_millis(ms).replace(hour=12, minute=0, second=0, microsecond=0)


def _check_frequency(frequency):
    if frequency not in FREQUENZE:
        raise UnsupportedFrequencyError(frequency)


def _check_day_of_month(value, name):
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 31:
        raise InvalidArgumentError(f"{name} must be between 1 and 31")


def anchor_day_for(start_date):
    """Giorno del mese di startDate: non viene mai ricalcolato dalle occorrenze."""
    return from_millis(start_date).day


def step_date_by_frequency(current, frequency, anchor_day=None):
    """Return the occurrence following ``current`` for ``frequency``.

    The date is moved to local noon before any arithmetic so DST changes never
    shift it across a day boundary. Month-based frequencies land on
    ``min(anchor_day, days in target month)``: Jan 31 -> Feb 29 -> Mar 31.
    """
    _check_frequency(frequency)
    if anchor_day is not None:
        _check_day_of_month(anchor_day, 'anchor_day')

    date = _at_local_noon(current)
    if frequency in _DAYS_BY_FREQUENCY:
        return to_millis(date + timedelta(days=_DAYS_BY_FREQUENCY[frequency]))

    day = anchor_day if anchor_day is not None else date.day
    # relativedelta clamps an absolute day to the length of the target month
    stepped = date + relativedelta(months=_MONTHS_BY_FREQUENCY[frequency], day=day)
    return to_millis(stepped)


def next_occurrence(last_date, frequency, start_date):
    """Occorrenza successiva a ``last_date`` per una ricorrenza iniziata a ``start_date``."""
    return step_date_by_frequency(last_date, frequency, anchor_day_for(start_date))


def initialize_next_due_date(start_date, now, frequency):
    """First occurrence >= ``now``, searching forward from ``start_date``."""
    _check_frequency(frequency)
    if start_date >= now:
        return start_date

    anchor = anchor_day_for(start_date)
    candidate = to_millis(_at_local_noon(start_date))
    while candidate < now:
        candidate = step_date_by_frequency(candidate, frequency, anchor)
    return candidate


def _round_half_up(value):
    # stesso arrotondamento di Math.round (non quello bancario di round())
    return int(math.floor(value + 0.5))


def split_amount_into_installments(total_amount, total_installments):
    """Divide un importo in rate lavorando in centesimi interi.

    I centesimi di resto vanno alle prime rate:
    ``split_amount_into_installments(100, 3) == [33.34, 33.33, 33.33]``.
    """
    try:
        n = float(total_installments)
        amount = float(total_amount)
    except (TypeError, ValueError):
        raise InvalidArgumentError("totalInstallments and totalAmount must be numbers")

    if isinstance(total_installments, bool) or not math.isfinite(n) or n < 1 or n != int(n):
        raise InvalidArgumentError("totalInstallments must be an integer >= 1")
    if not math.isfinite(amount):
        raise InvalidArgumentError("totalAmount must be a finite number")

    n = int(n)
    total_cents = _round_half_up(amount * 100)
    base_cents = total_cents // n
    remainder = total_cents - base_cents * n

    return [(base_cents + (1 if i < remainder else 0)) / 100 for i in range(n)]


def installment_due_dates(first_due_date, total_installments):
    """Scadenze mensili delle rate: la rata i cade i-1 mesi dopo la prima."""
    first = from_millis(first_due_date)
    return [to_millis(first + relativedelta(months=i)) for i in range(total_installments)]


def _payment_type_field(payment_type, name, camel_name):
    if isinstance(payment_type, dict):
        value = payment_type.get(name)
        return value if value is not None else payment_type.get(camel_name)
    return getattr(payment_type, name, None)


def _calendar_date(year, month, day):
    """Local midnight of (year, month, day), letting days overflow into the next month."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1) + timedelta(days=day - 1)


def calculate_next_due_date_for_payment_type(transaction_date, payment_type):
    """Data di pagamento dell'estratto conto in cui ricade una transazione.

    Per i tipi di pagamento non di credito (o senza giorno di chiusura/scadenza)
    restituisce la data della transazione invariata.
    """
    is_credit = _payment_type_field(payment_type, 'is_credit', 'isCredit')
    closing_day = _payment_type_field(payment_type, 'closing_day', 'closingDay')
    due_day = _payment_type_field(payment_type, 'due_day', 'dueDay')
    if not is_credit or not closing_day or not due_day:
        return transaction_date

    _check_day_of_month(closing_day, 'closing_day')
    _check_day_of_month(due_day, 'due_day')

    tx_date = from_millis(transaction_date)
    closing = _calendar_date(tx_date.year, tx_date.month, closing_day)
    if tx_date > closing:
        # dopo la mezzanotte del giorno di chiusura si passa al ciclo successivo
        closing = _calendar_date(tx_date.year, tx_date.month + 1, closing_day)

    due_year, due_month = closing.year, closing.month
    if due_day < closing_day:
        due_month += 1

    due = _calendar_date(due_year, due_month, due_day) + timedelta(days=STATEMENT_DUE_OFFSET_DAYS)
    return to_millis(due)
