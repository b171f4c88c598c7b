"""Eccezioni del motore di pianificazione delle ricorrenze.

I servizi CRUD continuano a restituire tuple ``(success, message)``; queste
eccezioni sono usate dal generatore, dal backfill e dalle funzioni pure di
``spese.utils.scheduling``.
"""


class SchedulingError(Exception):
    """Base class for every scheduling failure."""


class InvalidArgumentError(SchedulingError, ValueError):
    """Input rifiutato in modo sincrono (frequenza, rate, importi, giorni)."""


class UnsupportedFrequencyError(InvalidArgumentError):

    def __init__(self, frequency):
        super().__init__(f"Unsupported frequency: {frequency}")
        self.frequency = frequency


class NotFoundError(SchedulingError, LookupError):
    """Record richiesto non trovato."""


class DataIntegrityError(SchedulingError):
    """A template points to a record that no longer exists."""


class BoundaryViolationError(SchedulingError):
    """Target date outside the template's [startDate, endDate] window."""


class BeforeStartDateError(BoundaryViolationError, InvalidArgumentError):
    pass


class PastEndDateError(BoundaryViolationError):
    """La data richiesta supera endDate: la ricorrenza è stata disattivata."""

    def __init__(self, template_id, target_date, deactivated=True):
        super().__init__(
            f"Recurring transaction {template_id} past endDate at {target_date}; deactivated"
        )
        self.template_id = template_id
        self.target_date = target_date
        self.deactivated = deactivated
