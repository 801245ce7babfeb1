"""
Typed failures raised by the milk ledger services.

Every error carries the HTTP status the REST layer answers with and a short
machine-readable code, so the exception handler never has to guess.
"""
from contextlib import contextmanager

from django.db import InterfaceError, OperationalError


class MilkLedgerError(Exception):
    status_code = 400
    code = 'milk_ledger_error'
    retryable = False

    def __init__(self, message='', **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_dict(self):
        data = {
            'error': self.message,
            'error_type': self.__class__.__name__,
            'code': self.code,
            'retryable': self.retryable,
        }
        if self.details:
            data['details'] = self.details
        return data


class ValidationError(MilkLedgerError):
    code = 'validation_error'


class FarmerNotFound(ValidationError):
    status_code = 404
    code = 'farmer_not_found'


class FarmerSuspended(MilkLedgerError):
    status_code = 403
    code = 'farmer_suspended'


class PricingNotConfigured(ValidationError):
    code = 'pricing_not_configured'


class InsufficientStock(MilkLedgerError):
    status_code = 409
    code = 'insufficient_stock'


class InvalidPaymentTransition(MilkLedgerError):
    status_code = 409
    code = 'invalid_payment_transition'


class AlreadyArchived(MilkLedgerError):
    """Not a failure: the day was archived before, nothing to do."""
    status_code = 200
    code = 'already_archived'


class ReservationUnderfunded(MilkLedgerError):
    """Not a failure: returned as a warning so the caller can decide."""
    status_code = 200
    code = 'reservation_underfunded'


class InventoryOutOfSync(MilkLedgerError):
    """Ledger credit failed after the contribution and payment were committed."""
    status_code = 500
    code = 'inventory_out_of_sync'


class StoreUnavailable(MilkLedgerError):
    status_code = 503
    code = 'store_unavailable'
    retryable = True


@contextmanager
def store_errors():
    """Turn connectivity failures of the database into ``StoreUnavailable``."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailable(f'Stock store unavailable: {exc}') from exc
