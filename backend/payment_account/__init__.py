# backend/payment_account/__init__.py
from .fields import (
    PAYMENT_ACCOUNT_FIELD,
    PAYMENT_ACCOUNT_META_KEY,
    PAYMENT_ACCOUNT_COLUMN,
    relax_registration_fields,
)
from .validators import make_email_optional, validate_payment_account
from .repository import PaymentAccountRepository
from .presenter import PaymentAccountPresenter
from .extension import PaymentAccountExtension, register_payment_account_extension

__all__ = [
    'PAYMENT_ACCOUNT_FIELD',
    'PAYMENT_ACCOUNT_META_KEY',
    'PAYMENT_ACCOUNT_COLUMN',
    'relax_registration_fields',
    'make_email_optional',
    'validate_payment_account',
    'PaymentAccountRepository',
    'PaymentAccountPresenter',
    'PaymentAccountExtension',
    'register_payment_account_extension',
]
