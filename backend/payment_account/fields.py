# backend/payment_account/fields.py
from typing import Iterable, List, Optional

from core.config import settings
from schemas.affiliate_schema import RegistrationField

# Form field name and metadata key share one name
PAYMENT_ACCOUNT_FIELD = "payment_account_info"
PAYMENT_ACCOUNT_META_KEY = "payment_account_info"

# Admin list column key
PAYMENT_ACCOUNT_COLUMN = "payment_account"

# Self-service update form
UPDATE_ACTION = "update_payment_account"
NONCE_FIELD = "payment_account_token"

MISSING_PAYMENT_ACCOUNT_MESSAGE = "Please enter your payout account information."

RELAXED_FIELD_NAMES = frozenset({"promotional_method", "website", "how_promote"})


def relax_registration_fields(
    fields: List[RegistrationField],
    relaxed_names: Optional[Iterable[str]] = None,
) -> List[RegistrationField]:
    """Return the field list with the promotion-related fields made optional"""
    names = frozenset(relaxed_names) if relaxed_names is not None else RELAXED_FIELD_NAMES
    return [
        field.model_copy(update={"required": False}) if field.name in names else field
        for field in fields
    ]


def configured_relaxed_names() -> frozenset:
    return frozenset(settings.RELAXED_REGISTRATION_FIELDS) or RELAXED_FIELD_NAMES
