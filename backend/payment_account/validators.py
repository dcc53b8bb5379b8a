# backend/payment_account/validators.py
import logging
import time
from typing import Callable

from core.config import settings
from core.i18n import translate
from core.security import is_blank
from schemas.affiliate_schema import RegistrationValidation
from .fields import PAYMENT_ACCOUNT_FIELD, MISSING_PAYMENT_ACCOUNT_MESSAGE

logger = logging.getLogger(__name__)


def placeholder_email(clock: Callable[[], float] = time.time) -> str:
    return f"affiliate_{int(clock())}@{settings.PLACEHOLDER_EMAIL_DOMAIN}"


def make_email_optional(
    validation: RegistrationValidation,
    clock: Callable[[], float] = time.time,
) -> RegistrationValidation:
    """
    Fill an empty ``user_email`` with a placeholder address.

    Adds no error. The returned submission is what the host threads into its
    own e-mail check and into the insert, so this must run before the host's
    acceptance step.
    """
    if not is_blank(validation.submission.get("user_email")):
        return validation

    email = placeholder_email(clock)
    logger.info(f"No e-mail submitted, using placeholder {email}")
    return validation.with_submission(user_email=email)


def validate_payment_account(validation: RegistrationValidation) -> RegistrationValidation:
    """Require a non-empty payout account value"""
    if is_blank(validation.submission.get(PAYMENT_ACCOUNT_FIELD)):
        return validation.with_error(translate(MISSING_PAYMENT_ACCOUNT_MESSAGE))
    return validation
