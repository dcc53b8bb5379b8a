# backend/payment_account/extension.py
"""
Payout account field for affiliate registration.

Binds the field definition, validators, repository and presenter to the
host's extension points. Every stage works off the affiliate id the host
passes in and the ``payment_account_info`` metadata key; none of them call
each other.
"""
import logging
from typing import Any, List, Mapping

from core.hooks import ExtensionPoint, HookRegistry
from core.security import sanitize_text_field
from schemas.affiliate_schema import RegistrationField
from .fields import PAYMENT_ACCOUNT_FIELD, relax_registration_fields, configured_relaxed_names
from .validators import make_email_optional, validate_payment_account
from .repository import PaymentAccountRepository
from .presenter import PaymentAccountPresenter

logger = logging.getLogger(__name__)


class PaymentAccountExtension:
    def __init__(self, meta_store):
        self.repository = PaymentAccountRepository(meta_store)
        self.presenter = PaymentAccountPresenter(self.repository)

    def relax_fields(self, fields: List[RegistrationField]) -> List[RegistrationField]:
        return relax_registration_fields(fields, configured_relaxed_names())

    async def on_affiliate_insert(self, affiliate_id: int, submission: Mapping[str, str]) -> None:
        value = sanitize_text_field(submission.get(PAYMENT_ACCOUNT_FIELD))
        if not value:
            return
        await self.repository.save(affiliate_id, value)
        logger.info(f"Payout account saved for new affiliate {affiliate_id}")

    async def on_affiliate_update(self, affiliate_id: int, data: Mapping[str, Any]) -> None:
        # Admins may clear the value, so an empty submission is still written
        if PAYMENT_ACCOUNT_FIELD not in data:
            return
        await self.repository.save(affiliate_id, sanitize_text_field(data[PAYMENT_ACCOUNT_FIELD]))
        logger.info(f"Payout account updated by admin for affiliate {affiliate_id}")

    def register(self, registry: HookRegistry) -> None:
        registry.add(ExtensionPoint.REGISTRATION_FIELDS, self.relax_fields)
        registry.add(ExtensionPoint.REGISTRATION_VALIDATE, make_email_optional, priority=10)
        registry.add(ExtensionPoint.REGISTRATION_VALIDATE, validate_payment_account, priority=20)
        registry.add(ExtensionPoint.REGISTRATION_FORM, self.presenter.render_registration_field)
        registry.add(ExtensionPoint.AFFILIATE_INSERT, self.on_affiliate_insert)
        registry.add(ExtensionPoint.AFFILIATE_UPDATE, self.on_affiliate_update)
        registry.add(ExtensionPoint.ACCOUNT_TOP, self.presenter.render_account_section)
        registry.add(ExtensionPoint.ADMIN_AFTER_STATUS, self.presenter.render_admin_section)
        registry.add(ExtensionPoint.LIST_COLUMNS, self.presenter.add_list_column)
        registry.add(ExtensionPoint.LIST_COLUMN_VALUE, self.presenter.format_list_column)


def register_payment_account_extension(registry: HookRegistry, meta_store) -> PaymentAccountExtension:
    extension = PaymentAccountExtension(meta_store)
    extension.register(registry)
    logger.info("Payout account extension registered")
    return extension
