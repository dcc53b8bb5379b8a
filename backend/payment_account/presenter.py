# backend/payment_account/presenter.py
import logging
from typing import Any, Dict, Mapping, Optional

from markupsafe import Markup

from core.i18n import translate
from core.security import esc_html, sanitize_text_field
from core.templating import render_string
from models.affiliate import Affiliate
from schemas.affiliate_schema import AccountPageContext
from .fields import (
    PAYMENT_ACCOUNT_FIELD,
    PAYMENT_ACCOUNT_COLUMN,
    UPDATE_ACTION,
    NONCE_FIELD,
    MISSING_PAYMENT_ACCOUNT_MESSAGE,
)
from .repository import PaymentAccountRepository

logger = logging.getLogger(__name__)

REGISTRATION_FIELD_TEMPLATE = """
<div class="affiliate-field-wrapper affiliate-field-wrapper-inline">
    <label for="affiliate-payment-account">
        {{ _("Payout account information") }}
        <span class="affiliate-field-required">*</span>
    </label>
    <input id="affiliate-payment-account" name="{{ field }}" type="text" value="{{ value }}" />
    <p class="affiliate-field-description">
        {{ _("Enter your bank account number or e-wallet details (e.g. Momo, ZaloPay, Bank Account)") }}
    </p>
</div>
"""

ACCOUNT_SECTION_TEMPLATE = """
{% if notice %}<div class="affiliate-message affiliate-message-{{ notice.kind }}">{{ notice.text }}</div>{% endif %}
<div class="affiliate-card affiliate-card-payment-account">
    <div class="affiliate-card-header">
        <h3>{{ _("Payout account information") }}</h3>
    </div>
    <div class="affiliate-card-inner">
        <form method="post" action="">
            <input type="hidden" name="{{ nonce_field }}" value="{{ nonce }}" />
            <div class="affiliate-field-wrapper">
                <label for="payment-account-info">{{ _("Account number / E-wallet") }}</label>
                <input type="text" id="payment-account-info" name="{{ field }}" value="{{ value }}" class="affiliate-field" />
                <p class="affiliate-field-description">
                    {{ _("Enter your bank account number, Momo, ZaloPay or other wallet details to receive commission payments.") }}
                </p>
            </div>
            <button type="submit" name="{{ action }}" value="1" class="affiliate-button-primary">
                {{ _("Update information") }}
            </button>
        </form>
    </div>
</div>
"""

ADMIN_SECTION_TEMPLATE = """
<div class="affiliate-card">
    <div class="affiliate-card-header">{{ _("Payout account information") }}</div>
    <div class="affiliate-card-inner">
        <div class="affiliate-field-wrapper affiliate-field-wrapper-inline">
            <label for="affiliate-payment-account-admin">{{ _("Payout account") }}</label>
            <input id="affiliate-payment-account-admin" name="{{ field }}" type="text" value="{{ value }}" />
        </div>
    </div>
</div>
"""


def _record_id(item: Any) -> Optional[int]:
    if isinstance(item, Mapping):
        return item.get("id")
    return getattr(item, "id", None)


class PaymentAccountPresenter:
    """Markup for the payout account field on every surface it appears on"""

    def __init__(self, repository: PaymentAccountRepository):
        self.repository = repository

    def render_registration_field(self, submission: Optional[Mapping[str, str]] = None) -> Markup:
        # Keep what the user typed across a failed validation round trip
        value = (submission or {}).get(PAYMENT_ACCOUNT_FIELD) or ""
        return render_string(REGISTRATION_FIELD_TEMPLATE, field=PAYMENT_ACCOUNT_FIELD, value=value)

    async def render_account_section(self, context: AccountPageContext) -> Markup:
        affiliate = context.affiliate
        if affiliate is None:
            return Markup("")

        notice = None
        if UPDATE_ACTION in context.form:
            if context.verify_nonce(context.form.get(NONCE_FIELD), UPDATE_ACTION):
                new_value = sanitize_text_field(context.form.get(PAYMENT_ACCOUNT_FIELD))
                if new_value:
                    await self.repository.save(affiliate.id, new_value)
                    logger.info(f"Payout account updated by affiliate {affiliate.id}")
                    notice = {"kind": "success", "text": translate("Your payout account information has been updated.")}
                else:
                    notice = {"kind": "error", "text": translate(MISSING_PAYMENT_ACCOUNT_MESSAGE)}
            else:
                logger.warning(f"Payout account update skipped for affiliate {affiliate.id}: invalid nonce")

        # Read after any write so the form shows the committed value
        value = await self.repository.read(affiliate.id)
        return render_string(
            ACCOUNT_SECTION_TEMPLATE,
            notice=notice,
            nonce_field=NONCE_FIELD,
            nonce=context.create_nonce(UPDATE_ACTION),
            field=PAYMENT_ACCOUNT_FIELD,
            value=value,
            action=UPDATE_ACTION,
        )

    async def render_admin_section(self, affiliate: Affiliate) -> Markup:
        value = await self.repository.read(affiliate.id)
        return render_string(ADMIN_SECTION_TEMPLATE, field=PAYMENT_ACCOUNT_FIELD, value=value)

    def add_list_column(self, columns: Dict[str, str]) -> Dict[str, str]:
        return {**columns, PAYMENT_ACCOUNT_COLUMN: translate("Payout account")}

    async def format_list_column(self, value: Any, column_name: str, item: Any) -> Any:
        if column_name != PAYMENT_ACCOUNT_COLUMN:
            return value

        stored = await self.repository.read(_record_id(item))
        return esc_html(stored) if stored else "-"
