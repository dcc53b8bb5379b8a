# backend/payment_account/repository.py
from .fields import PAYMENT_ACCOUNT_META_KEY


class PaymentAccountRepository:
    """Reads and overwrites the payout account value of one affiliate.

    Values are stored as given; callers sanitize before ``save``.
    """

    def __init__(self, meta_store):
        self.meta_store = meta_store

    async def save(self, affiliate_id: int, value: str) -> None:
        await self.meta_store.update_meta(affiliate_id, PAYMENT_ACCOUNT_META_KEY, value)

    async def read(self, affiliate_id: int) -> str:
        value = await self.meta_store.get_meta(affiliate_id, PAYMENT_ACCOUNT_META_KEY)
        return value or ""
