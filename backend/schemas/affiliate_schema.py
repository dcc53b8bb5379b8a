# backend/schemas/affiliate_schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Callable, Dict, List, Optional

from models.affiliate import Affiliate


class RegistrationField(BaseModel):
    """One field declared on the host's registration form"""
    name: str
    label: str
    type: str = "text"
    required: bool = False


class RegistrationValidation(BaseModel):
    """
    Value threaded through the registration-validate filter chain.

    ``errors`` accumulates user-facing messages; ``submission`` is the
    submitted form as the next stage should see it. Validators return a new
    instance instead of mutating request input.
    """
    errors: List[str] = Field(default_factory=list)
    submission: Dict[str, str] = Field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return not self.errors

    def with_error(self, message: str) -> "RegistrationValidation":
        return self.model_copy(update={"errors": [*self.errors, message]})

    def with_submission(self, **values: str) -> "RegistrationValidation":
        return self.model_copy(update={"submission": {**self.submission, **values}})


class AccountPageContext(BaseModel):
    """What the self-service dashboard hands to ``ACCOUNT_TOP`` renderers"""
    affiliate: Optional[Affiliate] = None
    form: Dict[str, str] = Field(default_factory=dict)
    # (token, action) -> bool, bound to the current affiliate by the host
    verify_nonce: Callable[[Optional[str], str], bool]
    # action -> token
    create_nonce: Callable[[str], str]


class AffiliateLogin(BaseModel):
    user_login: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator('user_login')
    @classmethod
    def normalize_login(cls, v: str) -> str:
        return v.strip()
