# backend/routes/affiliates.py
"""
Affiliate-facing pages: public registration, login and the self-service
dashboard. Extensions hook in through the registry at each lifecycle point.
"""
import logging
import re
from typing import Dict, List

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from core.auth import create_jwt_token, create_nonce, hash_password, verify_nonce, verify_password
from core.config import settings
from core.hooks import ExtensionPoint
from core.i18n import translate
from core.security import is_blank, sanitize_text_field
from core.templating import render_page, render_string
from schemas.affiliate_schema import AccountPageContext, AffiliateLogin, RegistrationField, RegistrationValidation
from routes.dependencies import get_affiliate_store, get_current_affiliate, get_registry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["affiliates"])

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Fields the registration form declares before any filter runs
REGISTRATION_FIELDS: List[RegistrationField] = [
    RegistrationField(name="user_login", label="Username", required=True),
    RegistrationField(name="user_email", label="Email", type="email", required=True),
    RegistrationField(name="password", label="Password", type="password", required=True),
    RegistrationField(name="website", label="Website", type="url", required=True),
    RegistrationField(name="promotional_method", label="How will you promote us?", type="textarea", required=True),
]

REGISTER_FORM_TEMPLATE = """
{% if errors %}
<div class="affiliate-message affiliate-message-error">
    <ul>{% for error in errors %}<li>{{ error }}</li>{% endfor %}</ul>
</div>
{% endif %}
<form method="post" action="">
    {% for field in fields %}
    <div class="affiliate-field-wrapper">
        <label for="affiliate-{{ field.name }}">
            {{ _(field.label) }}{% if field.required %} <span class="affiliate-field-required">*</span>{% endif %}
        </label>
        {% if field.type == "textarea" %}
        <textarea id="affiliate-{{ field.name }}" name="{{ field.name }}">{{ values.get(field.name, "") }}</textarea>
        {% else %}
        <input id="affiliate-{{ field.name }}" name="{{ field.name }}" type="{{ field.type }}"
               value="{% if field.type != 'password' %}{{ values.get(field.name, '') }}{% endif %}" />
        {% endif %}
    </div>
    {% endfor %}
    {{ extra }}
    <button type="submit" class="affiliate-button-primary">{{ _("Register") }}</button>
</form>
"""

ACCOUNT_TEMPLATE = """
{{ top }}
<p>{{ affiliate.user_login }} &middot; {{ affiliate.status.value }}</p>
"""


def _form_values(form) -> Dict[str, str]:
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _session_token(affiliate_id: int) -> str:
    return create_jwt_token({"affiliate_id": affiliate_id, "role": "affiliate", "sub": str(affiliate_id)})


async def _registration_fields(request: Request) -> List[RegistrationField]:
    registry = get_registry(request)
    return await registry.apply_filters(ExtensionPoint.REGISTRATION_FIELDS, list(REGISTRATION_FIELDS))


async def _render_register_page(request: Request, submission: Dict[str, str], errors: List[str]) -> str:
    registry = get_registry(request)
    fields = await _registration_fields(request)
    extra = await registry.render(ExtensionPoint.REGISTRATION_FORM, submission)
    body = render_string(REGISTER_FORM_TEMPLATE, errors=errors, fields=fields, values=submission, extra=extra)
    return render_page(translate("Affiliate registration"), body)


async def _host_checks(request: Request, fields: List[RegistrationField], submission: Dict[str, str]) -> List[str]:
    """Checks the host runs after the validate filter chain"""
    errors = []
    for field in fields:
        if field.required and is_blank(submission.get(field.name)):
            errors.append(translate("This field is required: {label}", label=translate(field.label)))

    email = submission.get("user_email")
    if not is_blank(email) and not EMAIL_RE.match(email.strip()):
        errors.append(translate("Please enter a valid email address."))

    login = sanitize_text_field(submission.get("user_login"))
    if login and await get_affiliate_store(request).get_by_login(login):
        errors.append(translate("This username is already registered."))

    return errors


@router.get("/affiliates/register", response_class=HTMLResponse)
async def registration_form(request: Request):
    return HTMLResponse(content=await _render_register_page(request, {}, []))


@router.post("/affiliates/register", response_class=HTMLResponse)
async def register_affiliate(request: Request):
    try:
        submission = _form_values(await request.form())
        registry = get_registry(request)

        validation = await registry.apply_filters(
            ExtensionPoint.REGISTRATION_VALIDATE,
            RegistrationValidation(submission=submission),
        )
        fields = await _registration_fields(request)
        errors = validation.errors + await _host_checks(request, fields, validation.submission)

        if errors:
            # Re-render with what the user typed, not the filtered submission
            return HTMLResponse(content=await _render_register_page(request, submission, errors))

        accepted = validation.submission
        affiliate = await get_affiliate_store(request).insert({
            "user_login": sanitize_text_field(accepted.get("user_login")),
            "user_email": sanitize_text_field(accepted.get("user_email")),
            "password_hash": hash_password(accepted["password"]),
            "website": sanitize_text_field(accepted.get("website")),
            "promotional_method": sanitize_text_field(accepted.get("promotional_method")),
        })
        await registry.do_action(ExtensionPoint.AFFILIATE_INSERT, affiliate.id, accepted)

        logger.info(f"Affiliate registered: {affiliate.id} ({affiliate.user_login})")

        response = RedirectResponse(url="/affiliates/account", status_code=status.HTTP_303_SEE_OTHER)
        response.set_cookie(settings.SESSION_COOKIE_NAME, _session_token(affiliate.id), httponly=True)
        return response

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Affiliate registration failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )


@router.post("/api/affiliates/login")
async def login(credentials: AffiliateLogin, request: Request):
    affiliate = await get_affiliate_store(request).get_by_login(credentials.user_login)

    if not affiliate or not verify_password(credentials.password, affiliate.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    token = _session_token(affiliate.id)
    logger.info(f"Affiliate logged in: {affiliate.id}")

    response = JSONResponse({
        "token": token,
        "affiliate": {"id": affiliate.id, "user_login": affiliate.user_login},
    })
    response.set_cookie(settings.SESSION_COOKIE_NAME, token, httponly=True)
    return response


async def _account_page(request: Request, form: Dict[str, str]) -> HTMLResponse:
    affiliate = await get_current_affiliate(request)
    if affiliate is None:
        body = render_string("<p>{{ message }}</p>", message=translate("Please log in to view your affiliate account."))
        return HTMLResponse(content=render_page(translate("Affiliate account"), body), status_code=401)

    context = AccountPageContext(
        affiliate=affiliate,
        form=form,
        verify_nonce=lambda token, action: verify_nonce(token, action, affiliate.id),
        create_nonce=lambda action: create_nonce(action, affiliate.id),
    )
    top = await get_registry(request).render(ExtensionPoint.ACCOUNT_TOP, context)
    body = render_string(ACCOUNT_TEMPLATE, top=top, affiliate=affiliate)
    return HTMLResponse(content=render_page(translate("Affiliate account"), body))


@router.get("/affiliates/account", response_class=HTMLResponse)
async def account_dashboard(request: Request):
    return await _account_page(request, {})


@router.post("/affiliates/account", response_class=HTMLResponse)
async def account_dashboard_submit(request: Request):
    return await _account_page(request, _form_values(await request.form()))
