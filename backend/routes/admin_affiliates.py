# backend/routes/admin_affiliates.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from markupsafe import Markup

from core.auth import create_nonce, verify_nonce
from core.hooks import ExtensionPoint
from core.i18n import translate
from core.security import esc_html
from core.templating import render_page, render_string
from models.affiliate import Affiliate, AffiliateStatus
from routes.dependencies import get_affiliate_store, get_registry, require_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/affiliates", tags=["admin"], dependencies=[Depends(require_admin)])

# Column key -> label msgid
LIST_COLUMNS: Dict[str, str] = {
    "id": "ID",
    "user_login": "Username",
    "user_email": "Email",
    "status": "Status",
}

UPDATE_ACTION = "update_affiliate"
NONCE_FIELD = "affiliate_update_token"

LIST_TEMPLATE = """
<table class="affiliate-list-table">
    <thead>
        <tr>{% for key, label in columns.items() %}<th class="column-{{ key }}">{{ label }}</th>{% endfor %}</tr>
    </thead>
    <tbody>
        {% for row in rows %}
        <tr>{% for key in columns %}<td class="column-{{ key }}">{{ row[key] }}</td>{% endfor %}</tr>
        {% endfor %}
    </tbody>
</table>
"""

DETAIL_TEMPLATE = """
<form method="post" action="">
    <input type="hidden" name="{{ nonce_field }}" value="{{ nonce }}" />
    <div class="affiliate-card">
        <div class="affiliate-card-inner">
            <p>{{ affiliate.user_login }} &lt;{{ affiliate.user_email }}&gt;</p>
            <div class="affiliate-field-wrapper affiliate-field-wrapper-inline">
                <label for="affiliate-status">{{ _("Status") }}</label>
                <select id="affiliate-status" name="status">
                    {% for option in statuses %}
                    <option value="{{ option.value }}"{% if option == affiliate.status %} selected{% endif %}>{{ option.value }}</option>
                    {% endfor %}
                </select>
            </div>
        </div>
    </div>
    {{ after_status }}
    <button type="submit" class="affiliate-button-primary">{{ _("Save affiliate") }}</button>
</form>
"""


def _default_column_value(affiliate: Affiliate, column: str) -> Markup:
    value = getattr(affiliate, column, "")
    if isinstance(value, AffiliateStatus):
        value = value.value
    return esc_html(value)


async def _get_affiliate_or_404(request: Request, affiliate_id: int) -> Affiliate:
    affiliate = await get_affiliate_store(request).get(affiliate_id)
    if not affiliate:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Affiliate not found"
        )
    return affiliate


@router.get("", response_class=HTMLResponse)
async def list_affiliates(
    request: Request,
    limit: int = Query(50, ge=1, le=500),
    skip: int = Query(0, ge=0),
):
    try:
        registry = get_registry(request)
        affiliates = await get_affiliate_store(request).list(limit=limit, skip=skip)

        columns = {key: translate(label) for key, label in LIST_COLUMNS.items()}
        columns = await registry.apply_filters(ExtensionPoint.LIST_COLUMNS, columns)

        # Column values are markup-safe: defaults are escaped here, filters escape their own
        rows = []
        for affiliate in affiliates:
            row: Dict[str, Any] = {}
            for key in columns:
                value = await registry.apply_filters(
                    ExtensionPoint.LIST_COLUMN_VALUE,
                    _default_column_value(affiliate, key),
                    key,
                    affiliate,
                )
                row[key] = Markup(value)
            rows.append(row)

        body = render_string(LIST_TEMPLATE, columns=columns, rows=rows)
        return HTMLResponse(content=render_page(translate("Affiliates"), body))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Affiliate list failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list affiliates"
        )


@router.get("/{affiliate_id}", response_class=HTMLResponse)
async def affiliate_detail(request: Request, affiliate_id: int):
    affiliate = await _get_affiliate_or_404(request, affiliate_id)
    after_status = await get_registry(request).render(ExtensionPoint.ADMIN_AFTER_STATUS, affiliate)
    body = render_string(
        DETAIL_TEMPLATE,
        affiliate=affiliate,
        statuses=list(AffiliateStatus),
        after_status=after_status,
        nonce_field=NONCE_FIELD,
        nonce=create_nonce(UPDATE_ACTION, affiliate.id),
    )
    return HTMLResponse(content=render_page(f"{translate('Affiliates')} #{affiliate.id}", body))


@router.post("/{affiliate_id}")
async def update_affiliate(request: Request, affiliate_id: int):
    try:
        await _get_affiliate_or_404(request, affiliate_id)
        data = {key: value for key, value in (await request.form()).items() if isinstance(value, str)}

        # Nothing is written unless the form came from this affiliate's detail page
        if not verify_nonce(data.pop(NONCE_FIELD, None), UPDATE_ACTION, affiliate_id):
            logger.warning(f"Affiliate {affiliate_id} update rejected: invalid nonce")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid or expired form token"
            )

        fields: Dict[str, Any] = {}
        if "status" in data:
            try:
                fields["status"] = AffiliateStatus(data["status"])
            except ValueError:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid status: {data['status']}"
                )

        if fields:
            await get_affiliate_store(request).update(affiliate_id, fields)
        await get_registry(request).do_action(ExtensionPoint.AFFILIATE_UPDATE, affiliate_id, data)

        logger.info(f"Affiliate {affiliate_id} updated by admin")
        return RedirectResponse(url=f"/admin/affiliates/{affiliate_id}", status_code=status.HTTP_303_SEE_OTHER)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Affiliate update failed for {affiliate_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update affiliate"
        )
