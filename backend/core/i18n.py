# backend/core/i18n.py
from typing import Dict, Optional

from core.config import settings

# English msgids, translated per locale. Missing entries fall back to the msgid.
CATALOGS: Dict[str, Dict[str, str]] = {
    "en": {},
    "vi": {
        "Payout account information": "Thông tin tài khoản nhận tiền",
        "Enter your bank account number or e-wallet details (e.g. Momo, ZaloPay, Bank Account)":
            "Nhập số tài khoản ngân hàng hoặc thông tin ví điện tử (VD: Momo, ZaloPay, Bank Account)",
        "Please enter your payout account information.": "Vui lòng nhập thông tin tài khoản nhận tiền.",
        "Your payout account information has been updated.": "Thông tin tài khoản đã được cập nhật thành công!",
        "Account number / E-wallet": "Số tài khoản / Ví điện tử",
        "Enter your bank account number, Momo, ZaloPay or other wallet details to receive commission payments.":
            "Nhập số tài khoản ngân hàng, Momo, ZaloPay hoặc thông tin ví khác để nhận thanh toán hoa hồng.",
        "Update information": "Cập nhật thông tin",
        "Payout account": "Tài khoản nhận tiền",
        "Affiliate registration": "Đăng ký affiliate",
        "Register": "Đăng ký",
        "Username": "Tên đăng nhập",
        "Email": "Email",
        "Password": "Mật khẩu",
        "Website": "Website",
        "How will you promote us?": "Bạn sẽ quảng bá cho chúng tôi như thế nào?",
        "This field is required: {label}": "Trường này là bắt buộc: {label}",
        "Please enter a valid email address.": "Vui lòng nhập địa chỉ email hợp lệ.",
        "This username is already registered.": "Tên đăng nhập này đã được đăng ký.",
        "Affiliate account": "Tài khoản affiliate",
        "Affiliates": "Affiliates",
        "ID": "ID",
        "Status": "Trạng thái",
        "Save affiliate": "Lưu affiliate",
        "Please log in to view your affiliate account.": "Vui lòng đăng nhập để xem tài khoản affiliate.",
    },
}


def translate(msgid: str, locale: Optional[str] = None, **params) -> str:
    """Look up ``msgid`` in the catalog for ``locale`` (defaults to settings.LOCALE)"""
    catalog = CATALOGS.get(locale or settings.LOCALE, {})
    message = catalog.get(msgid, msgid)
    if params:
        message = message.format(**params)
    return message


# Conventional short alias
_ = translate
