"""이메일 발송 유틸리티 — SMTP (aiosmtplib).

SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import quote

import aiosmtplib

from storefront.config import settings
from storefront.logging import get_logger

logger = get_logger(__name__)


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> None:
    """이메일 발송.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (없으면 생략)
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        start_tls=True,
    )


async def send_password_reset_email(to: str, token: str) -> None:
    """비밀번호 재설정 링크 발송. 실패는 로그만 남기고 호출자에게 전파하지 않음.

    Send the password reset link. Delivery failures are logged only, so the
    caller's response never reveals whether the account exists.
    """
    reset_link: str = f"{settings.CLIENT_URL}/reset-password?token={quote(token)}"
    html: str = (
        "<p>Hello!</p>"
        "<p>We received a request to reset your password.</p>"
        "<p>Click the link below to reset your password:</p>"
        f'<a href="{reset_link}">{reset_link}</a>'
        "<p>If you did not request a password reset, please ignore this email.</p>"
    )
    text: str = f"Reset your password: {reset_link}"
    try:
        await send_email(to, "Password Reset Request", html, text)
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("password_reset_email_failed", error=str(exc))
        return
    logger.info("password_reset_email_sent")
