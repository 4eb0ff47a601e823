"""ZeptoMail implementation of EmailProvider.

Sends transactional mail over the ZeptoMail HTTP API through the shared
async HttpClient. Bodies are rendered from Jinja2 templates in
``templates/emails``. A failed send is reported as ``False``; callers decide
how to surface it and nothing is retried here.
"""

import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.com/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "EventHub",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def send(self, to_email: str, subject: str, html_body: str) -> bool:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            return False

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": {"address": to_email, "name": to_email}}],
            "subject": subject,
            "htmlbody": html_body,
        }

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
            if response.status_code in (200, 201, 202):
                log.info("email_sent_success", to_email=to_email, subject=subject)
                return True
            log.error(
                "email_sent_failed",
                to_email=to_email,
                subject=subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str, valid_minutes: int
    ) -> bool:
        subject = f"{self._app_name} - Verify your email"
        html_body = self._jinja.get_template("verification.html").render(
            otp_code=otp_code,
            user_name=user_name,
            valid_minutes=valid_minutes,
            app_name=self._app_name,
        )
        return await self.send(email, subject, html_body)

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], otp_code: str, valid_minutes: int
    ) -> bool:
        subject = f"{self._app_name} - Reset your password"
        html_body = self._jinja.get_template("password_reset.html").render(
            otp_code=otp_code,
            user_name=user_name,
            valid_minutes=valid_minutes,
            app_name=self._app_name,
        )
        return await self.send(email, subject, html_body)
