"""
Email Service
Renders stored templates and sends transactional email through Brevo

Author: TechTots
Date: 2025-10-20

API CONFIGURATION:
- Endpoint: POST https://api.brevo.com/v3/smtp/email
- Header: api-key: <BREVO_API_KEY>
- Body: {"to": [{"email", "name"}], "subject", "htmlContent", "sender": {"email", "name"}}

Without BREVO_API_KEY nothing is sent and a dev message id is returned.
"""
import re
import time
import logging
from html import escape
from typing import Dict, Optional, Any, List

import httpx
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.repositories.email_template_repository import EmailTemplateRepository

logger = logging.getLogger(__name__)

CONDITIONAL_BLOCK = re.compile(r"\{\{#if\s+(\w+)\}\}([\s\S]*?)\{\{/if\}\}")
VARIABLE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_template(template: str, variables: Dict[str, Any]) -> str:
    """
    Render {{variable}} placeholders and {{#if variable}}...{{/if}} blocks.

    Blocks are kept when the variable is truthy and dropped otherwise.
    Placeholders without a supplied value are left untouched.
    """
    def _conditional(match: re.Match) -> str:
        return match.group(2) if variables.get(match.group(1)) else ""

    def _variable(match: re.Match) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        return "" if value is None else str(value)

    rendered = CONDITIONAL_BLOCK.sub(_conditional, template)
    return VARIABLE.sub(_variable, rendered)


class EmailService:
    """
    Transactional email

    Handles:
    - Rendering DB templates by slug (with a built-in fallback body)
    - Delivery through the Brevo HTTP API
    - Order, supplier and ticket notifications
    """

    def __init__(self, db: Optional[Session] = None, api_key: Optional[str] = None):
        self.db = db
        self.api_key = api_key if api_key is not None else settings.BREVO_API_KEY

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "api-key": self.api_key or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def send_email(self, to: str, subject: str, html_content: str, to_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Send one email

        Returns:
            {"success": True, "message_id": "..."}

        Raises:
            httpx.HTTPError when Brevo rejects the request
        """
        if not self.api_key:
            message_id = f"dev-{int(time.time() * 1000)}@localhost"
            logger.info(f"BREVO_API_KEY not set, email to {to} not sent (subject: {subject})")
            return {"success": True, "message_id": message_id}

        recipient = {"email": to}
        if to_name:
            recipient["name"] = to_name

        payload = {
            "to": [recipient],
            "subject": subject,
            "htmlContent": html_content,
            "sender": {"email": settings.EMAIL_FROM, "name": settings.EMAIL_FROM_NAME},
        }

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    settings.BREVO_API_URL,
                    json=payload,
                    headers=self._headers,
                    timeout=30.0
                )
                response.raise_for_status()
                message_id = response.json().get("messageId")
                logger.info(f"Email sent to {to}: {message_id}")
                return {"success": True, "message_id": message_id}

            except httpx.HTTPStatusError as e:
                logger.error(f"Brevo send failed: {e.response.status_code} - {e.response.text}")
                raise

    async def send_template(
        self,
        slug: str,
        to: str,
        variables: Dict[str, Any],
        fallback_subject: str,
        fallback_html: str
    ) -> Dict[str, Any]:
        """Send a stored template by slug, or the fallback when none is active"""
        subject, html = fallback_subject, fallback_html
        if self.db is not None:
            template = EmailTemplateRepository(self.db).find_by_slug(slug)
            if template:
                subject, html = template.subject, template.content

        return await self.send_email(
            to=to,
            subject=render_template(subject, variables),
            html_content=render_template(html, variables),
            to_name=variables.get("customer_name"),
        )

    async def notify(self, *args, **kwargs) -> Optional[Dict[str, Any]]:
        """send_template that never raises; notification failures must not fail the request"""
        try:
            return await self.send_template(*args, **kwargs)
        except Exception as e:
            logger.error(f"Failed to send notification email: {e}")
            return None

    # ------------------------------------------------------------------
    # Order notifications
    # ------------------------------------------------------------------

    @staticmethod
    def _order_variables(order: Dict[str, Any], customer: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "customer_name": customer.get("name") or "Customer",
            "order_number": order["order_number"],
            "order_total": f"{float(order['total']):.2f}",
            "order_status": order["status"],
            "order_items": _items_html(order.get("items", [])),
            "order_url": f"{settings.STORE_URL}/account/orders/{order['id']}",
            "store_name": settings.EMAIL_FROM_NAME,
        }

    async def send_order_confirmation(self, order: Dict[str, Any], customer: Dict[str, Any]):
        return await self.notify(
            "order-confirmation",
            customer["email"],
            self._order_variables(order, customer),
            "Order confirmation #{{order_number}}",
            "<p>Hi {{customer_name}},</p><p>Thank you for your order <strong>#{{order_number}}</strong>.</p>"
            "{{order_items}}<p>Total: {{order_total}}</p>"
            "<p><a href=\"{{order_url}}\">View your order</a></p>",
        )

    async def send_order_shipped(self, order: Dict[str, Any], customer: Dict[str, Any]):
        return await self.notify(
            "order-shipped",
            customer["email"],
            self._order_variables(order, customer),
            "Your order #{{order_number}} is on its way",
            "<p>Hi {{customer_name}},</p><p>Order <strong>#{{order_number}}</strong> has shipped.</p>"
            "<p><a href=\"{{order_url}}\">Track your order</a></p>",
        )

    async def send_order_cancelled(self, order: Dict[str, Any], customer: Dict[str, Any], reason: Optional[str] = None):
        variables = self._order_variables(order, customer)
        variables["cancellation_reason"] = escape(reason) if reason else ""
        return await self.notify(
            "order-cancelled",
            customer["email"],
            variables,
            "Order #{{order_number}} has been cancelled",
            "<p>Hi {{customer_name}},</p><p>Your order <strong>#{{order_number}}</strong> has been cancelled.</p>"
            "{{#if cancellation_reason}}<p>Reason: {{cancellation_reason}}</p>{{/if}}"
            "<p>If you were charged, a refund will be issued to your original payment method.</p>",
        )

    async def send_order_completed(self, order: Dict[str, Any], customer: Dict[str, Any]):
        return await self.notify(
            "order-completed",
            customer["email"],
            self._order_variables(order, customer),
            "Order #{{order_number}} is complete",
            "<p>Hi {{customer_name}},</p><p>Your order <strong>#{{order_number}}</strong> is complete."
            " We hope your little engineers enjoy it!</p>"
            "<p><a href=\"{{order_url}}\">Leave a review</a></p>",
        )

    # ------------------------------------------------------------------
    # Account notifications
    # ------------------------------------------------------------------

    async def send_password_reset(self, email: str, name: Optional[str], reset_url: str):
        return await self.notify(
            "password-reset",
            email,
            {
                "customer_name": name or "Customer",
                "reset_url": reset_url,
                "store_name": settings.EMAIL_FROM_NAME,
            },
            "Reset your {{store_name}} password",
            "<p>Hi {{customer_name}},</p><p>We received a request to reset your password.</p>"
            "<p><a href=\"{{reset_url}}\">Choose a new password</a></p>"
            "<p>The link expires in one hour. If you did not ask for this, you can ignore this email.</p>",
        )

    # ------------------------------------------------------------------
    # Supplier notifications
    # ------------------------------------------------------------------

    async def send_supplier_approved(self, supplier: Dict[str, Any]):
        return await self.notify(
            "supplier-approved",
            supplier["contact_person_email"],
            {
                "customer_name": supplier["contact_person_name"],
                "company_name": supplier["company_name"],
                "commission_rate": supplier.get("commission_rate"),
                "dashboard_url": f"{settings.STORE_URL}/supplier",
            },
            "{{company_name}} is approved as a TechTots supplier",
            "<p>Hi {{customer_name}},</p><p>Good news: <strong>{{company_name}}</strong> has been approved."
            "</p><p>Commission rate: {{commission_rate}}%</p>"
            "<p><a href=\"{{dashboard_url}}\">Open your supplier dashboard</a></p>",
        )

    async def send_ticket_response(self, ticket: Dict[str, Any], supplier: Dict[str, Any], content: str):
        return await self.notify(
            "supplier-ticket-response",
            supplier["contact_person_email"],
            {
                "customer_name": supplier["contact_person_name"],
                "ticket_number": ticket["ticket_number"],
                "ticket_subject": ticket["subject"],
                "response_content": escape(content),
                "ticket_url": f"{settings.STORE_URL}/supplier/tickets/{ticket['id']}",
            },
            "New response on ticket {{ticket_number}}",
            "<p>Hi {{customer_name}},</p><p>Our team replied to <strong>{{ticket_subject}}</strong>:</p>"
            "<blockquote>{{response_content}}</blockquote>"
            "<p><a href=\"{{ticket_url}}\">View ticket</a></p>",
        )


def _items_html(items: List[Dict[str, Any]]) -> str:
    if not items:
        return ""
    rows = "".join(
        f"<tr><td>{escape(str(item['name']))}</td><td>{item['quantity']}</td>"
        f"<td>{float(item['price']):.2f}</td></tr>"
        for item in items
    )
    return f"<table><tr><th>Item</th><th>Qty</th><th>Price</th></tr>{rows}</table>"
