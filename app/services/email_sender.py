"""
Email sending service using Brevo (Sendinblue) API.
Sends the subscription confirmation and the "website is live" notification.
There is no queue and no retry: a failed send is logged and reported back to the caller.
"""
import httpx
import logging
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from pathlib import Path
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(['html', 'xml', 'html.jinja2'])
)

CONFIRMATION_SUBJECT = "Subscription Confirmation"
LIVE_NOTIFICATION_SUBJECT = "Important Update: Website is Now Live!"

class EmailSender:
    """Handles email sending via Brevo API."""
    
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = settings.BREVO_API_KEY
        self.base_url = settings.BREVO_BASE_URL.rstrip("/")
        self.sender_email = settings.SENDER_EMAIL
        self.sender_name = settings.SENDER_NAME
        self.timeout = settings.MAIL_TIMEOUT_SECONDS
        self._transport = transport
        
        # Don't raise during initialization - check during actual usage
        self._api_key_available = bool(self.api_key)
    
    def _template_vars(self) -> Dict[str, Any]:
        return {
            "sender_name": self.sender_name,
            "support_email": settings.SUPPORT_EMAIL,
            "credit": settings.WELCOME_CREDIT,
        }
    
    def render(self, template_name: str) -> Dict[str, str]:
        """Render the text and html variants of a template."""
        template_vars = self._template_vars()
        return {
            "text": env.get_template(f"{template_name}.txt.jinja2").render(**template_vars),
            "html": env.get_template(f"{template_name}.html.jinja2").render(**template_vars),
        }
    
    async def send(
        self,
        to_email: str,
        subject: str,
        text_content: str,
        html_content: Optional[str] = None,
        tags: Optional[list] = None
    ) -> Dict[str, Any]:
        """
        Send a single email.
        
        Args:
            to_email: Recipient email address
            subject: Email subject
            text_content: Plain text email content
            html_content: HTML email content
            tags: Brevo tags for the message
        
        Returns:
            Dict with send result, "success" plus "message_id" or "error"
        """
        if not self._api_key_available:
            logger.error(f"Email send failed for {to_email}: BREVO_API_KEY is not configured")
            return {
                "success": False,
                "error": "BREVO_API_KEY environment variable is required",
                "to_email": to_email
            }
        
        email_data = {
            "sender": {
                "name": self.sender_name,
                "email": self.sender_email
            },
            "to": [{"email": to_email}],
            "subject": subject,
            "textContent": text_content,
            "tags": tags or ["landing-page"]
        }
        if html_content:
            email_data["htmlContent"] = html_content
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/smtp/email",
                    headers={
                        "api-key": self.api_key,
                        "accept": "application/json",
                        "content-type": "application/json"
                    },
                    json=email_data
                )
                
                response.raise_for_status()
                message_id = response.json().get("messageId", "")
                
                logger.info(f"Email sent successfully to {to_email}, message_id: {message_id}")
                
                return {
                    "success": True,
                    "message_id": message_id,
                    "to_email": to_email,
                    "sent_at": datetime.now(timezone.utc).isoformat()
                }
                
        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP error {e.response.status_code}: {e.response.text}"
        except httpx.RequestError as e:
            error_msg = f"Request error: {str(e)}"
        except Exception as e:
            error_msg = f"Unexpected error: {str(e)}"
        
        logger.error(f"Email send failed for {to_email}: {error_msg}")
        return {
            "success": False,
            "error": error_msg,
            "to_email": to_email
        }
    
    async def send_confirmation(self, to_email: str) -> Dict[str, Any]:
        content = self.render("confirmation")
        return await self.send(
            to_email,
            CONFIRMATION_SUBJECT,
            content["text"],
            content["html"],
            tags=["subscription-confirmation"]
        )
    
    async def send_live_notification(self, to_email: str) -> Dict[str, Any]:
        content = self.render("live_notification")
        return await self.send(
            to_email,
            LIVE_NOTIFICATION_SUBJECT,
            content["text"],
            content["html"],
            tags=["site-live"]
        )

# Global email sender instance - lazy initialization
_email_sender_instance = None

def get_email_sender():
    """Get the email sender instance (lazy initialization)."""
    global _email_sender_instance
    if _email_sender_instance is None:
        _email_sender_instance = EmailSender()
    return _email_sender_instance
