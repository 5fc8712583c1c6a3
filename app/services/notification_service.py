"""
Notification Service - Email service using SendGrid
Following Single Responsibility Principle
"""
import base64
import html as html_module
import logging
from typing import Optional

import sendgrid
from sendgrid.helpers.mail import (
    Attachment, Content, Disposition, Email, FileContent, FileName, FileType, Mail, To,
)

from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.models.user import User

logger = logging.getLogger(__name__)

# Singleton pattern for NotificationService
_notification_service_instance = None


def get_notification_service():
    global _notification_service_instance
    if _notification_service_instance is None:
        _notification_service_instance = NotificationService()
    return _notification_service_instance


class NotificationService:
    def __init__(self, client: Optional[sendgrid.SendGridAPIClient] = None):
        self.sg = client
        self.from_email = Email(settings.FROM_EMAIL)

    def _client(self) -> sendgrid.SendGridAPIClient:
        if self.sg is None:
            if not settings.SENDGRID_API_KEY:
                raise ExternalServiceError("SendGrid is not configured")
            self.sg = sendgrid.SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)
        return self.sg

    def _send(self, mail: Mail) -> int:
        response = self._client().client.mail.send.post(request_body=mail.get())
        logger.info(f"SendGrid responded with status {response.status_code}")
        return response.status_code

    def send_email(self, to_email: str, subject: str, html_content: str) -> int:
        mail = Mail(self.from_email, To(to_email), subject, Content("text/html", html_content))
        return self._send(mail)

    def send_assessment_complete_email(self, user: User, pdf_bytes: Optional[bytes]) -> int:
        """Congratulate the student and attach the PDF report when available"""
        subject = "Your Career Assessment Results Are Ready"
        name = html_module.escape(user.name or "Student")
        html_content = f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2 style="color: #2d73f5;">Congratulations, {name}!</h2>
                <p>You have completed your career assessment.</p>
                <p>Your personalised report is attached. You can also review your results and
                   career recommendations any time on your dashboard.</p>
                <p><a href="{settings.FRONTEND_URL}/dashboard">Open your dashboard</a></p>
                <p>Best wishes for the road ahead!</p>
            </div>
        """
        mail = Mail(self.from_email, To(user.email), subject, Content("text/html", html_content))
        if pdf_bytes:
            mail.attachment = Attachment(
                FileContent(base64.b64encode(pdf_bytes).decode()),
                FileName("career-assessment-report.pdf"),
                FileType("application/pdf"),
                Disposition("attachment"),
            )
        return self._send(mail)
