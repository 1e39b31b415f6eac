# backend/app/services/email_service.py
from typing import List, Optional
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
import aiosmtplib
from jinja2 import Template

from app.core.config import settings
from app.core.logging import logger


BASE_TEMPLATE = """
<!DOCTYPE html>
<html dir="rtl" lang="ar">
<head>
    <meta charset="utf-8">
    <style>
        body { font-family: Tahoma, Arial, sans-serif; line-height: 1.8; color: #333; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; }
        .header { background: #0f766e; color: white; padding: 24px; text-align: center; border-radius: 8px 8px 0 0; }
        .content { background: #f9f9f9; padding: 30px; border-radius: 0 0 8px 8px; }
        .button { display: inline-block; padding: 12px 24px; background: #0f766e;
                 color: white; text-decoration: none; border-radius: 4px; margin: 20px 0; }
        .en { direction: ltr; text-align: left; color: #666; font-size: 13px; border-top: 1px solid #ddd; margin-top: 20px; padding-top: 10px; }
        .footer { text-align: center; padding: 20px; color: #666; font-size: 12px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{{ title_ar }}</h1>
        </div>
        <div class="content">
            <h2>مرحباً {{ name }}،</h2>
            <p>{{ message_ar }}</p>
            {% if action_url %}
            <a href="{{ action_url }}" class="button">{{ action_label }}</a>
            {% endif %}
            <div class="en">
                <strong>{{ title }}</strong>
                <p>{{ message }}</p>
            </div>
        </div>
        <div class="footer">
            <p>© عروض. جميع الحقوق محفوظة.</p>
        </div>
    </div>
</body>
</html>
"""


class EmailService:
    """Service for sending emails"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL
        self.template = Template(BASE_TEMPLATE)

    async def send_email(
        self,
        to: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send an email. Failures are logged and reported as False."""
        if not self.smtp_host:
            logger.warning("SMTP not configured, skipping email")
            return False

        try:
            message = MIMEMultipart('alternative')
            message['Subject'] = subject
            message['From'] = self.from_email
            message['To'] = ', '.join(to)

            if text_content:
                message.attach(MIMEText(text_content, 'plain', 'utf-8'))

            message.attach(MIMEText(html_content, 'html', 'utf-8'))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True,
            )

            logger.info(f"Email sent to {to}: {subject}")
            return True

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email: {str(e)}")
            return False

    def render(
        self,
        name: str,
        title: str,
        title_ar: str,
        message: str,
        message_ar: str,
        action_url: Optional[str] = None,
        action_label: str = "عرض التفاصيل",
    ) -> str:
        return self.template.render(
            name=name,
            title=title,
            title_ar=title_ar,
            message=message,
            message_ar=message_ar,
            action_url=action_url,
            action_label=action_label,
        )

    async def send_notification_email(
        self,
        email: str,
        name: str,
        title: str,
        title_ar: str,
        message: str,
        message_ar: str,
        action_url: Optional[str] = None,
    ) -> bool:
        """Send the email copy of an in-app notification"""
        html_content = self.render(name, title, title_ar, message, message_ar, action_url)
        text_content = f"{title_ar}\n\n{message_ar}\n\n{title}\n{message}"
        return await self.send_email([email], title_ar, html_content, text_content)

    async def send_welcome_email(self, email: str, name: str) -> bool:
        """Send welcome email to new merchants"""
        html_content = self.render(
            name=name or "شريكنا",
            title="Welcome to Arood!",
            title_ar="أهلاً بك في عروض!",
            message="Your business account is ready. Publish your first offer or book an advertising screen.",
            message_ar="تم إنشاء حسابك التجاري بنجاح. ابدأ بنشر عرضك الأول أو احجز شاشة إعلانية.",
            action_url=f"{settings.FRONTEND_URL}/merchant/dashboard",
            action_label="لوحة التحكم",
        )
        return await self.send_email([email], "أهلاً بك في عروض!", html_content)
