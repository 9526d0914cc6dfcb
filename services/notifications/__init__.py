"""
Email Notification Backends.

Exports:
    EmailNotificationService: Abstract base
    EmailContent: Composed email
    create_notification_service: Startup selection by NOTIFICATION_BACKEND

Backends (imported lazily by the factory so only the selected provider's
SDK is loaded):
    smtp.SmtpEmailNotificationService
    sendgrid.SendGridEmailNotificationService
    ses.SesEmailNotificationService
"""

from .base import EmailContent, EmailNotificationService
from .factory import create_notification_service

__all__ = [
    'EmailContent',
    'EmailNotificationService',
    'create_notification_service',
]
