"""SMTP email integration."""

from .smtp_notifier import EmailConfiguration, SmtpNotifier

__all__ = ["EmailConfiguration", "SmtpNotifier"]
