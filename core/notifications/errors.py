"""Exceptions raised by notification channels."""


class NotificationDeliveryError(Exception):
    """Raised when a single notification could not be delivered."""

    pass


class EmailNotConfiguredError(NotificationDeliveryError):
    """Raised when BREVO_API_KEY is not set."""

    pass


class EmailDeliveryError(NotificationDeliveryError):
    """Raised when the email provider rejects or fails a send."""

    pass


class SmsNotConfiguredError(NotificationDeliveryError):
    """Raised when FAST2SMS_API_KEY is not set."""

    pass


class SmsDeliveryError(NotificationDeliveryError):
    """Raised when the SMS provider rejects or fails a send."""

    pass
