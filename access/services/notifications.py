"""
Delivery of OTP messages to record owners.

Notifiers raise :class:`access.errors.Unavailable` when delivery fails;
callers decide whether that matters.
"""
import logging

import requests

from access.errors import Unavailable

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class Notifier:
    def deliver(self, channel: str, message: str) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Used when SMS is not configured: the message goes to the operational log."""

    def deliver(self, channel: str, message: str) -> None:
        logger.warning("SMS not configured; message for %s: %s", channel, message)


class TwilioSmsNotifier(Notifier):
    def __init__(self, account_sid: str, auth_token: str, from_number: str, *, timeout: int = 5):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    def deliver(self, channel: str, message: str) -> None:
        url = TWILIO_MESSAGES_URL.format(sid=self.account_sid)
        try:
            r = requests.post(
                url,
                data={'To': channel, 'From': self.from_number, 'Body': message},
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
            error_code = data.get('error_code')
        except requests.RequestException as e:
            raise Unavailable(f'SMS delivery failed: {e}') from e
        except (ValueError, AttributeError, TypeError) as e:
            raise Unavailable('SMS delivery failed: unreadable Twilio response') from e
        if error_code:
            raise Unavailable(f"Twilio error {error_code}: {data.get('error_message')}")
        logger.info("SMS queued to %s sid=%s", channel, data.get('sid'))
