"""Fast2SMS delivery channel."""

import os

import httpx

from core.notifications.errors import SmsDeliveryError, SmsNotConfiguredError


FAST2SMS_API_URL = "https://www.fast2sms.com/dev/bulkV2"
FAST2SMS_SENDER_ID = "FSTSMS"

FAST2SMS_API_KEY = os.environ.get("FAST2SMS_API_KEY")


async def send_sms(client: httpx.AsyncClient, phone: str, message: str) -> dict:
    """
    Send a single SMS via Fast2SMS.

    A missing API key only fails this message; callers decide whether
    that matters for the rest of the batch.

    Returns:
        Provider response body

    Raises:
        SmsNotConfiguredError: If FAST2SMS_API_KEY is not set
        SmsDeliveryError: If the request fails or Fast2SMS rejects it
    """
    if not FAST2SMS_API_KEY:
        raise SmsNotConfiguredError("FAST2SMS_API_KEY is not set")

    try:
        response = await client.post(
            FAST2SMS_API_URL,
            json={
                "route": "v3",
                "sender_id": FAST2SMS_SENDER_ID,
                "message": message,
                "language": "english",
                "flash": 0,
                "numbers": phone,
            },
            headers={"authorization": FAST2SMS_API_KEY},
        )
    except httpx.HTTPError as e:
        raise SmsDeliveryError(f"Request to Fast2SMS failed: {e}") from e

    if response.status_code != 200:
        raise SmsDeliveryError(
            f"Fast2SMS returned {response.status_code}: {response.text}"
        )

    data = response.json()
    # Fast2SMS reports rejections in the body with HTTP 200
    if data.get("return") is False:
        raise SmsDeliveryError(f"Fast2SMS rejected message: {data.get('message')}")

    return data
