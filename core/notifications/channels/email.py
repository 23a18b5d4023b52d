"""Brevo transactional email delivery channel."""

import os

import httpx

from core.notifications.errors import EmailDeliveryError, EmailNotConfiguredError


BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"

BREVO_API_KEY = os.environ.get("BREVO_API_KEY")
FROM_EMAIL = os.environ.get("FROM_EMAIL", "library@example.com")
FROM_NAME = os.environ.get("FROM_NAME", "Library Admin")


def is_email_configured() -> bool:
    """Check if the Brevo API key is set."""
    return bool(BREVO_API_KEY)


def build_transactional_payload(
    to_email: str,
    to_name: str,
    template_id: int,
    params: dict,
) -> dict:
    """Build the request body for a template-based transactional email."""
    return {
        "templateId": template_id,
        "sender": {"email": FROM_EMAIL, "name": FROM_NAME},
        "to": [{"email": to_email, "name": to_name}],
        "params": params,
    }


async def send_transactional_email(
    client: httpx.AsyncClient,
    to_email: str,
    to_name: str,
    template_id: int,
    params: dict,
) -> dict:
    """
    Send a template-based email via Brevo.

    The provider renders the template; params fill its placeholders
    (e.g. {"NAME": ..., "EXPIRY_DATE": ...}).

    Args:
        client: Shared HTTP client (carries the per-call timeout)
        to_email: Recipient email address
        to_name: Recipient display name
        template_id: Brevo template id
        params: Template parameters

    Returns:
        Provider response body (contains the messageId)

    Raises:
        EmailNotConfiguredError: If BREVO_API_KEY is not set
        EmailDeliveryError: If the request fails or Brevo rejects it
    """
    if not BREVO_API_KEY:
        raise EmailNotConfiguredError("BREVO_API_KEY is not set")

    payload = build_transactional_payload(to_email, to_name, template_id, params)
    try:
        response = await client.post(
            BREVO_API_URL,
            json=payload,
            headers={
                "api-key": BREVO_API_KEY,
                "accept": "application/json",
            },
        )
    except httpx.HTTPError as e:
        raise EmailDeliveryError(f"Request to Brevo failed: {e}") from e

    if response.status_code not in (200, 201, 202):
        raise EmailDeliveryError(
            f"Brevo returned {response.status_code}: {response.text}"
        )

    return response.json() if response.content else {}
