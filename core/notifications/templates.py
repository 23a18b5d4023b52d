"""
SMS message text, kept in messages.yaml next to this module.

Email bodies are not rendered here: the email provider fills its own
template (selected by the template id in the settings table) from params.
"""

from functools import lru_cache
from pathlib import Path
from string import Formatter

import yaml

MESSAGES_PATH = Path(__file__).parent / "messages.yaml"


@lru_cache(maxsize=1)
def load_templates() -> dict:
    """Read messages.yaml once per process."""
    with open(MESSAGES_PATH) as f:
        return yaml.safe_load(f)


def template_fields(template: str) -> set[str]:
    """Placeholder names used by a template, e.g. {"name", "expiry_date"}."""
    return {field for _, field, _, _ in Formatter().parse(template) if field}


def render_message(template: str, context: dict) -> str:
    """
    Fill a template's {placeholders} from context.

    Raises:
        KeyError: Naming every placeholder the context does not provide
    """
    missing = template_fields(template) - context.keys()
    if missing:
        raise KeyError(f"Missing template variables: {', '.join(sorted(missing))}")
    return template.format(**context)


def get_message(message_type: str, channel: str, context: dict) -> str:
    """
    Render the text for one message type on one channel.

    Args:
        message_type: Top-level key in messages.yaml, e.g. "membership_expiry"
        channel: Channel key under it, e.g. "sms"
        context: Placeholder values

    Raises:
        KeyError: Unknown message type/channel, or a missing placeholder
    """
    template = load_templates()[message_type][channel]
    return render_message(template, context)
