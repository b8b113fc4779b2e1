import secrets
import string
import time
from typing import Optional

from karigarverse.config import settings

_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(prefix: Optional[str] = None) -> str:
    """
    Human-readable order number: PREFIX-<epoch millis>-<9 random chars>.
    """
    prefix = prefix or settings.order_number_prefix
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}-{millis}-{suffix}"
