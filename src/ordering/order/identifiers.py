"""Order identifiers: ``ORD-<epoch seconds>-<4 uppercase alphanumerics>``."""

import re
import secrets
import string
import time

ORDER_ID_PREFIX = "ORD"
SUFFIX_LENGTH = 4

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
ORDER_ID_PATTERN = re.compile(rf"^{ORDER_ID_PREFIX}-\d+-[A-Z0-9]{{{SUFFIX_LENGTH}}}$")


def generate_order_id(now: float | None = None) -> str:
    epoch = int(time.time() if now is None else now)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{ORDER_ID_PREFIX}-{epoch}-{suffix}"


def is_order_id(value: str) -> bool:
    return isinstance(value, str) and bool(ORDER_ID_PATTERN.match(value))
