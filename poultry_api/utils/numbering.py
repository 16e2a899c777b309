"""Reference code generation for orders, payments and customers.

Format:
  {PREFIX}-{timestamp}-{random}

  timestamp → current time in milliseconds, base 36
  random    → 6 random base-36 characters

The whole code is upper-cased, e.g. "ORD-MGX3K2J1-4F9ZQ1".  Codes are not
sequential and are not checked here; callers verify uniqueness within the
farm before inserting and the per-farm unique constraint backs that up.
"""

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_reference_code(prefix: str = "REF", random_length: int = 6) -> str:
    timestamp = _to_base36(int(time.time() * 1000))
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(random_length))
    return f"{prefix}-{timestamp}-{random_part}".upper()
