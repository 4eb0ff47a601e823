"""
Random code and token generators — pure, side-effect-free functions.

All generators use cryptographically secure sources (``secrets`` module).
"""

from __future__ import annotations

import secrets
import string

OTP_LENGTH = 6


def generate_otp_code(length: int = OTP_LENGTH) -> str:
    """Generate a cryptographically secure numeric OTP.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of uniformly random decimal digits; leading zeros are kept.
    """
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_token_id() -> str:
    """Return a random 128-bit hex identifier used as a JWT ``jti`` claim."""
    return secrets.token_hex(16)
