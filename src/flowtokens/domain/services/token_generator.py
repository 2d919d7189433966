"""Random access token generator.

Tokens are cryptographically random bytes encoded as URL-safe base64 with
the trailing ``=`` padding stripped, so they can be dropped into a URL
path or query string untouched. Nine bytes encode to exactly twelve
characters.
"""

import base64
import secrets


def base64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64.

    Examples:
        >>> base64url_encode(b"\\xfb\\xff\\xbf")
        '-_-_'
        >>> base64url_encode(b"a")
        'YQ'
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(token: str) -> bytes:
    """Decode unpadded URL-safe base64 back to bytes.

    Raises:
        ValueError: If the string is not valid URL-safe base64.
    """
    padding = -len(token) % 4
    try:
        return base64.urlsafe_b64decode(token + "=" * padding)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid URL-safe base64 token: {token!r}") from e


class TokenGenerator:
    """Generator for random URL-safe tokens."""

    def __init__(self, num_bytes: int = 9) -> None:
        if num_bytes < 1:
            raise ValueError("num_bytes must be positive")
        self.num_bytes = num_bytes

    def generate(self, num_bytes: int | None = None) -> str:
        """Generate a new token.

        Args:
            num_bytes: Override the number of random bytes for this token.

        Returns:
            Unpadded URL-safe base64 encoding of fresh random bytes.
        """
        return base64url_encode(secrets.token_bytes(num_bytes or self.num_bytes))

    @staticmethod
    def encoded_length(num_bytes: int) -> int:
        """Length of the unpadded encoding of ``num_bytes`` bytes."""
        return (num_bytes * 4 + 2) // 3
