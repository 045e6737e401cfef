"""Base58 encoding with the Bitcoin alphabet.

Leading zero bytes are carried as leading ``1`` symbols, so any byte string,
including the empty one, round-trips exactly.
"""

from __future__ import annotations

from feedrelay.middleware.error_handler import InvalidCharacterError

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_INDEX = {char: index for index, char in enumerate(ALPHABET)}
_BASE = len(ALPHABET)


def encode(data: bytes | str) -> str:
    """Encode bytes (or UTF-8 text) as a Base58 string."""
    if isinstance(data, str):
        data = data.encode("utf-8")

    stripped = data.lstrip(b"\0")
    zeros = len(data) - len(stripped)

    number = int.from_bytes(stripped, "big")
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, _BASE)
        digits.append(ALPHABET[remainder])

    return ALPHABET[0] * zeros + "".join(reversed(digits))


def decode(text: str) -> bytes:
    """Decode a Base58 string.

    Raises ``InvalidCharacterError`` for any symbol outside the alphabet.
    """
    number = 0
    for position, char in enumerate(text):
        digit = _INDEX.get(char)
        if digit is None:
            raise InvalidCharacterError(
                f"Invalid Base58 character {char!r} at position {position}",
                character=char,
                position=position,
            )
        number = number * _BASE + digit

    stripped = text.lstrip(ALPHABET[0])
    zeros = len(text) - len(stripped)
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\0" * zeros + body
