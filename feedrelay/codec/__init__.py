"""Payload codecs."""

from feedrelay.codec.base58 import ALPHABET, decode, encode

__all__ = ["ALPHABET", "decode", "encode"]
