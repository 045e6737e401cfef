"""Validators for endpoint addresses and relay targets."""

from feedrelay.validators.url_validator import (
    is_http_url,
    is_private_ip,
    resolves_to_private_network,
)

__all__ = ["is_http_url", "is_private_ip", "resolves_to_private_network"]
