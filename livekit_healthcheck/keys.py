"""
Parser for LiveKit API keys.

Keys use the same format as the LiveKit server's ``keys`` setting::

    APIxxxxxxxx: secretsecretsecret

One pair per line. When several pairs are given the last one wins.
"""

import logging
from dataclasses import dataclass

import yaml

from .errors import KeyParseError

logger = logging.getLogger(__name__)

KEYS_FORMAT_HINT = 'Could not parse keys, it needs to be "key: secret", one per line'


@dataclass(frozen=True)
class ApiCredentials:
    """API key/secret pair used to sign the access token."""

    api_key: str = ""
    api_secret: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.api_key or not self.api_secret


def parse_keys(text: str, strict: bool = False) -> ApiCredentials:
    """
    Parse ``key: secret`` lines into a single credential pair.

    Entries whose value is not a string are skipped. An empty document or a
    mapping without string values yields empty credentials; the connection
    attempt reports the failure later.

    Args:
        text: YAML text shaped as a flat mapping.
        strict: Reject input holding more than one string entry.

    Raises:
        KeyParseError: text is not YAML, is not a mapping, or (strict) holds
            more than one pair.
    """
    try:
        data = yaml.safe_load(text or "")
    except yaml.YAMLError as e:
        raise KeyParseError(KEYS_FORMAT_HINT) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise KeyParseError(KEYS_FORMAT_HINT)

    pairs = [
        (str(key), value)
        for key, value in data.items()
        if isinstance(value, str)
    ]
    skipped = len(data) - len(pairs)
    if skipped:
        logger.debug(f"Ignoring {skipped} key entries without a string secret")

    if strict and len(pairs) > 1:
        raise KeyParseError(
            f"Found {len(pairs)} key pairs, expected exactly one \"key: secret\" line"
        )

    if not pairs:
        return ApiCredentials()

    api_key, api_secret = pairs[-1]
    if len(pairs) > 1:
        logger.debug(f"{len(pairs)} key pairs given, using the last one ({api_key})")
    return ApiCredentials(api_key=api_key, api_secret=api_secret)
