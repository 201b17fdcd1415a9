"""
IP address and range normalization for global blocks.

Turns a user supplied address expression (single IP, ``start-end`` range or
CIDR block) into the value submitted to Special:GlobalBlock and records the
range start address, which is what block lookups are keyed on.
"""

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Optional


log = logging.getLogger(__name__)

CIDR_SUFFIX_RE = re.compile(r"^(?P<base>.+)/(?P<prefix>\d{1,3})$")


@dataclass(frozen=True)
class NormalizedAddress:
    """
    Result of normalizing an address expression.

    Attributes:
        original: The expression as given by the caller
        address: The value to submit to the wiki
        cidr: Canonical CIDR block, or None if the expression was invalid
        start: First address of a range or CIDR input; None for a bare IP
        is_range: True for hyphenated and CIDR input
        valid: False when the expression could not be parsed
    """
    original: str
    address: str
    cidr: Optional[str]
    start: Optional[str]
    is_range: bool
    valid: bool


def range_to_cidr(start: str, end: str) -> str:
    """
    Compute the smallest single CIDR block containing start..end.

    The order of start and end does not matter.

    Raises:
        ValueError: If either address is malformed or the versions differ
    """
    first = ipaddress.ip_address(start.strip())
    last = ipaddress.ip_address(end.strip())
    if first.version != last.version:
        raise ValueError(f"Mixed IP versions in range {start}-{end}")
    if int(first) > int(last):
        first, last = last, first
    prefix = first.max_prefixlen - (int(first) ^ int(last)).bit_length()
    return str(ipaddress.ip_network(f"{first}/{prefix}", strict=False))


def normalize_address(expression: str) -> NormalizedAddress:
    """
    Normalize an address expression for submission.

    - "a-b": the smallest CIDR covering the range; start is a
    - "a/nn": submitted unchanged; start is a
    - "a": submitted unchanged; cidr is the single-host block

    Malformed input is logged as a warning and returned unmodified with
    valid=False. It is up to the caller whether to go ahead with it.

    Args:
        expression: Address expression from the caller

    Returns:
        NormalizedAddress describing the expression
    """
    expression = (expression or "").strip()

    if "-" in expression:
        start, end = (part.strip() for part in expression.split("-", 1))
        try:
            cidr = range_to_cidr(start, end)
        except ValueError:
            log.warning("Invalid IP %s", expression)
            return NormalizedAddress(expression, expression, None, start, True, False)
        return NormalizedAddress(expression, cidr, cidr, start, True, True)

    match = CIDR_SUFFIX_RE.match(expression)
    if match:
        start = match.group("base")
        try:
            network = ipaddress.ip_network(expression, strict=False)
        except ValueError:
            log.warning("Invalid IP %s", expression)
            return NormalizedAddress(expression, expression, None, start, True, False)
        return NormalizedAddress(expression, expression, str(network), start, True, True)

    try:
        single = ipaddress.ip_address(expression)
    except ValueError:
        log.warning("Invalid IP %s", expression)
        return NormalizedAddress(expression, expression, None, None, False, False)
    return NormalizedAddress(
        expression, expression, f"{single}/{single.max_prefixlen}", None, False, True
    )


__all__ = [
    'CIDR_SUFFIX_RE',
    'NormalizedAddress',
    'range_to_cidr',
    'normalize_address',
]
