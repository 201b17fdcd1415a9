"""
Constants used throughout the StewardBot codebase.

Centralizes special page titles, form field names and the default values
applied when a caller passes only a target.
"""

import re

# Special pages driven by screen-scraping
GLOBAL_BLOCK_PAGE = "Special:GlobalBlock"
GLOBAL_UNBLOCK_PAGE = "Special:GlobalUnblock"
CENTRAL_AUTH_PAGE = "Special:CentralAuth"

# Appended to every index.php URL so error markup is predictable
DEFAULT_EXTRA = "&uselang=en&useskin=monobook"

# Defaults for g_block
DEFAULT_BLOCK_REASON = "cross-wiki abuse"
DEFAULT_BLOCK_EXPIRY = "31 hours"
DEFAULT_ANON_ONLY = False

# Defaults for g_unblock
DEFAULT_UNBLOCK_REASON = "Removing obsolete block"

# Defaults for ca_lock / ca_unlock
DEFAULT_LOCK_REASON = "cross-wiki abuse"
DEFAULT_UNLOCK_REASON = "Removing obsolete account lock"
DEFAULT_HIDE_LEVEL = 0

# Form field names on Special:GlobalBlock
FIELD_BLOCK_ADDRESS = "wpAddress"
FIELD_BLOCK_EXPIRY = "wpExpiryOther"
FIELD_BLOCK_REASON = "wpReason"
FIELD_BLOCK_ANON_ONLY = "wpAnonOnly"

# Form field names on Special:GlobalUnblock
FIELD_UNBLOCK_ADDRESS = "address"
FIELD_UNBLOCK_REASON = "wpReason"

# Form field names on Special:CentralAuth
FIELD_LOCK_STATUS = "wpStatusLocked"
FIELD_HIDE_STATUS = "wpStatusHidden"
FIELD_LOCK_REASON = "wpReason"

# Optional "User:" namespace prefix on account names
USER_PREFIX_RE = re.compile(r"^User:", re.IGNORECASE)


__all__ = [
    'GLOBAL_BLOCK_PAGE',
    'GLOBAL_UNBLOCK_PAGE',
    'CENTRAL_AUTH_PAGE',
    'DEFAULT_EXTRA',
    'DEFAULT_BLOCK_REASON',
    'DEFAULT_BLOCK_EXPIRY',
    'DEFAULT_ANON_ONLY',
    'DEFAULT_UNBLOCK_REASON',
    'DEFAULT_LOCK_REASON',
    'DEFAULT_UNLOCK_REASON',
    'DEFAULT_HIDE_LEVEL',
    'FIELD_BLOCK_ADDRESS',
    'FIELD_BLOCK_EXPIRY',
    'FIELD_BLOCK_REASON',
    'FIELD_BLOCK_ANON_ONLY',
    'FIELD_UNBLOCK_ADDRESS',
    'FIELD_UNBLOCK_REASON',
    'FIELD_LOCK_STATUS',
    'FIELD_HIDE_STATUS',
    'FIELD_LOCK_REASON',
    'USER_PREFIX_RE',
]
