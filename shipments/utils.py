"""
Courier Express - Tracking code utilities
=========================================
Public shipment identifiers of the form CRR-XXXXXXXX-XX.
"""

import re
import random
import string
import uuid


# ============================================
# CONFIGURATION
# ============================================

TRACKING_CODE_PREFIX = 'CRR'
TRACKING_CODE_REGEX = re.compile(r'^CRR-[A-Z0-9]{8}-[A-Z0-9]{2}$')
SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

# Attempts to find an unused code before giving up
MAX_TRACKING_CODE_ATTEMPTS = 5


def generate_tracking_code() -> str:
    """
    Build a new tracking code.

    The body is the first 8 hex characters of a UUID4, the suffix two random
    alphanumerics. Uniqueness is checked by the caller against the database.
    """
    body = uuid.uuid4().hex[:8].upper()
    suffix = ''.join(random.choices(SUFFIX_ALPHABET, k=2))
    return f"{TRACKING_CODE_PREFIX}-{body}-{suffix}"


def normalize_tracking_code(code) -> str:
    return str(code or '').strip().upper()


def is_valid_tracking_code(code) -> bool:
    return bool(TRACKING_CODE_REGEX.match(normalize_tracking_code(code)))
