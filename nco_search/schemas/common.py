"""
Validation helpers shared by request schemas
"""

import re

PHONE_PATTERN = re.compile(r'^[6-9][0-9]{9}$')
PHONE_SEPARATORS = re.compile(r'[\s\-\(\)]')

def clean_phone(value) -> str:
    """Strip spaces, dashes and parentheses from a phone number"""
    if value is None:
        return ""
    return PHONE_SEPARATORS.sub('', str(value))

def is_valid_phone(value) -> bool:
    """10-digit Indian mobile number starting with 6-9"""
    return bool(PHONE_PATTERN.match(clean_phone(value)))

def validate_phone(value) -> str:
    cleaned = clean_phone(value)
    if not PHONE_PATTERN.match(cleaned):
        raise ValueError('Invalid phone number. Please enter a valid 10-digit Indian mobile number.')
    return cleaned
