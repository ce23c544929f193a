"""
Payment card helpers: AES-256-CBC encryption, brand detection and validation

Card numbers and CVVs are stored as "<iv hex>:<ciphertext hex>".
"""
import os
import re
from datetime import datetime
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend

from .config import settings

BLOCK_SIZE_BITS = 128


def _encryption_key(raw: Optional[str] = None) -> bytes:
    """Key padded with '0' or truncated to exactly 32 bytes"""
    key = (raw if raw is not None else settings.ENCRYPTION_KEY).encode("utf-8")
    if len(key) < 32:
        return key.ljust(32, b"0")
    return key[:32]


def encrypt_data(text: str, key: Optional[str] = None) -> str:
    """Encrypt a string with AES-256-CBC and a random IV"""
    iv = os.urandom(16)
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(text.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(
        algorithms.AES(_encryption_key(key)),
        modes.CBC(iv),
        backend=default_backend()
    ).encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()

    return f"{iv.hex()}:{encrypted.hex()}"


def decrypt_data(encrypted_text: str, key: Optional[str] = None) -> str:
    """Reverse encrypt_data"""
    iv_hex, _, data_hex = encrypted_text.partition(":")
    if not iv_hex or not data_hex:
        raise ValueError("Invalid encrypted data format")

    decryptor = Cipher(
        algorithms.AES(_encryption_key(key)),
        modes.CBC(bytes.fromhex(iv_hex)),
        backend=default_backend()
    ).decryptor()
    padded = decryptor.update(bytes.fromhex(data_hex)) + decryptor.finalize()

    unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")


def clean_card_number(card_number: str) -> str:
    return re.sub(r"\D", "", card_number or "")


def mask_card_number(card_number: str) -> str:
    return f"•••• •••• •••• {clean_card_number(card_number)[-4:]}"


# Order matters: first match wins
CARD_TYPE_PATTERNS = [
    ("visa", r"^4"),
    ("mastercard", r"^5[1-5]"),
    ("amex", r"^3[47]"),
    ("discover", r"^6(?:011|4[4-9]|5)"),
    ("unionpay", r"^62"),
    ("jcb", r"^35(?:2[89]|[3-8]\d)"),
    ("maestro", r"^(?:5[0678]\d\d|6304|6390|67\d\d)"),
    ("dinersclub", r"^3(?:0[0-5]|[689])"),
]

CARD_FORMAT_RULES = {
    "visa": {"length": [13, 16, 19], "prefixes": ["4"]},
    "mastercard": {"length": [16], "prefixes": ["51", "52", "53", "54", "55"]},
    "amex": {"length": [15], "prefixes": ["34", "37"]},
    "discover": {"length": [16, 19], "prefixes": ["6011", "644", "645", "646", "647", "648", "649", "65"]},
    "unionpay": {"length": [16, 17, 18, 19], "prefixes": ["62"]},
    "jcb": {"length": [15, 16], "prefixes": ["35"]},
    "maestro": {
        "length": list(range(12, 20)),
        "prefixes": ["5018", "5020", "5038", "6304", "6759", "6761", "6762", "6763"],
    },
    "dinersclub": {"length": [14, 16, 19], "prefixes": ["30", "36", "38", "39"]},
}

CARD_DISPLAY_NAMES = {
    "visa": "Visa",
    "mastercard": "Mastercard",
    "amex": "American Express",
    "discover": "Discover",
    "unionpay": "UnionPay",
    "jcb": "JCB",
    "maestro": "Maestro",
    "dinersclub": "Diners Club",
}


def get_card_type(card_number: str) -> str:
    number = clean_card_number(card_number)
    for card_type, pattern in CARD_TYPE_PATTERNS:
        if re.match(pattern, number):
            return card_type
    return "unknown"


def luhn_check(card_number: str) -> bool:
    number = clean_card_number(card_number)
    if not number:
        return False

    total = 0
    for index, char in enumerate(reversed(number)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def card_number_error(card_number: str) -> Optional[str]:
    """
    Validate a card number against brand rules and the Luhn checksum.

    Returns:
        None when valid, otherwise a user-facing message
    """
    number = clean_card_number(card_number)
    if len(number) < 12 or len(number) > 19:
        return "Invalid card number"

    card_type = get_card_type(number)
    if card_type == "unknown":
        return "Unsupported card type"

    rules = CARD_FORMAT_RULES[card_type]
    brand = CARD_DISPLAY_NAMES[card_type]
    if len(number) not in rules["length"]:
        return f"Invalid {brand} card number length"
    if not any(number.startswith(prefix) for prefix in rules["prefixes"]):
        return f"Invalid {brand} card number"
    if not luhn_check(number):
        return "Invalid card number"
    return None


def is_card_expired(month: str, year: str, now: Optional[datetime] = None) -> bool:
    """MM / YY expiry; a card is valid through the end of its expiry month"""
    now = now or datetime.now()
    expiry_month = int(month)
    expiry_year = int(year)
    current_year = now.year % 100

    if expiry_year < current_year:
        return True
    return expiry_year == current_year and expiry_month < now.month
