"""Transaction PIN hashing and the withdrawal authorization state machine"""

import re
from enum import Enum
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from pounds_ledger.domain.exceptions import AuthorizationError, ValidationError

PIN_PATTERN = re.compile(r"[0-9]{4}")


def validate_pin_format(pin: Optional[str]) -> str:
    """Return the PIN if it is exactly four digits, else raise ValidationError"""
    if not isinstance(pin, str) or not PIN_PATTERN.fullmatch(pin):
        raise ValidationError("Transaction PIN must be exactly 4 digits")
    return pin


def hash_pin(pin: str) -> str:
    """Salted hash of a transaction PIN. The plaintext is never stored."""
    return generate_password_hash(validate_pin_format(pin))


def pin_matches(pin_hash: str, pin: str) -> bool:
    # check_password_hash compares digests in constant time
    return check_password_hash(pin_hash, pin)


class AuthorizationState(str, Enum):
    AWAITING_PIN = "awaiting_pin"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PinAuthorization:
    """
    Single-use PIN gate in front of a withdrawal.

    AWAITING_PIN -> VERIFIED on a match, AWAITING_PIN -> REJECTED on a mismatch.
    A bad PIN format raises ValidationError and leaves the state unchanged.
    The entered PIN is dropped once a verdict is reached.
    """

    def __init__(self, pin_hash: str):
        self._pin_hash = pin_hash
        self._entered_pin: Optional[str] = None
        self.state = AuthorizationState.AWAITING_PIN

    @property
    def verified(self) -> bool:
        return self.state is AuthorizationState.VERIFIED

    def verify(self, pin: Optional[str]) -> None:
        if self.state is not AuthorizationState.AWAITING_PIN:
            raise AuthorizationError(f"Authorization already {self.state.value}")

        self._entered_pin = validate_pin_format(pin)
        try:
            if pin_matches(self._pin_hash, self._entered_pin):
                self.state = AuthorizationState.VERIFIED
            else:
                self.state = AuthorizationState.REJECTED
                raise AuthorizationError("Invalid transaction PIN")
        finally:
            self._entered_pin = None
