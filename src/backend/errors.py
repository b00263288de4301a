"""
errors.py: Error taxonomy for the treasury gateway.

Every guard failure raises one of these. Each kind carries:
  - code: stable machine-readable identifier (surfaced in API responses and logs)
  - status_code: HTTP status used by routers/treasury.py

No kind is ever coerced into another. Unauthorized (never granted) and
UnauthorizedRole (explicitly disabled) stay distinct.
"""


class TreasuryError(Exception):
    """Base class for every caller-visible gateway failure."""

    code = "TREASURY_ERROR"
    status_code = 400

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return cls.code

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


# --- Authorization ---

class Unauthorized(TreasuryError):
    code = "UNAUTHORIZED"
    status_code = 403


class UnauthorizedRole(TreasuryError):
    code = "UNAUTHORIZED_ROLE"
    status_code = 403


# --- Input ---

class InvalidAddress(TreasuryError):
    """An address argument is empty or blank."""
    code = "INVALID_ADDRESS"


# --- Buy order guards ---

class Expired(TreasuryError):
    code = "EXPIRED"
    status_code = 409


class SlippageOutOfRange(TreasuryError):
    code = "SLIPPAGE_OUT_OF_RANGE"


class InsufficientInputForGas(TreasuryError):
    code = "INSUFFICIENT_INPUT_FOR_GAS"


class InsufficientAmountToSwap(TreasuryError):
    code = "INSUFFICIENT_AMOUNT_TO_SWAP"


# --- Arithmetic ---

class FeeUnderflow(TreasuryError):
    code = "FEE_UNDERFLOW"


class ArithmeticOverflow(TreasuryError):
    code = "ARITHMETIC_OVERFLOW"


class ArithmeticUnderflow(TreasuryError):
    """Raised by checked_sub when no more specific kind applies."""
    code = "ARITHMETIC_UNDERFLOW"


class DivideByZero(TreasuryError):
    code = "DIVIDE_BY_ZERO"


# --- Persistence ---

class StorageFailure(TreasuryError):
    code = "STORAGE_FAILURE"
    status_code = 503


class ConfigNotFound(StorageFailure):
    code = "CONFIG_NOT_FOUND"


class AlreadyInstantiated(TreasuryError):
    code = "ALREADY_INSTANTIATED"
    status_code = 409
