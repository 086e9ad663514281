"""Trade intent model and trade-shape classification."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dexswap.errors import ValidationError
from dexswap.models.types import Address, DecimalAmount, is_native, normalize_address

# Literal input amount meaning "use the caller's full token balance"
ALL_BALANCE_SENTINEL = "0"


class InputKind(str, Enum):
    """How the input amount is denominated."""

    ETH = "ETH"
    USD = "USD"
    TOKEN = "TOKEN"


class TradeShape(str, Enum):
    """Direction of a swap relative to the native asset."""

    ETH_TO_TOKEN = "ETH_TO_TOKEN"
    TOKEN_TO_ETH = "TOKEN_TO_ETH"
    TOKEN_TO_TOKEN = "TOKEN_TO_TOKEN"


class TradeIntent(BaseModel):
    """A caller's request to swap one asset for another.

    Amounts are decimal strings in human units. The zero address stands for
    the chain's native asset on either side.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    chain: str
    input_kind: InputKind = Field(alias="inputType")
    input_token: Address = Field(alias="inputToken")
    input_amount: DecimalAmount = Field(alias="inputAmount")
    output_token: Address = Field(alias="outputToken")
    sell_price: DecimalAmount | None = Field(default=None, alias="sellPrice")

    @field_validator("chain")
    @classmethod
    def _upper_chain(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def is_all_balance(self) -> bool:
        """True if the amount is the full-balance sentinel for a token input."""
        return (
            self.input_kind == InputKind.TOKEN
            and self.input_amount == ALL_BALANCE_SENTINEL
            and not is_native(self.input_token)
        )

    @property
    def amount(self) -> Decimal:
        return Decimal(self.input_amount)


def validate_intent(intent: TradeIntent) -> None:
    """Reject non-numeric or non-positive amounts before any chain call.

    The full-balance sentinel "0" is accepted for token input. ETH and USD
    amounts are only meaningful when the input is the native asset.

    Raises:
        ValidationError: If the amount is unusable
    """
    if intent.input_kind in (InputKind.ETH, InputKind.USD) and not is_native(intent.input_token):
        raise ValidationError(
            "input kind requires the native asset as input",
            input_kind=intent.input_kind.value,
            input_token=intent.input_token,
        )
    if intent.is_all_balance:
        return
    try:
        amount = Decimal(intent.input_amount)
    except InvalidOperation as err:
        raise ValidationError(
            "input amount is not a number", input_amount=intent.input_amount
        ) from err
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(
            "input amount must be a positive number", input_amount=intent.input_amount
        )


def classify_trade(intent: TradeIntent) -> TradeShape:
    """Classify an intent as ETH→token, token→ETH or token→token.

    Raises:
        ValidationError: If both sides are the same asset
    """
    token_in = normalize_address(intent.input_token)
    token_out = normalize_address(intent.output_token)

    if token_in == token_out:
        raise ValidationError(
            "input and output token are identical",
            input_token=token_in,
            output_token=token_out,
        )
    if is_native(token_in):
        return TradeShape.ETH_TO_TOKEN
    if is_native(token_out):
        return TradeShape.TOKEN_TO_ETH
    return TradeShape.TOKEN_TO_TOKEN
