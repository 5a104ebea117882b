"""
Chain-aware amount arithmetic: human units <-> smallest units <-> USD.

All arithmetic is Decimal/int; floats never touch an on-chain amount.

Hedera (chain ids 295/296) needs two scalings for the same logical amount:
its JSON-RPC relay rescales msg.value from 18 to 8 decimals but passes
function arguments through untouched. So contract_amount is 8-decimal and
transaction_value is 18-decimal. Getting this wrong overpays 10**10-fold or
reverts.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

from .chains import HEDERA_CHAIN_IDS, coingecko_price_id, native_decimals, native_symbol
from .contracts.calls import UINT256_MAX
from .core.errors import PriceUnavailableError
from .providers.cache import PriceSource

logger = logging.getLogger(__name__)

AmountLike = Union[str, int, float, Decimal]

HEDERA_CONTRACT_DECIMALS = 8
HEDERA_TRANSACTION_DECIMALS = 18

# Enough headroom for 18-decimal scaling of large balances
_PRECISION = 80
# uint256 has 78 digits; anything wider cannot be an on-chain amount
_MAX_SCALED_DIGITS = len(str(UINT256_MAX))


@dataclass(frozen=True)
class ChainAmountPair:
    """contract_amount goes into function args, transaction_value into msg.value."""

    contract_amount: int
    transaction_value: int

    def __add__(self, other: "ChainAmountPair") -> "ChainAmountPair":
        return ChainAmountPair(
            self.contract_amount + other.contract_amount,
            self.transaction_value + other.transaction_value,
        )

    def to_dict(self) -> dict:
        # Strings: JSON consumers lose precision on 18-decimal integers
        return {
            "contract_amount": str(self.contract_amount),
            "transaction_value": str(self.transaction_value),
        }


@dataclass(frozen=True)
class EscrowAmountBreakdown:
    base_amount: ChainAmountPair
    fee_amount: ChainAmountPair
    total_amount: ChainAmountPair

    def to_dict(self) -> dict:
        return {
            "base_amount": self.base_amount.to_dict(),
            "fee_amount": self.fee_amount.to_dict(),
            "total_amount": self.total_amount.to_dict(),
        }


@dataclass(frozen=True)
class NormalizedTransactionValue:
    normalized_tx_value: str
    normalized_expected: str


@dataclass(frozen=True)
class NativeConversion:
    native_amount: str
    native_price: float
    native_symbol: str
    usd_amount: Decimal
    chain_id: int

    def to_dict(self) -> dict:
        return {
            "native_amount": self.native_amount,
            "native_price": self.native_price,
            "native_symbol": self.native_symbol,
            "usd_amount": str(self.usd_amount),
            "chain_id": self.chain_id,
        }


def to_decimal(amount: AmountLike) -> Decimal:
    """Parse an amount into a finite Decimal. Floats go through repr, not binary expansion."""
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, float):
        value = Decimal(repr(amount))
    else:
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return value


def to_smallest_unit(amount: AmountLike, decimals: int) -> int:
    """
    Scale a human amount to integer smallest units.

    Fractional digits beyond `decimals` are rounded half-up. Negative amounts
    and amounts that do not fit in a uint256 once scaled raise ValueError.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")
    value = to_decimal(amount)
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {amount!r}")
    if value and value.adjusted() + decimals >= _MAX_SCALED_DIGITS:
        raise ValueError(f"Amount out of range: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = int(value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if scaled > UINT256_MAX:
        raise ValueError(f"Amount out of range: {amount!r}")
    return scaled


def from_smallest_unit(amount: Union[int, str], decimals: int) -> str:
    """Inverse of to_smallest_unit; trailing fractional zeros are trimmed."""
    value = int(amount)
    sign = "-" if value < 0 else ""
    whole, remainder = divmod(abs(value), 10 ** decimals)
    if decimals == 0 or remainder == 0:
        return f"{sign}{whole}"
    fraction = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction}"


def is_dual_decimal_chain(chain_id: Union[int, str]) -> bool:
    """True for the Hedera family (mainnet 295, testnet 296)."""
    try:
        return int(chain_id) in HEDERA_CHAIN_IDS
    except (TypeError, ValueError):
        return False


def parse_native_amount(amount: AmountLike, chain_id: Union[int, str]) -> int:
    return to_smallest_unit(amount, native_decimals(chain_id))


def format_native_amount(amount: Union[int, str], chain_id: Union[int, str]) -> str:
    return from_smallest_unit(amount, native_decimals(chain_id))


def compute_chain_amounts(amount: AmountLike, chain_id: Union[int, str]) -> ChainAmountPair:
    if is_dual_decimal_chain(chain_id):
        return ChainAmountPair(
            contract_amount=to_smallest_unit(amount, HEDERA_CONTRACT_DECIMALS),
            transaction_value=to_smallest_unit(amount, HEDERA_TRANSACTION_DECIMALS),
        )
    native = parse_native_amount(amount, chain_id)
    return ChainAmountPair(contract_amount=native, transaction_value=native)


def compute_escrow_amounts(
    amount: AmountLike,
    fee_percentage: AmountLike,
    chain_id: Union[int, str],
    *,
    strict_additive: bool = False,
) -> EscrowAmountBreakdown:
    """
    Base, fee and total for an escrow deposit, in both representations.

    fee_percentage is a fraction (0.025 for 2.5%). Fee and total are computed
    in Decimal first. By default base, fee and total are then rescaled
    independently, so at the integer level total may differ from base + fee
    by at most one smallest unit. With strict_additive=True the total is the
    sum of the rescaled base and fee, so total == base + fee exactly.
    """
    base = to_decimal(amount)
    pct = to_decimal(fee_percentage)
    if pct < 0:
        raise ValueError(f"Fee percentage must be non-negative, got {fee_percentage!r}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        fee = base * pct
        total = base + fee

    base_pair = compute_chain_amounts(base, chain_id)
    fee_pair = compute_chain_amounts(fee, chain_id)
    if strict_additive:
        total_pair = base_pair + fee_pair
    else:
        total_pair = compute_chain_amounts(total, chain_id)
    return EscrowAmountBreakdown(base_amount=base_pair, fee_amount=fee_pair, total_amount=total_pair)


def subscription_amount(amount: AmountLike, chain_id: Union[int, str]) -> int:
    """msg.value for a subscription payment (18-decimal on Hedera, native elsewhere)."""
    if is_dual_decimal_chain(chain_id):
        return to_smallest_unit(amount, HEDERA_TRANSACTION_DECIMALS)
    return parse_native_amount(amount, chain_id)


def normalize_transaction_value(
    transaction_value: Union[int, str],
    expected_amount: str,
    chain_id: Union[int, str],
) -> NormalizedTransactionValue:
    """Bring an on-chain tx value to the contract scale before comparing with an expected amount."""
    tx_value = int(transaction_value)
    if is_dual_decimal_chain(chain_id):
        tx_value //= 10 ** (HEDERA_TRANSACTION_DECIMALS - HEDERA_CONTRACT_DECIMALS)
    return NormalizedTransactionValue(str(tx_value), str(expected_amount))


def native_usd_price(chain_id: Union[int, str], prices: PriceSource) -> Decimal:
    """USD price of the chain's native currency. Raises PriceUnavailableError."""
    gecko_id = coingecko_price_id(chain_id)
    result = prices.get_cached_price(gecko_id, symbol=native_symbol(chain_id), coingecko_id=gecko_id)
    if result is None or result.price <= 0:
        raise PriceUnavailableError(gecko_id)
    return Decimal(repr(result.price))


def convert_usd_to_smallest_unit(usd_amount: AmountLike, chain_id: Union[int, str], prices: PriceSource) -> int:
    usd = to_decimal(usd_amount)
    if usd == 0:
        return 0
    price = native_usd_price(chain_id, prices)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        native = usd / price
    return parse_native_amount(native, chain_id)


def convert_smallest_unit_to_usd(amount: Union[int, str], chain_id: Union[int, str], prices: PriceSource) -> Decimal:
    smallest = int(amount)
    if smallest == 0:
        return Decimal(0)
    price = native_usd_price(chain_id, prices)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(smallest).scaleb(-native_decimals(chain_id)) * price


def convert_usd_to_native(usd_amount: AmountLike, chain_id: Union[int, str], prices: PriceSource) -> NativeConversion:
    """USD -> native amount for display, at half the native decimals (9 for 18, 4 for 8)."""
    usd = to_decimal(usd_amount)
    price = native_usd_price(chain_id, prices)
    display_places = math.ceil(native_decimals(chain_id) / 2)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        native = (usd / price).quantize(Decimal(1).scaleb(-display_places), rounding=ROUND_HALF_UP)
    logger.debug("Converted $%s to %s %s on chain %s", usd, native, native_symbol(chain_id), chain_id)
    return NativeConversion(
        native_amount=f"{native:f}",
        native_price=float(price),
        native_symbol=native_symbol(chain_id),
        usd_amount=usd,
        chain_id=int(chain_id),
    )
