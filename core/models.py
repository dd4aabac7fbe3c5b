# PATH: core/models.py
"""
Core data models for LOOPARB.

All models are frozen dataclasses. The Settings Cache publishes a new
SettingsSnapshot instead of mutating fields, so a reader holding a snapshot
reference always sees a whitelist and settings that belong together.

AMOUNT CONTRACT:
================
- On-chain amounts (in/out/threshold/spread) are int in smallest units.
- Display amounts (trade sizes, slippage percent) are Decimal.
- No floats on the quote -> spread -> threshold path.
================
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from core.constants import (
    AttemptOutcomeKind,
    DEFAULT_PRIORITY_FEE,
    DEFAULT_SLIPPAGE_PCT,
    DEFAULT_THRESHOLD,
    DEFAULT_TRADE_SIZE,
    SOLANA_MAINNET_CHAIN_ID,
    WRAPPED_SOL_MINT,
)
from core.exceptions import ErrorCode, ValidationError
from core.math import floor_to_int, format_amount, safe_decimal, slippage_pct_to_bps


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Any, field_name: str, default: int) -> int:
    if value is None:
        return default
    try:
        return floor_to_int(value)
    except ValueError:
        raise ValidationError(
            f"Field {field_name} is not numeric: {value!r}",
            details={"field": field_name, "value": value},
        )


def _to_decimal(value: Any, field_name: str, default: Decimal) -> Decimal:
    if value is None:
        return default
    result = safe_decimal(value, default=None)
    if result is None:
        raise ValidationError(
            f"Field {field_name} is not numeric: {value!r}",
            details={"field": field_name, "value": value},
        )
    return result


# ============================================================================
# TOKEN CATALOG
# ============================================================================

@dataclass(frozen=True)
class Token:
    """Token descriptor from the catalog feed. Read-only after startup."""
    chain_id: int
    address: str
    symbol: str
    name: str
    decimals: int
    logo_uri: str = ""
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_catalog(cls, data: Dict[str, Any]) -> "Token":
        """Build a Token from a catalog entry (chainId/address/symbol/name/decimals/logoURI/tags)."""
        address = data.get("address")
        decimals = data.get("decimals")
        if not isinstance(address, str) or not address:
            raise ValidationError(
                "Catalog entry has no address",
                code=ErrorCode.CATALOG_MALFORMED,
                details={"entry": data},
            )
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            raise ValidationError(
                f"Catalog entry {address} has invalid decimals: {decimals!r}",
                code=ErrorCode.CATALOG_MALFORMED,
                details={"address": address},
            )
        chain_id = data.get("chainId", SOLANA_MAINNET_CHAIN_ID)
        if isinstance(chain_id, bool) or not isinstance(chain_id, int):
            raise ValidationError(
                f"Catalog entry {address} has invalid chainId: {chain_id!r}",
                code=ErrorCode.CATALOG_MALFORMED,
                details={"address": address},
            )
        tags = data.get("tags")
        if tags is None:
            tags = []
        if not isinstance(tags, list):
            raise ValidationError(
                f"Catalog entry {address} has invalid tags: {tags!r}",
                code=ErrorCode.CATALOG_MALFORMED,
                details={"address": address},
            )

        symbol = str(data.get("symbol") or "")
        return cls(
            chain_id=chain_id,
            address=address,
            symbol=symbol,
            name=str(data.get("name") or symbol),
            decimals=decimals,
            logo_uri=str(data.get("logoURI") or ""),
            tags=tuple(str(tag) for tag in tags),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "logoURI": self.logo_uri,
            "tags": list(self.tags),
        }


# ============================================================================
# CONFIG STORE DOCUMENTS
# ============================================================================

@dataclass(frozen=True)
class WhitelistEntry:
    """One token approved for scanning, keyed by mint address."""
    key: str
    symbol: str
    amount: Decimal
    enabled: bool = True
    token: Optional[Token] = None

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "WhitelistEntry":
        """Parse a whitelist document row ({key, ccy, amount, enabled})."""
        if not isinstance(data, dict):
            raise ValidationError(f"Whitelist row is not a mapping: {data!r}")

        key = data.get("key")
        if not isinstance(key, str) or not key:
            raise ValidationError("Whitelist row has no key", details={"row": data})

        amount = _to_decimal(data.get("amount"), "amount", Decimal("0"))
        if amount <= 0 and _to_bool(data.get("enabled")):
            raise ValidationError(
                f"Whitelist row {key} has non-positive amount",
                details={"key": key, "amount": str(amount)},
            )

        return cls(
            key=key,
            symbol=str(data.get("ccy") or data.get("symbol") or key[:6]),
            amount=amount,
            enabled=_to_bool(data.get("enabled")),
        )

    def with_token(self, token: Optional[Token]) -> "WhitelistEntry":
        return replace(self, token=token)

    @property
    def trade_size_label(self) -> str:
        return format_amount(self.amount)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "ccy": self.symbol,
            "amount": str(self.amount),
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class StrategySettings:
    """Strategy parameters. Replaced wholesale on refresh."""
    threshold: int = DEFAULT_THRESHOLD
    priority_fee: int = DEFAULT_PRIORITY_FEE
    slippage_pct: Decimal = DEFAULT_SLIPPAGE_PCT
    token: str = WRAPPED_SOL_MINT
    amount: Decimal = DEFAULT_TRADE_SIZE

    # Config Store field name -> attribute name
    DOCUMENT_FIELDS: ClassVar[Dict[str, str]] = {
        "threshold": "threshold",
        "priorityFee": "priority_fee",
        "slippagePct": "slippage_pct",
        "token": "token",
        "amount": "amount",
    }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "StrategySettings":
        """Parse the settings document ({threshold, priorityFee, slippagePct, token, amount})."""
        if not isinstance(data, dict):
            raise ValidationError(f"Settings document is not a mapping: {data!r}")

        slippage_pct = _to_decimal(data.get("slippagePct"), "slippagePct", DEFAULT_SLIPPAGE_PCT)
        if slippage_pct < 0:
            raise ValidationError(
                "slippagePct must not be negative",
                details={"slippagePct": str(slippage_pct)},
            )

        return cls(
            threshold=_to_int(data.get("threshold"), "threshold", DEFAULT_THRESHOLD),
            priority_fee=_to_int(data.get("priorityFee"), "priorityFee", DEFAULT_PRIORITY_FEE),
            slippage_pct=slippage_pct,
            token=str(data.get("token") or WRAPPED_SOL_MINT),
            amount=_to_decimal(data.get("amount"), "amount", DEFAULT_TRADE_SIZE),
        )

    @property
    def slippage_bps(self) -> int:
        return slippage_pct_to_bps(self.slippage_pct)

    @property
    def threshold_label(self) -> str:
        return str(self.threshold)

    def diff(self, other: "StrategySettings") -> Dict[str, Tuple[Any, Any]]:
        """Fields whose value differs from `other`, keyed by document field name."""
        changes = {}
        for doc_field, attr in self.DOCUMENT_FIELDS.items():
            old = getattr(other, attr)
            new = getattr(self, attr)
            if old != new:
                changes[doc_field] = (old, new)
        return changes

    def to_dict(self) -> Dict[str, Any]:
        return {
            doc_field: str(getattr(self, attr)) if isinstance(getattr(self, attr), Decimal) else getattr(self, attr)
            for doc_field, attr in self.DOCUMENT_FIELDS.items()
        }


@dataclass(frozen=True)
class SettingsSnapshot:
    """
    Settings and resolved whitelist published together.

    Readers take the reference once per use and never see a whitelist paired
    with settings from another refresh.
    """
    settings: StrategySettings = field(default_factory=StrategySettings)
    whitelist: Tuple[WhitelistEntry, ...] = ()
    version: int = 0
    refreshed_at: str = ""

    @property
    def symbols(self) -> list[str]:
        return [entry.symbol for entry in self.whitelist]

    def __len__(self) -> int:
        return len(self.whitelist)


# ============================================================================
# ROUTING
# ============================================================================

@dataclass(frozen=True)
class Route:
    """Router candidate route. `raw` is the payload needed to build the swap."""
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    other_amount_threshold: int
    slippage_bps: int = 0
    price_impact_pct: Decimal = Decimal("0")
    labels: Tuple[str, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_jupiter(cls, data: Dict[str, Any]) -> "Route":
        """Parse a Jupiter v6 quote response."""
        try:
            labels = tuple(
                str(step.get("swapInfo", {}).get("label", ""))
                for step in data.get("routePlan") or []
            )
            return cls(
                input_mint=data["inputMint"],
                output_mint=data["outputMint"],
                in_amount=int(data["inAmount"]),
                out_amount=int(data["outAmount"]),
                other_amount_threshold=int(data["otherAmountThreshold"]),
                slippage_bps=int(data.get("slippageBps", 0)),
                price_impact_pct=safe_decimal(data.get("priceImpactPct")),
                labels=labels,
                raw=data,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(
                f"Malformed route: {e}",
                code=ErrorCode.ROUTER_ERROR,
                details={"keys": sorted(data.keys()) if isinstance(data, dict) else None},
            )

    @property
    def hops(self) -> int:
        return len(self.labels)


@dataclass(frozen=True)
class Quote:
    """Best route for one evaluation. Consumed by the gate and discarded."""
    route: Route
    in_amount: int
    out_amount: int
    min_out_amount: int

    @classmethod
    def from_route(cls, route: Route) -> "Quote":
        return cls(
            route=route,
            in_amount=route.in_amount,
            out_amount=route.out_amount,
            min_out_amount=route.other_amount_threshold,
        )


# ============================================================================
# EXECUTION
# ============================================================================

@dataclass(frozen=True)
class SwapError:
    """Structured error of a submitted swap (program error code when known)."""
    code: Optional[int] = None
    txid: Optional[str] = None
    message: str = ""


@dataclass(frozen=True)
class TerminalResult:
    """Final result of Router build-and-submit."""
    txid: Optional[str] = None
    input_amount: int = 0
    output_amount: int = 0
    error: Optional[SwapError] = None

    @property
    def is_success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Success:
    input_amount: int
    output_amount: int
    txid: Optional[str] = None

    kind: ClassVar[AttemptOutcomeKind] = AttemptOutcomeKind.SUCCESS


@dataclass(frozen=True)
class SlippageFailure:
    txid: Optional[str] = None

    kind: ClassVar[AttemptOutcomeKind] = AttemptOutcomeKind.SLIPPAGE


@dataclass(frozen=True)
class OtherFailure:
    txid: Optional[str] = None
    code: Optional[int] = None
    message: str = ""

    kind: ClassVar[AttemptOutcomeKind] = AttemptOutcomeKind.OTHER


AttemptOutcome = Union[Success, SlippageFailure, OtherFailure]
