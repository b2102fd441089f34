"""
Configuration for proxybid.

Two layers:
- AuctionConfig: the immutable parameters of one auction, validated once
  at construction (seller, timing window, minimum bid and increment,
  asset mode).
- SystemConfig: process-wide defaults and logging options, loaded from
  defaults, a .env file, PROXYBID_* environment variables and an optional
  JSON file, in that order of precedence (last wins).
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from proxybid.utils.logger import get_logger
from proxybid.utils.validation import MAX_STRING_LENGTH, validate_address

logger = get_logger("config")

ENV_PREFIX = "PROXYBID_"


# =============================================================================
# Asset Mode
# =============================================================================


class AssetMode(str, Enum):
    """Which kind of value an auction escrows."""
    NATIVE = "native"   # Native currency attached to calls
    TOKEN = "token"     # Fungible token pulled via allowance


# =============================================================================
# Per-auction Configuration
# =============================================================================


class AuctionConfig(BaseModel):
    """
    Immutable parameters of a single auction.

    Attributes:
        seller: 20-byte address of the party selling the lot
        name: Human-readable lot name
        description: Free-form lot description
        min_bid: Every pledge must strictly exceed this amount
        start: First second (inclusive) bids are accepted
        end: First second bids are no longer accepted
        min_increment: Step by which a pledge must clear the binding bid
        asset_mode: Native currency or token ledger
    """

    model_config = ConfigDict(frozen=True)

    seller: bytes
    name: str = Field(min_length=1, max_length=MAX_STRING_LENGTH)
    description: str = Field(default="", max_length=MAX_STRING_LENGTH)
    min_bid: int = Field(default=0, ge=0)
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    min_increment: int = Field(default=1, gt=0)
    asset_mode: AssetMode = AssetMode.NATIVE

    @field_validator("seller")
    @classmethod
    def check_seller(cls, value: bytes) -> bytes:
        valid, err = validate_address(value, "seller")
        if not valid:
            raise ValueError(err)
        return bytes(value)

    @model_validator(mode="after")
    def check_window(self) -> "AuctionConfig":
        if self.end <= self.start:
            raise ValueError(f"end ({self.end}) must be after start ({self.start})")
        return self

    @property
    def duration(self) -> int:
        return self.end - self.start


# =============================================================================
# System Configuration
# =============================================================================


@dataclass
class SystemConfig:
    """Process-wide defaults"""

    # Auction defaults (used by the CLI and directory helpers)
    default_min_increment: int = 1
    default_min_bid: int = 0
    default_duration: int = 3600  # seconds

    # Token ledger
    token_symbol: str = "PBT"
    token_initial_supply: int = 1_000_000

    # Logging
    log_level: str = "INFO"
    log_levels: str = ""  # per-subsystem overrides, e.g. "assets=DEBUG"
    log_to_file: bool = False
    log_dir: Path = Path("logs")

    def auction_config(
        self,
        seller: bytes,
        name: str,
        start: int,
        description: str = "",
        min_bid: Optional[int] = None,
        min_increment: Optional[int] = None,
        duration: Optional[int] = None,
        asset_mode: AssetMode = AssetMode.NATIVE,
    ) -> AuctionConfig:
        """Build an AuctionConfig, filling unspecified parameters from defaults."""
        return AuctionConfig(
            seller=seller,
            name=name,
            description=description,
            min_bid=self.default_min_bid if min_bid is None else min_bid,
            start=start,
            end=start + (self.default_duration if duration is None else duration),
            min_increment=self.default_min_increment if min_increment is None else min_increment,
            asset_mode=asset_mode,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["log_dir"] = str(self.log_dir)
        return data


def _coerce(name: str, field_type: Any, raw: Any) -> Any:
    """Convert a raw env/JSON value to the field's type."""
    if field_type is bool:
        if isinstance(raw, bool):
            return raw
        if str(raw).strip().lower() in ("1", "true", "yes", "on"):
            return True
        if str(raw).strip().lower() in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"{name}: cannot interpret {raw!r} as bool")
    if field_type is int:
        if isinstance(raw, bool):
            raise ValueError(f"{name}: expected int, got bool")
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name}: expected int, got {raw!r}") from e
    if field_type is Path:
        return Path(raw)
    return str(raw)


# Global config instance (can be overridden)
config = SystemConfig()


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> SystemConfig:
    """
    Load configuration from .env, environment and an optional JSON file.

    Args:
        config_path: Optional path to a JSON object of SystemConfig fields
        env_file: Optional .env path. If None, searches from the working directory

    Returns:
        SystemConfig instance

    Raises:
        ValueError: unknown keys or values of the wrong type
        FileNotFoundError: config_path does not exist
    """
    load_dotenv(env_file or find_dotenv(usecwd=True), override=False)

    cfg = SystemConfig()
    known = {f.name: f.type for f in fields(SystemConfig)}

    for name, field_type in known.items():
        raw = os.environ.get(ENV_PREFIX + name.upper())
        if raw is not None:
            setattr(cfg, name, _coerce(name, field_type, raw))

    if config_path:
        data = json.loads(Path(config_path).read_text())
        if not isinstance(data, dict):
            raise ValueError("Config file must contain a JSON object")
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        for name, raw in data.items():
            setattr(cfg, name, _coerce(name, known[name], raw))

    logger.debug(f"Loaded config: {cfg.to_dict()}")
    return cfg
