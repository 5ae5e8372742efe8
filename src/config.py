import importlib
import os
from dataclasses import dataclass
from pathlib import Path

_ENV_LOADED = False

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _load_env() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    try:
        dotenv = importlib.import_module("dotenv")
    except ImportError as exc:  # pragma: no cover
        raise SystemExit("python-dotenv is required (pip install -e .)") from exc
    env_path = Path(__file__).resolve().parent.parent / ".env"
    dotenv.load_dotenv(dotenv_path=env_path)
    _ENV_LOADED = True


def get_env(
    name: str, default: str | None = None, required: bool = False
) -> str | None:
    _load_env()
    value = os.environ.get(name, default)
    if required and (value is None or value == ""):
        raise SystemExit(f"{name} env var is required")
    return value


def _get_int(name: str, default: int) -> int:
    raw = get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _get_bool(name: str, default: bool) -> bool:
    raw = get_env(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    chain_id: int = 43114
    flash_loan_fee_bps: int = 0
    trade_size: str = "300"
    test_mode: bool = False


def load_settings() -> Settings:
    """Read settings from the environment (and ``.env`` if present)."""
    settings = Settings(
        log_level=(get_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        chain_id=_get_int("CHAIN_ID", 43114),
        flash_loan_fee_bps=_get_int("FLASH_LOAN_FEE_BPS", 0),
        trade_size=get_env("TRADE_SIZE", "300") or "300",
        test_mode=_get_bool("ARBITRAGE_TEST_MODE", False),
    )
    if settings.chain_id <= 0:
        raise ValueError("CHAIN_ID must be positive")
    if not 0 <= settings.flash_loan_fee_bps < 10_000:
        raise ValueError("FLASH_LOAN_FEE_BPS must be in [0, 10000)")
    return settings
