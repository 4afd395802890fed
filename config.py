"""
Configuration for Sui CLMM Rebalancer

Конфигурация для ребалансировки позиции Cetus CLMM на Sui.
Значения по умолчанию можно переопределить через .env / переменные окружения.
"""

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from rebalancer.exceptions import ConfigError


@dataclass
class NetworkConfig:
    """Конфигурация сети."""
    name: str
    rpc_url: str
    explorer_url: str
    native_token: str


# ============================================================
# NETWORK CONFIGURATIONS
# ============================================================

SUI_MAINNET = NetworkConfig(
    name="mainnet",
    rpc_url="https://fullnode.mainnet.sui.io:443",
    explorer_url="https://suivision.xyz",
    native_token="SUI",
)

SUI_TESTNET = NetworkConfig(
    name="testnet",
    rpc_url="https://fullnode.testnet.sui.io:443",
    explorer_url="https://testnet.suivision.xyz",
    native_token="SUI",
)

NETWORKS: Dict[str, NetworkConfig] = {
    "mainnet": SUI_MAINNET,
    "testnet": SUI_TESTNET,
}

# ============================================================
# CETUS CLMM OBJECT TYPES
# ============================================================

CETUS_CLMM_PACKAGE = "0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb"
CETUS_POOL_TYPE = f"{CETUS_CLMM_PACKAGE}::pool::Pool"
CETUS_POSITION_TYPE = f"{CETUS_CLMM_PACKAGE}::position::Position"

# ============================================================
# DEFAULT SETTINGS
# ============================================================

DEFAULT_REBALANCE_THRESHOLD_PERCENT = 2.0
DEFAULT_RANGE_WIDTH_PERCENT = 5.0
DEFAULT_MAX_SLIPPAGE_PERCENT = 1.0
DEFAULT_CHECK_INTERVAL_SECONDS = 60
DEFAULT_MAX_GAS_PRICE = 1000  # MIST
DEFAULT_RPC_TIMEOUT = 15.0


@dataclass
class BotConfig:
    """
    Конфигурация бота.

    Пороги в процентах: 2.0 = 2%.
    """
    rpc_url: str
    pool_id: str
    position_id: str
    rebalance_threshold_percent: float = DEFAULT_REBALANCE_THRESHOLD_PERCENT
    range_width_percent: float = DEFAULT_RANGE_WIDTH_PERCENT
    max_slippage_percent: float = DEFAULT_MAX_SLIPPAGE_PERCENT
    check_interval_seconds: float = DEFAULT_CHECK_INTERVAL_SECONDS
    max_gas_price: int = DEFAULT_MAX_GAS_PRICE
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    dry_run: bool = True
    # Move-типы объектов для проверки ответа RPC
    pool_object_type: str = CETUS_POOL_TYPE
    position_object_type: str = CETUS_POSITION_TYPE

    def validate(self) -> "BotConfig":
        """Проверка значений. Возвращает self для чейнинга."""
        if not self.rpc_url:
            raise ConfigError("rpc_url is required")
        if not self.pool_id:
            raise ConfigError("pool_id is required")
        if not self.position_id:
            raise ConfigError("position_id is required")
        if self.rebalance_threshold_percent < 0:
            raise ConfigError(
                f"rebalance_threshold_percent must be >= 0, got {self.rebalance_threshold_percent}"
            )
        if self.range_width_percent <= 0:
            raise ConfigError(f"range_width_percent must be > 0, got {self.range_width_percent}")
        if not 0 <= self.max_slippage_percent < 100:
            raise ConfigError(
                f"max_slippage_percent must be in [0, 100), got {self.max_slippage_percent}"
            )
        if self.check_interval_seconds <= 0:
            raise ConfigError(
                f"check_interval_seconds must be > 0, got {self.check_interval_seconds}"
            )
        if self.max_gas_price <= 0:
            raise ConfigError(f"max_gas_price must be > 0, got {self.max_gas_price}")
        if self.rpc_timeout <= 0:
            raise ConfigError(f"rpc_timeout must be > 0, got {self.rpc_timeout}")
        if "::" not in self.pool_object_type or "::" not in self.position_object_type:
            raise ConfigError(
                f"pool_object_type / position_object_type must be Move types, got "
                f"{self.pool_object_type!r}, {self.position_object_type!r}"
            )
        return self


# ============================================================
# ENV LOADING
# ============================================================

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_number(env: Mapping[str, str], key: str, default, cast=float):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


def load_config_from_env(env: Optional[Mapping[str, str]] = None) -> BotConfig:
    """
    Собрать BotConfig из переменных окружения.

    .env должен быть загружен заранее (load_dotenv в main.py).

    Args:
        env: Источник переменных (по умолчанию os.environ)

    Raises:
        ConfigError: отсутствуют обязательные переменные или значения невалидны
    """
    if env is None:
        env = os.environ

    network = env.get("SUI_NETWORK", "mainnet").strip().lower()
    if network not in NETWORKS:
        raise ConfigError(f"Unknown SUI_NETWORK: {network}. Valid: {sorted(NETWORKS)}")

    config = BotConfig(
        rpc_url=env.get("SUI_RPC_URL", "").strip() or NETWORKS[network].rpc_url,
        pool_id=env.get("POOL_ID", "").strip(),
        position_id=env.get("POSITION_ID", "").strip(),
        rebalance_threshold_percent=_get_number(
            env, "REBALANCE_THRESHOLD_PERCENT", DEFAULT_REBALANCE_THRESHOLD_PERCENT
        ),
        range_width_percent=_get_number(env, "RANGE_WIDTH_PERCENT", DEFAULT_RANGE_WIDTH_PERCENT),
        max_slippage_percent=_get_number(env, "MAX_SLIPPAGE_PERCENT", DEFAULT_MAX_SLIPPAGE_PERCENT),
        check_interval_seconds=_get_number(
            env, "CHECK_INTERVAL_SECONDS", DEFAULT_CHECK_INTERVAL_SECONDS
        ),
        max_gas_price=_get_number(env, "MAX_GAS_PRICE", DEFAULT_MAX_GAS_PRICE, cast=int),
        rpc_timeout=_get_number(env, "RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT),
        dry_run=_get_bool(env, "DRY_RUN", True),
        pool_object_type=env.get("POOL_OBJECT_TYPE", "").strip() or CETUS_POOL_TYPE,
        position_object_type=env.get("POSITION_OBJECT_TYPE", "").strip() or CETUS_POSITION_TYPE,
    )
    return config.validate()


def get_network_config(name: str) -> NetworkConfig:
    """Получение конфигурации сети по имени."""
    if name not in NETWORKS:
        raise ValueError(f"Unknown network: {name}")
    return NETWORKS[name]
