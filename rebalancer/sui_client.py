"""
Sui JSON-RPC Client (read-only)

HTTP-клиент для чтения снапшотов пула и позиции Cetus CLMM.
Подпись и отправка транзакций сюда не входят.

API flow:
1. sui_multiGetObjects([pool_id, position_id]): оба объекта одним запросом
2. parse_pool / parse_position: Move-поля -> PoolSnapshot / PositionSnapshot
3. suix_getReferenceGasPrice: проверка газа перед ребалансом

Docs: https://docs.sui.io/sui-api-ref
"""

import itertools
import logging
from typing import List, Optional, Tuple

import requests

from .encoding import decode_tick_i32, normalize_type_argument, split_type_parameters
from .exceptions import SuiObjectError, SuiRpcError, SuiRpcTimeoutError
from .models import PoolSnapshot, PositionSnapshot

logger = logging.getLogger(__name__)

OBJECT_OPTIONS = {
    "showType": True,
    "showContent": True,
}


def _move_fields(obj: dict, object_id: str = "?") -> Tuple[str, dict]:
    """Достать (type, fields) из ответа sui_getObject / multiGetObjects."""
    if not isinstance(obj, dict):
        raise SuiObjectError(f"Object {object_id}: unexpected response {type(obj).__name__}")
    if obj.get("error"):
        raise SuiObjectError(f"Object {object_id} unavailable: {obj['error']}")

    data = obj.get("data")
    if not isinstance(data, dict) or not data:
        raise SuiObjectError(f"Object {object_id} has no data")

    content = data.get("content") or {}
    if not isinstance(content, dict) or content.get("dataType") != "moveObject":
        raise SuiObjectError(f"Object {data.get('objectId', object_id)} is not a Move object")

    fields = content.get("fields")
    if not isinstance(fields, dict):
        raise SuiObjectError(f"Object {data.get('objectId', object_id)} has no fields")

    return content.get("type") or data.get("type", ""), fields


def _i32(value) -> int:
    """Move I32 { bits } (в любом из вариантов JSON-представления) -> int."""
    if isinstance(value, dict):
        if "fields" in value:
            value = value["fields"]
        value = value.get("bits")
    if value is None:
        raise SuiObjectError("I32 field has no bits")
    return decode_tick_i32(int(value))


def _type_name(value) -> str:
    """Move TypeName { name } -> нормализованный type tag с 0x."""
    if isinstance(value, dict):
        if "fields" in value:
            value = value["fields"]
        value = value.get("name", "")
    name = str(value)
    if name and not name.startswith("0x"):
        name = "0x" + name
    return normalize_type_argument(name)


def _check_type(object_type: str, expected_type: Optional[str], object_id: str) -> None:
    """Сравнение Move-типа объекта (без generic-параметров) с ожидаемым."""
    if not expected_type:
        return
    base_type = object_type.split("<", 1)[0]
    if normalize_type_argument(base_type) != normalize_type_argument(expected_type):
        raise SuiObjectError(f"Object {object_id} has type {object_type}, expected {expected_type}")


def parse_pool(obj: dict, expected_type: Optional[str] = None) -> PoolSnapshot:
    """
    Ответ RPC с объектом пула -> PoolSnapshot.

    Ожидаемые поля Cetus Pool: current_sqrt_price, current_tick_index (I32),
    tick_spacing, fee_rate, liquidity. Coin types берутся из generic-параметров типа.

    Args:
        obj: Элемент ответа sui_multiGetObjects
        expected_type: Move-тип пула без generic-параметров (None = не проверять)
    """
    object_type, fields = _move_fields(obj)
    object_id = obj["data"].get("objectId", "")
    _check_type(object_type, expected_type, object_id)

    coin_types = split_type_parameters(object_type)
    if len(coin_types) != 2:
        raise SuiObjectError(f"Object {object_id} is not a two-coin pool: {object_type}")

    try:
        return PoolSnapshot(
            pool_id=object_id,
            current_tick=_i32(fields["current_tick_index"]),
            current_sqrt_price_x64=int(fields["current_sqrt_price"]),
            tick_spacing=int(fields["tick_spacing"]),
            fee_rate=int(fields["fee_rate"]),
            coin_type_a=normalize_type_argument(coin_types[0]),
            coin_type_b=normalize_type_argument(coin_types[1]),
            liquidity=int(fields.get("liquidity", 0)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SuiObjectError(f"Malformed pool object {object_id}: {e}")


def parse_position(obj: dict, expected_type: Optional[str] = None) -> PositionSnapshot:
    """
    Ответ RPC с объектом позиции -> PositionSnapshot.

    Ожидаемые поля Cetus Position: pool, liquidity, tick_lower_index / tick_upper_index (I32),
    coin_type_a / coin_type_b (TypeName).
    """
    object_type, fields = _move_fields(obj)
    object_id = obj["data"].get("objectId", "")
    _check_type(object_type, expected_type, object_id)

    try:
        return PositionSnapshot(
            position_id=object_id,
            pool_id=str(fields.get("pool", "")),
            tick_lower=_i32(fields["tick_lower_index"]),
            tick_upper=_i32(fields["tick_upper_index"]),
            liquidity=int(fields["liquidity"]),
            coin_a=_type_name(fields["coin_type_a"]),
            coin_b=_type_name(fields["coin_type_b"]),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SuiObjectError(f"Malformed position object {object_id}: {e}")


class SuiRpcClient:
    """
    HTTP-клиент для Sui JSON-RPC.

    Использование:
        client = SuiRpcClient("https://fullnode.mainnet.sui.io:443")
        pool, position = client.get_pool_and_position(pool_id, position_id)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 15.0,
        session: requests.Session = None,
        pool_type: Optional[str] = None,
        position_type: Optional[str] = None,
    ):
        if not rpc_url:
            raise SuiRpcError("rpc_url is required")
        self.rpc_url = rpc_url
        self.timeout = timeout
        # Ожидаемые Move-типы; None = без проверки
        self.pool_type = pool_type
        self.position_type = position_type
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        self._ids = itertools.count(1)

    def call(self, method: str, params: list):
        """
        Один JSON-RPC вызов.

        Raises:
            SuiRpcTimeoutError: Таймаут
            SuiRpcError: HTTP ошибка, невалидный JSON или error в ответе
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            resp = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise SuiRpcTimeoutError(f"Timeout calling {method} ({self.timeout}s)")
        except requests.exceptions.RequestException as e:
            raise SuiRpcError(f"Request {method} failed: {e}")

        if resp.status_code != 200:
            raise SuiRpcError(resp.text[:500], code=resp.status_code)

        try:
            body = resp.json()
        except ValueError:
            raise SuiRpcError(f"Invalid JSON response for {method}")

        if not isinstance(body, dict):
            raise SuiRpcError(f"Unexpected {type(body).__name__} response for {method}")

        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise SuiRpcError(str(error))
            raise SuiRpcError(error.get("message", "Unknown error"), code=error.get("code"))

        if "result" not in body:
            raise SuiRpcError(f"No result in {method} response")

        logger.debug(f"{method} OK")
        return body["result"]

    def get_objects(self, object_ids: List[str]) -> List[dict]:
        """sui_multiGetObjects с type и content."""
        result = self.call("sui_multiGetObjects", [list(object_ids), OBJECT_OPTIONS])
        if not isinstance(result, list) or len(result) != len(object_ids):
            raise SuiRpcError(
                f"Expected {len(object_ids)} objects, got "
                f"{len(result) if isinstance(result, list) else type(result).__name__}"
            )
        return result

    def get_pool(self, pool_id: str) -> PoolSnapshot:
        return parse_pool(self.get_objects([pool_id])[0], self.pool_type)

    def get_position(self, position_id: str) -> PositionSnapshot:
        return parse_position(self.get_objects([position_id])[0], self.position_type)

    def get_pool_and_position(self, pool_id: str, position_id: str) -> Tuple[PoolSnapshot, PositionSnapshot]:
        """
        Пул и позиция одним запросом, чтобы оба снапшота были с одного чекпоинта.

        Raises:
            SuiObjectError: позиция принадлежит другому пулу
        """
        pool_obj, position_obj = self.get_objects([pool_id, position_id])
        pool = parse_pool(pool_obj, self.pool_type)
        position = parse_position(position_obj, self.position_type)

        if position.pool_id and pool.pool_id and position.pool_id.lower() != pool.pool_id.lower():
            raise SuiObjectError(
                f"Position {position.position_id} belongs to pool {position.pool_id}, not {pool.pool_id}"
            )
        return pool, position

    def get_reference_gas_price(self) -> int:
        """Текущая reference gas price в MIST."""
        result = self.call("suix_getReferenceGasPrice", [])
        try:
            return int(result)
        except (TypeError, ValueError):
            raise SuiRpcError(f"Invalid reference gas price: {result!r}")
