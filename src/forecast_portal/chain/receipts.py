"""
Reading a createGame transaction receipt.

Receipts arrive as JSON (hex quantities, hex data) from a browser wallet or
eth_getTransactionReceipt. `normalize_receipt` turns that into the shape web3
decodes, `extract_created_game` pulls the GameCreated event out of it.
"""
import json
import logging
from typing import Any, Mapping

from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import LogTopicError, MismatchedABI

from forecast_portal.portal import CreatedGame

logger = logging.getLogger(__name__)

GAME_CREATED = "GameCreated"

_ZERO_HASH = HexBytes(b"\x00" * 32)


class ChainInteractionFailed(Exception):
    pass


def _int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value)


def _bytes(value: Any) -> HexBytes:
    if value is None:
        return _ZERO_HASH
    return HexBytes(value)


def _hex(value: Any) -> str:
    if isinstance(value, str):
        return value
    return Web3.to_hex(value)


def normalize_log(log: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "address": Web3.to_checksum_address(log["address"]),
        "topics": [HexBytes(topic) for topic in log.get("topics", [])],
        "data": HexBytes(log.get("data") or b""),
        "logIndex": _int(log.get("logIndex", log.get("index", 0))),
        "transactionIndex": _int(log.get("transactionIndex", 0)),
        "transactionHash": _bytes(log.get("transactionHash")),
        "blockHash": _bytes(log.get("blockHash")),
        "blockNumber": _int(log.get("blockNumber", 0)),
    }


def normalize_receipt(receipt: Mapping[str, Any]) -> dict[str, Any]:
    transaction_hash = receipt.get("transactionHash", receipt.get("hash"))
    if transaction_hash is None:
        raise ChainInteractionFailed("Receipt has no transaction hash.")
    status = receipt.get("status")
    try:
        return {
            "transactionHash": HexBytes(transaction_hash),
            "status": _int(status) if status is not None else None,
            "logs": [normalize_log(log) for log in receipt.get("logs", [])],
        }
    except (KeyError, TypeError, ValueError) as e:
        raise ChainInteractionFailed(f"Malformed receipt: {e}") from e


def confirm_receipt(receipt: Mapping[str, Any]) -> None:
    if receipt.get("status") != 1:
        raise ChainInteractionFailed("Transaction failed on-chain.")


def _load_abi(factory_abi: str | list[dict[str, Any]]) -> list[dict[str, Any]]:
    if isinstance(factory_abi, str):
        try:
            abi = json.loads(factory_abi)
        except json.JSONDecodeError as e:
            raise ChainInteractionFailed(f"Factory ABI is not valid JSON: {e}") from e
    else:
        abi = factory_abi
    if not isinstance(abi, list) or not all(isinstance(item, dict) for item in abi):
        raise ChainInteractionFailed("Factory ABI must be a JSON list of entries.")
    return abi


def extract_created_game(
    factory_abi: str | list[dict[str, Any]], receipt: Mapping[str, Any]
) -> CreatedGame | None:
    """
    Returns the first GameCreated event in the receipt's logs, or None when
    there isn't one. Logs that don't decode as GameCreated are skipped.
    """
    abi = _load_abi(factory_abi)
    if not any(
        item.get("type") == "event" and item.get("name") == GAME_CREATED
        for item in abi
    ):
        raise ChainInteractionFailed(f"Factory ABI has no {GAME_CREATED} event.")
    event = Web3().eth.contract(abi=abi).events[GAME_CREATED]()

    for log in receipt.get("logs", []):
        try:
            decoded = event.process_log(log)
        except (MismatchedABI, LogTopicError, DecodingError):
            logger.debug("Could not parse log, skipping: %s", log)
            continue
        return CreatedGame(
            game_id_on_chain=int(decoded["args"]["gameId"]),
            game_address=decoded["args"]["gameAddress"],
            transaction_hash=_hex(receipt["transactionHash"]),
        )
    return None
