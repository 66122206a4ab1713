import json
from typing import Any, Awaitable, Callable

from eth_abi import encode
from web3 import Web3

from forecast_portal.games import RecordOutcome
from forecast_portal.portal import CreatedGame, DeploymentMetadata

FACTORY_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
CHAIN_ID = 11155111
AGENT_ID = "agent-007"
DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
GAME_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
BLOCK_HASH = "0x" + "ab" * 32

FACTORY_ABI = json.dumps(
    [
        {
            "type": "function",
            "name": "createGame",
            "stateMutability": "payable",
            "inputs": [
                {"name": "question", "type": "string"},
                {"name": "answers", "type": "string[]"},
                {"name": "odds", "type": "uint256[]"},
            ],
            "outputs": [],
        },
        {
            "type": "event",
            "name": "GameCreated",
            "anonymous": False,
            "inputs": [
                {"name": "gameId", "type": "uint256", "indexed": True},
                {"name": "gameAddress", "type": "address", "indexed": False},
            ],
        },
    ]
)

GAME_CREATED_TOPIC = Web3.to_hex(Web3.keccak(text="GameCreated(uint256,address)"))
TRANSFER_TOPIC = Web3.to_hex(Web3.keccak(text="Transfer(address,address,uint256)"))


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def game_created_log(
    game_id: int, game_address: str = GAME_ADDRESS, log_index: int = 0
) -> dict[str, Any]:
    return {
        "address": FACTORY_ADDRESS.lower(),
        "topics": [GAME_CREATED_TOPIC, Web3.to_hex(encode(["uint256"], [game_id]))],
        "data": Web3.to_hex(encode(["address"], [game_address])),
        "logIndex": hex(log_index),
        "transactionIndex": "0x0",
        "transactionHash": tx_hash(1),
        "blockHash": BLOCK_HASH,
        "blockNumber": "0x10",
    }


def transfer_log(log_index: int = 0) -> dict[str, Any]:
    return {
        "address": GAME_ADDRESS,
        "topics": [
            TRANSFER_TOPIC,
            Web3.to_hex(encode(["address"], [DEPLOYER])),
            Web3.to_hex(encode(["address"], [GAME_ADDRESS])),
        ],
        "data": Web3.to_hex(encode(["uint256"], [10**17])),
        "logIndex": hex(log_index),
        "transactionIndex": "0x0",
        "transactionHash": tx_hash(1),
        "blockHash": BLOCK_HASH,
        "blockNumber": "0x10",
    }


def receipt(
    logs: list[dict[str, Any]], status: str = "0x1", transaction_hash: str = tx_hash(1)
) -> dict[str, Any]:
    return {
        "transactionHash": transaction_hash,
        "status": status,
        "blockNumber": "0x10",
        "logs": logs,
    }


def make_event(n: int, game_id: int | None = None) -> CreatedGame:
    return CreatedGame(
        game_id_on_chain=n if game_id is None else game_id,
        game_address=GAME_ADDRESS,
        transaction_hash=tx_hash(n),
    )


def make_metadata(
    categories: list[str] | None = None, **overrides: Any
) -> DeploymentMetadata:
    fields: dict[str, Any] = {
        "factory_address": FACTORY_ADDRESS,
        "chain_id": CHAIN_ID,
        "agent_id": AGENT_ID,
        "deployed_by_address": DEPLOYER,
        "categories": categories or [],
    }
    fields.update(overrides)
    return DeploymentMetadata(**fields)


Record = Callable[..., Awaitable[RecordOutcome]]
