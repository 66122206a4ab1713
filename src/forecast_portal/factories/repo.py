from sentry_sdk.tracing import trace

from forecast_portal.common import Storage
from forecast_portal.common.tables import deployed_contracts
from forecast_portal.portal import FACTORY_CONTRACT_NAME, FactoryContract


def _as_text(value: str | bytes | None) -> str | None:
    # abi and bytecode are blobs in some deployments of the table.
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return value


@trace
async def get_factory(
    storage: Storage,
    address: str,
    chain_id: int,
    contract_name: str = FACTORY_CONTRACT_NAME,
) -> FactoryContract | None:
    contract = await storage.fetch_one(
        query=deployed_contracts.select().where(
            (deployed_contracts.c.address == address)
            & (deployed_contracts.c.chain_id == chain_id)
            & (deployed_contracts.c.contract_name == contract_name)
        )
    )
    if contract is None:
        return None
    return FactoryContract(
        id=contract["id"],
        contract_name=contract["contract_name"],
        address=contract["address"],
        abi=_as_text(contract["abi"]) or "[]",
        bytecode=_as_text(contract["bytecode"]),
        deployed_at=contract["deployed_at"],
        status=contract["status"],
        chain_id=contract["chain_id"],
        compiler_version=contract["compiler_version"],
    )
