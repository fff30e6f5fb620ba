"""Transaction building and submission for drips-sdk."""

import logging
from typing import cast

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContractFunction
from web3.exceptions import ContractLogicError, Web3Exception

from .types import GasOptions, TransactionResult

logger = logging.getLogger(__name__)

# Type alias for transaction params
TxParams = dict[str, int | str]

# Default gas limits for operations
DEFAULT_GAS_SET_DRIPS = 500_000
DEFAULT_GAS_SET_SPLITS = 300_000
DEFAULT_GAS_GIVE = 150_000
DEFAULT_GAS_COLLECT = 250_000
DEFAULT_GAS_APPROVE = 100_000
DEFAULT_GAS_RECEIVE_DRIPS = 400_000
DEFAULT_GAS_SPLIT = 300_000
DEFAULT_GAS_SQUEEZE_DRIPS = 500_000
DEFAULT_GAS_CREATE_SPLITS = 400_000
DEFAULT_PRIORITY_FEE = 1_000_000_000  # 1 gwei
GAS_ESTIMATE_BUFFER = 1.2


async def _gas_limit(
    sender: ChecksumAddress | str,
    default_gas: int,
    opts: GasOptions,
    contract_call: AsyncContractFunction | None,
) -> int:
    if opts.gas_limit is not None:
        return opts.gas_limit
    if not opts.estimate_gas or contract_call is None:
        return default_gas
    return int(await contract_call.estimate_gas({"from": sender}) * GAS_ESTIMATE_BUFFER)


async def build_tx_params(
    w3: AsyncWeb3,
    sender: ChecksumAddress | str,
    chain_id: int,
    default_gas: int,
    gas_options: GasOptions | None = None,
    contract_call: AsyncContractFunction | None = None,
) -> TxParams:
    """
    Build the params `build_transaction` is called with.

    An explicit `gas_limit` always wins. Otherwise the call is estimated
    (plus a 20% buffer) when `estimate_gas` is set, and `default_gas` is used
    if not. Setting `max_fee_per_gas` makes it an EIP-1559 transaction; the
    priority fee then defaults to DEFAULT_PRIORITY_FEE.

    Args:
        w3: AsyncWeb3 instance
        sender: Address the transaction is sent from
        chain_id: Chain ID
        default_gas: Gas limit of the operation when not estimating
        gas_options: Gas configuration (defaults to GasOptions())
        contract_call: The call to estimate, needed for estimate_gas
    """
    opts = gas_options or GasOptions()

    tx_params: TxParams = {
        "from": sender,
        "nonce": await w3.eth.get_transaction_count(cast(ChecksumAddress, sender)),
        "chainId": chain_id,
        "gas": await _gas_limit(sender, default_gas, opts, contract_call),
    }

    if opts.max_fee_per_gas is not None:
        priority_fee = opts.max_priority_fee_per_gas
        tx_params.update(
            {
                "type": "0x2",
                "maxFeePerGas": opts.max_fee_per_gas,
                "maxPriorityFeePerGas": DEFAULT_PRIORITY_FEE if priority_fee is None else priority_fee,
            }
        )

    return tx_params


def failed_result(error: Exception) -> TransactionResult:
    """Classify a submission error into a FAILED TransactionResult."""
    if isinstance(error, ContractLogicError):
        return TransactionResult(status="FAILED", reason="transaction_reverted", message=str(error))

    if isinstance(error, Web3Exception):
        message = str(error).lower()
        if "rejected" in message or "denied" in message:
            return TransactionResult(status="FAILED", reason="wallet_rejected", message="Transaction rejected")
        if "gas" in message or "insufficient" in message:
            return TransactionResult(status="FAILED", reason="insufficient_gas", message=str(error))

    return TransactionResult(status="FAILED", reason="transaction_failed", message=str(error))


async def send_transaction(
    w3: AsyncWeb3,
    account: LocalAccount,
    contract_call: AsyncContractFunction,
    default_gas: int,
    gas_options: GasOptions | None = None,
) -> TransactionResult:
    """
    Sign and send a contract call, then wait for its receipt.

    Never raises for submission failures: they come back as FAILED results.
    A receipt with status 0 is reported as `transaction_reverted`.
    """
    try:
        chain_id = await w3.eth.chain_id
        tx_params = await build_tx_params(
            w3,
            account.address,
            chain_id,
            default_gas,
            gas_options=gas_options,
            contract_call=contract_call,
        )
        tx = await contract_call.build_transaction(tx_params)

        signed = account.sign_transaction(tx)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)

        receipt = await w3.eth.wait_for_transaction_receipt(tx_hash)
    except Exception as e:
        result = failed_result(e)
        logger.warning("Transaction failed (%s): %s", result.reason, result.message)
        return result

    if receipt.get("status") == 0:
        logger.warning("Transaction %s reverted", tx_hash.hex())
        return TransactionResult(
            status="FAILED",
            tx_hash=tx_hash.hex(),
            reason="transaction_reverted",
            message="Transaction reverted",
        )

    logger.info("Transaction %s confirmed", tx_hash.hex())
    return TransactionResult(status="CONFIRMED", tx_hash=tx_hash.hex())
