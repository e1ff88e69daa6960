"""
EVM escrow adapter for the ETH leg.

Talks to an escrow factory contract that deploys one escrow per swap id.
The escrow holds amount + safety deposit in native ETH and enforces the
withdrawal / cancellation windows encoded in the packed timelocks word.
The coordinator only calls lock() and balance_of().
"""

import logging
from typing import Optional

from ..errors import EscrowError
from .commitment import to_bytes32

log = logging.getLogger(__name__)

# Local anvil/hardhat node by default
RPC_URL = "http://127.0.0.1:8545"
CHAIN_ID = 31337

# Factory ABI (minimal - only functions we use)
ESCROW_FACTORY_ABI = [
    {
        "name": "createEscrow",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "swapId", "type": "bytes32"},
            {"name": "hashlock", "type": "bytes32"},
            {"name": "taker", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "safetyDeposit", "type": "uint256"},
            {"name": "timelocks", "type": "uint256"}
        ],
        "outputs": [{"name": "escrow", "type": "address"}]
    },
    {
        "name": "addressOfEscrow",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "swapId", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "address"}]
    }
]

ZERO_ADDRESS = "0x" + "0" * 40


class EVMEscrow:
    """
    Escrow factory client.

    Implements the escrow interface used by EscrowLifecycleController:
        lock(swap_id, hashlock, timelocks, amount, safety_deposit, taker=...) -> address
        balance_of(address) -> wei
    """

    def __init__(
        self,
        factory_address: str,
        private_key: Optional[str] = None,
        rpc_url: str = RPC_URL,
        chain_id: int = CHAIN_ID,
        receipt_timeout: int = 120
    ):
        self.factory_address = factory_address
        self.private_key = private_key
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self._web3 = None

    @property
    def web3(self):
        """Lazy-load web3 instance."""
        if self._web3 is None:
            from web3 import Web3
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url))
        return self._web3

    def _factory(self):
        from web3 import Web3
        return self.web3.eth.contract(
            address=Web3.to_checksum_address(self.factory_address),
            abi=ESCROW_FACTORY_ABI
        )

    def address_of(self, swap_id: bytes) -> Optional[str]:
        """Deterministic escrow address for a swap id, None if not deployed."""
        address = self._factory().functions.addressOfEscrow(to_bytes32(swap_id)).call()
        if not address or address.lower() == ZERO_ADDRESS:
            return None
        return address

    def lock(
        self,
        swap_id: bytes,
        hashlock: bytes,
        timelocks: int,
        amount: int,
        safety_deposit: int,
        taker: str = ZERO_ADDRESS
    ) -> str:
        """
        Deploy the escrow for a swap and fund it.

        Args:
            swap_id: 32-byte swap identifier
            hashlock: SHA256 hashlock (32 bytes)
            timelocks: packed schedule incl. deployment time
            amount: wei locked for the taker
            safety_deposit: wei paid to whoever executes withdraw/cancel
            taker: resolver address allowed to withdraw

        Returns:
            Escrow contract address

        Raises:
            EscrowError: connection failure, simulation revert or failed tx
        """
        from web3 import Web3
        from eth_account import Account

        if not self.private_key:
            raise EscrowError("No private key configured for escrow lock")

        w3 = self.web3
        if not w3.is_connected():
            raise EscrowError(f"Cannot connect to RPC {self.rpc_url}")

        key = self.private_key if self.private_key.startswith("0x") else "0x" + self.private_key
        account = Account.from_key(key)
        sender = account.address

        factory = self._factory()
        call = factory.functions.createEscrow(
            to_bytes32(swap_id),
            to_bytes32(hashlock),
            Web3.to_checksum_address(taker or ZERO_ADDRESS),
            amount,
            safety_deposit,
            timelocks
        )
        value = amount + safety_deposit

        # Simulate first so a revert surfaces before we pay gas
        try:
            expected = call.call({'from': sender, 'value': value})
            log.info(f"Simulation succeeded, expected escrow: {expected}")
        except Exception as e:
            log.error(f"Escrow simulation failed: {e}")
            raise EscrowError(f"Simulation failed: {e}") from e

        nonce = w3.eth.get_transaction_count(sender, 'pending')
        gas_price = int(w3.eth.gas_price * 1.1)  # 10% buffer

        tx = call.build_transaction({
            'from': sender,
            'value': value,
            'nonce': nonce,
            'gas': 500000,
            'gasPrice': gas_price,
            'chainId': self.chain_id
        })

        signed = account.sign_transaction(tx)
        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        log.info(f"createEscrow TX: {tx_hash.hex()}")

        receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt['status'] != 1:
            raise EscrowError(f"createEscrow transaction failed: {tx_hash.hex()}")

        escrow = self.address_of(swap_id) or expected
        log.info(f"Escrow deployed at {escrow}")
        return escrow

    def balance_of(self, escrow: str) -> int:
        """Native balance (wei) held by an escrow."""
        from web3 import Web3
        return self.web3.eth.get_balance(Web3.to_checksum_address(escrow))
