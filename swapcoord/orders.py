"""
Order signing for ETH -> SUI swaps.

The maker builds a limit order (maker asset on the EVM chain, taker asset
identified off-chain by its Sui coin type), generates a secret, embeds
SHA256(secret) in the order and signs it as EIP-712 typed data. The
coordinator never sees the secret; it only receives the hashlock and the
swap id derived from the order terms.

Usage:
    signed, secret = create_and_sign_order(
        maker_key, weth, "0x2::sui::SUI",
        making_amount=10**17, taking_amount=1_500_000_000_000,
        chain_id=1, verifying_contract=lop_address,
    )
    controller.create(**signed.to_create_kwargs(taker=resolver, safety_deposit=10**15))
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Any, Tuple, Optional

from .htlc.commitment import generate_secret, to_hex
from .htlc.timelocks import TimelockSchedule, DEFAULT_SCHEDULE

log = logging.getLogger(__name__)

DOMAIN_NAME = "1inch Limit Order Protocol"
DOMAIN_VERSION = "4"

ORDER_TYPES = {
    "Order": [
        {"name": "salt", "type": "uint256"},
        {"name": "maker", "type": "address"},
        {"name": "makerAsset", "type": "address"},
        {"name": "takerAsset", "type": "bytes32"},
        {"name": "makingAmount", "type": "uint256"},
        {"name": "takingAmount", "type": "uint256"},
        {"name": "hashlock", "type": "bytes32"},
    ]
}


def asset_id(coin_type: str) -> bytes:
    """Opaque 32-byte id for a Sui coin type, e.g. '0x2::sui::SUI'."""
    from web3 import Web3
    return bytes(Web3.keccak(text=coin_type))


@dataclass(frozen=True)
class OrderTerms:
    """Economic terms of one swap."""
    maker: str
    maker_asset: str            # ERC20 / WETH address
    taker_asset: str            # Sui coin type
    making_amount: int
    taking_amount: int
    hashlock: bytes
    salt: int = 0

    @property
    def taker_asset_id(self) -> bytes:
        return asset_id(self.taker_asset)

    def swap_id(self) -> bytes:
        """keccak256 of the packed terms. Same terms, same id."""
        from web3 import Web3
        return bytes(Web3.solidity_keccak(
            ["address", "address", "bytes32", "uint256", "uint256", "bytes32", "uint256"],
            [
                Web3.to_checksum_address(self.maker),
                Web3.to_checksum_address(self.maker_asset),
                self.taker_asset_id,
                self.making_amount,
                self.taking_amount,
                self.hashlock,
                self.salt,
            ]
        ))

    def to_message(self) -> Dict[str, Any]:
        from web3 import Web3
        return {
            "salt": self.salt,
            "maker": Web3.to_checksum_address(self.maker),
            "makerAsset": Web3.to_checksum_address(self.maker_asset),
            "takerAsset": self.taker_asset_id,
            "makingAmount": self.making_amount,
            "takingAmount": self.taking_amount,
            "hashlock": self.hashlock,
        }


@dataclass(frozen=True)
class SignedOrder:
    """Order terms plus the maker's EIP-712 signature."""
    terms: OrderTerms
    signature: str
    chain_id: int
    verifying_contract: str

    @property
    def swap_id(self) -> bytes:
        return self.terms.swap_id()

    def to_create_kwargs(self, taker: str, safety_deposit: int,
                         schedule: TimelockSchedule = DEFAULT_SCHEDULE) -> Dict[str, Any]:
        """Arguments for EscrowLifecycleController.create()."""
        return {
            "swap_id": self.swap_id,
            "hashlock": self.terms.hashlock,
            "counterparty_amount": self.terms.taking_amount,
            "counterparty_asset": self.terms.taker_asset_id,
            "schedule": schedule,
            "maker": self.terms.maker,
            "taker": taker,
            "amount": self.terms.making_amount,
            "safety_deposit": safety_deposit,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "swap_id": to_hex(self.swap_id),
            "maker": self.terms.maker,
            "maker_asset": self.terms.maker_asset,
            "taker_asset": self.terms.taker_asset,
            "making_amount": str(self.terms.making_amount),
            "taking_amount": str(self.terms.taking_amount),
            "hashlock": to_hex(self.terms.hashlock),
            "salt": str(self.terms.salt),
            "signature": self.signature,
            "chain_id": self.chain_id,
            "verifying_contract": self.verifying_contract,
        }


def order_domain(chain_id: int, verifying_contract: str) -> Dict[str, Any]:
    from web3 import Web3
    return {
        "name": DOMAIN_NAME,
        "version": DOMAIN_VERSION,
        "chainId": chain_id,
        "verifyingContract": Web3.to_checksum_address(verifying_contract),
    }


def build_order(maker: str, maker_asset: str, taker_asset: str, making_amount: int,
                taking_amount: int, hashlock: bytes, salt: Optional[int] = None) -> OrderTerms:
    """Build order terms. A random salt keeps repeated orders distinct."""
    if making_amount <= 0 or taking_amount <= 0:
        raise ValueError("Order amounts must be positive")
    if len(hashlock) != 32:
        raise ValueError("Hashlock must be 32 bytes")
    return OrderTerms(
        maker=maker,
        maker_asset=maker_asset,
        taker_asset=taker_asset,
        making_amount=making_amount,
        taking_amount=taking_amount,
        hashlock=bytes(hashlock),
        salt=secrets.randbits(96) if salt is None else salt,
    )


def sign_order(terms: OrderTerms, private_key: str, chain_id: int,
               verifying_contract: str) -> SignedOrder:
    """Sign order terms as EIP-712 typed data with the maker's key."""
    from eth_account import Account

    account = Account.from_key(private_key)
    if account.address.lower() != terms.maker.lower():
        raise ValueError(f"Key for {account.address} cannot sign an order made by {terms.maker}")

    signed = Account.sign_typed_data(
        private_key,
        domain_data=order_domain(chain_id, verifying_contract),
        message_types=ORDER_TYPES,
        message_data=terms.to_message(),
    )
    return SignedOrder(
        terms=terms,
        signature=to_hex(bytes(signed.signature)),
        chain_id=chain_id,
        verifying_contract=verifying_contract,
    )


def recover_signer(order: SignedOrder) -> str:
    """Address that produced the order's signature."""
    from eth_account import Account
    from eth_account.messages import encode_typed_data

    message = encode_typed_data(
        domain_data=order_domain(order.chain_id, order.verifying_contract),
        message_types=ORDER_TYPES,
        message_data=order.terms.to_message(),
    )
    return Account.recover_message(message, signature=order.signature)


def create_and_sign_order(private_key: str, maker_asset: str, taker_asset: str,
                          making_amount: int, taking_amount: int, chain_id: int,
                          verifying_contract: str) -> Tuple[SignedOrder, bytes]:
    """
    Generate the swap secret, build the order around its hashlock and sign it.

    Returns:
        (signed_order, secret). The secret stays with the maker until the
        counterparty escrow is confirmed.
    """
    from eth_account import Account

    log.info("Creating and signing a limit order...")
    secret, hashlock = generate_secret()

    maker = Account.from_key(private_key).address
    terms = build_order(maker, maker_asset, taker_asset, making_amount, taking_amount, hashlock)
    signed = sign_order(terms, private_key, chain_id, verifying_contract)

    log.info(f"Order signed: swap_id={to_hex(signed.swap_id)[:18]}..., "
             f"hashlock={hashlock.hex()[:16]}...")
    return signed, secret
