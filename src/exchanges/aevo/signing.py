"""
Aevo order and withdrawal signing.

Builds the EIP-712 Order / Withdraw records under the environment's signing
domain (name, version, chainId; no verifying contract) and signs them with
eth_account. Every call draws a fresh 64-bit salt so identical requests
never produce identical signatures.

Usage:
    signer = AevoSigner(credentials, env_config.signing_domain)
    signed = signer.sign_order(instrument_id=1, is_buy=True, limit_price=1850.5,
                               quantity=0.1, timestamp=1700000000)
    signed.salt, signed.signature, signed.hash
"""

import binascii
import secrets
from typing import Dict, List, Optional, Union

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import is_hex_address, to_checksum_address
from msgspec import Struct

from config.structs import AevoCredentials, SigningDomain
from infrastructure.exceptions.system import SigningError
from infrastructure.logging import get_logger
from utils.math_utils import DEFAULT_DECIMALS, market_price, to_fixed_point

Number = Union[int, float, str]

EIP712_DOMAIN_TYPE: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
]

ORDER_TYPE: List[Dict[str, str]] = [
    {"name": "maker", "type": "address"},
    {"name": "isBuy", "type": "bool"},
    {"name": "limitPrice", "type": "uint256"},
    {"name": "amount", "type": "uint256"},
    {"name": "salt", "type": "uint256"},
    {"name": "instrument", "type": "uint256"},
    {"name": "timestamp", "type": "uint256"},
]

WITHDRAW_TYPE: List[Dict[str, str]] = [
    {"name": "collateral", "type": "address"},
    {"name": "to", "type": "address"},
    {"name": "amount", "type": "uint256"},
    {"name": "salt", "type": "uint256"},
    {"name": "data", "type": "uint256"},
]


class SignedIntent(Struct, frozen=True):
    """
    Result of signing an order or a withdrawal.

    Attributes:
        salt: Random 64-bit salt included in the signed record
        signature: 0x-prefixed 65-byte r||s||v signature
        hash: 0x-prefixed EIP-712 digest (doubles as the order id)
        limit_price: Scaled limit price that was signed (orders only)
        amount: Scaled amount that was signed
    """
    salt: int
    signature: str
    hash: str
    amount: int
    limit_price: Optional[int] = None


def generate_salt() -> int:
    """Uniformly random 64-bit salt."""
    return secrets.randbits(64)


class AevoSigner:
    """Signs orders and withdrawals; no network I/O."""

    def __init__(self, credentials: AevoCredentials, signing_domain: SigningDomain, logger=None):
        self.credentials = credentials
        self.signing_domain = signing_domain
        self.logger = logger or get_logger('aevo.signing')

    @property
    def wallet_address(self) -> str:
        """Checksummed maker address."""
        return self._parse_address(self.credentials.wallet_address, 'wallet_address')

    def sign_order(
        self,
        instrument_id: int,
        is_buy: bool,
        limit_price: Optional[Number],
        quantity: Number,
        timestamp: int,
        price_decimals: int = DEFAULT_DECIMALS,
        amount_decimals: int = DEFAULT_DECIMALS,
        salt: Optional[int] = None,
    ) -> SignedIntent:
        """
        Sign an Order record.

        limit_price=None signs a market order: buys use 2**256 - 1, sells use 0.

        Raises:
            SigningError: Missing wallet address / signing key, or unparsable address or key
            ValueError: Negative price or quantity
        """
        maker = self.wallet_address
        account = self._load_account()

        scaled_price = market_price(is_buy) if limit_price is None else to_fixed_point(limit_price, price_decimals)
        scaled_amount = to_fixed_point(quantity, amount_decimals)
        salt = generate_salt() if salt is None else salt

        message = {
            "maker": maker,
            "isBuy": bool(is_buy),
            "limitPrice": scaled_price,
            "amount": scaled_amount,
            "salt": salt,
            "instrument": int(instrument_id),
            "timestamp": int(timestamp),
        }
        signature, digest = self._sign(account, "Order", ORDER_TYPE, message)

        self.logger.debug("Order signed", instrument=instrument_id, is_buy=is_buy,
                          limit_price=scaled_price, amount=scaled_amount, order_hash=digest)
        return SignedIntent(salt=salt, signature=signature, hash=digest,
                            amount=scaled_amount, limit_price=scaled_price)

    def sign_withdraw(
        self,
        collateral: str,
        to: str,
        amount: Number,
        data: int = 0,
        amount_decimals: int = DEFAULT_DECIMALS,
        salt: Optional[int] = None,
    ) -> SignedIntent:
        """
        Sign a Withdraw record.

        Raises:
            SigningError: Missing signing key, or unparsable address or key
            ValueError: Negative amount
        """
        collateral = self._parse_address(collateral, 'collateral')
        to = self._parse_address(to, 'to')
        account = self._load_account()

        scaled_amount = to_fixed_point(amount, amount_decimals)
        salt = generate_salt() if salt is None else salt

        message = {
            "collateral": collateral,
            "to": to,
            "amount": scaled_amount,
            "salt": salt,
            "data": int(data),
        }
        signature, digest = self._sign(account, "Withdraw", WITHDRAW_TYPE, message)

        self.logger.debug("Withdraw signed", collateral=collateral, to=to,
                          amount=scaled_amount, withdraw_hash=digest)
        return SignedIntent(salt=salt, signature=signature, hash=digest, amount=scaled_amount)

    def _sign(self, account, primary_type: str, fields: List[Dict[str, str]], message: Dict) -> tuple:
        typed = {
            "types": {
                "EIP712Domain": EIP712_DOMAIN_TYPE,
                primary_type: fields,
            },
            "primaryType": primary_type,
            "domain": {
                "name": self.signing_domain.name,
                "version": self.signing_domain.version,
                "chainId": self.signing_domain.chain_id,
            },
            "message": message,
        }
        signed = account.sign_message(encode_typed_data(full_message=typed))
        return "0x" + bytes(signed.signature).hex(), "0x" + bytes(signed.message_hash).hex()

    def _load_account(self):
        key = self.credentials.signing_key
        if not key:
            raise SigningError("Order sign error: Signing key not set", 'signing_key')
        try:
            return Account.from_key(key)
        except (ValueError, TypeError, binascii.Error) as e:
            raise SigningError(f"Invalid signing key: {e}", 'signing_key') from e

    @staticmethod
    def _parse_address(address: Optional[str], name: str) -> str:
        if not address:
            raise SigningError(f"Order sign error: {name} not set", name)
        if not is_hex_address(address):
            raise SigningError(f"Invalid address for {name}: {address}", name)
        return to_checksum_address(address)
