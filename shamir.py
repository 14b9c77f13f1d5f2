import logging
import os
import random

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.backends import default_backend

import config
from sharevote.entities import Share
from sharevote.field import FiniteField

logger = logging.getLogger(__name__)

_system_random = random.SystemRandom()


def create_polynomial(secret: int, threshold: int, rng=None, prime: int = None) -> list:
    """Coefficients [secret, c_1, ..., c_{threshold-1}] with c_i uniform in [0, prime)"""
    prime = prime or config.Config.PRIME
    if threshold < 1:
        raise ValueError("Threshold must be at least 1")
    if not 0 <= secret < prime:
        raise ValueError("Secret is too large for the chosen prime")

    rng = rng or _system_random
    return [secret] + [rng.randrange(prime) for _ in range(threshold - 1)]


def derive_share(coefficients: list, x: int, prime: int = None) -> Share:
    """Evaluate polynomial at x"""
    prime = prime or config.Config.PRIME
    y = 0
    for coefficient in reversed(coefficients):
        y = (y * x + coefficient) % prime
    return Share(x, y)


def derive_shares(coefficients: list, count: int, prime: int = None) -> list:
    return [derive_share(coefficients, x, prime) for x in range(1, count + 1)]


def secret_to_bytes(secret: int) -> bytes:
    return secret.to_bytes(max(1, (secret.bit_length() + 7) // 8), 'big')


def commit_secret(secret: int, salt: bytes) -> str:
    """Salted SHA-256 commitment to the polynomial's constant term"""
    digest = hashes.Hash(hashes.SHA256(), backend=default_backend())
    digest.update(salt)
    digest.update(secret_to_bytes(secret))
    return digest.finalize().hex()


def new_salt() -> bytes:
    return os.urandom(config.Config.COMMITMENT_SALT_LENGTH)


class ShamirSecretSharing:
    """Implementation of Shamir's Secret Sharing scheme"""

    def __init__(self, threshold: int, total_shares: int, prime: int = None):
        if threshold > total_shares:
            raise ValueError("Threshold cannot be greater than the number of shares.")
        self.threshold = threshold
        self.total_shares = total_shares
        self.field = FiniteField(prime)
        self.prime = self.field.prime

    def split_secret(self, secret: int, rng=None) -> list:
        """Split secret into shares for x = 1..total_shares"""
        coefficients = create_polynomial(secret, self.threshold, rng=rng, prime=self.prime)
        shares = derive_shares(coefficients, self.total_shares, self.prime)
        logger.debug("[Dealer] Secret split into %d shares (threshold %d)",
                     len(shares), self.threshold)
        return shares

    def recover_secret(self, shares: list) -> int:
        """Recover secret from shares using Lagrange interpolation"""
        if len(shares) < self.threshold:
            raise ValueError(f"Not enough shares. Need {self.threshold}, got {len(shares)}")
        return self.field.lagrange_at(shares, 0)
