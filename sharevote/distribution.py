import logging

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from sharevote.entities import Share
from sharevote.identity import load_public_key

logger = logging.getLogger(__name__)


def _oaep():
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None
    )


def encrypt_share(share: Share, public_key_pem: str) -> bytes:
    """Encrypt an (x, y) share to a voter's RSA public key."""
    shard_string = f"{share.x},{share.y}"
    return load_public_key(public_key_pem).encrypt(shard_string.encode('utf-8'), _oaep())


def decrypt_share(encrypted: bytes, identity) -> Share:
    shard_string = identity.private_key.decrypt(encrypted, _oaep()).decode('utf-8')
    x, y = map(int, shard_string.split(','))
    return Share(x, y)


def distribute_shares(shares, public_keys) -> dict:
    """
    Pair shares with voters in order and encrypt each one to its voter.

    ``public_keys`` maps account id to PEM public key; the result maps the
    same account ids to ciphertexts. Extra shares are left undistributed.
    """
    if len(public_keys) > len(shares):
        raise ValueError(f"{len(public_keys)} voters but only {len(shares)} shares")

    envelopes = {}
    for share, (account_id, public_key_pem) in zip(shares, public_keys.items()):
        envelopes[account_id] = encrypt_share(share, public_key_pem)
        logger.info("[Dealer] Encrypted share x=%d for voter %s...", share.x, account_id[:10])
    return envelopes
