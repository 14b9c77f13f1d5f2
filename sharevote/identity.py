"""
Signer identities.

Each participant (dealer or voter) owns an RSA key pair. The account id
is the SHA-256 fingerprint of the PEM public key, so the ledger can tie
a signature to an identity without any extra registry of names.
Requests are signed with RSA-PSS over canonical JSON.
"""
import base64
import json
import os

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

import config


def canonical_bytes(obj) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode('utf-8')


def account_id_for(public_key_pem: str) -> str:
    digest = hashes.Hash(hashes.SHA256(), backend=default_backend())
    digest.update(public_key_pem.encode('utf-8'))
    return digest.finalize().hex()[:32]


def signed_message(route, payload, nonce) -> dict:
    return {"route": route, "payload": payload, "nonce": nonce}


def load_public_key(public_key_pem: str):
    return serialization.load_pem_public_key(
        public_key_pem.encode('utf-8'),
        backend=default_backend()
    )


def _pss():
    return padding.PSS(
        mgf=padding.MGF1(hashes.SHA256()),
        salt_length=padding.PSS.MAX_LENGTH,
    )


def verify_signature(public_key_pem: str, message, signature_b64: str) -> bool:
    try:
        load_public_key(public_key_pem).verify(
            base64.b64decode(signature_b64),
            canonical_bytes(message),
            _pss(),
            hashes.SHA256(),
        )
        return True
    except (InvalidSignature, ValueError):
        return False


class Identity:
    """An RSA key pair acting as a signer on the ledger."""

    def __init__(self, name=None, private_key=None):
        self.name = name
        self.private_key = private_key or rsa.generate_private_key(
            public_exponent=65537,
            key_size=config.Config.RSA_KEY_SIZE,
            backend=default_backend()
        )
        self.public_key = self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        ).decode('utf-8')
        self.account_id = account_id_for(self.public_key)

    def sign(self, message) -> str:
        signature = self.private_key.sign(canonical_bytes(message), _pss(), hashes.SHA256())
        return base64.b64encode(signature).decode('utf-8')

    def signed_request(self, route, payload=None) -> dict:
        """Envelope for a ledger request. The nonce makes each envelope single-use."""
        payload = payload or {}
        nonce = os.urandom(16).hex()
        return {
            "signer": self.account_id,
            "payload": payload,
            "nonce": nonce,
            "signature": self.sign(signed_message(route, payload, nonce)),
        }

    def get_private_key_bytes(self) -> str:
        """Export private key as PEM string."""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        ).decode('utf-8')

    @classmethod
    def from_private_key_bytes(cls, pem: str, name=None) -> "Identity":
        private_key = serialization.load_pem_private_key(
            pem.encode('utf-8'),
            password=None,
            backend=default_backend()
        )
        return cls(name=name, private_key=private_key)
