import os
import json
import logging
import threading

import config
from ledger.tx_log import TransactionLog
from sharevote.errors import BadSignature, ReplayedRequest, UnknownAccount, VoteError
from sharevote.identity import account_id_for, load_public_key, signed_message, verify_signature
from sharevote.program import VotingProgram

logger = logging.getLogger(__name__)


class Ledger:
    """
    Minimal stand-in for the ledger substrate.

    Authenticates signers, runs each program operation as a single
    transaction under one lock, and persists accounts to a JSON file
    once a transaction commits.
    """
    def __init__(self, storage_file=None, log_file=None):
        self.storage_file = storage_file or config.Config.LEDGER_STORAGE
        self.lock = threading.Lock()
        self.identities = {}
        self.nonces = set()
        self.program = VotingProgram()
        self.tx_log = TransactionLog(log_file)
        self.load_accounts()

    def load_accounts(self):
        if os.path.exists(self.storage_file):
            with open(self.storage_file, "r") as f:
                data = json.load(f)
            self.identities = data.get("identities", {})
            self.nonces = set(data.get("nonces", []))
            self.program = VotingProgram.from_dict(data.get("program", {}))

    def save_accounts(self):
        with open(self.storage_file, "w") as f:
            json.dump({
                "identities": self.identities,
                "nonces": sorted(self.nonces),
                "program": self.program.to_dict()
            }, f, indent=2)

    def register_identity(self, public_key_pem):
        load_public_key(public_key_pem)
        account_id = account_id_for(public_key_pem)
        with self.lock:
            if account_id not in self.identities:
                self.identities[account_id] = public_key_pem
                self.save_accounts()
                logger.info("[Ledger] Registered identity %s...", account_id[:10])
        return account_id

    def authenticate(self, route, request_body):
        """
        Return the signer's account id for a signed request envelope.

        Each envelope carries a nonce covered by the signature. A nonce is
        accepted once; replaying the same envelope raises ReplayedRequest.
        """
        signer = request_body.get("signer")
        public_key_pem = self.identities.get(signer) if isinstance(signer, str) else None
        if public_key_pem is None:
            raise UnknownAccount(f"Signer {signer} is not a registered identity")

        nonce = request_body.get("nonce")
        signature = request_body.get("signature")
        if not isinstance(nonce, str) or not nonce or not isinstance(signature, str):
            raise BadSignature("Request must carry a nonce and a signature")

        message = signed_message(route, request_body.get("payload", {}), nonce)
        if not verify_signature(public_key_pem, message, signature):
            raise BadSignature()

        with self.lock:
            if nonce in self.nonces:
                logger.warning("[Ledger] Replayed request from %s... on %s", signer[:10], route)
                raise ReplayedRequest()
            self.nonces.add(nonce)
            self.save_accounts()
        return signer

    def transact(self, operation, signer, ballot_id, fn):
        """
        Run ``fn`` as one transaction, logged under ``ballot_id`` (or the
        ballot it created when ``ballot_id`` is None).
        """
        with self.lock:
            try:
                result = fn()
            except VoteError as e:
                logger.warning("[Ledger] %s rejected: %s", operation, e.code)
                self.tx_log.log_rejected(ballot_id, operation, signer, e.code)
                raise
            self.save_accounts()
            self.tx_log.log_committed(ballot_id or getattr(result, "ballot_id", None), operation, signer)
            return result

    def ballot_of_voter(self, voter_id):
        voter = self.program.registry.voters.get(voter_id)
        return voter.ballot_id if voter else None
