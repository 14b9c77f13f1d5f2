import json
import os
import config
from sharevote.identity import Identity


class WalletStorage:
    """Local JSON store for signer keys, received shares and voter accounts."""

    def __init__(self, storage_file=None):
        self.storage_file = storage_file or config.Config.CLIENT_STORAGE
        self.data = self._load_data()

    def _load_data(self):
        if os.path.exists(self.storage_file):
            with open(self.storage_file, "r") as f:
                return json.load(f)
        return {"identities": {}, "ballots": {}}

    def _save_data(self):
        with open(self.storage_file, "w") as f:
            json.dump(self.data, f, indent=2)

    def store_identity(self, name, identity):
        self.data["identities"][name] = {
            "account_id": identity.account_id,
            "private_key": identity.get_private_key_bytes()
        }
        self._save_data()

    def get_identity(self, name):
        entry = self.data["identities"].get(name)
        if not entry:
            return None
        return Identity.from_private_key_bytes(entry["private_key"], name=name)

    def list_identities(self):
        return list(self.data["identities"].keys())

    def store_ballot(self, ballot_id, **data):
        self.data["ballots"].setdefault(ballot_id, {}).update(data)
        self._save_data()

    def store_voter(self, ballot_id, name, voter_id, share):
        ballot = self.data["ballots"].setdefault(ballot_id, {})
        ballot.setdefault("voters", {})[name] = {"voter_id": voter_id, "share": list(share)}
        self._save_data()

    def get_ballot(self, ballot_id):
        return self.data["ballots"].get(ballot_id)
