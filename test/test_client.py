import os
import shutil
import tempfile
import unittest
from unittest import mock

from client.app import LedgerRequestError, ShareVoteClient
from client.storage import WalletStorage
from ledger.server import create_app
from ledger.store import Ledger


class _Response:
    def __init__(self, flask_response):
        self.status_code = flask_response.status_code
        self.text = flask_response.get_data(as_text=True)
        self._json = flask_response.get_json(silent=True)

    def json(self):
        if self._json is None:
            raise ValueError("no JSON body")
        return self._json


class ClientAgainstLedger(unittest.TestCase):
    """Drives the HTTP client against an in-process ledger app."""

    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        ledger = Ledger(
            storage_file=os.path.join(self.data_dir, "ledger.json"),
            log_file=os.path.join(self.data_dir, "tx_log.json"),
        )
        self.app_client = create_app(ledger).test_client()
        self.storage = WalletStorage(os.path.join(self.data_dir, "wallet.json"))
        self.client = ShareVoteClient(ledger_url="http://ledger", storage=self.storage)

        def post(url, json=None, timeout=None):
            return _Response(self.app_client.post(url.replace("http://ledger", ""), json=json))

        def get(url, timeout=None):
            return _Response(self.app_client.get(url.replace("http://ledger", "")))

        patcher = mock.patch.multiple("client.app.requests", post=post, get=get)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        shutil.rmtree(self.data_dir)

    def test_ballot_through_client(self):
        names = ["alice", "bob", "carol"]
        for name in ["dealer"] + names:
            self.client.create_identity(name)
        self.assertEqual(sorted(self.storage.list_identities()), sorted(["dealer"] + names))

        ballot = self.client.create_ballot("dealer", b"Before upgrading", threshold=2, total_voters=3)
        ballot_id = ballot["ballot_id"]
        envelopes = self.client.distribute_shares("dealer", ballot_id, names)
        for name in names:
            self.client.register_voter(name, ballot_id, envelopes[name])

        self.client.vote("alice", ballot_id, True)
        self.assertFalse(self.client.compute_result(ballot_id)["upgrade_occurred"])
        with self.assertRaises(LedgerRequestError) as ctx:
            self.client.apply_upgrade("carol", ballot_id)
        self.assertEqual(ctx.exception.error, "NotAuthorized")

        self.client.vote("bob", ballot_id, True)
        self.assertTrue(self.client.compute_result(ballot_id)["upgrade_occurred"])
        self.assertEqual(self.client.apply_upgrade("carol", ballot_id), b"Before upgrading")

        table = self.client.ballot_table(ballot_id)
        self.assertIn("finalized", table)

        stored = WalletStorage(self.storage.storage_file).get_ballot(ballot_id)
        self.assertEqual(set(stored["voters"]), set(names))

    def test_vote_without_registration(self):
        self.client.create_identity("dealer")
        ballot = self.client.create_ballot("dealer", b"x", threshold=1, total_voters=1)
        with self.assertRaises(KeyError):
            self.client.vote("dealer", ballot["ballot_id"], True)


if __name__ == '__main__':
    unittest.main()
