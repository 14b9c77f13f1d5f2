import base64
import os
from collections import namedtuple

Share = namedtuple("Share", ["x", "y"])


class Phase:
    CREATED = "created"
    SHARES_DISTRIBUTED = "shares_distributed"
    VOTING = "voting"
    FINALIZED = "finalized"

    ORDER = (CREATED, SHARES_DISTRIBUTED, VOTING, FINALIZED)

    @classmethod
    def advance(cls, current, target):
        """Return ``target`` unless it would move the phase backwards."""
        if cls.ORDER.index(target) < cls.ORDER.index(current):
            return current
        return target


def new_account_id():
    return os.urandom(8).hex()


class Ballot:
    """
    One election gating one upgrade file.

    Tallies are only ever mutated by the voting program; ``yes_shares``
    holds the (x, y) points of YES voters for the reconstruction check.
    """
    def __init__(self, ballot_id, dealer, threshold, total_voters, prime, upgrade_file):
        self.ballot_id = ballot_id
        self.dealer = dealer
        self.threshold = threshold
        self.total_voters = total_voters
        self.prime = prime
        self.upgrade_file = upgrade_file
        self.phase = Phase.CREATED
        self.yes_votes = 0
        self.no_votes = 0
        self.total_votes = 0
        self.registered_voters = 0
        self.yes_shares = []
        self.upgrade_occurred = False
        self.commitment = None
        self.salt = None

    def to_dict(self):
        return {
            "ballot_id": self.ballot_id,
            "dealer": self.dealer,
            "threshold": self.threshold,
            "total_voters": self.total_voters,
            "prime": self.prime,
            "upgrade_file": self.upgrade_file,
            "phase": self.phase,
            "yes_votes": self.yes_votes,
            "no_votes": self.no_votes,
            "total_votes": self.total_votes,
            "registered_voters": self.registered_voters,
            "yes_shares": [list(share) for share in self.yes_shares],
            "upgrade_occurred": self.upgrade_occurred,
            "commitment": self.commitment,
            "salt": base64.b64encode(self.salt).decode('utf-8') if self.salt else None,
        }

    @classmethod
    def from_dict(cls, data):
        ballot = cls(
            data["ballot_id"], data["dealer"], data["threshold"],
            data["total_voters"], data["prime"], data["upgrade_file"],
        )
        ballot.phase = data["phase"]
        ballot.yes_votes = data["yes_votes"]
        ballot.no_votes = data["no_votes"]
        ballot.total_votes = data["total_votes"]
        ballot.registered_voters = data["registered_voters"]
        ballot.yes_shares = [Share(x, y) for x, y in data["yes_shares"]]
        ballot.upgrade_occurred = data["upgrade_occurred"]
        ballot.commitment = data["commitment"]
        ballot.salt = base64.b64decode(data["salt"]) if data["salt"] else None
        return ballot


class VoterAccount:
    def __init__(self, voter_id, ballot_id, authority, x, y):
        self.voter_id = voter_id
        self.ballot_id = ballot_id
        self.authority = authority
        self.x = x
        self.y = y
        self.has_voted = False

    @property
    def share(self):
        return Share(self.x, self.y)

    def to_dict(self, include_share=True):
        data = {
            "voter_id": self.voter_id,
            "ballot_id": self.ballot_id,
            "authority": self.authority,
            "x": self.x,
            "has_voted": self.has_voted,
        }
        if include_share:
            data["y"] = self.y
        return data

    @classmethod
    def from_dict(cls, data):
        voter = cls(data["voter_id"], data["ballot_id"], data["authority"], data["x"], data["y"])
        voter.has_voted = data["has_voted"]
        return voter


class UpgradeFile:
    def __init__(self, file_id, content: bytes):
        self.file_id = file_id
        self.content = bytes(content)
        self.applied = False

    def to_dict(self):
        return {
            "file_id": self.file_id,
            "content": base64.b64encode(self.content).decode('utf-8'),
            "applied": self.applied,
        }

    @classmethod
    def from_dict(cls, data):
        upgrade_file = cls(data["file_id"], base64.b64decode(data["content"]))
        upgrade_file.applied = data["applied"]
        return upgrade_file
