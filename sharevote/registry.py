from sharevote.entities import VoterAccount, new_account_id
from sharevote.errors import (
    DuplicateVoterIndex, InvalidShareIndex, InvalidShareValue, UnknownAccount,
)


class VoterRegistry:
    """
    Storage for voter accounts: an arena keyed by voter id plus a
    per-ballot index keyed by share abscissa.

    Shares are stored as supplied. Whether ``y`` lies on the dealer's
    polynomial is only decided when the ballot reconstructs its secret.
    """
    def __init__(self):
        self.voters = {}
        self.index = {}

    def register(self, ballot_id, x, y, authority, prime, voter_id=None) -> VoterAccount:
        if isinstance(x, bool) or not isinstance(x, int) or not 0 < x < prime:
            raise InvalidShareIndex(f"Share index {x} is outside 1..{prime - 1}")
        if isinstance(y, bool) or not isinstance(y, int) or not 0 <= y < prime:
            raise InvalidShareValue(f"Share value {y} is outside 0..{prime - 1}")

        by_x = self.index.setdefault(ballot_id, {})
        if x in by_x:
            raise DuplicateVoterIndex(f"Share index {x} already registered for ballot {ballot_id}")

        voter = VoterAccount(voter_id or new_account_id(), ballot_id, authority, x, y)
        self.voters[voter.voter_id] = voter
        by_x[x] = voter.voter_id
        return voter

    def add(self, voter: VoterAccount):
        """Re-insert a voter loaded from storage"""
        self.voters[voter.voter_id] = voter
        self.index.setdefault(voter.ballot_id, {})[voter.x] = voter.voter_id

    def get(self, voter_id) -> VoterAccount:
        voter = self.voters.get(voter_id)
        if voter is None:
            raise UnknownAccount(f"Voter {voter_id} not found")
        return voter

    def by_index(self, ballot_id, x):
        voter_id = self.index.get(ballot_id, {}).get(x)
        return self.voters.get(voter_id) if voter_id else None

    def for_ballot(self, ballot_id):
        return [self.voters[v] for _, v in sorted(self.index.get(ballot_id, {}).items())]

    def count(self, ballot_id=None):
        if ballot_id is None:
            return len(self.voters)
        return len(self.index.get(ballot_id, {}))
