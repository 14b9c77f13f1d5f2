import itertools
import logging

import config
from shamir import commit_secret, create_polynomial, derive_shares, new_salt
from sharevote import upgrade_gate
from sharevote.entities import Ballot, Phase, UpgradeFile, VoterAccount, new_account_id
from sharevote.errors import (
    AlreadyInitialized, AlreadyVoted, ContentTooLarge, DivisionByZero,
    InvalidPhase, InvalidPolynomialDegree, InvalidShareValue, InvalidThreshold,
    InvalidVoterCount, ReconstructionFailed, Unauthorized, UnknownAccount,
)
from sharevote.field import FiniteField
from sharevote.registry import VoterRegistry

logger = logging.getLogger(__name__)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


class VotingProgram:
    """
    The threshold ballot state machine.

    Every operation validates phase and authority before touching any
    account, so a raised VoteError leaves all state as it was. Callers
    (the ledger substrate) are responsible for serialising operations
    and for authenticating ``signer``.
    """
    def __init__(self):
        self.ballots = {}
        self.upgrade_files = {}
        self.registry = VoterRegistry()

    # --- Reads ---

    def get_ballot(self, ballot_id) -> Ballot:
        ballot = self.ballots.get(ballot_id)
        if ballot is None:
            raise UnknownAccount(f"Ballot {ballot_id} not found")
        return ballot

    def get_upgrade_file(self, ballot_id) -> UpgradeFile:
        return self.upgrade_files[self.get_ballot(ballot_id).upgrade_file]

    def get_voter(self, voter_id) -> VoterAccount:
        return self.registry.get(voter_id)

    def tally(self, ballot_id) -> dict:
        ballot = self.get_ballot(ballot_id)
        return {
            "phase": ballot.phase,
            "yes_votes": ballot.yes_votes,
            "no_votes": ballot.no_votes,
            "total_votes": ballot.total_votes,
            "threshold": ballot.threshold,
            "upgrade_occurred": ballot.upgrade_occurred,
        }

    # --- Operations ---

    def initialize(self, dealer, upgrade_content: bytes, threshold=None,
                   total_voters=None, ballot_id=None) -> Ballot:
        threshold = config.Config.THRESHOLD if threshold is None else threshold
        total_voters = config.Config.TOTAL_VOTERS if total_voters is None else total_voters

        if not dealer:
            raise Unauthorized("initialize requires a dealer signature")
        if ballot_id is not None and ballot_id in self.ballots:
            raise AlreadyInitialized(f"Ballot {ballot_id} already exists")
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
            raise InvalidThreshold(f"Invalid threshold {threshold}")
        if isinstance(total_voters, bool) or not isinstance(total_voters, int) or total_voters < 0:
            raise InvalidVoterCount(f"Invalid voter count {total_voters}")
        if len(upgrade_content) > config.Config.UPGRADE_CONTENT_LIMIT:
            raise ContentTooLarge(
                f"Upgrade content is {len(upgrade_content)} bytes, "
                f"limit is {config.Config.UPGRADE_CONTENT_LIMIT}")

        upgrade_file = UpgradeFile(new_account_id(), upgrade_content)
        ballot = Ballot(
            ballot_id or new_account_id(), dealer, threshold, total_voters,
            config.Config.PRIME, upgrade_file.file_id,
        )
        self.upgrade_files[upgrade_file.file_id] = upgrade_file
        self.ballots[ballot.ballot_id] = ballot

        logger.info("[Ballot] %s initialized: %d of %d YES votes required",
                    ballot.ballot_id, threshold, total_voters)
        return ballot

    def create_polynomial_and_distribute_shares(self, ballot_id, signer, coefficients=None,
                                                secret=None, rng=None) -> list:
        """
        Dealer step. Builds (or accepts) the polynomial, commits to its
        constant term and returns the shares for x = 1..total_voters.
        The coefficients themselves are never stored.
        """
        ballot = self.get_ballot(ballot_id)
        if signer != ballot.dealer:
            raise Unauthorized("Only the dealer may create the polynomial")
        if ballot.phase != Phase.CREATED:
            raise AlreadyInitialized(f"Polynomial for ballot {ballot_id} already created")

        if coefficients is not None:
            if not isinstance(coefficients, (list, tuple)):
                raise InvalidPolynomialDegree("Coefficients must be a list of integers")
            if len(coefficients) != ballot.threshold:
                raise InvalidPolynomialDegree(
                    f"Expected {ballot.threshold} coefficients, got {len(coefficients)}")
            if not all(_is_int(c) for c in coefficients):
                raise InvalidShareValue("Coefficients must be integers")
            coefficients = [c % ballot.prime for c in coefficients]
        else:
            secret = config.Config.DEFAULT_SECRET if secret is None else secret
            if not _is_int(secret) or not 0 <= secret < ballot.prime:
                raise InvalidShareValue(f"Secret is outside 0..{ballot.prime - 1}")
            coefficients = create_polynomial(secret, ballot.threshold, rng=rng, prime=ballot.prime)

        shares = derive_shares(coefficients, ballot.total_voters, ballot.prime)
        salt = new_salt()
        commitment = commit_secret(coefficients[0], salt)
        del coefficients

        ballot.salt = salt
        ballot.commitment = commitment
        ballot.phase = Phase.advance(ballot.phase, Phase.SHARES_DISTRIBUTED)

        logger.info("[Dealer] Ballot %s: polynomial committed, %d shares derived",
                    ballot_id, len(shares))
        return shares

    def initialize_voter(self, ballot_id, signer, x, y) -> VoterAccount:
        ballot = self.get_ballot(ballot_id)
        if not signer:
            raise Unauthorized("initialize_voter requires the voter's signature")
        if ballot.phase not in (Phase.SHARES_DISTRIBUTED, Phase.VOTING):
            raise InvalidPhase(f"Cannot register voters while ballot is {ballot.phase}")

        voter = self.registry.register(ballot_id, x, y, signer, ballot.prime)
        ballot.registered_voters += 1
        ballot.phase = Phase.advance(ballot.phase, Phase.VOTING)

        logger.info("[Ballot] %s: voter %s registered with share index %d",
                    ballot_id, voter.voter_id, x)
        return voter

    def submit_vote(self, voter_id, signer, is_yes) -> Ballot:
        voter = self.registry.get(voter_id)
        ballot = self.get_ballot(voter.ballot_id)

        if signer != voter.authority:
            raise Unauthorized(f"Signer is not the authority of voter {voter_id}")
        if voter.has_voted:
            raise AlreadyVoted()
        if ballot.phase != Phase.VOTING:
            raise InvalidPhase(f"Cannot vote while ballot is {ballot.phase}")

        is_yes = bool(is_yes)
        voter.has_voted = True
        if is_yes:
            ballot.yes_votes += 1
            ballot.yes_shares.append(voter.share)
        else:
            ballot.no_votes += 1
        ballot.total_votes += 1

        logger.info("[Ballot] %s: voter %s voted %s (%d yes / %d no)",
                    ballot.ballot_id, voter_id, "YES" if is_yes else "NO",
                    ballot.yes_votes, ballot.no_votes)
        return ballot

    def compute_result(self, ballot_id) -> Ballot:
        ballot = self.get_ballot(ballot_id)
        if ballot.phase not in (Phase.VOTING, Phase.FINALIZED):
            raise InvalidPhase(f"Cannot compute result while ballot is {ballot.phase}")

        if ballot.upgrade_occurred:
            return ballot

        if ballot.yes_votes >= ballot.threshold and self._reconstructs_commitment(ballot):
            ballot.upgrade_occurred = True
            ballot.phase = Phase.advance(ballot.phase, Phase.FINALIZED)
            logger.info("[Ballot] %s: threshold met and secret verified, upgrade approved", ballot_id)
        else:
            logger.info("[Ballot] %s: upgrade not approved (%d of %d YES votes)",
                        ballot_id, ballot.yes_votes, ballot.threshold)
        return ballot

    def apply_upgrade(self, ballot_id, signer) -> bytes:
        ballot = self.get_ballot(ballot_id)
        return upgrade_gate.apply_upgrade(ballot, self.upgrade_files[ballot.upgrade_file], signer)

    def _reconstructs_commitment(self, ballot) -> bool:
        """
        True when some ``threshold``-sized subset of the YES shares
        interpolates to the committed secret. Subsets are taken in x
        order, so the answer does not depend on the order votes arrived.
        """
        field = FiniteField(ballot.prime)
        shares = sorted(ballot.yes_shares)
        for subset in itertools.combinations(shares, ballot.threshold):
            try:
                secret = field.lagrange_at(subset, 0)
            except (DivisionByZero, ReconstructionFailed) as e:
                logger.warning("[Ballot] %s: reconstruction failed: %s", ballot.ballot_id, e)
                continue
            if commit_secret(secret, ballot.salt) == ballot.commitment:
                logger.debug("[Ballot] %s: secret reconstructed from indices %s",
                             ballot.ballot_id, [share.x for share in subset])
                return True

        logger.warning("[Ballot] %s: YES shares do not reconstruct the committed secret",
                       ballot.ballot_id)
        return False

    # --- Persistence ---

    def to_dict(self) -> dict:
        return {
            "ballots": {k: b.to_dict() for k, b in self.ballots.items()},
            "upgrade_files": {k: f.to_dict() for k, f in self.upgrade_files.items()},
            "voters": {k: v.to_dict() for k, v in self.registry.voters.items()},
        }

    @classmethod
    def from_dict(cls, data) -> "VotingProgram":
        program = cls()
        for ballot_id, ballot in data.get("ballots", {}).items():
            program.ballots[ballot_id] = Ballot.from_dict(ballot)
        for file_id, upgrade_file in data.get("upgrade_files", {}).items():
            program.upgrade_files[file_id] = UpgradeFile.from_dict(upgrade_file)
        for voter in data.get("voters", {}).values():
            program.registry.add(VoterAccount.from_dict(voter))
        return program
