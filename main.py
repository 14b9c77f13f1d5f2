import argparse
import time

import config
from sharevote.distribution import decrypt_share, distribute_shares
from sharevote.errors import VoteError
from sharevote.identity import Identity
from sharevote.program import VotingProgram

# --- Helper Functions ---
def print_header(title):
    print("\n" + "="*50)
    print(f"{title}")
    print("="*50)

def print_backend(message, delay=0.0):
    print(f"\n[BACKEND LOG]... {message}")
    if delay:
        time.sleep(delay)

def print_tally(program, ballot_id):
    tally = program.tally(ballot_id)
    print(f"  Phase: {tally['phase']}")
    print(f"  YES: {tally['yes_votes']}  NO: {tally['no_votes']}  Total: {tally['total_votes']}")
    print(f"  Threshold: {tally['threshold']}  Upgrade approved: {tally['upgrade_occurred']}")


def run_scenario(votes, late_yes_votes=1, delay=0.0):
    """
    Reference run: dealer commits to secret 11, voters 1..n vote as given,
    then ``late_yes_votes`` extra voters register and vote YES.
    """
    program = VotingProgram()
    dealer = Identity("Dealer")
    voters = [Identity(f"Voter {i + 1}") for i in range(len(votes) + late_yes_votes)]

    print_header("Initializing Ballot")
    ballot = program.initialize(dealer.account_id, b"Before upgrading",
                                threshold=config.Config.THRESHOLD,
                                total_voters=len(voters))
    print_backend(f"Ballot {ballot.ballot_id} created, dealer {dealer.account_id[:10]}...", delay)

    print_header("Dealer Creates Polynomial and Distributes Shares")
    shares = program.create_polynomial_and_distribute_shares(
        ballot.ballot_id, dealer.account_id, secret=config.Config.DEFAULT_SECRET)
    envelopes = distribute_shares(shares, {v.account_id: v.public_key for v in voters})
    print_backend(f"{len(envelopes)} shares encrypted to voter keys; coefficients discarded", delay)

    accounts = []
    for identity in voters:
        share = decrypt_share(envelopes[identity.account_id], identity)
        accounts.append(program.initialize_voter(ballot.ballot_id, identity.account_id, share.x, share.y))
        print(f"  {identity.name} registered with share index {share.x}")

    print_header("Voting")
    for identity, account, is_yes in zip(voters, accounts, votes):
        program.submit_vote(account.voter_id, identity.account_id, is_yes)
        print(f"  {identity.name} voted {'YES' if is_yes else 'NO'}")

    try:
        program.submit_vote(accounts[0].voter_id, voters[0].account_id, True)
    except VoteError as e:
        print(f"  Double voting attempt by {voters[0].name} rejected: {e.code}")

    program.compute_result(ballot.ballot_id)
    print_tally(program, ballot.ballot_id)

    for identity, account in zip(voters[len(votes):], accounts[len(votes):]):
        print_header(f"Late Vote from {identity.name}")
        program.submit_vote(account.voter_id, identity.account_id, True)
        program.compute_result(ballot.ballot_id)
        print_tally(program, ballot.ballot_id)

    print_header("Applying Upgrade")
    try:
        content = program.apply_upgrade(ballot.ballot_id, dealer.account_id)
        print(f"  Upgrade applied. Content: {content.decode('utf-8')}")
    except VoteError as e:
        print(f"  Upgrade not applied: {e.code}")

    return program, ballot.ballot_id


def main():
    parser = argparse.ArgumentParser(description="Run the reference threshold ballot scenario")
    parser.add_argument("--votes", default="YYNNN",
                        help="Votes for the first voters, Y or N per voter")
    parser.add_argument("--late-yes", type=int, default=1,
                        help="Voters who register late and vote YES")
    parser.add_argument("--delay", type=float, default=0.5)
    args = parser.parse_args()

    config.configure_logging("WARNING")
    print_header("ShareVote Threshold Ballot")
    run_scenario([v.upper() == "Y" for v in args.votes], args.late_yes, args.delay)


if __name__ == "__main__":
    main()
