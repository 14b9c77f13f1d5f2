import json
import random
import statistics
import time

from tqdm import tqdm

import config
from shamir import ShamirSecretSharing, derive_share
from sharevote.field import FiniteField
from sharevote.program import VotingProgram


class PerformanceTest:
    def __init__(self):
        self.results = {
            "shamir_split": [],
            "lagrange_reconstruct": [],
            "ballot_round": []
        }

    def run_shamir_tests(self, num_runs=config.Config.PERFORMANCE_SAMPLES):
        """Time share derivation and Lagrange reconstruction"""
        print("\n=== Shamir's Secret Sharing Performance ===")
        shamir = ShamirSecretSharing(threshold=config.Config.THRESHOLD,
                                     total_shares=config.Config.TOTAL_VOTERS)
        field = FiniteField()

        times = []
        for _ in tqdm(range(num_runs)):
            start = time.perf_counter()
            shares = shamir.split_secret(config.Config.DEFAULT_SECRET)
            times.append(time.perf_counter() - start)
        self.results["shamir_split"] = times
        print(f"Split: {statistics.mean(times)*1000:.3f} ms avg")

        times = []
        for _ in tqdm(range(num_runs)):
            start = time.perf_counter()
            field.lagrange_at(shares[:config.Config.THRESHOLD], 0)
            times.append(time.perf_counter() - start)
        self.results["lagrange_reconstruct"] = times
        print(f"Reconstruct: {statistics.mean(times)*1000:.3f} ms avg")

    def run_ballot_tests(self, num_voters=50, num_runs=config.Config.PERFORMANCE_SAMPLES):
        """Time a full ballot: setup, registration, voting and tally"""
        print(f"\n=== Ballot Round Performance ({num_voters} voters) ===")
        rng = random.Random(0)
        times = []
        for _ in tqdm(range(num_runs)):
            start = time.perf_counter()
            program = VotingProgram()
            ballot = program.initialize("dealer", b"upgrade", total_voters=num_voters)
            coefficients = [config.Config.DEFAULT_SECRET] + [
                rng.randrange(ballot.prime) for _ in range(ballot.threshold - 1)]
            program.create_polynomial_and_distribute_shares(
                ballot.ballot_id, "dealer", coefficients=coefficients)
            for x in range(1, num_voters + 1):
                share = derive_share(coefficients, x, ballot.prime)
                voter = program.initialize_voter(ballot.ballot_id, f"voter-{x}", share.x, share.y)
                program.submit_vote(voter.voter_id, voter.authority, rng.random() < 0.6)
            program.compute_result(ballot.ballot_id)
            times.append(time.perf_counter() - start)
        self.results["ballot_round"] = times
        print(f"Ballot round: {statistics.mean(times)*1000:.2f} ms avg")

    def save_results(self, filename="performance_results.json"):
        with open(filename, "w") as f:
            json.dump(self.results, f, indent=2)
        print(f"Results saved to {filename}")


if __name__ == "__main__":
    tester = PerformanceTest()
    tester.run_shamir_tests()
    tester.run_ballot_tests()
    tester.save_results()
