import random
import unittest

import config
from shamir import ShamirSecretSharing, commit_secret, create_polynomial, derive_share, derive_shares
from sharevote.entities import Share
from sharevote.errors import DivisionByZero, ReconstructionFailed
from sharevote.field import FiniteField

PRIME = 2089


class FieldArithmetic(unittest.TestCase):
    def setUp(self):
        self.field = FiniteField(PRIME)

    def test_basic_operations_wrap(self):
        self.assertEqual(self.field.add(2000, 100), 11)
        self.assertEqual(self.field.sub(5, 10), PRIME - 5)
        self.assertEqual(self.field.mul(1000, 3), 3000 % PRIME)
        self.assertEqual(self.field.pow(2, 11), 2048)
        self.assertEqual(self.field.pow(3, PRIME - 1), 1)

    def test_modular_inverse_property(self):
        """a * a^-1 == 1 for every non-zero element"""
        for a in range(1, PRIME):
            self.assertEqual(self.field.mul(a, self.field.inverse(a)), 1)

    def test_inverse_of_zero(self):
        with self.assertRaises(DivisionByZero):
            self.field.inverse(0)
        with self.assertRaises(DivisionByZero):
            self.field.inverse(PRIME)

    def test_default_prime_comes_from_config(self):
        self.assertEqual(FiniteField().prime, config.Config.PRIME)


class LagrangeInterpolation(unittest.TestCase):
    def setUp(self):
        self.field = FiniteField(PRIME)

    def test_reconstructs_constant_term(self):
        rng = random.Random(1234)
        for _ in range(200):
            secret = rng.randrange(PRIME)
            coefficients = [secret, rng.randrange(PRIME), rng.randrange(PRIME)]
            xs = rng.sample(range(1, PRIME), 3)
            points = [derive_share(coefficients, x, PRIME) for x in xs]
            self.assertEqual(self.field.lagrange_at(points, 0), secret)

    def test_evaluates_at_other_points(self):
        coefficients = [11, 7, 3]
        points = derive_shares(coefficients, 3, PRIME)
        self.assertEqual(self.field.lagrange_at(points, 10), derive_share(coefficients, 10, PRIME).y)

    def test_extra_consistent_points_agree(self):
        coefficients = [11, 1500, 42]
        points = derive_shares(coefficients, 7, PRIME)
        self.assertEqual(self.field.lagrange_at(points, 0), 11)

    def test_under_threshold_subset_misses_secret(self):
        """Two points of a quadratic do not pin down its constant term"""
        rng = random.Random(99)
        misses = 0
        for _ in range(50):
            coefficients = create_polynomial(rng.randrange(PRIME), 3, rng=rng, prime=PRIME)
            points = derive_shares(coefficients, 2, PRIME)
            if self.field.lagrange_at(points, 0) != coefficients[0]:
                misses += 1
        self.assertGreater(misses, 0)

    def test_duplicate_index_rejected(self):
        with self.assertRaises(DivisionByZero):
            self.field.lagrange_at([(1, 5), (2, 9), (1, 5)], 0)

    def test_duplicate_modulo_prime_rejected(self):
        with self.assertRaises(DivisionByZero):
            self.field.lagrange_at([(1, 5), (1 + PRIME, 5)], 0)

    def test_empty_points(self):
        with self.assertRaises(ReconstructionFailed):
            self.field.lagrange_at([], 0)


class ShareGeneration(unittest.TestCase):
    def test_polynomial_shape(self):
        coefficients = create_polynomial(11, 3, rng=random.Random(7), prime=PRIME)
        self.assertEqual(len(coefficients), 3)
        self.assertEqual(coefficients[0], 11)
        self.assertTrue(all(0 <= c < PRIME for c in coefficients))

    def test_polynomial_rejects_bad_input(self):
        with self.assertRaises(ValueError):
            create_polynomial(PRIME, 3, prime=PRIME)
        with self.assertRaises(ValueError):
            create_polynomial(11, 0, prime=PRIME)

    def test_derive_share_matches_direct_evaluation(self):
        coefficients = [11, 5, 9]
        for x in range(1, 20):
            expected = (11 + 5 * x + 9 * x * x) % PRIME
            self.assertEqual(derive_share(coefficients, x, PRIME), Share(x, expected))

    def test_shares_start_at_one(self):
        shares = derive_shares([11, 5, 9], 5, PRIME)
        self.assertEqual([s.x for s in shares], [1, 2, 3, 4, 5])

    def test_split_and_recover(self):
        shamir = ShamirSecretSharing(threshold=3, total_shares=5, prime=PRIME)
        shares = shamir.split_secret(11)
        self.assertEqual(shamir.recover_secret(shares[:3]), 11)
        self.assertEqual(shamir.recover_secret(shares[2:]), 11)
        self.assertEqual(shamir.recover_secret(shares), 11)

    def test_recover_insufficient_shares(self):
        shamir = ShamirSecretSharing(threshold=3, total_shares=5, prime=PRIME)
        shares = shamir.split_secret(11)
        with self.assertRaises(ValueError):
            shamir.recover_secret(shares[:2])

    def test_threshold_above_share_count(self):
        with self.assertRaises(ValueError):
            ShamirSecretSharing(threshold=6, total_shares=5, prime=PRIME)

    def test_commitment_binds_secret_and_salt(self):
        salt = b"\x01" * 16
        self.assertEqual(commit_secret(11, salt), commit_secret(11, salt))
        self.assertNotEqual(commit_secret(11, salt), commit_secret(12, salt))
        self.assertNotEqual(commit_secret(11, salt), commit_secret(11, b"\x02" * 16))
        self.assertEqual(len(commit_secret(0, salt)), 64)


if __name__ == '__main__':
    unittest.main()
