import config
from sharevote.errors import DivisionByZero, ReconstructionFailed


class FiniteField:
    """Arithmetic modulo a fixed prime, plus Lagrange interpolation."""

    def __init__(self, prime: int = None):
        self.prime = prime or config.Config.PRIME

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.prime

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.prime

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.prime

    def pow(self, base: int, exponent: int) -> int:
        return pow(base % self.prime, exponent, self.prime)

    def inverse(self, a: int) -> int:
        a = a % self.prime
        if a == 0:
            raise DivisionByZero(f"0 has no inverse modulo {self.prime}")
        return pow(a, -1, self.prime)

    def lagrange_at(self, points, at_x: int = 0) -> int:
        """
        Value at ``at_x`` of the unique polynomial of degree < len(points)
        through ``points`` (an iterable of (x, y) pairs).

        Duplicate abscissas (also modulo the prime) are rejected before
        any arithmetic runs.
        """
        points = [(int(x), int(y)) for x, y in points]
        if not points:
            raise ReconstructionFailed("Cannot interpolate from zero points")

        seen = set()
        for x, _ in points:
            residue = x % self.prime
            if residue in seen:
                raise DivisionByZero(f"Duplicate share index {x}")
            seen.add(residue)

        value = 0
        for i, (x_i, y_i) in enumerate(points):
            numerator = 1
            denominator = 1
            for j, (x_j, _) in enumerate(points):
                if i == j:
                    continue
                numerator = self.mul(numerator, self.sub(at_x, x_j))
                denominator = self.mul(denominator, self.sub(x_i, x_j))

            basis = self.mul(numerator, self.inverse(denominator))
            value = self.add(value, self.mul(y_i, basis))

        return value
