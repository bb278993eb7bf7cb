"""Paillier encryption with the operations the linkage engine needs.

The client key encrypts and decrypts; the server key only computes on
ciphertexts (addition, equality, trivial encryption). Both come from one
keypair produced by ``keygen``.
"""
import logging
import random
from math import gcd

import sympy

from .config import KEY_BITS, WORD_BITS
from .errors import EncryptionFailure, OverflowRisk

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()


# Utility Functions
def lcm(a, b):
    return a * b // gcd(a, b)


def mod_inverse(a, m):
    try:
        return pow(a, -1, m)
    except ValueError:
        raise EncryptionFailure("Modular inverse does not exist")


def L(u, n):
    return (u - 1) // n


def _random_unit(n):
    while True:
        r = _rng.randint(1, n - 1)
        if gcd(r, n) == 1:
            return r


class Ciphertext:
    __slots__ = ("c", "n")

    def __init__(self, c, n):
        self.c = c
        self.n = n

    def __repr__(self):
        return f"{type(self).__name__}(n=...{self.n & 0xFFFF:04x})"


class CiphertextBool(Ciphertext):
    """Encrypted boolean: plaintext zero means true."""
    __slots__ = ()


# Paillier Implementation
class PaillierPub:
    def __init__(self, n, g):
        self.n = n
        self.g = g
        self.n2 = n * n

    def raw_encrypt(self, m):
        r = _random_unit(self.n)
        return (pow(self.g, m, self.n2) * pow(r, self.n, self.n2)) % self.n2


class PaillierPriv:
    def __init__(self, lam, pub):
        self.lam = lam
        self.mu = mod_inverse(L(pow(pub.g, lam, pub.n2), pub.n), pub.n)


def generate_paillier(bits):
    p = int(sympy.nextprime(_rng.randint(2**(bits//2 - 1), 2**(bits//2))))
    q = int(sympy.nextprime(_rng.randint(2**(bits//2 - 1), 2**(bits//2))))
    while p == q or gcd(p * q, (p-1) * (q-1)) != 1:
        q = int(sympy.nextprime(_rng.randint(2**(bits//2 - 1), 2**(bits//2))))
    n = p * q
    g = n + 1
    lam = lcm(p-1, q-1)
    pub = PaillierPub(n, g)
    return pub, PaillierPriv(lam, pub)


def decrypt(c, pub, priv):
    u = pow(c, priv.lam, pub.n2)
    return (L(u, pub.n) * priv.mu) % pub.n


def add(pub, c1, c2):
    return (c1 * c2) % pub.n2


class _KeyBase:
    def __init__(self, pub, word_bits):
        self.pub = pub
        self.word_bits = word_bits

    def _check(self, *cts):
        for ct in cts:
            if ct.n != self.pub.n:
                raise EncryptionFailure("ciphertext was produced under a different key")

    def _check_word(self, m):
        if not 0 <= m < (1 << self.word_bits):
            raise OverflowRisk(f"value does not fit in a {self.word_bits}-bit word")


class ClientKey(_KeyBase):
    def __init__(self, pub, priv, word_bits):
        super().__init__(pub, word_bits)
        self._priv = priv

    def encrypt(self, m):
        self._check_word(m)
        return Ciphertext(self.pub.raw_encrypt(m), self.pub.n)

    def decrypt(self, ct):
        self._check(ct)
        if isinstance(ct, CiphertextBool):
            raise EncryptionFailure("use decrypt_bool for comparison results")
        m = decrypt(ct.c, self.pub, self._priv)
        self._check_word(m)
        return m

    def decrypt_bool(self, ct):
        self._check(ct)
        if not isinstance(ct, CiphertextBool):
            raise EncryptionFailure("not a comparison result")
        return decrypt(ct.c, self.pub, self._priv) == 0


class ServerKey(_KeyBase):
    def trivial_encrypt(self, m):
        # g = n + 1, so g^m = 1 + m*n (mod n^2) with no randomness
        self._check_word(m)
        return Ciphertext((1 + m * self.pub.n) % self.pub.n2, self.pub.n)

    def add(self, a, b):
        self._check(a, b)
        return Ciphertext(add(self.pub, a.c, b.c), self.pub.n)

    def rerandomize(self, ct):
        self._check(ct)
        r = _random_unit(self.pub.n)
        return type(ct)((ct.c * pow(r, self.pub.n, self.pub.n2)) % self.pub.n2, self.pub.n)

    def eq(self, a, b):
        self._check(a, b)
        n2 = self.pub.n2
        diff = (a.c * mod_inverse(b.c, n2)) % n2  # E(a - b)
        blinded = pow(diff, _random_unit(self.pub.n), n2)  # E(r * (a - b))
        return self.rerandomize(CiphertextBool(blinded, self.pub.n))


def keygen(bits=KEY_BITS, word_bits=WORD_BITS):
    # the word plus sign room for differences must stay well below n
    if word_bits + 2 >= bits // 2:
        raise EncryptionFailure(f"{bits}-bit modulus too small for {word_bits}-bit words")
    pub, priv = generate_paillier(bits)
    logger.info("Generated %d-bit Paillier keypair (%d-bit words)", pub.n.bit_length(), word_bits)
    return ClientKey(pub, priv, word_bits), ServerKey(pub, word_bits)
