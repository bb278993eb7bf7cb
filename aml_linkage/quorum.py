"""Quorum policies deciding whether enough banks hold a client to reveal it."""
import logging
import random

from .config import QUORUM_PROBABILITY, check_threshold

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()


class AttestationQuorum:
    """Homomorphic vote count over per-bank participation bits.

    Each bank encrypts 1 if it holds the token, 0 otherwise. The ballots are
    summed under encryption and the sum is tested for equality against every
    count in ``[threshold, len(banks)]``. The tests are shuffled before
    decryption, so the only thing learned is whether the quorum was met, not
    how many banks voted.
    """

    def __init__(self, banks, client_key, server_key, threshold):
        check_threshold(threshold, len(banks))
        self.banks = list(banks)
        self.client_key = client_key
        self.server_key = server_key
        self.threshold = threshold
        self._decisions = {}

    def tally(self, token):
        # TODO: ballots are built in-process from each Bank object; a deployment
        # needs each bank to submit its encrypted bit over its own channel.
        votes = self.server_key.trivial_encrypt(0)
        for bank in self.banks:
            votes = self.server_key.add(votes, bank.attest(token, self.client_key))
        return votes

    def reached(self, token):
        if token not in self._decisions:
            votes = self.tally(token)
            tests = [
                self.server_key.eq(votes, self.server_key.trivial_encrypt(k))
                for k in range(self.threshold, len(self.banks) + 1)
            ]
            _rng.shuffle(tests)
            # decrypt every test so the time taken does not depend on the vote
            outcomes = [self.client_key.decrypt_bool(t) for t in tests]
            self._decisions[token] = any(outcomes)
        return self._decisions[token]


class RandomQuorum:
    """Each party flips a coin; reveal if at least ``threshold`` say yes.

    This is the placeholder gate of the original demo. The outcome does not
    depend on who holds the token, so it authorizes nothing; use it only to
    reproduce that behavior. ``AttestationQuorum`` is the real policy.
    """

    def __init__(self, n_parties, threshold, probability=QUORUM_PROBABILITY, rng=None):
        check_threshold(threshold, n_parties)
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be in [0, 1], got {probability}")
        self.n_parties = n_parties
        self.threshold = threshold
        self.probability = probability
        self.rng = rng or _rng

    def reached(self, token):
        yes = sum(1 for _ in range(self.n_parties) if self.rng.random() < self.probability)
        return yes >= self.threshold
