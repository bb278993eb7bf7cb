# Simulation Parameters
N_BANKS = 5
THRESHOLD = 3
CLIENTS_PER_BANK = 30
PERSON_POOL = 120  # shared person pool so banks overlap

# Word widths
TOKEN_BITS = 64
WORD_BITS = 64  # accumulator width for sums and counts
MIN_SCORE = 1
MAX_SCORE = 100

# Paillier modulus size
KEY_BITS = 512

# Stand-in quorum: chance that a party votes "reveal"
QUORUM_PROBABILITY = 0.4

# Upper bound on equality tests queued to the worker pool at once
MAX_IN_FLIGHT = 64


def check_threshold(threshold, n_parties):
    if n_parties < 1:
        raise ValueError(f"need at least one party, got {n_parties}")
    if not 1 <= threshold <= n_parties:
        raise ValueError(f"threshold must be in [1, {n_parties}], got {threshold}")
