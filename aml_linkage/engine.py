"""Encrypted grouping and aggregation of sealed records.

Records are partitioned by homomorphic equality of their token ciphertexts.
There is no plaintext sort key, so every seed is compared with every later
unconsumed record: O(n^2) equality tests. Per-bank record counts are small
enough for that to be acceptable, and bucketing by plaintext would leak
token order.

The engine's operator holds the client key. It decrypts the boolean result
of each equality test to decide which entry a record joins, and decrypts
each seed token to key the resulting mapping. That is a trust boundary: the
operator learns which records link, the data-owning banks do not. Scores,
sums and counts stay encrypted.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .config import MAX_IN_FLIGHT, MAX_SCORE
from .errors import OverflowRisk
from .paillier import Ciphertext

logger = logging.getLogger(__name__)


@dataclass
class AggregateEntry:
    token: Ciphertext
    sum: Ciphertext
    count: Ciphertext
    members: list = field(default_factory=list)  # indices into the input sequence


class AggregationEngine:
    def __init__(self, client_key, server_key, workers=1, max_in_flight=MAX_IN_FLIGHT):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if max_in_flight < 1:
            raise ValueError(f"max_in_flight must be >= 1, got {max_in_flight}")
        self.client_key = client_key
        self.server_key = server_key
        self.workers = workers
        self.max_in_flight = max_in_flight
        self._pool = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def check_capacity(self, n_records):
        # worst case: every record lands in one entry with the top score
        limit = 1 << self.server_key.word_bits
        if n_records * MAX_SCORE >= limit:
            raise OverflowRisk(
                f"{n_records} records x max score {MAX_SCORE} "
                f"overflows a {self.server_key.word_bits}-bit accumulator"
            )

    def _matches(self, token, candidates):
        eq = self.server_key.eq
        if self._pool is None:
            return [eq(token, c) for c in candidates]
        results = []
        for start in range(0, len(candidates), self.max_in_flight):
            chunk = candidates[start:start + self.max_in_flight]
            futures = [self._pool.submit(eq, token, c) for c in chunk]
            results.extend(f.result() for f in futures)
        return results

    def aggregate(self, records):
        """Group ``records`` by encrypted token equality.

        Returns a new ``{representative_token: AggregateEntry}`` mapping for
        this run only.
        """
        records = list(records)
        self.check_capacity(len(records))
        aggregates = {}
        consumed = [False] * len(records)
        one = self.server_key.trivial_encrypt(1)

        for i, seed in enumerate(records):
            if consumed[i]:
                continue
            consumed[i] = True
            entry = AggregateEntry(
                token=seed.token,
                sum=seed.score,
                count=one,
                members=[i],
            )

            later = [j for j in range(i + 1, len(records)) if not consumed[j]]
            results = self._matches(seed.token, [records[j].token for j in later])
            # single writer: only this thread touches the entry
            for j, is_equal in zip(later, results):
                if self.client_key.decrypt_bool(is_equal):
                    entry.sum = self.server_key.add(entry.sum, records[j].score)
                    entry.count = self.server_key.add(entry.count, one)
                    entry.members.append(j)
                    consumed[j] = True

            key = self.client_key.decrypt(seed.token)  # operator-only peek
            aggregates[key] = entry
            logger.debug("Entry …%08x closed with %d records", key & 0xFFFFFFFF, len(entry.members))

        logger.info("Homomorphic aggregation completed: %d records -> %d unique clients",
                    len(records), len(aggregates))
        return aggregates
