import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .errors import DivisionUndefined

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Disclosure:
    bank_id: int
    token: int
    revealed: bool
    total: int = None
    count: int = None
    mean: float = None


def mean(total, count):
    if count == 0:
        raise DivisionUndefined("aggregate entry has count 0")
    return total / count


class DisclosureGate:
    """Reveals an aggregate to a bank only when the quorum is met.

    Every kind of denial (bank does not hold the token, no entry, quorum not
    met) produces the same ``Disclosure``, so a bank cannot tell them apart.
    """

    def __init__(self, client_key, aggregates, quorum):
        self.client_key = client_key
        self.aggregates = aggregates
        self.quorum = quorum

    def decide(self, bank, token):
        denied = Disclosure(bank.id, token, False)
        if not bank.holds(token):
            return denied
        entry = self.aggregates.get(token)
        if entry is None:
            return denied
        if not self.quorum.reached(token):
            return denied
        total = self.client_key.decrypt(entry.sum)
        count = self.client_key.decrypt(entry.count)
        return Disclosure(bank.id, token, True, total, count, mean(total, count))

    def reveal_all(self, bank):
        decisions = [self.decide(bank, token) for token in bank.tokens()]
        logger.info("Bank %s revealed %d averages", bank.id, sum(d.revealed for d in decisions))
        return decisions

    def reveal_banks(self, banks, workers=1):
        """Run ``reveal_all`` for each bank; returns ``{bank_id: [Disclosure]}``."""
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(self.reveal_all, banks))
        else:
            results = [self.reveal_all(bank) for bank in banks]
        return {bank.id: decisions for bank, decisions in zip(banks, results)}
