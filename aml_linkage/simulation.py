import argparse
import logging
import random
from dataclasses import dataclass, field

from .config import (
    CLIENTS_PER_BANK,
    KEY_BITS,
    MAX_SCORE,
    MIN_SCORE,
    N_BANKS,
    PERSON_POOL,
    THRESHOLD,
    check_threshold,
)
from .disclosure import DisclosureGate
from .engine import AggregationEngine
from .paillier import keygen
from .quorum import AttestationQuorum, RandomQuorum
from .records import Bank

logger = logging.getLogger(__name__)

SHARED_TOKEN_DOMAIN = 0


@dataclass
class SimulationReport:
    n_records: int
    n_entries: int
    disclosures: dict = field(default_factory=dict)  # {bank_id: [Disclosure]}

    def revealed(self, bank_id):
        return [d for d in self.disclosures[bank_id] if d.revealed]


def make_banks(n_banks, clients_per_bank, pool_size, rng, shared_linkage=False):
    if clients_per_bank > pool_size:
        raise ValueError(f"cannot draw {clients_per_bank} distinct clients from a pool of {pool_size}")
    domain = SHARED_TOKEN_DOMAIN if shared_linkage else None
    people = list(range(1000000000, 1000000000 + pool_size))
    banks = []
    for bank_id in range(n_banks):
        bank = Bank(bank_id, token_domain=domain)
        for person in rng.sample(people, k=clients_per_bank):
            bank.add_client(person, rng.randint(MIN_SCORE, MAX_SCORE))
        banks.append(bank)
    return banks


def simulate(n_banks=N_BANKS, threshold=THRESHOLD, clients_per_bank=CLIENTS_PER_BANK,
             pool_size=PERSON_POOL, key_bits=KEY_BITS, quorum="attestation",
             shared_linkage=False, workers=1, seed=None):
    check_threshold(threshold, n_banks)
    rng = random.Random(seed)

    client_key, server_key = keygen(key_bits)
    banks = make_banks(n_banks, clients_per_bank, pool_size, rng, shared_linkage)

    records = []
    for bank in banks:
        records.extend(bank.seal(client_key))

    with AggregationEngine(client_key, server_key, workers=workers) as engine:
        aggregates = engine.aggregate(records)

    if quorum == "attestation":
        policy = AttestationQuorum(banks, client_key, server_key, threshold)
    elif quorum == "random":
        policy = RandomQuorum(n_banks, threshold, rng=rng)
    else:
        raise ValueError(f"unknown quorum policy {quorum!r}")

    gate = DisclosureGate(client_key, aggregates, policy)
    disclosures = gate.reveal_banks(banks, workers=workers)
    return SimulationReport(len(records), len(aggregates), disclosures)


def print_report(report):
    print(f"\nHomomorphic aggregation completed → {report.n_entries} unique clients "
          f"from {report.n_records} records")
    print("\nSelective reveal")
    for bank_id in sorted(report.disclosures):
        revealed = report.revealed(bank_id)
        for d in revealed:
            print(f"  Bank {bank_id} → client …{d.token & 0xFFFFFFFF:08x} → "
                  f"average risk = {d.mean:.1f} ({d.count} banks)")
        print(f"  Bank {bank_id} revealed {len(revealed)} averages")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Encrypted cross-bank client risk aggregation")
    parser.add_argument("--banks", type=int, default=N_BANKS)
    parser.add_argument("--threshold", type=int, default=THRESHOLD)
    parser.add_argument("--clients", type=int, default=CLIENTS_PER_BANK)
    parser.add_argument("--pool", type=int, default=PERSON_POOL)
    parser.add_argument("--key-bits", type=int, default=KEY_BITS)
    parser.add_argument("--quorum", choices=["attestation", "random"], default="attestation")
    parser.add_argument("--shared-linkage", action="store_true",
                        help="tokenize every bank with the same domain so clients link across banks")
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--seed", type=int)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    report = simulate(
        n_banks=args.banks,
        threshold=args.threshold,
        clients_per_bank=args.clients,
        pool_size=args.pool,
        key_bits=args.key_bits,
        quorum=args.quorum,
        shared_linkage=args.shared_linkage,
        workers=args.workers,
        seed=args.seed,
    )
    print_report(report)
    return 0


if __name__ == "__main__":
    main()
