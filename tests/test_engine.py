import random
from collections import defaultdict

import pytest

from aml_linkage.engine import AggregationEngine
from aml_linkage.errors import OverflowRisk
from aml_linkage.paillier import keygen

T1 = 0xA1B2C3D4E5F60708
T2 = 0x1122334455667788
T3 = 42


def opened(client_key, aggregates):
    return {
        token: (client_key.decrypt(e.sum), client_key.decrypt(e.count))
        for token, e in aggregates.items()
    }


@pytest.fixture
def engine(client_key, server_key):
    with AggregationEngine(client_key, server_key) as engine:
        yield engine


def test_empty_input(engine):
    assert engine.aggregate([]) == {}


def test_single_record(engine, seal, client_key):
    aggregates = engine.aggregate(seal([(T1, 5)]))
    assert opened(client_key, aggregates) == {T1: (5, 1)}
    assert aggregates[T1].members == [0]


def test_two_banks_same_token(engine, seal, client_key):
    aggregates = engine.aggregate(seal([(T1, 10), (T1, 20)]))
    assert opened(client_key, aggregates) == {T1: (30, 2)}


def test_grouping_and_sums(engine, seal, client_key):
    pairs = [(T1, 10), (T2, 7), (T1, 20), (T3, 1), (T2, 3), (T1, 30)]
    aggregates = engine.aggregate(seal(pairs))

    assert opened(client_key, aggregates) == {T1: (60, 3), T2: (10, 2), T3: (1, 1)}
    assert aggregates[T1].members == [0, 2, 5]
    assert aggregates[T2].members == [1, 4]

    members = sorted(i for e in aggregates.values() for i in e.members)
    assert members == list(range(len(pairs)))


def test_random_records_match_plaintext_grouping(engine, seal, client_key):
    rng = random.Random(7)
    tokens = [rng.getrandbits(64) for _ in range(5)]
    pairs = [(rng.choice(tokens), rng.randint(1, 100)) for _ in range(14)]

    expected = defaultdict(lambda: [0, 0])
    for token, score in pairs:
        expected[token][0] += score
        expected[token][1] += 1

    got = opened(client_key, engine.aggregate(seal(pairs)))
    assert got == {t: tuple(v) for t, v in expected.items()}


def test_order_does_not_change_result(engine, seal, client_key):
    pairs = [(T1, 10), (T2, 7), (T1, 20), (T3, 1), (T2, 3), (T1, 30)]
    baseline = opened(client_key, engine.aggregate(seal(pairs)))
    for seed in range(3):
        shuffled = pairs[:]
        random.Random(seed).shuffle(shuffled)
        assert opened(client_key, engine.aggregate(seal(shuffled))) == baseline


def test_each_run_gets_its_own_mapping(engine, seal):
    first = engine.aggregate(seal([(T1, 1)]))
    second = engine.aggregate(seal([(T2, 1)]))
    assert list(first) == [T1]
    assert list(second) == [T2]


def test_worker_pool_matches_sequential(client_key, server_key, seal):
    pairs = [(T1, 10), (T2, 7), (T1, 20), (T3, 1), (T2, 3), (T1, 30), (T3, 9)]
    records = seal(pairs)
    with AggregationEngine(client_key, server_key) as sequential:
        expected = opened(client_key, sequential.aggregate(records))
    with AggregationEngine(client_key, server_key, workers=3, max_in_flight=2) as pooled:
        assert opened(client_key, pooled.aggregate(records)) == expected


def test_overflow_risk_before_run():
    client_key, server_key = keygen(256, word_bits=8)
    with AggregationEngine(client_key, server_key) as engine:
        engine.check_capacity(2)
        with pytest.raises(OverflowRisk):
            engine.check_capacity(3)
        with pytest.raises(OverflowRisk):
            engine.aggregate([None] * 3)


def test_invalid_pool_settings(client_key, server_key):
    with pytest.raises(ValueError):
        AggregationEngine(client_key, server_key, workers=0)
    with pytest.raises(ValueError):
        AggregationEngine(client_key, server_key, max_in_flight=0)
