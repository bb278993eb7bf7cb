import pytest

from aml_linkage.records import Bank
from aml_linkage.tokenizer import hash_id


def test_add_client_tokenizes_with_bank_id():
    bank = Bank(2)
    token = bank.add_client(1000000001, 55)
    assert token == hash_id(1000000001, 2)
    assert bank.holds(token)
    assert bank.clients == {token: 55}


def test_banks_do_not_link_by_default():
    a, b = Bank(0), Bank(1)
    assert a.add_client(7, 10) != b.add_client(7, 10)


def test_shared_domain_links_banks():
    a, b = Bank(0, token_domain=9), Bank(1, token_domain=9)
    assert a.add_client(7, 10) == b.add_client(7, 20)


@pytest.mark.parametrize("score", [0, 101, -5])
def test_rejects_scores_out_of_range(score):
    with pytest.raises(ValueError):
        Bank(0).add_client(1, score)


def test_seal(client_key):
    bank = Bank(0)
    token = bank.add_client(5, 42)
    (record,) = bank.seal(client_key)
    assert client_key.decrypt(record.token) == token
    assert client_key.decrypt(record.score) == 42


def test_attest(client_key):
    bank = Bank(0)
    token = bank.add_client(5, 42)
    assert client_key.decrypt(bank.attest(token, client_key)) == 1
    assert client_key.decrypt(bank.attest(token ^ 1, client_key)) == 0
