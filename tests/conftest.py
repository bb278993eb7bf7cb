import pytest

from aml_linkage.paillier import keygen
from aml_linkage.records import SealedRecord

TEST_KEY_BITS = 256


@pytest.fixture(scope="session")
def keys():
    return keygen(TEST_KEY_BITS)


@pytest.fixture(scope="session")
def client_key(keys):
    return keys[0]


@pytest.fixture(scope="session")
def server_key(keys):
    return keys[1]


@pytest.fixture
def seal(client_key):
    """Seal plaintext (token, score) pairs into records."""

    def _seal(pairs):
        return [SealedRecord(client_key.encrypt(t), client_key.encrypt(s)) for t, s in pairs]

    return _seal
