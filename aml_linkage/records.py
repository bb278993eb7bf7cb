import logging
from dataclasses import dataclass

from .config import MAX_SCORE, MIN_SCORE
from .paillier import Ciphertext
from .tokenizer import hash_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SealedRecord:
    token: Ciphertext
    score: Ciphertext


class Bank:
    """One party's plaintext record store.

    Clients are kept as ``{token: score}``; raw entity ids are tokenized on
    insert and never stored. ``token_domain`` is the party byte fed to the
    tokenizer: a bank's own id by default, or a value shared by every bank
    when tokens must link across banks.
    """

    def __init__(self, id, token_domain=None):
        self.id = id
        self.token_domain = id if token_domain is None else token_domain
        self.clients = {}  # {token: risk_score}

    def add_client(self, entity_id, score):
        if not MIN_SCORE <= score <= MAX_SCORE:
            raise ValueError(f"score {score} outside [{MIN_SCORE}, {MAX_SCORE}]")
        token = hash_id(entity_id, self.token_domain)
        self.clients[token] = score
        return token

    def holds(self, token):
        return token in self.clients

    def tokens(self):
        return list(self.clients)

    def seal(self, client_key):
        sealed = [
            SealedRecord(client_key.encrypt(token), client_key.encrypt(score))
            for token, score in self.clients.items()
        ]
        logger.info("Bank %s encrypted %d records", self.id, len(sealed))
        return sealed

    def attest(self, token, client_key):
        # encrypted participation bit; fresh randomness hides which bit it is
        return client_key.encrypt(1 if self.holds(token) else 0)
