from .disclosure import Disclosure, DisclosureGate, mean
from .engine import AggregateEntry, AggregationEngine
from .errors import DivisionUndefined, EncryptionFailure, LinkageError, OverflowRisk
from .paillier import Ciphertext, CiphertextBool, ClientKey, ServerKey, keygen
from .quorum import AttestationQuorum, RandomQuorum
from .records import Bank, SealedRecord
from .tokenizer import hash_id

__all__ = [
    "AggregateEntry",
    "AggregationEngine",
    "AttestationQuorum",
    "Bank",
    "Ciphertext",
    "CiphertextBool",
    "ClientKey",
    "Disclosure",
    "DisclosureGate",
    "DivisionUndefined",
    "EncryptionFailure",
    "LinkageError",
    "OverflowRisk",
    "RandomQuorum",
    "SealedRecord",
    "ServerKey",
    "hash_id",
    "keygen",
    "mean",
]
