import hashlib

from .config import TOKEN_BITS


# Hash function for client ids: sha256(entity_le64 || party_byte), first 8 bytes
def hash_id(entity_id, party_id):
    h = hashlib.sha256()
    h.update(entity_id.to_bytes(8, "little"))
    h.update(bytes([party_id]))
    token = int.from_bytes(h.digest()[:8], "little")
    return token & ((1 << TOKEN_BITS) - 1)
