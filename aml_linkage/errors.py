class LinkageError(Exception):
    """Base class for failures that abort a linkage run."""


class EncryptionFailure(LinkageError):
    """Key or parameter mismatch between ciphertexts or keys."""


class OverflowRisk(LinkageError):
    """A plaintext or an accumulated value does not fit the configured word."""


class DivisionUndefined(LinkageError):
    """Mean requested for an entry whose count is zero.

    The engine never builds such an entry, so seeing this means an
    aggregate was corrupted or constructed by hand.
    """
