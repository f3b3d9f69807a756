"""Domain exceptions"""


class DokpedisiError(Exception):
    """Base exception of Dokpedisi"""

    pass


class ValidationError(DokpedisiError):
    """Invalid caller input (raised before any state is changed)"""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class ExternalFetchError(DokpedisiError):
    """Fetching sheet rows failed (network, timeout, non-2xx)"""

    pass


class ExternalWriteError(DokpedisiError):
    """Persisting an expedition to the sheet failed"""

    pass


class SignatureUploadError(DokpedisiError):
    """Storing a signature image failed"""

    pass
