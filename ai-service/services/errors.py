from typing import Optional

class ProviderError(Exception):
    """Base class for failures talking to the inference provider"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class ProviderAuthError(ProviderError):
    """Provider rejected the credential, or no credential is configured"""

class ProviderRequestError(ProviderError):
    """Provider answered with a non-2xx status other than 401"""

class ProviderResponseError(ProviderError):
    """Provider answered 2xx but the body could not be understood"""

class ProviderTransportError(ProviderError):
    """Network-level failure before any HTTP status was received"""
