"""Access code gate."""
from typing import Optional

from photobooth.core.errors import AuthorizationError, NotConfiguredError
from photobooth.models.config import VariantConfig


def check_access_code(submitted_code: Optional[str], config: Optional[VariantConfig]) -> None:
    """Raise unless ``submitted_code`` equals the configured code exactly.

    The code is a low-stakes shared secret, compared case-sensitively with
    plain equality.

    Raises:
        NotConfiguredError: No configuration exists for the variant.
        AuthorizationError: The code does not match.
    """
    if config is None:
        raise NotConfiguredError("Pas de config disponible")
    if submitted_code != config.code:
        raise AuthorizationError("Code incorrect")
