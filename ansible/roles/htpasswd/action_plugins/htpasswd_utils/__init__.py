from .salt import InvalidSaltError, validate_salt
from .sha512crypt import sha512_crypt

__all__ = ["InvalidSaltError", "sha512_crypt", "validate_salt"]
