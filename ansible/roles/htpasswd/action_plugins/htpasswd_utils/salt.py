from ansible.errors import AnsibleActionFail

from .sha512crypt import CRYPT_B64

SALT_LEN = 8


class InvalidSaltError(AnsibleActionFail):
    """Raised when a configured salt cannot be used for sha512 crypt hashes."""

    def __init__(self, problems):
        # problems: list of (reason, message) tuples, in detection order
        self.problems = list(problems)
        self.reasons = [reason for reason, _ in self.problems]
        super().__init__(message=" ".join(msg for _, msg in self.problems))

    @property
    def reason(self):
        return self.reasons[0]


def validate_salt(salt) -> str:
    """
    Accept an empty salt or exactly 8 characters from the crypt base64
    alphabet. Returns the salt ("" for None).
    """
    if not salt:
        return ""

    problems = []
    if len(salt) != SALT_LEN:
        problems.append(
            (
                "length",
                f"Salt must be exactly {SALT_LEN} characters, got {len(salt)}.",
            )
        )

    for c in salt:
        if c not in CRYPT_B64:
            problems.append(
                (
                    "character",
                    f"Salt contains invalid character '{c}'; "
                    f"valid characters are: {CRYPT_B64}",
                )
            )
            break

    if problems:
        raise InvalidSaltError(problems)
    return salt
