# SHA-512 crypt ("$6$") for htpasswd-style hashes
# Rounds are fixed at the default 5000, there is no "rounds=N$" form.
# Output is byte-exact with glibc crypt(3) and `openssl passwd -6`.
# From https://www.akkadia.org/drepper/SHA-crypt.txt (PUBLIC DOMAIN)
import hashlib

from ansible.module_utils.common.text.converters import to_bytes, to_text

PREFIX = "$6$"
ROUNDS = 5000
SALT_LEN_MAX = 16
DIGEST_SIZE = 64

# Custom base64 alphabet used by crypt(3)
CRYPT_B64 = "./0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

# Final byte transposition: each group is (B2, B1, B0) of b64_from_24bit,
# the last group only carries byte 63 and yields two characters.
TRANSPOSE_MAP = (
    (0, 21, 42),
    (22, 43, 1),
    (44, 2, 23),
    (3, 24, 45),
    (25, 46, 4),
    (47, 5, 26),
    (6, 27, 48),
    (28, 49, 7),
    (50, 8, 29),
    (9, 30, 51),
    (31, 52, 10),
    (53, 11, 32),
    (12, 33, 54),
    (34, 55, 13),
    (56, 14, 35),
    (15, 36, 57),
    (37, 58, 16),
    (59, 17, 38),
    (18, 39, 60),
    (40, 61, 19),
    (62, 20, 41),
)
TAIL_INDEX = 63
ENCODED_LEN = 86


def b64_from_24bit(b2: int, b1: int, b0: int, n: int) -> str:
    v = (b2 << 16) | (b1 << 8) | b0
    return "".join(CRYPT_B64[(v >> (6 * i)) & 0x3F] for i in range(n))


def _repeat_to_length(digest: bytes, length: int) -> bytes:
    """
    Copy digest in 64-byte chunks until exactly `length` bytes are filled.
        for (cnt = key_len; cnt >= 64; cnt -= 64)
            cp = mempcpy (cp, temp_result, 64);
        memcpy (cp, temp_result, cnt);
    """
    return digest * (length // DIGEST_SIZE) + digest[: length % DIGEST_SIZE]


def alternate_sum(pw: bytes, sl: bytes) -> bytes:
    return hashlib.sha512(pw + sl + pw).digest()


def main_sum(pw: bytes, sl: bytes, alt_result: bytes) -> bytes:
    ctx = hashlib.sha512(pw + sl)

    # For every byte of the password, one byte of alt_result.
    cnt = len(pw)
    while cnt > DIGEST_SIZE:
        ctx.update(alt_result)
        cnt -= DIGEST_SIZE
    ctx.update(alt_result[:cnt])

    """
    Take the binary representation of the length of the key and for every '1'
    add the alternate sum, for every '0' the key.
    """
    i = len(pw)
    while i:
        if i & 1:
            ctx.update(alt_result)
        else:
            ctx.update(pw)
        i >>= 1

    return ctx.digest()


def p_sequence(pw: bytes) -> bytes:
    """
    For every character in the password add the entire password
        for (cnt = 0; cnt < key_len; ++cnt)
            sha512_process_bytes (key, key_len, &alt_ctx);
    """
    p_bytes = hashlib.sha512(pw * len(pw)).digest()
    return _repeat_to_length(p_bytes, len(pw))


def s_sequence(sl: bytes, result: bytes) -> bytes:
    """
    The salt is repeated 16 plus the first byte of the main sum times
        for (cnt = 0; cnt < 16 + alt_result[0]; ++cnt)
            sha512_process_bytes (salt, salt_len, &alt_ctx);
    """
    s_bytes = hashlib.sha512(sl * (16 + result[0])).digest()
    return _repeat_to_length(s_bytes, len(sl))


def mix_rounds(result: bytes, p_seq: bytes, s_seq: bytes) -> bytes:
    """
    Repeatedly run the collected hash value through SHA512 to burn
    CPU cycles.
        if ((cnt & 1) != 0) P else C
        if (cnt % 3 != 0)   S
        if (cnt % 7 != 0)   P
        if ((cnt & 1) != 0) C else P
    """
    for i in range(ROUNDS):
        ctx = hashlib.sha512()
        if i & 1:
            ctx.update(p_seq)
        else:
            ctx.update(result)
        if i % 3:
            ctx.update(s_seq)
        if i % 7:
            ctx.update(p_seq)
        if i & 1:
            ctx.update(result)
        else:
            ctx.update(p_seq)
        result = ctx.digest()
    return result


def encode_digest(result: bytes) -> str:
    """Reorder the final digest per the crypt(3) mapping table and encode it."""
    encoded = "".join(
        b64_from_24bit(result[a], result[b], result[c], 4)
        for a, b, c in TRANSPOSE_MAP
    )
    return encoded + b64_from_24bit(0, 0, result[TAIL_INDEX], 2)


def sha512_crypt(password, salt="") -> str:
    """
    Hash `password` with `salt` into a "$6$<salt>$<86 chars>" string.

    Both arguments may be bytes or text; text is encoded as UTF-8. Salts
    longer than 16 bytes are cut to their first 16 bytes. The salt alphabet is
    not checked here, see htpasswd_utils.salt.validate_salt.
    """
    pw = to_bytes(password, errors="surrogate_or_strict")
    sl = to_bytes(salt or b"", errors="surrogate_or_strict")[:SALT_LEN_MAX]

    alt_result = alternate_sum(pw, sl)
    result = main_sum(pw, sl, alt_result)
    p_seq = p_sequence(pw)
    s_seq = s_sequence(sl, result)
    result = mix_rounds(result, p_seq, s_seq)

    return f"{PREFIX}{to_text(sl, errors='surrogate_or_replace')}${encode_digest(result)}"
