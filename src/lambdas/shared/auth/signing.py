"""HMAC signing and timing-safe verification for session cookies.

Signatures are HMAC digests rendered as cookie-safe text: the digest is
encoded (base64 by default) and then ``/`` becomes ``_``, ``+`` becomes
``-`` and ``=`` padding is dropped. The width of a signature depends only
on the (algorithm, encoding) pair, which is what lets the session codec
split signature from payload without a delimiter.

Security considerations:
- Signature comparison never touches the raw candidates with an early-exit
  compare. Both candidates are HMAC'd under a fresh random key and the
  fixed-length digests are compared (Brad Hill's Double HMAC pattern).
- The comparison key comes from the ``secrets`` CSPRNG and is generated
  per call, never cached.
- Key length is NOT enforced here; see ``SessionCookieConfig.get_secret_key``.
"""

import base64
import hashlib
import hmac
import secrets

DEFAULT_ALGORITHM = "sha1"
DEFAULT_ENCODING = "base64"

SUPPORTED_ALGORITHMS = frozenset({"sha1", "sha256", "sha512"})
SUPPORTED_ENCODINGS = frozenset({"base64", "base64url", "hex"})

# 32 bytes of key material for generate_secret_key() and the compare key
SECRET_KEY_BYTES = 32

_COOKIE_SAFE = str.maketrans({"/": "_", "+": "-", "=": None})


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def _check_params(algorithm: str, encoding: str) -> None:
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported signing algorithm: {algorithm}")
    if encoding not in SUPPORTED_ENCODINGS:
        raise ValueError(f"Unsupported signature encoding: {encoding}")


def _encode_digest(digest: bytes, encoding: str) -> str:
    if encoding == "hex":
        return digest.hex()
    if encoding == "base64url":
        return base64.urlsafe_b64encode(digest).decode("ascii")
    return base64.b64encode(digest).decode("ascii")


def sign(
    data: str | bytes,
    key: str | bytes,
    algorithm: str = DEFAULT_ALGORITHM,
    encoding: str = DEFAULT_ENCODING,
) -> str:
    """Sign data with HMAC and return a cookie-safe signature.

    Args:
        data: Canonical bytes (or text, encoded as UTF-8) to authenticate
        key: Secret key material
        algorithm: One of sha1 (default), sha256, sha512
        encoding: One of base64 (default), base64url, hex

    Returns:
        Encoded digest with ``/`` -> ``_``, ``+`` -> ``-`` and no padding.
        27 characters for the sha1/base64 default.

    Raises:
        ValueError: If the algorithm or encoding is not supported

    Example:
        >>> len(sign("hello", "k" * 32))
        27
    """
    _check_params(algorithm, encoding)
    digest = hmac.new(_to_bytes(key), _to_bytes(data), algorithm).digest()
    return _encode_digest(digest, encoding).translate(_COOKIE_SAFE)


def signature_length(
    algorithm: str = DEFAULT_ALGORITHM,
    encoding: str = DEFAULT_ENCODING,
) -> int:
    """Return the fixed width of a signature produced by ``sign``.

    Computed from the digest size so the split point follows the
    configured algorithm: sha1/base64 is 27, sha256/base64 is 43,
    sha512/base64 is 86, and hex is twice the digest size.
    """
    _check_params(algorithm, encoding)
    digest_size = hashlib.new(algorithm).digest_size
    if encoding == "hex":
        return digest_size * 2
    # Unpadded base64 width
    return (digest_size * 4 + 2) // 3


def _buffer_equal(a: bytes, b: bytes) -> bool:
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def time_safe_compare(a: object, b: object) -> bool:
    """Compare two values without leaking where they differ.

    Both values are converted to strings and HMAC-SHA256'd under a fresh
    random key; the digests are compared in constant time. The final
    ``a == b`` check only disambiguates a digest collision and runs after
    the constant-time comparison has already decided the common case.

    Returns:
        True if the two values are equal, False otherwise
    """
    sa = str(a)
    sb = str(b)
    key = secrets.token_bytes(SECRET_KEY_BYTES)
    # surrogatepass: client-supplied text may carry lone surrogates
    ah = hmac.new(key, sa.encode("utf-8", "surrogatepass"), hashlib.sha256).digest()
    bh = hmac.new(key, sb.encode("utf-8", "surrogatepass"), hashlib.sha256).digest()

    return _buffer_equal(ah, bh) and sa == sb


def verify(
    key: str | bytes,
    data: str | bytes,
    signature: str,
    algorithm: str = DEFAULT_ALGORITHM,
    encoding: str = DEFAULT_ENCODING,
) -> bool:
    """Check a signature against a freshly computed one for the same data.

    Args:
        key: Secret key material used to sign
        data: The data the signature claims to cover
        signature: Signature to check
        algorithm: Signing algorithm (defaults to sha1)
        encoding: Signature encoding (defaults to base64)

    Returns:
        True if the signature is valid for the data, False otherwise
    """
    return time_safe_compare(signature, sign(data, key, algorithm, encoding))


def generate_secret_key() -> str:
    """Generate a random 32-byte key, base64 encoded.

    Suitable as a ``SESSION_COOKIE_SECRET`` value (44 characters).
    """
    return base64.b64encode(secrets.token_bytes(SECRET_KEY_BYTES)).decode("ascii")
