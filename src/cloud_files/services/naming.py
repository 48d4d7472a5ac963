"""Object name helpers.

Cloud Files rejects raw multi-byte UTF-8 object names, so names are
transliterated to UTF-7 before they are placed in a request path. CDN URLs
use JavaScript-style ``encodeURIComponent`` escaping.
"""

from urllib.parse import quote

# Characters the CDN accepts literally even though RFC 3986 reserves them.
_URI_COMPONENT_REVERT = {
    "%21": "!",
    "%2A": "*",
    "%27": "'",
    "%28": "(",
    "%29": ")",
}


def transliterate_name(name: str) -> str:
    """Rewrite an object name into its ASCII-safe UTF-7 form.

    Args:
        name: Object name as given by the caller (e.g. "café.txt")

    Returns:
        UTF-7 representation, e.g. "ø" becomes "+APg-"
    """
    return name.encode("utf-7").decode("ascii")


def restore_name(encoded: str) -> str:
    """Reverse :func:`transliterate_name`.

    Args:
        encoded: UTF-7 object name as stored in the container

    Returns:
        The original Unicode name
    """
    return encoded.encode("ascii").decode("utf-7")


def encode_uri_component(value: str) -> str:
    """Percent-encode a path component the way ``encodeURIComponent`` does.

    Args:
        value: Raw filename

    Returns:
        Encoded string with ``! * ' ( )`` left literal
    """
    encoded = quote(value, safe="")
    for escaped, literal in _URI_COMPONENT_REVERT.items():
        encoded = encoded.replace(escaped, literal)
    return encoded
