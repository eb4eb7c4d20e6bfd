"""Cache key builder for IP-keyed cache layers."""

import string

_SAFE_CHARACTERS = frozenset(string.ascii_letters + string.digits)
_SUBSTITUTIONS = {".": "_", ":": "-"}


class CacheKeyBuilder:
    """Build storage keys from IP addresses.

    Object-cache keys keep the address verbatim. Persistent keys must only
    contain alphanumerics and ``_``/``-``/``~``, so dots and colons are
    substituted and every other character is escaped as ``~XX``. Because
    ``_``, ``-`` and ``~`` in the input are escaped themselves, two
    different addresses never share a persistent key.

    Example:
        >>> builder = CacheKeyBuilder()
        >>> builder.object_key("8.8.8.8")
        'ipstack_8.8.8.8'
        >>> builder.persistent_key("8.8.8.8")
        'ipstack_8_8_8_8'
        >>> builder.persistent_key("fe80::1%eth0")
        'ipstack_fe80--1~25eth0'
    """

    def __init__(self, prefix: str = "ipstack_"):
        self.prefix = prefix

    def object_key(self, ip: str) -> str:
        return f"{self.prefix}{ip}"

    def persistent_key(self, ip: str) -> str:
        return f"{self.prefix}{self.escape(ip)}"

    @staticmethod
    def escape(ip: str) -> str:
        parts = []
        for char in ip:
            if char in _SAFE_CHARACTERS:
                parts.append(char)
            elif char in _SUBSTITUTIONS:
                parts.append(_SUBSTITUTIONS[char])
            else:
                parts.extend(f"~{byte:02X}" for byte in char.encode("utf-8"))
        return "".join(parts)
