"""Credential record and wipeable secret storage.

A CredentialRecord describes one credential being resolved: the context
(protocol, host, path) set by the caller, the username/password pair filled in
by helpers or the user, and the ordered helper chain to consult.

The password is held in a SecretValue, a mutable byte buffer that is zeroed
when the record is cleared or rejected instead of being left for the garbage
collector.

Example:
    >>> with CredentialRecord(protocol="https", host="example.com") as record:
    ...     record.password = "s3cret"
    ...     record.password
    's3cret'
    >>> record.password is None
    True
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import TracebackType

from credchain.credentials.url import parse_credential_url
from credchain.enums import CredentialState

# Wire order; encode() emits present fields in exactly this order.
CREDENTIAL_FIELDS: tuple[str, ...] = ("protocol", "host", "path", "username", "password")


class SecretValue:
    """Mutable holder for a secret string that can be wiped in place.

    The value is stored as a UTF-8 bytearray. ``wipe()`` overwrites every byte
    with zero before releasing the buffer. ``repr()`` and ``str()`` never
    reveal the value.
    """

    __slots__ = ("_buffer",)

    def __init__(self, value: str) -> None:
        self._buffer: bytearray | None = bytearray(value.encode("utf-8"))

    @property
    def wiped(self) -> bool:
        """True once ``wipe()`` has been called."""
        return self._buffer is None

    def reveal(self) -> str:
        """Return the secret as a string.

        Raises:
            ValueError: If the secret has already been wiped
        """
        if self._buffer is None:
            raise ValueError("Secret has been wiped")
        return self._buffer.decode("utf-8")

    def wipe(self) -> None:
        """Zero the underlying buffer and release it."""
        if self._buffer is None:
            return
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._buffer.clear()
        self._buffer = None

    def __repr__(self) -> str:
        return "SecretValue('**********')" if self._buffer is not None else "SecretValue(<wiped>)"

    __str__ = __repr__


class CredentialRecord:
    """A credential being resolved, with its helper chain and lifecycle state.

    Attributes:
        protocol: URL scheme, e.g. 'https'
        host: Host name, including ':port' when one was given
        path: Path on the host (leading '/' preserved)
        username: User name, once known
        helpers: Ordered helper specifiers to consult
        state: Current lifecycle state
    """

    def __init__(
        self,
        protocol: str | None = None,
        host: str | None = None,
        path: str | None = None,
        username: str | None = None,
        password: str | None = None,
        helpers: Iterable[str] | None = None,
    ) -> None:
        self.protocol = protocol
        self.host = host
        self.path = path
        self.username = username
        self._password: SecretValue | None = None
        self.password = password
        self.helpers: list[str] = list(helpers) if helpers else []
        self.state = CredentialState.EMPTY

    @property
    def password(self) -> str | None:
        """The password, or None when absent."""
        if self._password is None:
            return None
        return self._password.reveal()

    @password.setter
    def password(self, value: str | None) -> None:
        # Wipe the previous secret before replacing it
        if self._password is not None:
            self._password.wipe()
        self._password = SecretValue(value) if value is not None else None

    @property
    def complete(self) -> bool:
        """True when both username and password are present."""
        return self.username is not None and self._password is not None

    @property
    def missing_fields(self) -> tuple[str, ...]:
        """Names of the credential fields (username/password) still absent."""
        missing = []
        if self.username is None:
            missing.append("username")
        if self._password is None:
            missing.append("password")
        return tuple(missing)

    def get_field(self, name: str) -> str | None:
        """Return the value of a wire field by name.

        Raises:
            KeyError: If name is not a credential field
        """
        if name not in CREDENTIAL_FIELDS:
            raise KeyError(name)
        return getattr(self, name)

    def apply(self, attributes: Mapping[str, str]) -> list[str]:
        """Overwrite fields with every recognised attribute, unconditionally.

        Unrecognised keys are ignored.

        Returns:
            Names of the fields that were set
        """
        applied = []
        for key in CREDENTIAL_FIELDS:
            if key in attributes:
                setattr(self, key, attributes[key])
                applied.append(key)
        return applied

    def forget_secrets(self) -> None:
        """Clear username and password, wiping the password buffer."""
        self.username = None
        self.password = None

    def clear(self) -> None:
        """Wipe every field, release the helper list and mark the record disposed."""
        self.forget_secrets()
        self.protocol = None
        self.host = None
        self.path = None
        self.helpers.clear()
        self.state = CredentialState.DISPOSED

    def describe(self) -> str:
        """Describe the credential as a URL suitable for prompts and logs.

        Never includes the password.
        """
        if not self.protocol:
            return self.host or ""
        description = f"{self.protocol}://"
        if self.username:
            description += f"{self.username}@"
        if self.host:
            description += self.host
        if self.path:
            description += self.path if self.path.startswith("/") else f"/{self.path}"
        return description

    def __enter__(self) -> CredentialRecord:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.clear()

    def __repr__(self) -> str:
        return (
            f"CredentialRecord(protocol={self.protocol!r}, host={self.host!r}, path={self.path!r}, "
            f"username={self.username!r}, password={'<set>' if self._password is not None else None}, "
            f"state={self.state.value!r})"
        )

    @classmethod
    def from_url(cls, url: str) -> CredentialRecord:
        """Build a record by decomposing a URL.

        Raises:
            CredentialUrlError: If the URL is malformed; nothing is populated
        """
        parts = parse_credential_url(url)
        return cls(**parts)
