"""Line-oriented key=value attribute protocol spoken with credential helpers.

Both directions use the same format::

    protocol=https
    host=example.com
    username=alice
    <blank line or EOF>

Keys exclude '=', newline and NUL; values exclude newline and NUL. Nothing is
escaped. Unknown keys are passed through by decode() so that newer helpers
never break older consumers.
"""

import io
from collections.abc import Iterable

from credchain.credentials.record import CREDENTIAL_FIELDS, CredentialRecord
from credchain.exceptions import ProtocolDecodeError


class AttributeCodec:
    """Serialize credential records and parse helper responses.

    Example:
        >>> codec = AttributeCodec()
        >>> record = CredentialRecord(protocol="https", host="example.com")
        >>> codec.encode(record)
        'protocol=https\\nhost=example.com\\n\\n'
        >>> codec.decode(["username=alice\\n", "password=s3cret\\n", "\\n"])
        {'username': 'alice', 'password': 's3cret'}
    """

    @staticmethod
    def encode(record: CredentialRecord, fields: Iterable[str] = CREDENTIAL_FIELDS) -> str:
        """Encode the present fields of a record, terminated by a blank line.

        Fields are always emitted in wire order regardless of the order of
        ``fields``. Values are not validated or escaped.

        Args:
            record: Record to serialize
            fields: Names of the fields to include (default: all)

        Returns:
            Encoded request text
        """
        wanted = set(fields)
        lines = []
        for name in CREDENTIAL_FIELDS:
            if name not in wanted:
                continue
            value = record.get_field(name)
            if value is not None:
                lines.append(f"{name}={value}\n")
        lines.append("\n")
        return "".join(lines)

    @staticmethod
    def decode(stream: Iterable[str]) -> dict[str, str]:
        """Decode attributes until a blank line or end of stream.

        Lines are split at the first '='. A line without '=' is skipped. When
        a key repeats, the later value wins.

        Args:
            stream: Text stream or any iterable of lines

        Returns:
            Mapping of every attribute read, recognised or not

        Raises:
            ProtocolDecodeError: If a line contains a NUL character
        """
        attributes: dict[str, str] = {}
        for raw_line in stream:
            line = raw_line.rstrip("\n")
            # Tolerate CRLF line endings from helpers written on Windows
            line = line.removesuffix("\r")
            if not line:
                break
            if "\0" in line:
                raise ProtocolDecodeError("Helper output contains a NUL character")
            key, sep, value = line.partition("=")
            if not sep:
                continue
            attributes[key] = value
        return attributes

    @classmethod
    def decode_bytes(cls, data: bytes) -> dict[str, str]:
        """Decode raw helper output.

        Raises:
            ProtocolDecodeError: If the output is not valid UTF-8 or contains NUL
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolDecodeError(f"Helper output is not valid UTF-8: {e.reason}") from e
        return cls.decode(io.StringIO(text))
