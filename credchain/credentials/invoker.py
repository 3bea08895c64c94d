"""Single credential helper invocation.

HelperInvoker runs one helper for one operation: it writes the encoded record
to the helper's stdin, and for ``get`` decodes the attributes the helper
prints. Every helper failure is isolated here, so a broken helper degrades to
"contributed nothing" and never aborts the chain.

Secrets are never logged: log events carry the helper label and
attribute names only.
"""

import structlog

from credchain.credentials.helpers import ExecutableCommand, HelperCommandBuilder
from credchain.credentials.protocol import AttributeCodec
from credchain.credentials.record import CredentialRecord
from credchain.credentials.runner import HelperRunner, SubprocessRunner
from credchain.enums import HelperOperation
from credchain.exceptions import HelperError, HelperSpawnError, ProtocolDecodeError

log = structlog.get_logger(__name__)

# Exit status the shell uses for "command not found"
SHELL_COMMAND_NOT_FOUND = 127


class HelperInvoker:
    """Invoke credential helpers one operation at a time.

    Attributes:
        runner: Process runner capability
        builder: Resolves specifier strings to commands
        codec: Wire protocol codec
        timeout: Optional per-helper timeout in seconds
    """

    def __init__(
        self,
        runner: HelperRunner | None = None,
        builder: HelperCommandBuilder | None = None,
        codec: AttributeCodec | None = None,
        timeout: float | None = None,
    ) -> None:
        self.runner: HelperRunner = runner or SubprocessRunner()
        self.builder = builder or HelperCommandBuilder()
        self.codec = codec or AttributeCodec()
        self.timeout = timeout

    def invoke(
        self,
        command: ExecutableCommand | str,
        operation: HelperOperation | str,
        record: CredentialRecord,
    ) -> dict[str, str]:
        """Run one helper for one operation.

        Args:
            command: Resolved command, or a specifier string to resolve
            operation: get, store or erase. Other names are passed through
                unchanged; helpers ignore operations they do not know.
            record: Record whose present fields form the request

        Returns:
            Attributes printed by the helper for ``get``; always empty for
            other operations and for any helper failure
        """
        op = str(operation)

        if isinstance(command, str):
            try:
                resolved = self.builder.build(command)
            except HelperSpawnError as e:
                log.warning("credential_helper_unparseable", error=e.message)
                return {}
            if resolved is None:
                return {}
            command = resolved

        is_get = op == HelperOperation.GET.value
        request = self.codec.encode(record).encode("utf-8")

        log.debug("credential_helper_start", helper=command.label, operation=op)

        try:
            result = self.runner.run(
                command.argv(op),
                request,
                capture_output=is_get,
                timeout=self.timeout,
            )
        except HelperError as e:
            log.warning(
                "credential_helper_failed",
                helper=command.label,
                operation=op,
                error=e.message,
            )
            return {}

        if not is_get:
            # store/erase: the helper may legitimately do nothing
            log.debug(
                "credential_helper_done",
                helper=command.label,
                operation=op,
                returncode=result.returncode,
            )
            return {}

        if not result.ok:
            event = (
                "credential_helper_not_found"
                if result.returncode == SHELL_COMMAND_NOT_FOUND
                else "credential_helper_exit_nonzero"
            )
            log.warning(event, helper=command.label, operation=op, returncode=result.returncode)
            return {}

        try:
            attributes = self.codec.decode_bytes(result.stdout)
        except ProtocolDecodeError as e:
            log.warning(
                "credential_helper_bad_output",
                helper=command.label,
                operation=op,
                error=e.message,
            )
            return {}

        log.debug(
            "credential_helper_done",
            helper=command.label,
            operation=op,
            attributes=sorted(attributes),
        )
        return attributes
