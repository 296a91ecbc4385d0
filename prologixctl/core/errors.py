"""Domain-specific errors for prologixctl."""


class PrologixError(Exception):
    """Base error for prologixctl."""


class ConfigError(PrologixError):
    """Raised when the CLI settings file cannot be read or is invalid."""


class MessageParseError(PrologixError):
    """Raised when a controller reply is structurally invalid."""


class ControllerNotFoundError(PrologixError):
    """Raised when a discovery window closes without any controller reply."""


class TransportError(PrologixError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised when a UDP endpoint cannot be opened or configured."""


class TransportSendError(TransportError):
    """Raised when the local stack rejects an outbound datagram."""


class TransportReceiveError(TransportError):
    """Raised when a receive attempt fails below the protocol layer."""
