"""
Custom Exception Classes for the healthping listener

Every error this process can hit is fatal: the listener exists to signal
liveness, so a broken socket must kill it and let the supervisor restart it.
"""


class HealthPingError(Exception):
    """Base exception for all healthping errors"""

    def __init__(self, message: str, recoverable: bool = False):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(HealthPingError):
    """Configuration-related errors"""

    def __init__(self, message: str):
        super().__init__(f"Config Error: {message}", recoverable=False)


class ChannelError(HealthPingError):
    """UDP command channel errors"""

    def __init__(
        self,
        message: str,
        port: int | None = None,
        address: tuple | None = None,
    ):
        self.port = port
        self.address = address
        super().__init__(f"Channel Error: {message}", recoverable=False)


class BindError(ChannelError):
    """Could not bind the UDP endpoint at startup"""


class ReceiveError(ChannelError):
    """Reading a datagram failed"""


class SendError(ChannelError):
    """Writing a reply datagram failed"""
