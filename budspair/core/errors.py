"""Domain-specific errors for budspair."""


class BudspairError(Exception):
    """Base error for budspair. Anything escaping the workflow is fatal."""


class PrivilegeError(BudspairError):
    """Raised when the process lacks root privileges."""


class SettingsError(BudspairError):
    """Raised when a settings file cannot be read or fails validation."""


class ConfigPatchError(BudspairError):
    """Raised when the Bluetooth daemon config cannot be patched or restored."""


class ServiceRestartError(BudspairError):
    """Raised when restarting the Bluetooth service fails."""


class DaemonCommandError(BudspairError):
    """Raised when a bluetoothctl invocation exits nonzero or cannot start."""

    def __init__(self, command: str, detail: str = "") -> None:
        self.command = command
        self.detail = detail
        message = f"'{command}' failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class AdapterNotReadyError(BudspairError):
    """Raised when the adapter never reports itself powered."""


class NoDevicesFoundError(BudspairError):
    """Raised when discovery yields no device matching the name filter."""


class RetryExhaustedError(BudspairError):
    """Raised when a retried operation fails on every attempt."""

    def __init__(self, operation: str, attempts: int) -> None:
        self.operation = operation
        self.attempts = attempts
        super().__init__(f"'{operation}' failed after {attempts} attempts")
