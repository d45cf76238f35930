"""Error taxonomy for awssume.

Every failure the CLI can report derives from ``AwssumeError``. None of them
are retried; the CLI prints the message and exits with status 1.
"""

from typing import Iterable, Sequence


class AwssumeError(Exception):
    """Base class for all awssume errors."""

    pass


class MalformedIdentifierError(AwssumeError, ValueError):
    """Raised when a string cannot be parsed as an ARN."""

    pass


class RoleNotFoundError(AwssumeError):
    """Raised when no Role is configured under the given alias."""

    def __init__(self, alias: str):
        super().__init__(f"no role with alias {alias} found")
        self.alias = alias


class RoleExistsError(AwssumeError):
    """Raised when adding a Role whose alias is already configured."""

    def __init__(self, alias: str):
        super().__init__(f"role {alias} already exists")
        self.alias = alias


class MultipleConfigsDetectedError(AwssumeError):
    """Raised when more than one configuration file exists for the same path."""

    def __init__(self, paths: Iterable[str]):
        self.paths = list(paths)
        super().__init__(f"multiple configuration files detected: {', '.join(self.paths)}")


class UnsupportedConfigFormatError(AwssumeError):
    """Raised when a configuration format has no codec."""

    def __init__(self, fmt: object = None):
        message = "unsupported config file format"
        if fmt is not None:
            message = f"{message}: {fmt}"
        super().__init__(message)


class MarshalError(AwssumeError):
    """Raised when the configuration cannot be serialized."""

    pass


class UnmarshalError(AwssumeError):
    """Raised when the configuration cannot be deserialized."""

    pass


class FileReadError(AwssumeError):
    """Raised when a configuration file cannot be probed or read."""

    def __init__(self, path: str, reason: object):
        super().__init__(f"error reading file {path}: {reason}")
        self.path = path


class FileWriteError(AwssumeError):
    """Raised when a configuration file cannot be created, written or removed."""

    def __init__(self, path: str, reason: object):
        super().__init__(f"error writing to file {path}: {reason}")
        self.path = path


class LoadAWSConfigError(AwssumeError):
    """Raised when no usable ambient AWS configuration is found."""

    def __init__(self, reason: object):
        super().__init__(f"error loading AWS config: {reason}")


class AssumeRoleError(AwssumeError):
    """Raised when sts:AssumeRole fails for a Role."""

    def __init__(self, arn: object, reason: object):
        super().__init__(f"error assuming Role {arn}: {reason}")
        self.arn = str(arn)


class ExecError(AwssumeError):
    """Raised when the child command cannot be started."""

    def __init__(self, command: str, args: Sequence[str], reason: object):
        super().__init__(f"error executing command {command} (args {list(args)}): {reason}")
        self.command = command
        self.args_list = list(args)


class NoShellFoundError(AwssumeError):
    """Raised when no shell can be located to run interactively."""

    def __init__(self):
        super().__init__("no shell found")
