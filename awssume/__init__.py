"""awssume: run commands with credentials of locally registered IAM Roles."""

from .arn import ARN
from .config_store import Config, load_config
from .errors import AwssumeError
from .formats import ConfigFormat
from .models import Role
from .registry import RoleRegistry
from .version import __version__

__all__ = [
    "ARN",
    "AwssumeError",
    "Config",
    "ConfigFormat",
    "Role",
    "RoleRegistry",
    "__version__",
    "load_config",
]
