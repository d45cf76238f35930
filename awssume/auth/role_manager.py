"""Assume a configured Role through STS and run a command with its credentials.

The flow is linear: load the ambient AWS configuration, resolve the Role by
alias, call sts:AssumeRole once, then run the child command with the
temporary credentials added to its environment and propagate its exit status.
Credentials are not cached and the STS call is not retried.
"""

import os
from typing import Dict, Mapping, Optional, Sequence

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ..config_store import Config
from ..errors import AssumeRoleError, LoadAWSConfigError
from ..models import Role
from ..process import run_command

logger = structlog.get_logger(__name__)

#: Default STS session duration in seconds (1 hour)
DEFAULT_SESSION_DURATION = 60 * 60

#: Region used for STS when none resolves from the environment or profile
DEFAULT_STS_REGION = "us-east-1"

AWS_ACCESS_KEY_ID_ENV_VAR = "AWS_ACCESS_KEY_ID"
AWS_SECRET_ACCESS_KEY_ENV_VAR = "AWS_SECRET_ACCESS_KEY"
AWS_SESSION_TOKEN_ENV_VAR = "AWS_SESSION_TOKEN"
# Older SDKs and tools read the session token from this name
AWS_SECURITY_TOKEN_ENV_VAR = "AWS_SECURITY_TOKEN"


def build_environment(credentials: Mapping[str, str], base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Build the child environment from ``base`` plus STS credentials.

    Args:
        credentials: The ``Credentials`` mapping of an AssumeRole response
        base: Environment to extend (defaults to os.environ)

    Returns:
        New environment dict; ``base`` is not modified
    """
    env = dict(os.environ if base is None else base)
    env.update(
        {
            AWS_ACCESS_KEY_ID_ENV_VAR: credentials["AccessKeyId"],
            AWS_SECRET_ACCESS_KEY_ENV_VAR: credentials["SecretAccessKey"],
            AWS_SECURITY_TOKEN_ENV_VAR: credentials["SessionToken"],
            AWS_SESSION_TOKEN_ENV_VAR: credentials["SessionToken"],
        }
    )
    return env


class RoleManager:
    """Runs commands with credentials of Roles from a Config.

    Usage:
        config = load_config()
        manager = RoleManager(config)
        status = manager.exec_role("prod-admin", 3600, "aws", ["sts", "get-caller-identity"])

    Attributes:
        config: Loaded configuration holding the Roles
        region: Optional region override for the STS client
    """

    def __init__(
        self,
        config: Config,
        session: Optional[boto3.Session] = None,
        region: Optional[str] = None,
    ):
        """Initialize RoleManager.

        Args:
            config: Loaded configuration
            session: boto3 session to use; built from the default chain when omitted
            region: Region override for the STS client
        """
        self.config = config
        self.region = region
        self._session = session

    def load_aws_session(self) -> boto3.Session:
        """Load the ambient AWS configuration (credential chain and region).

        Raises:
            LoadAWSConfigError: If no session can be built or no credentials resolve
        """
        if self._session is not None:
            return self._session

        try:
            session = boto3.Session(region_name=self.region) if self.region else boto3.Session()
            credentials = session.get_credentials()
        except BotoCoreError as e:
            raise LoadAWSConfigError(e) from e

        if credentials is None:
            raise LoadAWSConfigError("no AWS credentials found")

        logger.debug("Loaded AWS configuration", region=session.region_name)
        self._session = session
        return session

    def assume_role(self, role: Role, session_duration: int = DEFAULT_SESSION_DURATION) -> dict:
        """Assume ``role`` and return its temporary credentials.

        Args:
            role: Role to assume
            session_duration: STS session duration in seconds

        Returns:
            Dictionary with AccessKeyId, SecretAccessKey, SessionToken, Expiration

        Raises:
            AssumeRoleError: If the STS call fails
        """
        session = self.load_aws_session()
        role_arn = str(role.arn)

        logger.debug(
            "Assuming IAM role",
            role_arn=role_arn,
            session_name=role.session_name,
            duration_seconds=session_duration,
        )

        try:
            sts_client = session.client("sts", region_name=session.region_name or DEFAULT_STS_REGION)
            response = sts_client.assume_role(
                RoleArn=role_arn,
                RoleSessionName=role.session_name,
                DurationSeconds=session_duration,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                "Failed to assume role",
                role_arn=role_arn,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise AssumeRoleError(role_arn, e) from e

        credentials = response["Credentials"]
        expiration = credentials.get("Expiration")
        logger.info(
            "Role assumed successfully",
            role_arn=role_arn,
            expires_at=expiration.isoformat() if hasattr(expiration, "isoformat") else expiration,
        )
        return credentials

    def exec_role(
        self,
        alias: str,
        session_duration: int,
        command: str,
        args: Sequence[str],
    ) -> int:
        """Assume the Role configured under ``alias`` and run ``command`` with its credentials.

        Returns:
            The child's exit status

        Raises:
            LoadAWSConfigError: If no ambient AWS configuration is usable
            RoleNotFoundError: If ``alias`` is not configured
            AssumeRoleError: If the STS call fails
            ExecError: If the command cannot be started
        """
        self.load_aws_session()
        role = self.config.roles.by_alias(alias)
        credentials = self.assume_role(role, session_duration)
        env = build_environment(credentials)
        return run_command(command, args, env)
