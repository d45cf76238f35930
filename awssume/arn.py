"""Amazon Resource Name parsing and per-format encoding.

An ARN has the form ``arn:partition:service:region:account-id:resource``.
The resource section may itself contain colons, so a string is split into at
most six sections.
"""

from dataclasses import dataclass
from typing import Any

from .errors import MalformedIdentifierError

ARN_PREFIX = "arn:"
ARN_DELIMITER = ":"
ARN_SECTIONS = 6

#: Key of the singleton object form accepted when decoding JSON
JSON_OBJECT_KEY = "arn"


@dataclass(frozen=True)
class ARN:
    """Parsed Amazon Resource Name.

    Attributes:
        partition: AWS partition (e.g. "aws", "aws-cn")
        service: Service namespace (e.g. "iam")
        region: Region, empty for global services such as IAM
        account_id: 12 digit account ID, may be empty
        resource: Resource part, may contain "/" and ":"
    """

    partition: str = ""
    service: str = ""
    region: str = ""
    account_id: str = ""
    resource: str = ""

    @classmethod
    def parse(cls, value: str) -> "ARN":
        """Parse an ARN string.

        Args:
            value: String of the form arn:partition:service:region:account:resource

        Returns:
            Parsed ARN

        Raises:
            MalformedIdentifierError: If the prefix is missing or there are fewer than 6 sections
        """
        if not isinstance(value, str) or not value.startswith(ARN_PREFIX):
            raise MalformedIdentifierError("arn: invalid prefix")

        sections = value.split(ARN_DELIMITER, ARN_SECTIONS - 1)
        if len(sections) != ARN_SECTIONS:
            raise MalformedIdentifierError("arn: not enough sections")

        _, partition, service, region, account_id, resource = sections
        return cls(
            partition=partition,
            service=service,
            region=region,
            account_id=account_id,
            resource=resource,
        )

    def __str__(self) -> str:
        return ARN_DELIMITER.join(
            ["arn", self.partition, self.service, self.region, self.account_id, self.resource]
        )

    # JSON: decodes from {"arn": "..."} (or a bare string), encodes to the bare string

    @classmethod
    def from_json(cls, value: Any) -> "ARN":
        """Decode an ARN from a JSON value.

        Accepts the singleton object form ``{"arn": "<arn>"}`` as well as a
        bare string.
        """
        if isinstance(value, dict):
            value = value.get(JSON_OBJECT_KEY, "")
        return cls.parse(value)

    def to_json(self) -> str:
        return str(self)

    # YAML: bare scalar both ways

    @classmethod
    def from_yaml(cls, value: Any) -> "ARN":
        return cls.parse(value)

    @staticmethod
    def to_yaml(dumper, data: "ARN"):
        """PyYAML representer emitting the ARN as a plain string scalar."""
        return dumper.represent_str(str(data))
