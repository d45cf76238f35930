"""Role entity persisted in the awssume configuration file."""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from .arn import ARN


class Role(BaseModel):
    """A named reference to an assumable IAM Role.

    Attributes are mutable; assignment is validated so ``role.arn = "arn:..."``
    parses the string into an ``ARN``.
    """

    alias: str = Field(..., description="Human-friendly Role identifier")
    arn: ARN = Field(..., description="Amazon Resource Name of the Role")
    session_name: str = Field(..., description="STS session name used when assuming the Role")

    class Config:
        arbitrary_types_allowed = True
        validate_assignment = True

    @field_validator("arn", mode="before")
    @classmethod
    def parse_arn(cls, v: Any) -> ARN:
        if isinstance(v, ARN):
            return v
        if isinstance(v, dict):
            return ARN.from_json(v)
        return ARN.parse(v)

    def to_document(self) -> Dict[str, Any]:
        """Mapping written to the configuration file.

        The ARN is left as an ``ARN`` so each format encodes it its own way.
        """
        return {"alias": self.alias, "arn": self.arn, "session_name": self.session_name}
