"""Configuration file formats and their codecs.

Each supported format maps to a lowercase file extension and a ``Codec``.
All format dispatch goes through ``get_codec`` so no other module needs to
branch on the format.
"""

import json
import tomllib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict

import tomli_w
import yaml

from .arn import ARN
from .errors import MarshalError, UnmarshalError, UnsupportedConfigFormatError

#: Indentation used by the JSON and YAML encoders
DEFAULT_INDENT = 2

Document = Dict[str, Any]


class ConfigFormat(str, Enum):
    """Supported configuration file formats, valued by file extension"""

    JSON = "json"
    TOML = "toml"
    YAML = "yaml"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_ext(cls, ext: str) -> "ConfigFormat":
        """Map a file extension (with or without leading dot) to a format.

        Matching is case-sensitive; ``yml`` is an alias for YAML. Anything
        else, including the empty string, yields ``UNKNOWN``.
        """
        return _EXTENSIONS.get(ext[1:] if ext.startswith(".") else ext, cls.UNKNOWN)

    @property
    def ext(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


_EXTENSIONS = {
    "json": ConfigFormat.JSON,
    "toml": ConfigFormat.TOML,
    "yaml": ConfigFormat.YAML,
    "yml": ConfigFormat.YAML,
}


@dataclass(frozen=True)
class Codec:
    """Encode/decode functions for one configuration format.

    Attributes:
        encode: Serializes a document (ARN values included) to bytes
        decode: Deserializes bytes to a document; empty input yields {}
        decode_arn: Turns the stored value of a Role's ``arn`` field into an ARN
    """

    encode: Callable[[Document], bytes]
    decode: Callable[[bytes], Document]
    decode_arn: Callable[[Any], ARN]


def _is_blank(data: bytes) -> bool:
    return not data or not data.strip()


def _as_document(value: Any, fmt: ConfigFormat) -> Document:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UnmarshalError(f"error deserializing: expected a {fmt.name} mapping, got {type(value).__name__}")
    return value


def _stringify_arns(value: Any) -> Any:
    if isinstance(value, ARN):
        return str(value)
    if isinstance(value, dict):
        return {k: _stringify_arns(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_arns(v) for v in value]
    return value


# JSON


def _json_default(value: Any) -> Any:
    if isinstance(value, ARN):
        return value.to_json()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode_json(document: Document) -> bytes:
    try:
        text = json.dumps(document, indent=DEFAULT_INDENT, default=_json_default)
    except (TypeError, ValueError) as e:
        raise MarshalError(f"error serializing: {e}") from e
    return (text + "\n").encode("utf-8")


def _decode_json(data: bytes) -> Document:
    if _is_blank(data):
        return {}
    try:
        return _as_document(json.loads(data.decode("utf-8")), ConfigFormat.JSON)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise UnmarshalError(f"error deserializing: {e}") from e


# YAML


class _ConfigDumper(yaml.SafeDumper):
    """SafeDumper that knows how to represent ARNs"""

    pass


_ConfigDumper.add_representer(ARN, ARN.to_yaml)


def _encode_yaml(document: Document) -> bytes:
    try:
        text = yaml.dump(
            document,
            Dumper=_ConfigDumper,
            indent=DEFAULT_INDENT,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise MarshalError(f"error serializing: {e}") from e
    return text.encode("utf-8")


def _decode_yaml(data: bytes) -> Document:
    if _is_blank(data):
        return {}
    try:
        return _as_document(yaml.safe_load(data.decode("utf-8")), ConfigFormat.YAML)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise UnmarshalError(f"error deserializing: {e}") from e


# TOML


def _encode_toml(document: Document) -> bytes:
    try:
        text = tomli_w.dumps(_stringify_arns(document))
    except TypeError as e:
        raise MarshalError(f"error serializing: {e}") from e
    return text.encode("utf-8")


def _decode_toml(data: bytes) -> Document:
    if _is_blank(data):
        return {}
    try:
        return tomllib.loads(data.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise UnmarshalError(f"error deserializing: {e}") from e


CODECS: Dict[ConfigFormat, Codec] = {
    ConfigFormat.JSON: Codec(encode=_encode_json, decode=_decode_json, decode_arn=ARN.from_json),
    ConfigFormat.YAML: Codec(encode=_encode_yaml, decode=_decode_yaml, decode_arn=ARN.from_yaml),
    ConfigFormat.TOML: Codec(encode=_encode_toml, decode=_decode_toml, decode_arn=ARN.parse),
}


def get_codec(fmt: ConfigFormat) -> Codec:
    """Return the codec for ``fmt``.

    Raises:
        UnsupportedConfigFormatError: For ``UNKNOWN`` or any format without a codec
    """
    try:
        return CODECS[fmt]
    except KeyError:
        raise UnsupportedConfigFormatError(fmt) from None
