"""Unit tests for ARN parsing, formatting and per-format encoding."""

import pytest

from awssume.arn import ARN
from awssume.errors import MalformedIdentifierError


class TestParse:
    def test_parse_role_arn(self, skunk_arn_string):
        arn = ARN.parse(skunk_arn_string)

        assert arn == ARN(
            partition="aws",
            service="iam",
            region="",
            account_id="000000000000",
            resource="role/skunk",
        )

    def test_parse_all_empty_sections(self):
        assert ARN.parse("arn:::::") == ARN()

    def test_resource_keeps_extra_colons(self):
        arn = ARN.parse("arn:aws:logs:us-east-1:123456789012:log-group:/aws/lambda/fn:*")

        assert arn.region == "us-east-1"
        assert arn.resource == "log-group:/aws/lambda/fn:*"

    def test_invalid_prefix(self):
        with pytest.raises(MalformedIdentifierError, match="arn: invalid prefix"):
            ARN.parse("iNv@LiD")

    def test_not_enough_sections(self):
        with pytest.raises(MalformedIdentifierError, match="arn: not enough sections"):
            ARN.parse("arn:aws:iam::000000000000")

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            ARN.parse("")

    @pytest.mark.parametrize(
        "value",
        [
            "arn:aws:iam::000000000000:role/skunk",
            "arn:aws-cn:s3:::bucket/key",
            "arn:aws:sts::123456789012:assumed-role/Admin/session",
            "arn:aws:logs:us-east-1:123456789012:log-group:/x:*",
            "arn:::::",
        ],
    )
    def test_stringify_inverts_parse(self, value):
        assert str(ARN.parse(value)) == value


class TestStringify:
    def test_str(self, skunk_arn_string):
        arn = ARN(partition="aws", service="iam", account_id="000000000000", resource="role/skunk")

        assert str(arn) == skunk_arn_string

    def test_str_empty(self):
        assert str(ARN()) == "arn:::::"


class TestJSONEncoding:
    def test_decode_singleton_object(self):
        arn = ARN.from_json({"arn": "arn:aws:iam::587928718845:role/skunk"})

        assert arn.account_id == "587928718845"
        assert arn.resource == "role/skunk"

    def test_decode_bare_string(self, skunk_arn_string):
        assert ARN.from_json(skunk_arn_string) == ARN.parse(skunk_arn_string)

    def test_decode_object_without_arn_key(self):
        with pytest.raises(MalformedIdentifierError, match="invalid prefix"):
            ARN.from_json({"name": "skunk"})

    def test_encode_is_bare_string(self, skunk_arn_string):
        # Decodes from {"arn": ...} but encodes to the bare string
        assert ARN.parse(skunk_arn_string).to_json() == skunk_arn_string


class TestYAMLEncoding:
    def test_decode_scalar(self, skunk_arn_string):
        assert ARN.from_yaml(skunk_arn_string) == ARN.parse(skunk_arn_string)

    def test_decode_null(self):
        with pytest.raises(MalformedIdentifierError):
            ARN.from_yaml(None)
