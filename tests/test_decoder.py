"""Tests for decoding annotation values into records."""

from dataclasses import dataclass, field

import pytest

from annotation_index.decoder import DecodeStrategy, decode, schema_for
from annotation_index.exceptions import DecodeError
from annotation_index.models import Annotation


@dataclass
class RestResponse:
    code: str
    type: str = ""
    description: str = field(default="", metadata={"attr": "desc"})


@dataclass
class Param:
    location: str
    name: str
    type: str
    required: str = ""
    description: str = ""


class TestSchema:
    def test_keys_honor_attr_metadata(self):
        """Test keys honor attr metadata."""
        assert schema_for(RestResponse) == {"code": "code", "type": "type", "desc": "description"}

    def test_rejects_non_dataclass(self):
        """Test rejects non dataclass."""
        with pytest.raises(DecodeError):
            schema_for(str)


class TestKeyedDecoding:
    def test_decode_into_dataclass(self):
        """Test decode into dataclass."""
        ann = Annotation("RestResponse", "code=201,type=json,desc=created")
        assert decode(ann, RestResponse) == RestResponse(code="201", type="json", description="created")

    def test_missing_optional_keys_use_defaults(self):
        """Test missing optional keys use defaults."""
        assert decode("code=404", RestResponse) == RestResponse(code="404")

    def test_unknown_key_is_an_error(self):
        """Test unknown key is an error."""
        with pytest.raises(DecodeError, match="no matching field"):
            decode("code=200,colour=red", RestResponse)

    def test_missing_required_key_is_an_error(self):
        """Test missing required key is an error."""
        with pytest.raises(DecodeError):
            decode("type=json", RestResponse)

    def test_decode_into_dict(self):
        """Test decode into dict."""
        assert decode("x=1,y=2", dict) == {"x": "1", "y": "2"}

    def test_whitespace_separated_pairs(self):
        """Test whitespace separated pairs."""
        assert decode("index=0 name=xpto", dict) == {"index": "0", "name": "xpto"}

    def test_annotation_method_defaults_to_keyed(self):
        """Test annotation method defaults to keyed."""
        assert Annotation("Bar", "x=1").decode(dict) == {"x": "1"}


class TestPositionalDecoding:
    def test_tokens_zip_onto_dataclass_fields(self):
        """Test tokens zip onto dataclass fields."""
        ann = Annotation("param", "query foo bool true")
        result = decode(ann, Param, DecodeStrategy.POSITIONAL)
        assert result == Param(location="query", name="foo", type="bool", required="true")

    def test_surplus_tokens_are_an_error(self):
        """Test surplus tokens are an error."""
        with pytest.raises(DecodeError):
            decode("query foo bool true tiam sed", Param, "positional")

    def test_greedy_joins_surplus_into_last_field(self):
        """Test greedy joins surplus into last field."""
        result = decode("query foo bool true tiam sed efficitur", Param, "positional", greedy=True)
        assert result.description == "tiam sed efficitur"

    def test_explicit_fields_into_dict(self):
        """Test explicit fields into dict."""
        result = decode("GET /users", dict, DecodeStrategy.POSITIONAL, fields=["method", "path"])
        assert result == {"method": "GET", "path": "/users"}

    def test_dict_without_fields_is_an_error(self):
        """Test dict without fields is an error."""
        with pytest.raises(DecodeError):
            decode("GET /users", dict, DecodeStrategy.POSITIONAL)

    def test_too_few_tokens_for_required_fields(self):
        """Test too few tokens for required fields."""
        with pytest.raises(DecodeError):
            decode("query", Param, DecodeStrategy.POSITIONAL)

    def test_unknown_strategy(self):
        """Test an unknown decode strategy."""
        with pytest.raises(ValueError):
            decode("x=1", dict, "yaml")
