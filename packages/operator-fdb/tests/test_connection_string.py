"""Tests for connection string parsing."""

import pytest

from operator_fdb.connection_string import ConnectionString
from operator_fdb.exceptions import MalformedConnectionStringError
from operator_fdb.types import ProcessAddress


class TestConnectionStringParse:
    """Tests for ConnectionString.parse()."""

    def test_parses_description_generation_and_coordinators(self):
        parsed = ConnectionString.parse("test_cluster:a1b2c3@10.0.0.1:4500,10.0.0.2:4500")

        assert parsed.description == "test_cluster"
        assert parsed.generation == "a1b2c3"
        assert parsed.coordinators == (
            ProcessAddress("10.0.0.1", 4500),
            ProcessAddress("10.0.0.2", 4500),
        )

    def test_keeps_listed_order(self):
        parsed = ConnectionString.parse("c:1@10.0.0.9:4500,10.0.0.1:4500")
        assert [str(a) for a in parsed.coordinators] == ["10.0.0.9:4500", "10.0.0.1:4500"]

    def test_tls_and_ipv6_coordinators(self):
        parsed = ConnectionString.parse("c:1@10.0.0.1:4500:tls,[2001:db8::1]:4500:tls")
        assert all(a.tls for a in parsed.coordinators)
        assert parsed.coordinators[1].ip == "2001:db8::1"

    def test_str_reproduces_canonical_form(self):
        value = "c:1@10.0.0.1:4500:tls,[2001:db8::1]:4500:tls"
        assert str(ConnectionString.parse(value)) == value

    @pytest.mark.parametrize(
        "value,reason",
        [
            ("no-at-sign", "expected description:generation@addresses"),
            ("bad-desc:1@10.0.0.1:4500", "expected description:generation@addresses"),
            ("c:gen_1@10.0.0.1:4500", "expected description:generation@addresses"),
            ("c:1@", "no coordinators listed"),
            ("c:1@ , ", "no coordinators listed"),
        ],
    )
    def test_malformed_form(self, value, reason):
        with pytest.raises(MalformedConnectionStringError) as exc_info:
            ConnectionString.parse(value)
        assert exc_info.value.reason == reason
        assert exc_info.value.connection_string == value

    def test_malformed_address(self):
        with pytest.raises(MalformedConnectionStringError, match="Invalid port"):
            ConnectionString.parse("c:1@10.0.0.1:4500,10.0.0.2:abc")
