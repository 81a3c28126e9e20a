"""Unit tests for test identifiers and instance addresses."""

import pytest

from dataflow_testkit.core.errors import InstanceURIError
from dataflow_testkit.core.identity import (
    InstanceURI,
    is_valid_scheme,
    make_instance_uri,
    make_test_id,
    normalize_name,
)


class TestMakeTestId:
    """Tests for make_test_id()."""

    def test_joins_class_and_method(self):
        assert make_test_id("pkg.Foo", "testBar") == "pkg_Foo_testBar"

    def test_nested_packages(self):
        assert (
            make_test_id("org.kiji.schema.TestTables", "testCreate")
            == "org_kiji_schema_TestTables_testCreate"
        )

    @pytest.mark.parametrize(
        "class_name,expected",
        [
            ("tests/unit/test_x.py", "tests_unit_test_x_py_test"),
            ("tests\\unit\\Case", "tests_unit_Case_test"),
            ("mod::Cls", "mod__Cls_test"),
        ],
    )
    def test_path_like_separators(self, class_name, expected):
        assert make_test_id(class_name, "test") == expected

    def test_parametrized_pytest_names(self):
        assert make_test_id("mod.Cls", "test_x[a b-1]") == "mod_Cls_test_x_a_b-1_"

    @pytest.mark.parametrize("class_name,method_name", [("", "test"), ("Cls", "")])
    def test_empty_names_rejected(self, class_name, method_name):
        with pytest.raises(ValueError):
            make_test_id(class_name, method_name)

    def test_normalize_keeps_safe_characters(self):
        assert normalize_name("abc_DEF-123") == "abc_DEF-123"


class TestInstanceURI:
    """Tests for InstanceURI."""

    def test_str_format(self):
        uri = InstanceURI("testkit", ".fake.t-0", "t")
        assert str(uri) == "testkit://.fake.t-0/t"

    def test_parse(self):
        uri = InstanceURI.parse("kiji://.fake.pkg_Foo_testBar-3/pkg_Foo_testBar")

        assert uri.scheme == "kiji"
        assert uri.cluster == ".fake.pkg_Foo_testBar-3"
        assert uri.instance == "pkg_Foo_testBar"
        assert uri.is_fake

    def test_parse_str_identity(self):
        text = "testkit://cluster/instance"
        assert str(InstanceURI.parse(text)) == text

    def test_not_fake_cluster(self):
        assert InstanceURI.parse("testkit://prod/db").is_fake is False

    @pytest.mark.parametrize(
        "value",
        [
            "no-scheme/instance",
            "testkit://cluster-only",
            "testkit:///instance",
            "testkit://cluster/",
            "testkit://cluster/a/b",
            "1bad://cluster/instance",
        ],
    )
    def test_parse_invalid(self, value):
        with pytest.raises(InstanceURIError):
            InstanceURI.parse(value)

    def test_uri_error_is_value_error(self):
        with pytest.raises(ValueError):
            InstanceURI.parse("nonsense")

    def test_hashable_and_comparable(self):
        a = InstanceURI.parse("testkit://c/i")
        b = InstanceURI.parse("testkit://c/i")
        assert a == b
        assert len({a, b}) == 1


class TestMakeInstanceUri:
    """Tests for make_instance_uri()."""

    def test_embeds_test_id_and_sequence(self):
        uri = make_instance_uri("pkg_Foo_testBar", 7)

        assert str(uri) == "testkit://.fake.pkg_Foo_testBar-7/pkg_Foo_testBar"

    def test_custom_scheme(self):
        assert make_instance_uri("t", 0, scheme="kiji").scheme == "kiji"

    def test_distinct_sequences_distinct_uris(self):
        uris = {make_instance_uri("t", i) for i in range(100)}
        assert len(uris) == 100

    def test_distinct_tests_distinct_uris(self):
        assert make_instance_uri("a_test1", 0) != make_instance_uri("a_test2", 0)

    def test_negative_sequence_rejected(self):
        with pytest.raises(ValueError):
            make_instance_uri("t", -1)


class TestIsValidScheme:
    """Tests for is_valid_scheme()."""

    @pytest.mark.parametrize("scheme", ["testkit", "kiji", "svn+ssh", "a.b-c"])
    def test_valid(self, scheme):
        assert is_valid_scheme(scheme)

    @pytest.mark.parametrize("scheme", ["", "my_scheme", "1kiji", "kiji:", "a b"])
    def test_invalid(self, scheme):
        assert not is_valid_scheme(scheme)
