"""
Unit tests for the ExpressionAttributes alias table.

These tests verify:
1. Names are deduplicated, values never are
2. Dotted and bracketed paths are aliased segment by segment
3. Reserved/valid name strategies are per-instance
4. get_paths/get_values return None when empty
5. reset() restarts numbering
"""

import pytest

from dynexpr import AliasOptions, ExpressionAttributes, is_valid_attribute_name


@pytest.mark.unit
class TestAddPath:
    """Test path aliasing."""

    def test_simple_name(self, attributes):
        assert attributes.add_path("path") == "#n0"
        assert attributes.get_paths() == {"#n0": "path"}

    def test_treat_name_as_path_disabled(self):
        attributes = ExpressionAttributes(treat_name_as_path=False)
        assert attributes.add_path("path.sub[1]") == "#n0"
        assert attributes.get_paths() == {"#n0": "path.sub[1]"}

    def test_two_part_path(self, attributes):
        assert attributes.add_path("path.subpath") == "#n0.#n1"
        assert attributes.get_paths() == {"#n0": "path", "#n1": "subpath"}

    def test_three_part_path(self, attributes):
        assert attributes.add_path("path.l1.l2") == "#n0.#n1.#n2"
        assert attributes.get_paths() == {"#n0": "path", "#n1": "l1", "#n2": "l2"}

    def test_ten_part_path(self, attributes):
        result = attributes.add_path("path.l1.l2.l3.l4.l5.l6.l7.l8.l9")
        assert result == "#n0.#n1.#n2.#n3.#n4.#n5.#n6.#n7.#n8.#n9"
        assert list(attributes.get_paths().values()) == [
            "path", "l1", "l2", "l3", "l4", "l5", "l6", "l7", "l8", "l9"
        ]

    def test_array_index_is_not_aliased(self, attributes):
        assert attributes.add_path("path[1]") == "#n0[1]"
        assert attributes.get_paths() == {"#n0": "path"}

    def test_three_dimensional_array(self, attributes):
        assert attributes.add_path("path[3][2][1]") == "#n0[3][2][1]"
        assert attributes.get_paths() == {"#n0": "path"}

    def test_multi_component_path(self, attributes):
        result = attributes.add_path("path.l1[1].l2.l3[2][1].l4.l5")
        assert result == "#n0.#n1[1].#n2.#n3[2][1].#n4.#n5"
        assert attributes.get_paths() == {
            "#n0": "path",
            "#n1": "l1",
            "#n2": "l2",
            "#n3": "l3",
            "#n4": "l4",
            "#n5": "l5",
        }

    def test_same_name_twice_returns_same_alias(self, attributes):
        first = attributes.add_path("status")
        second = attributes.add_path("status")
        assert first == second == "#n0"
        assert attributes.get_paths() == {"#n0": "status"}

    def test_repeated_segments_share_alias(self, attributes):
        assert attributes.add_path("a.b.a") == "#n0.#n1.#n0"
        assert attributes.get_paths() == {"#n0": "a", "#n1": "b"}

    def test_custom_delimiter(self):
        attributes = ExpressionAttributes(delimiter="/")
        assert attributes.add_path("a/b.c") == "#n0.#n1"
        assert attributes.get_paths() == {"#n0": "a", "#n1": "b.c"}

    def test_unmatched_bracket_is_aliased_whole(self, attributes):
        assert attributes.add_path("odd]") == "#n0"
        assert attributes.get_paths() == {"#n0": "odd]"}


@pytest.mark.unit
class TestNameStrategies:
    """Test the injected is_reserved_name/is_valid_name strategies."""

    def test_reserved_name_uses_literal_alias(self):
        attributes = ExpressionAttributes(is_reserved_name=lambda name: True)
        assert attributes.add_path("path") == "#path"
        assert attributes.get_paths() == {"#path": "path"}

    def test_reserved_name_does_not_consume_counter(self):
        attributes = ExpressionAttributes(is_reserved_name=lambda name: name == "name")
        assert attributes.add_path("name") == "#name"
        assert attributes.add_path("other") == "#n0"
        assert attributes.get_paths() == {"#name": "name", "#n0": "other"}

    def test_reserved_alias_overwrites_colliding_counter_alias(self):
        """A reserved "#name" alias is stored even when a counter alias already uses it."""
        attributes = ExpressionAttributes(is_reserved_name=lambda name: name == "n0")
        assert attributes.add_path("x") == "#n0"
        assert attributes.add_path("n0") == "#n0"
        assert attributes.get_paths() == {"#n0": "n0"}
        assert attributes.add_path("x") == "#n1"
        assert attributes.get_paths() == {"#n0": "n0", "#n1": "x"}

    def test_valid_name_is_not_aliased(self):
        attributes = ExpressionAttributes(is_valid_name=lambda name: True)
        assert attributes.add_path("path") == "path"
        assert attributes.get_paths() is None

    def test_valid_name_with_regex_helper(self):
        attributes = ExpressionAttributes(is_valid_name=is_valid_attribute_name)
        assert attributes.add_path("simple.with-dash[2]") == "simple.#n0[2]"
        assert attributes.get_paths() == {"#n0": "with-dash"}

    def test_strategies_are_per_instance(self):
        options = AliasOptions(is_valid_name=lambda name: True)
        plain = ExpressionAttributes()
        configured = ExpressionAttributes(options)
        assert configured.add_path("path") == "path"
        assert plain.add_path("path") == "#n0"

    def test_overrides_do_not_mutate_shared_options(self):
        options = AliasOptions()
        attributes = ExpressionAttributes(options, treat_name_as_path=False)
        assert attributes.treat_name_as_path is False
        assert options.treat_name_as_path is True

    def test_is_valid_attribute_name(self):
        assert is_valid_attribute_name("a")
        assert is_valid_attribute_name("a0")
        assert not is_valid_attribute_name("0")
        assert not is_valid_attribute_name("-")
        assert not is_valid_attribute_name("a_b")


@pytest.mark.unit
class TestAddValue:
    """Test value aliasing."""

    @pytest.mark.parametrize(
        "value",
        [
            "value",
            3,
            True,
            None,
            b"buffer",
            {"name1": "value2", "name2": "value2"},
            ["value2", "value2"],
            {"a", "b", "c"},
            {1, 2, 3},
            {b"buffer1", b"buffer2"},
        ],
    )
    def test_value_stored_verbatim(self, attributes, value):
        assert attributes.add_value(value) == ":v0"
        assert attributes.get_values() == {":v0": value}

    def test_equal_values_are_not_deduplicated(self, attributes):
        assert attributes.add_value(1) == ":v0"
        assert attributes.add_value(1) == ":v1"
        assert attributes.get_values() == {":v0": 1, ":v1": 1}

    def test_get_values_in_order(self, attributes):
        attributes.add_value("value1")
        attributes.add_value(2)
        assert attributes.get_values() == {":v0": "value1", ":v1": 2}


@pytest.mark.unit
class TestTableState:
    """Test getters, add_params and reset."""

    def test_empty_table_returns_none(self, attributes):
        assert attributes.get_paths() is None
        assert attributes.get_values() is None

    def test_get_paths(self, attributes):
        attributes.add_path("path1")
        attributes.add_path("path2")
        assert attributes.get_paths() == {"#n0": "path1", "#n1": "path2"}

    def test_add_params_omits_empty_maps(self, attributes):
        assert attributes.add_params({}) == {}
        attributes.add_path("path")
        assert attributes.add_params({}) == {"ExpressionAttributeNames": {"#n0": "path"}}

    def test_add_params_with_names_and_values(self, attributes):
        attributes.add_path("path")
        attributes.add_value("value")
        assert attributes.add_params({"Other": 1}) == {
            "Other": 1,
            "ExpressionAttributeNames": {"#n0": "path"},
            "ExpressionAttributeValues": {":v0": "value"},
        }

    def test_reset(self, attributes):
        attributes.add_path("path1")
        attributes.add_value("value1")
        assert attributes.get_paths() == {"#n0": "path1"}
        assert attributes.get_values() == {":v0": "value1"}

        attributes.reset()
        assert attributes.get_paths() is None
        assert attributes.get_values() is None

        assert attributes.add_path("x") == "#n0"
        assert attributes.add_value(1) == ":v0"

    def test_custom_prefixes(self):
        attributes = ExpressionAttributes(name_prefix="#u", value_prefix=":u")
        assert attributes.add_path("a") == "#u0"
        assert attributes.add_value(1) == ":u0"
