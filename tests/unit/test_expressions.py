import pytest

from resultfold.core.expressions import (
    and_join,
    build_field_expression,
    build_range_expression,
    or_combine,
    quote_if_needed,
)


def test_field_expression_keeps_atomic_values_unquoted():
    assert build_field_expression("@fieldname", "=", ["fieldvalue"]) == "@fieldname=fieldvalue"
    assert build_field_expression("conversationid", "=", [42]) == "@conversationid=42"


def test_field_expression_quotes_values_with_spaces_and_quotes():
    assert build_field_expression("@author", "=", ["Ada Lovelace"]) == '@author="Ada Lovelace"'
    assert quote_if_needed('say "hi"') == '"say \\"hi\\""'


def test_field_expression_lists_several_values():
    assert build_field_expression("@filetype", "==", ["pdf", "Word Document"]) == (
        '@filetype==(pdf,"Word Document")'
    )


def test_field_expression_requires_a_value():
    with pytest.raises(ValueError):
        build_field_expression("@fieldname", "=", [])


def test_range_expression_formats_whole_numbers():
    assert build_range_expression("position", 3.0, 7) == "@position=3..7"
    assert build_range_expression("@score", 0.5, 1.5) == "@score=0.5..1.5"


def test_or_combine_groups_keywords():
    assert or_combine("foo bar", "@uri") == "(foo bar) OR @uri"
    assert or_combine("   ", "@uri") == "@uri"
    assert or_combine("foo", None) == "foo"


def test_and_join_skips_blank_parts():
    assert and_join("@a=1", "", None, "  @b=2 ") == "@a=1 @b=2"


def test_values_with_operator_characters_are_quoted():
    assert build_field_expression("@date", "=", ["2024-01-01"]) == '@date="2024-01-01"'
    assert build_field_expression("@name", "=", ["a-b"]) == '@name="a-b"'
    assert build_field_expression("@filename", "=", ["report.pdf"]) == '@filename="report.pdf"'
    assert build_field_expression("@offset", "=", [-3.5]) == "@offset=-3.5"
    assert build_field_expression("@conversation", "=", ["thread_42"]) == "@conversation=thread_42"
