"""Tests for dialect grammar profiles and parse failures."""

from __future__ import annotations

import threading

import pytest

from importcost.parsers import Dialect, ParseError, parse_source
from importcost.parsers.syntax import BASE_FEATURES, char_column, get_parser


def test_each_profile_adds_one_exclusive_extension() -> None:
    javascript = Dialect.JAVASCRIPT.profile.features
    typescript = Dialect.TYPESCRIPT.profile.features

    assert javascript - BASE_FEATURES == {"flow_types"}
    assert typescript - BASE_FEATURES == {"static_types"}
    assert javascript & typescript == BASE_FEATURES


def test_parser_is_memoized_per_thread() -> None:
    assert get_parser(Dialect.JAVASCRIPT) is get_parser(Dialect.JAVASCRIPT)
    assert get_parser(Dialect.JAVASCRIPT) is not get_parser(Dialect.TYPESCRIPT)

    other = []
    thread = threading.Thread(target=lambda: other.append(get_parser(Dialect.JAVASCRIPT)))
    thread.start()
    thread.join()

    assert other[0] is not get_parser(Dialect.JAVASCRIPT)


@pytest.mark.parametrize("dialect", list(Dialect))
def test_jsx_parses_in_both_dialects(dialect: Dialect) -> None:
    tree = parse_source("const el = <Button onClick={() => go()}>Hi</Button>;\n", dialect)

    assert tree.root_node.has_error is False


@pytest.mark.parametrize("dialect", list(Dialect))
def test_type_annotations_parse_in_both_dialects(dialect: Dialect) -> None:
    source = (
        "// @flow\n"
        "import type { Node } from 'react';\n"
        "function add(a: number, b: number): number { return a + b; }\n"
    )

    assert parse_source(source, dialect).root_node.has_error is False


def test_parse_error_reports_position() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_source("const ok = 1;\nconst = ;\n", Dialect.JAVASCRIPT)

    assert excinfo.value.line == 2
    assert "javascript" in str(excinfo.value)


def test_char_column_counts_characters() -> None:
    data = "const café = 1;".encode("utf-8")
    offset = data.index(b"1")

    assert offset == 14
    assert char_column(data, offset, offset) == 13
