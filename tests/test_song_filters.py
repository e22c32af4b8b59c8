"""Tests for catalog query construction.

Statements are compiled with the asyncpg dialect (positional $n
placeholders) so each WHERE conjunct can be matched to the value
actually bound at its placeholder position.
"""

import itertools
import re

import pytest
from sqlalchemy.dialects.postgresql import asyncpg

from music_library.stores.songs import FILTER_PREDICATES, build_filter_predicates, build_filtered_query

FILTER_VALUES = {"group": "Muse", "song": "Hole", "text": "black hole"}
FILTER_COLUMNS = {"group": "group_name", "song": "song_name", "text": "text"}
# What actually gets bound for each filter value.
BOUND_VALUES = {"group": "%Muse%", "song": "%Hole%", "text": "black hole"}


def _compile(stmt):
    compiled = stmt.compile(dialect=asyncpg.dialect())
    values = [compiled.params[name] for name in compiled.positiontup]
    return str(compiled), values


def _where_bindings(sql: str, values: list) -> list[tuple[str, object]]:
    """(column, bound value) for each WHERE conjunct, in SQL order."""
    if "WHERE" not in sql:
        return []
    where = re.split(r"\sWHERE\s", sql, maxsplit=1)[1]
    where = re.split(r"\sORDER BY\s", where, maxsplit=1)[0]
    bindings = []
    for conjunct in where.split(" AND "):
        column = re.search(r"songs\.(\w+)", conjunct).group(1)
        placeholders = re.findall(r"\$(\d+)", conjunct)
        assert len(placeholders) == 1, conjunct
        bindings.append((column, values[int(placeholders[0]) - 1]))
    return bindings


# Each recognized key is absent, empty, whitespace or set: 4^3 combinations.
KEY_STATES = [None, "", "   ", "value"]
COMBINATIONS = list(itertools.product(KEY_STATES, repeat=len(FILTER_VALUES)))


@pytest.mark.parametrize("states", COMBINATIONS)
def test_every_filter_combination_binds_values_to_their_columns(states):
    filters = {}
    expected = []
    for key, state in zip(FILTER_VALUES, states):
        if state is None:
            continue
        if state == "value":
            filters[key] = FILTER_VALUES[key]
            expected.append((FILTER_COLUMNS[key], BOUND_VALUES[key]))
        else:
            filters[key] = state

    sql, values = _compile(build_filtered_query(filters, page=3, page_size=5))

    assert _where_bindings(sql, values) == expected
    # Filter values come first, then only the LIMIT/OFFSET values.
    assert values[: len(expected)] == [value for _, value in expected]
    assert sorted(values[len(expected) :]) == [5, 10]


@pytest.mark.parametrize("order", list(itertools.permutations(FILTER_VALUES)))
def test_predicate_order_does_not_depend_on_caller_dict_order(order):
    filters = {key: FILTER_VALUES[key] for key in order}
    sql, values = _compile(build_filtered_query(filters, page=1, page_size=10))

    assert [column for column, _ in _where_bindings(sql, values)] == ["group_name", "song_name", "text"]


def test_unsupported_filter_keys_are_ignored():
    filters = {"artist": "Muse", "year": "2006", "group": "Muse", "Group": "ignored too"}
    sql, values = _compile(build_filtered_query(filters, page=1, page_size=10))

    assert _where_bindings(sql, values) == [("group_name", "%Muse%")]
    assert len(build_filter_predicates(filters)) == 1


def test_no_filters_means_no_where_clause():
    sql, _ = _compile(build_filtered_query({}, page=1, page_size=10))
    assert "WHERE" not in sql
    sql, _ = _compile(build_filtered_query(None, page=1, page_size=10))
    assert "WHERE" not in sql


def test_ordered_by_release_date_desc_with_stable_tiebreak():
    sql, _ = _compile(build_filtered_query({}, page=1, page_size=10))
    assert "ORDER BY songs.release_date DESC, songs.id ASC" in sql


def test_values_are_never_rendered_into_sql():
    hostile = "x'; DROP TABLE songs; --"
    filters = {"group": hostile, "song": hostile, "text": hostile}
    sql, values = _compile(build_filtered_query(filters, page=1, page_size=10))

    assert "DROP TABLE" not in sql
    assert values[:3] == [f"%{hostile}%", f"%{hostile}%", hostile]


def test_like_wildcards_in_values_are_escaped():
    sql, values = _compile(build_filtered_query({"group": "100%_pure"}, page=1, page_size=10))

    assert "ESCAPE '/'" in sql
    assert values[0] == "%100/%/_pure%"


def test_group_and_song_are_case_insensitive_substring_matches():
    sql, _ = _compile(build_filtered_query({"group": "muse", "song": "hole"}, page=1, page_size=10))
    assert "songs.group_name ILIKE" in sql
    assert "songs.song_name ILIKE" in sql


def test_text_uses_full_text_search():
    sql, _ = _compile(build_filtered_query({"text": "black hole"}, page=1, page_size=10))
    assert "to_tsvector(songs.text) @@ plainto_tsquery(" in sql


@pytest.mark.parametrize(
    ("page", "page_size", "expected"),
    [
        (1, 10, [0, 10]),
        (2, 10, [10, 10]),
        (4, 3, [3, 9]),
        (None, None, [0, 10]),
        (0, -1, [0, 10]),
    ],
)
def test_pagination_window(page, page_size, expected):
    _, values = _compile(build_filtered_query({}, page=page, page_size=page_size))
    assert sorted(values) == sorted(expected)


def test_recognized_filter_names():
    assert list(FILTER_PREDICATES) == ["group", "song", "text"]
