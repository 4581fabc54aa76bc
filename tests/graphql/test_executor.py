"""
Tests for the query executor.
"""

from unittest.mock import patch

import pytest

from minigraphql.graphql.core import (
    MUTATION,
    QUERY,
    Argument,
    ArgumentTypeError,
    Field,
    FieldResolutionError,
    InvalidSelectionError,
    ParseError,
    SchemaRegistry,
    UnknownFieldError,
    UnknownOperationError,
    execute,
    parse,
)
from minigraphql.records import DuplicateRecordError

LIST_QUERY = "{ list { id title comments { body } author { Name Tutorials } } }"


def _fail(parent, args, context):
    raise RuntimeError("boom")


@pytest.fixture
def toy_schema():
    """A schema whose resolvers exercise the error paths."""
    registry = SchemaRegistry()
    registry.define_type("Item", {"name": Field("String!"), "count": Field("Int")})
    registry.define_root(
        QUERY,
        {
            "ok": Field("String", resolver=lambda p, a, c: "fine"),
            "broken": Field("String", resolver=_fail),
            "required": Field("String!", resolver=lambda p, a, c: None),
            "items": Field(
                "[Item]",
                resolver=lambda p, a, c: [
                    {"name": "a", "count": 1},
                    {"name": "b", "count": "many"},
                    {"name": None, "count": 3},
                ],
            ),
            "notAList": Field("[Int]", resolver=lambda p, a, c: 5),
            "echo": Field(
                "[Int]",
                resolver=lambda p, a, c: a.get("values"),
                args={"values": Argument("[Int]", default=[7])},
            ),
            "context": Field("String", resolver=lambda p, a, c: c["value"]),
        },
    )
    registry.define_root(
        MUTATION,
        {"raise": Field("Int", resolver=_fail)},
    )
    return registry.finalize()


class TestTutorialQueries:
    """Tests against the tutorial service with the two mock tutorials."""

    def test_end_to_end_list(self, tutorial_service):
        result = tutorial_service.execute(LIST_QUERY)

        assert result.errors == []
        assert result.formatted() == {
            "data": {
                "list": [
                    {
                        "id": 1,
                        "title": "Go GraphQL Tutorial",
                        "comments": [{"body": "First Comment"}],
                        "author": {"Name": "Elliot Forbes", "Tutorials": [1, 2]},
                    },
                    {
                        "id": 2,
                        "title": "Go GraphQL Tutorial - Part 2",
                        "comments": [{"body": "Second Comment"}],
                        "author": {"Name": "Elliot Forbes", "Tutorials": [1, 2]},
                    },
                ]
            }
        }

    def test_only_requested_fields(self, tutorial_service):
        result = tutorial_service.execute("{ list { id title } }")

        assert result.errors == []
        entries = result.data["list"]
        assert len(entries) == 2
        for entry in entries:
            assert set(entry) == {"id", "title"}

    def test_result_keys_follow_request_order(self, tutorial_service):
        result = tutorial_service.execute("{ list { title id } }")
        assert list(result.data["list"][0]) == ["title", "id"]

    def test_list_is_idempotent(self, tutorial_service):
        first = tutorial_service.execute(LIST_QUERY)
        second = tutorial_service.execute(LIST_QUERY)
        assert first.formatted() == second.formatted()

    def test_tutorial_by_id(self, tutorial_service):
        result = tutorial_service.execute("{ tutorial(id: 2) { id title } }")
        assert result.formatted() == {
            "data": {"tutorial": {"id": 2, "title": "Go GraphQL Tutorial - Part 2"}}
        }

    def test_missing_id_is_null_without_error(self, tutorial_service):
        result = tutorial_service.execute("{ tutorial(id: 99) { id title } }")

        assert result.data == {"tutorial": None}
        assert result.errors == []
        assert "errors" not in result.formatted()

    def test_omitted_id_is_null(self, tutorial_service):
        result = tutorial_service.execute("{ tutorial { id } }")
        assert result.data == {"tutorial": None}
        assert result.errors == []

    def test_numeric_string_id_is_coerced(self, tutorial_service):
        result = tutorial_service.execute('{ tutorial(id: "1") { title } }')
        assert result.data == {"tutorial": {"title": "Go GraphQL Tutorial"}}
        assert result.errors == []

    def test_non_numeric_id_fails_only_that_field(self, tutorial_service):
        result = tutorial_service.execute('{ tutorial(id: "abc") { title } list { id } }')

        assert result.data["tutorial"] is None
        assert result.data["list"] == [{"id": 1}, {"id": 2}]
        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, ArgumentTypeError)
        assert error.path == ["tutorial"]
        assert "'id'" in error.message

    def test_oversized_int_literal_fails_only_that_field(self, tutorial_service):
        document = "{ tutorial(id: %s) { title } list { id } }" % ("9" * 5000)
        result = tutorial_service.execute(document)

        assert result.data["tutorial"] is None
        assert result.data["list"] == [{"id": 1}, {"id": 2}]
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], ArgumentTypeError)
        assert result.errors[0].path == ["tutorial"]

    def test_oversized_default_value_rejects_document(self, tutorial_service):
        result = tutorial_service.execute(
            "query($id: Int = %s) { tutorial(id: $id) { id } }" % ("9" * 5000)
        )

        assert result.data is None
        assert isinstance(result.errors[0], ParseError)
        assert "'$id'" in result.errors[0].message

    def test_undeclared_supplied_variables_are_ignored(self, tutorial_service):
        result = tutorial_service.execute(
            "query Find($id: Int) { tutorial(id: $id) { id } }", {"id": 1, "extra": "x"}
        )
        assert result.data == {"tutorial": {"id": 1}}
        assert result.errors == []

    def test_aliases(self, tutorial_service):
        result = tutorial_service.execute(
            "{ first: tutorial(id: 1) { title } second: tutorial(id: 2) { title } }"
        )
        assert result.data == {
            "first": {"title": "Go GraphQL Tutorial"},
            "second": {"title": "Go GraphQL Tutorial - Part 2"},
        }

    def test_variables_and_defaults(self, tutorial_service):
        document = "query Find($id: Int = 2) { tutorial(id: $id) { id } }"

        supplied = tutorial_service.execute(document, {"id": 1})
        defaulted = tutorial_service.execute(document)

        assert supplied.data == {"tutorial": {"id": 1}}
        assert defaulted.data == {"tutorial": {"id": 2}}

    def test_typename(self, tutorial_service):
        result = tutorial_service.execute(
            "{ __typename tutorial(id: 1) { __typename author { __typename } } }"
        )
        assert result.data == {
            "__typename": "RootQuery",
            "tutorial": {"__typename": "Tutorial", "author": {"__typename": "Author"}},
        }

    def test_partial_failure_keeps_sibling_data(self, tutorial_service, tutorial_store):
        with patch.object(tutorial_store, "list_all", side_effect=RuntimeError("store offline")):
            result = tutorial_service.execute("{ tutorial(id: 1) { title } list { id } }")

        assert result.data == {"tutorial": {"title": "Go GraphQL Tutorial"}, "list": None}
        assert len(result.errors) == 1
        assert result.errors[0].path == ["list"]
        assert result.formatted()["errors"] == [{"message": "store offline", "path": ["list"]}]


class TestTutorialMutations:
    """Tests for the create mutation."""

    def test_create_appends_with_next_id(self, tutorial_service, tutorial_store):
        result = tutorial_service.execute(
            'mutation { create(title: "Part 3") { id title author { Name } comments { body } } }'
        )

        assert result.errors == []
        assert result.data == {
            "create": {"id": 3, "title": "Part 3", "author": None, "comments": []}
        }
        records = tutorial_store.list_all()
        assert [record.id for record in records] == [1, 2, 3]
        assert sum(1 for record in records if record.title == "Part 3") == 1

    def test_created_tutorial_is_listed_last(self, tutorial_service):
        tutorial_service.execute('mutation { create(title: "Part 3") { id } }')
        result = tutorial_service.execute("{ list { id title } }")

        assert result.data["list"][-1] == {"id": 3, "title": "Part 3"}
        assert len(result.data["list"]) == 3

    def test_root_fields_run_in_order(self, tutorial_service):
        result = tutorial_service.execute(
            'mutation { a: create(title: "A") { id } b: create(title: "B") { id } }'
        )
        assert result.data == {"a": {"id": 3}, "b": {"id": 4}}

    def test_title_is_required(self, tutorial_service, tutorial_store):
        result = tutorial_service.execute("mutation { create { id } }")

        assert result.data == {"create": None}
        assert isinstance(result.errors[0], ArgumentTypeError)
        assert len(tutorial_store) == 2

    def test_store_error_becomes_field_error(self, tutorial_service, tutorial_store):
        with patch.object(
            tutorial_store, "create", side_effect=DuplicateRecordError("id 3 already exists")
        ):
            result = tutorial_service.execute('mutation { create(title: "X") { id } }')

        assert result.data == {"create": None}
        error = result.errors[0]
        assert isinstance(error, FieldResolutionError)
        assert isinstance(error.original_error, DuplicateRecordError)


class TestPostQueries:
    """Tests against the post service."""

    def test_post_by_slug(self, post_service):
        result = post_service.execute('{ post(slug: "second-post") { id slug title } }')
        assert result.formatted() == {
            "data": {"post": {"id": "2", "slug": "second-post", "title": "Second post"}}
        }

    def test_unknown_slug(self, post_service):
        result = post_service.execute('{ post(slug: "nope") { id } }')
        assert result.data == {"post": None}
        assert result.errors == []

    def test_missing_required_argument(self, post_service):
        result = post_service.execute("{ post { id } }")

        assert result.data == {"post": None}
        assert len(result.errors) == 1
        assert result.errors[0].path == ["post"]
        assert "not provided" in result.errors[0].message

    def test_mutation_without_mutation_root(self, post_service):
        result = post_service.execute('mutation { post(slug: "x") { id } }')
        assert result.data is None
        assert isinstance(result.errors[0], UnknownOperationError)


class TestRequestErrors:
    """Errors that reject the whole document."""

    @pytest.mark.parametrize(
        "document, error_type",
        [
            ("{ list { id }", ParseError),
            ("{ nope }", UnknownFieldError),
            ("{ list { nope } }", UnknownFieldError),
            ("{ list }", InvalidSelectionError),
            ("{ list { id { x } } }", InvalidSelectionError),
            ("{ __typename { x } }", InvalidSelectionError),
            ('subscription { tutorial(id: 1) { id } }', UnknownOperationError),
            ("query A { list { id } } query B { list { id } }", UnknownOperationError),
            ("{ tutorial(id: $id) { id } }", ParseError),
            ("{ list " * 400 + "{ id }" + " }" * 400, ParseError),
        ],
    )
    def test_rejected(self, tutorial_service, document, error_type):
        result = tutorial_service.execute(document)

        assert result.data is None
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], error_type)
        assert "path" not in result.formatted()["errors"][0]

    def test_unknown_field_message(self, tutorial_service):
        result = tutorial_service.execute("{ list { nope } }")
        assert result.errors[0].message == "Cannot query field 'nope' on type 'Tutorial'"

    def test_operation_name_selects_operation(self, tutorial_service):
        result = tutorial_service.execute(
            "query A { list { id } } query B { tutorial(id: 1) { id } }", operation_name="B"
        )
        assert result.data == {"tutorial": {"id": 1}}

    def test_unknown_operation_name(self, tutorial_service):
        result = tutorial_service.execute("query A { list { id } }", operation_name="Z")
        assert result.data is None
        assert isinstance(result.errors[0], UnknownOperationError)

    def test_accepts_parsed_document(self, tutorial_service):
        result = tutorial_service.execute(parse("{ list { id } }"))
        assert result.data == {"list": [{"id": 1}, {"id": 2}]}


class TestFieldErrors:
    """Field-scoped errors recorded with their path."""

    def test_resolver_exception_is_wrapped(self, toy_schema):
        result = execute(toy_schema, "{ ok broken }")

        assert result.data == {"ok": "fine", "broken": None}
        (error,) = result.errors
        assert isinstance(error, FieldResolutionError)
        assert isinstance(error.original_error, RuntimeError)
        assert error.formatted() == {"message": "boom", "path": ["broken"]}

    def test_non_null_violation(self, toy_schema):
        result = execute(toy_schema, "{ required ok }")

        assert result.data == {"required": None, "ok": "fine"}
        assert "non-nullable field 'required'" in result.errors[0].message

    def test_list_item_errors_carry_index(self, toy_schema):
        result = execute(toy_schema, "{ items { name count } }")

        assert result.data == {
            "items": [
                {"name": "a", "count": 1},
                {"name": "b", "count": None},
                {"name": None, "count": 3},
            ]
        }
        assert [error.path for error in result.errors] == [
            ["items", 1, "count"],
            ["items", 2, "name"],
        ]

    def test_non_iterable_for_list(self, toy_schema):
        result = execute(toy_schema, "{ notAList }")
        assert result.data == {"notAList": None}
        assert "Expected an iterable" in result.errors[0].message

    def test_list_argument_coercion(self, toy_schema):
        assert execute(toy_schema, "{ echo }").data == {"echo": [7]}
        assert execute(toy_schema, "{ echo(values: 4) }").data == {"echo": [4]}
        assert execute(toy_schema, '{ echo(values: [1, "2"]) }').data == {"echo": [1, 2]}

    def test_unknown_argument(self, toy_schema):
        result = execute(toy_schema, "{ ok(x: 1) }")
        assert result.data == {"ok": None}
        assert isinstance(result.errors[0], ArgumentTypeError)

    def test_context_passed_to_resolvers(self, toy_schema):
        result = execute(toy_schema, "{ context }", context={"value": "ctx"})
        assert result.data == {"context": "ctx"}

    def test_mutation_field_error(self, toy_schema):
        result = execute(toy_schema, "mutation { raise }")
        assert result.data == {"raise": None}
        assert result.errors[0].path == ["raise"]
