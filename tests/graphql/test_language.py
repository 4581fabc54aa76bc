"""
Tests for request document parsing.
"""

import pytest

from minigraphql.graphql.core import ParseError, UnknownOperationError, parse
from minigraphql.graphql.core.language import MAX_SELECTION_DEPTH, MISSING, value_to_python


class TestParse:
    """Tests for parse()."""

    def test_shorthand_query(self):
        document = parse("{ list { id title } }")

        assert len(document.operations) == 1
        operation = document.get_operation()
        assert operation.kind == "query"
        assert operation.name is None

        (selection,) = operation.selections
        assert selection.name == "list"
        assert selection.has_selection_set
        assert [s.name for s in selection.selections] == ["id", "title"]

    def test_alias_and_arguments(self):
        operation = parse('mutation Make { made: create(title: "x") { id } }').get_operation()

        assert operation.kind == "mutation"
        assert operation.name == "Make"
        (selection,) = operation.selections
        assert selection.name == "create"
        assert selection.response_key == "made"
        assert value_to_python(selection.arguments["title"], {}) == "x"

    def test_leaf_has_no_selection_set(self):
        (selection,) = parse("{ tutorial(id: 1) }").get_operation().selections
        assert not selection.has_selection_set
        assert selection.selections == []

    def test_variables_with_defaults(self):
        operation = parse("query Q($id: Int = 2, $name: String!) { tutorial(id: $id) { id } }")
        variables = operation.get_operation("Q").variables

        assert variables["id"].type == "Int"
        assert value_to_python(variables["id"].default, {}) == 2
        assert variables["name"].type == "String!"
        assert variables["name"].default is None

    def test_fragments_are_inlined_and_merged(self):
        document = parse(
            """
            query {
                list { id ...TutorialParts }
            }
            fragment TutorialParts on Tutorial {
                title
                id
                author { Name }
            }
            """
        )
        (selection,) = document.get_operation().selections
        assert [s.name for s in selection.selections] == ["id", "title", "author"]

    def test_inline_fragment(self):
        document = parse("{ list { ... on Tutorial { title } } }")
        (selection,) = document.get_operation().selections
        assert [s.name for s in selection.selections] == ["title"]

    def test_same_field_merges_subselections(self):
        document = parse("{ list { id } list { title } }")
        (selection,) = document.get_operation().selections
        assert [s.name for s in selection.selections] == ["id", "title"]

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "   ",
            "{ list { id }",
            "fragment F on Tutorial { id }",
            "{ ...Missing }",
            "{ ...A } fragment A on T { ...A }",
            "{ x: list { id } x: tutorial { id } }",
            "{ ...A } fragment A on T { id } fragment A on T { title }",
        ],
    )
    def test_invalid_documents(self, source):
        with pytest.raises(ParseError):
            parse(source)

    def test_syntax_error_message(self):
        with pytest.raises(ParseError) as exc_info:
            parse("{ list { id }")
        assert exc_info.value.message.startswith("Syntax Error")

    @staticmethod
    def _nested(depth: int) -> str:
        return "{ a " * (depth - 1) + "{ b }" + " }" * (depth - 1)

    def test_nesting_up_to_limit(self):
        operation = parse(self._nested(MAX_SELECTION_DEPTH)).get_operation()
        assert operation.selections[0].name == "a"

    def test_nesting_beyond_limit(self):
        with pytest.raises(ParseError, match="nested deeper"):
            parse(self._nested(MAX_SELECTION_DEPTH + 1))

    def test_deep_nesting_does_not_overflow(self):
        with pytest.raises(ParseError):
            parse(self._nested(2000))

    def test_fragments_count_toward_depth(self):
        inner = self._nested(MAX_SELECTION_DEPTH)
        with pytest.raises(ParseError, match="nested deeper"):
            parse(f"{{ outer {{ ...F }} }} fragment F on T {inner}")

    @pytest.mark.parametrize(
        "source",
        [
            "{ tutorial(id: $id) { id } }",
            "query Find($other: Int) { tutorial(id: $id) { id } }",
            "query($a: Int) { f(x: [1, $a, $b]) }",
            "{ f(x: {nested: {value: $v}}) }",
            "{ list { comments(first: $n) { body } } }",
        ],
    )
    def test_undeclared_variables(self, source):
        with pytest.raises(ParseError, match="is not defined by operation"):
            parse(source)

    def test_undeclared_variable_names_operation(self):
        with pytest.raises(ParseError) as exc_info:
            parse("query Find { tutorial(id: $id) { id } }")
        assert exc_info.value.message == "Variable '$id' is not defined by operation 'Find'"


class TestGetOperation:
    """Tests for selecting the operation to run."""

    def setup_method(self):
        self.document = parse("query A { list { id } } query B { list { title } }")

    def test_by_name(self):
        assert self.document.get_operation("B").name == "B"

    def test_name_required_for_multiple_operations(self):
        with pytest.raises(UnknownOperationError):
            self.document.get_operation()

    def test_unknown_name(self):
        with pytest.raises(UnknownOperationError, match="C"):
            self.document.get_operation("C")


class TestValueToPython:
    """Tests for literal conversion."""

    def _argument(self, literal: str):
        (selection,) = parse(f"{{ f(a: {literal}) }}").get_operation().selections
        return selection.arguments["a"]

    @pytest.mark.parametrize(
        "literal, expected",
        [
            ("1", 1),
            ("1.5", 1.5),
            ('"text"', "text"),
            ("true", True),
            ("null", None),
            ("[1, 2]", [1, 2]),
            ("{x: 1}", {"x": 1}),
            ("RED", "RED"),
        ],
    )
    def test_literals(self, literal, expected):
        assert value_to_python(self._argument(literal), {}) == expected

    def test_variables(self):
        (selection,) = parse("query($v: Int) { f(a: $v) }").get_operation().selections
        node = selection.arguments["a"]
        assert value_to_python(node, {"v": 3}) == 3
        assert value_to_python(node, {}) is MISSING
