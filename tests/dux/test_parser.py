"""Tests for the Dux Pratt parser."""

import pytest

from dux.dux_ast import (
    DuxArrayLiteral, DuxBooleanLiteral, DuxCallExpression, DuxExpressionStatement, DuxFunctionLiteral,
    DuxHashLiteral, DuxIdentifier, DuxIfExpression, DuxIndexExpression, DuxInfixExpression,
    DuxIntegerLiteral, DuxLetStatement, DuxPrefixExpression, DuxReturnStatement, DuxStringLiteral
)
from dux.dux_lexer import DuxLexer
from dux.dux_parser import MAX_NESTING_DEPTH, DuxParser, DuxPrecedence, parse


def single_expression(helpers, source):
    """Parse source holding one expression statement and return the expression."""
    program = helpers.parse_cleanly(source)
    assert len(program.statements) == 1
    statement = program.statements[0]
    assert isinstance(statement, DuxExpressionStatement)
    return statement.expression


PRECEDENCE_CORPUS = [
    ("-a * b", "((-a) * b)"),
    ("!-a", "(!(-a))"),
    ("a + b + c", "((a + b) + c)"),
    ("a + b - c", "((a + b) - c)"),
    ("a * b * c", "((a * b) * c)"),
    ("a * b / c", "((a * b) / c)"),
    ("a + b / c", "(a + (b / c))"),
    ("a + b * c", "(a + (b * c))"),
    ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
    ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
    ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
    ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
    ("true", "true"),
    ("false", "false"),
    ("3 > 5 == false", "((3 > 5) == false)"),
    ("3 < 5 == true", "((3 < 5) == true)"),
    ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
    ("(5 + 5) * 2", "((5 + 5) * 2)"),
    ("2 / (5 + 5)", "(2 / (5 + 5))"),
    ("-(5 + 5)", "(-(5 + 5))"),
    ("!(true == true)", "(!(true == true))"),
    ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
    ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))", "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
    ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
    ("a * [1, 2, 3, 4][b * c] * d", "((a * ([1, 2, 3, 4][(b * c)])) * d)"),
    ("add(a * b[2], b[1], 2 * [1, 2][1])", "add((a * (b[2])), (b[1]), (2 * ([1, 2][1])))"),
    ("-a[0]", "(-(a[0]))"),
    ("a(b)[c]", "(a(b)[c])"),
    ("a[0](1)", "(a[0])(1)"),
    ('"a" + "b" * 3', '("a" + ("b" * 3))'),
]


class TestPrecedence:
    """Test operator precedence and associativity."""

    @pytest.mark.parametrize("source,expected", PRECEDENCE_CORPUS)
    def test_precedence_rendering(self, helpers, source, expected):
        """Test that each expression parses to the expected canonical rendering."""
        assert str(helpers.parse_cleanly(source)) == expected

    @pytest.mark.parametrize("source,expected", PRECEDENCE_CORPUS)
    def test_rendering_round_trips(self, helpers, source, expected):
        """Test that re-parsing a canonical rendering gives the same rendering again."""
        rendered = str(helpers.parse_cleanly(source))
        assert str(helpers.parse_cleanly(rendered)) == rendered

    def test_multiple_statements_render_separated(self, helpers):
        """Test that a program renders its statements apart, so they re-parse as two."""
        assert str(helpers.parse_cleanly("3 + 4; -5 * 5")) == "(3 + 4); ((-5) * 5)"

    def test_precedence_levels_are_ordered(self):
        """Test the ordering of the precedence levels."""
        assert DuxPrecedence.LOWEST < DuxPrecedence.EQUALS < DuxPrecedence.LESSGREATER \
            < DuxPrecedence.SUM < DuxPrecedence.PRODUCT < DuxPrecedence.PREFIX < DuxPrecedence.CALL


class TestStatements:
    """Test statement parsing."""

    @pytest.mark.parametrize("source,name,value", [
        ("let x = 5;", "x", "5"),
        ("let y = true;", "y", "true"),
        ("let foobar = y;", "foobar", "y"),
        ("let sum = a + b", "sum", "(a + b)"),
    ])
    def test_let_statements(self, helpers, source, name, value):
        """Test let statements bind a name to an expression."""
        program = helpers.parse_cleanly(source)
        assert len(program.statements) == 1

        statement = program.statements[0]
        assert isinstance(statement, DuxLetStatement)
        assert statement.token_literal() == "let"
        assert statement.name.value == name
        assert str(statement.value) == value
        assert str(statement) == f"let {name} = {value};"

    @pytest.mark.parametrize("source,value", [
        ("return 5;", "5"),
        ("return true;", "true"),
        ("return foobar;", "foobar"),
        ("return x * 2", "(x * 2)"),
    ])
    def test_return_statements(self, helpers, source, value):
        """Test return statements carry their expression."""
        program = helpers.parse_cleanly(source)
        assert len(program.statements) == 1

        statement = program.statements[0]
        assert isinstance(statement, DuxReturnStatement)
        assert statement.token_literal() == "return"
        assert str(statement.return_value) == value
        assert str(statement) == f"return {value};"

    def test_semicolons_are_optional(self, helpers):
        """Test that statements need no separating semicolons."""
        program = helpers.parse_cleanly("let a = 1 let b = 2 a b")
        assert len(program.statements) == 4

    def test_repeated_semicolons(self, helpers):
        """Test that runs of semicolons after let and return are consumed."""
        program = helpers.parse_cleanly("let a = 1;;; return a;;")
        assert len(program.statements) == 2

    def test_empty_program(self, helpers):
        """Test that empty input parses to an empty program."""
        program = helpers.parse_cleanly("")
        assert program.statements == ()
        assert str(program) == ""


class TestExpressions:
    """Test expression parsing."""

    def test_identifier(self, helpers):
        """Test a bare identifier."""
        expression = single_expression(helpers, "foobar;")
        assert isinstance(expression, DuxIdentifier)
        assert expression.value == "foobar"
        assert expression.token_literal() == "foobar"

    def test_integer_literal(self, helpers):
        """Test an integer literal."""
        expression = single_expression(helpers, "5;")
        assert isinstance(expression, DuxIntegerLiteral)
        assert expression.value == 5

    def test_largest_integer_literal(self, helpers):
        """Test the largest integer that fits in 64 bits."""
        expression = single_expression(helpers, "9223372036854775807")
        assert isinstance(expression, DuxIntegerLiteral)
        assert expression.value == 2**63 - 1

    @pytest.mark.parametrize("source,expected", [("true", True), ("false", False)])
    def test_boolean_literal(self, helpers, source, expected):
        """Test boolean literals."""
        expression = single_expression(helpers, source)
        assert isinstance(expression, DuxBooleanLiteral)
        assert expression.value is expected

    def test_string_literal(self, helpers):
        """Test a string literal."""
        expression = single_expression(helpers, '"hello world";')
        assert isinstance(expression, DuxStringLiteral)
        assert expression.value == "hello world"
        assert str(expression) == '"hello world"'

    @pytest.mark.parametrize("source,operator,operand", [
        ("!5;", "!", "5"),
        ("-15;", "-", "15"),
        ("!true;", "!", "true"),
        ("!foobar;", "!", "foobar"),
    ])
    def test_prefix_expressions(self, helpers, source, operator, operand):
        """Test prefix operators."""
        expression = single_expression(helpers, source)
        assert isinstance(expression, DuxPrefixExpression)
        assert expression.operator == operator
        assert str(expression.right) == operand

    @pytest.mark.parametrize("operator", ["+", "-", "*", "/", ">", "<", "==", "!="])
    def test_infix_expressions(self, helpers, operator):
        """Test every binary operator."""
        expression = single_expression(helpers, f"5 {operator} 6;")
        assert isinstance(expression, DuxInfixExpression)
        assert expression.operator == operator
        assert isinstance(expression.left, DuxIntegerLiteral)
        assert expression.left.value == 5
        assert isinstance(expression.right, DuxIntegerLiteral)
        assert expression.right.value == 6

    def test_if_expression(self, helpers):
        """Test an if without an else."""
        expression = single_expression(helpers, "if (x < y) { x }")
        assert isinstance(expression, DuxIfExpression)
        assert str(expression.condition) == "(x < y)"
        assert len(expression.consequence.statements) == 1
        assert str(expression.consequence) == "x"
        assert expression.alternative is None
        assert str(expression) == "if ((x < y)) { x }"

    def test_if_else_expression(self, helpers):
        """Test an if with an else."""
        expression = single_expression(helpers, "if (x < y) { x } else { y }")
        assert isinstance(expression, DuxIfExpression)
        assert expression.alternative is not None
        assert str(expression.alternative) == "y"
        assert str(expression) == "if ((x < y)) { x } else { y }"

    def test_function_literal(self, helpers):
        """Test a function literal with parameters and a body."""
        expression = single_expression(helpers, "fn(x, y) { x + y; }")
        assert isinstance(expression, DuxFunctionLiteral)
        assert [parameter.value for parameter in expression.parameters] == ["x", "y"]
        assert len(expression.body.statements) == 1
        assert str(expression) == "fn(x, y) { (x + y) }"

    @pytest.mark.parametrize("source,expected", [
        ("fn() {};", []),
        ("fn(x) {};", ["x"]),
        ("fn(x, y, z) {};", ["x", "y", "z"]),
    ])
    def test_function_parameters(self, helpers, source, expected):
        """Test parameter lists of different lengths."""
        expression = single_expression(helpers, source)
        assert isinstance(expression, DuxFunctionLiteral)
        assert [parameter.value for parameter in expression.parameters] == expected

    def test_call_expression(self, helpers):
        """Test a call with several arguments."""
        expression = single_expression(helpers, "add(1, 2 * 3, 4 + 5);")
        assert isinstance(expression, DuxCallExpression)
        assert str(expression.function) == "add"
        assert [str(argument) for argument in expression.arguments] == ["1", "(2 * 3)", "(4 + 5)"]

    def test_call_without_arguments(self, helpers):
        """Test a call with no arguments."""
        expression = single_expression(helpers, "now()")
        assert isinstance(expression, DuxCallExpression)
        assert expression.arguments == ()
        assert str(expression) == "now()"

    def test_immediately_called_function(self, helpers):
        """Test calling a function literal directly."""
        expression = single_expression(helpers, "fn(x) { x }(5)")
        assert isinstance(expression, DuxCallExpression)
        assert isinstance(expression.function, DuxFunctionLiteral)

    def test_array_literal(self, helpers):
        """Test an array literal."""
        expression = single_expression(helpers, "[1, 2 * 2, 3 + 3]")
        assert isinstance(expression, DuxArrayLiteral)
        assert len(expression.elements) == 3
        assert str(expression) == "[1, (2 * 2), (3 + 3)]"

    def test_empty_array_literal(self, helpers):
        """Test the empty array literal."""
        expression = single_expression(helpers, "[]")
        assert isinstance(expression, DuxArrayLiteral)
        assert expression.elements == ()

    def test_index_expression(self, helpers):
        """Test indexing."""
        expression = single_expression(helpers, "myArray[1 + 1]")
        assert isinstance(expression, DuxIndexExpression)
        assert str(expression.left) == "myArray"
        assert str(expression.index) == "(1 + 1)"

    def test_hash_literal_with_string_keys(self, helpers):
        """Test a hash literal keeps its pairs in source order."""
        expression = single_expression(helpers, '{"one": 1, "two": 2, "three": 3}')
        assert isinstance(expression, DuxHashLiteral)
        assert [(str(key), str(value)) for key, value in expression.pairs] == [
            ('"one"', "1"), ('"two"', "2"), ('"three"', "3")
        ]
        assert str(expression) == '{"one": 1, "two": 2, "three": 3}'

    def test_hash_literal_with_mixed_keys(self, helpers):
        """Test that hash keys can be any expression."""
        expression = single_expression(helpers, '{1: true, true: "x", "a" + "b": 0 + 1}')
        assert isinstance(expression, DuxHashLiteral)
        assert str(expression) == '{1: true, true: "x", ("a" + "b"): (0 + 1)}'

    def test_empty_hash_literal(self, helpers):
        """Test the empty hash literal."""
        expression = single_expression(helpers, "{}")
        assert isinstance(expression, DuxHashLiteral)
        assert expression.pairs == ()


class TestParserErrors:
    """Test that malformed input records errors instead of raising."""

    @pytest.mark.parametrize("source,expected", [
        ("let x 5;", ["expected next token to be =, got INT instead"]),
        ("let 838383;", ["expected next token to be IDENT, got INT instead"]),
        ("let = 10;", [
            "expected next token to be IDENT, got = instead",
            "no prefix parse function for = found",
        ]),
        ("9223372036854775808", ['could not parse "9223372036854775808" as integer']),
        ("@", ["no prefix parse function for ILLEGAL found"]),
        ("return;", ["no prefix parse function for ; found"]),
        ("(1 + 2", ["expected next token to be ), got EOF instead"]),
        ("[1, 2", ["expected next token to be ], got EOF instead"]),
        ("a[1", ["expected next token to be ], got EOF instead"]),
        ("if (x) { x", ["expected next token to be }, got EOF instead"]),
        ("fn(x) { x", ["expected next token to be }, got EOF instead"]),
    ])
    def test_error_messages(self, helpers, source, expected):
        """Test the exact error messages for common mistakes."""
        assert helpers.parse_errors(source) == expected

    @pytest.mark.parametrize("source,first_error", [
        ('{"a" 1}', "expected next token to be :, got INT instead"),
        ("if x { x }", "expected next token to be (, got IDENT instead"),
        ("if (x) x", "expected next token to be {, got IDENT instead"),
        ("fn(x, 1) { x }", "expected next token to be IDENT, got INT instead"),
        ("fn x { x }", "expected next token to be (, got IDENT instead"),
    ])
    def test_first_error(self, helpers, source, first_error):
        """Test the first error reported for a malformed construct."""
        errors = helpers.parse_errors(source)
        assert errors
        assert errors[0] == first_error

    def test_failed_statement_is_dropped(self):
        """Test that parsing resumes after a statement that failed."""
        program, errors = parse("let x 5; let y = 10;")
        assert errors == ["expected next token to be =, got INT instead"]
        assert str(program) == "5; let y = 10;"

    def test_errors_accumulate(self):
        """Test that one pass reports every problem it finds."""
        _, errors = parse("let x 5; let = 10; let 838383;")
        assert errors == [
            "expected next token to be =, got INT instead",
            "expected next token to be IDENT, got = instead",
            "no prefix parse function for = found",
            "expected next token to be IDENT, got INT instead",
        ]

    @pytest.mark.parametrize("source", [
        "(" * 3000 + "1" + ")" * 3000,
        "-" * 3000 + "1",
        "[" * 3000 + "]" * 3000,
        "f(" * 3000 + ")" * 3000,
        "if (x) { " * 500 + "1" + " }" * 500,
        "let x = " + "!" * 3000 + "true; x",
    ])
    def test_deep_nesting_is_one_error(self, helpers, source):
        """Test that input nested too deeply stops the parse with a single error."""
        assert helpers.parse_errors(source) == ["expression nested too deeply"]

    def test_nesting_below_limit_parses(self, helpers):
        """Test that nesting just inside the limit is accepted."""
        depth = MAX_NESTING_DEPTH - 1
        assert str(helpers.parse_cleanly("(" * depth + "1" + ")" * depth)) == "1"
        assert helpers.parse_errors("(" * MAX_NESTING_DEPTH + "1" + ")" * MAX_NESTING_DEPTH) == [
            "expression nested too deeply"
        ]

    def test_parser_can_be_reused_after_deep_nesting(self, helpers):
        """Test that a later parse is unaffected by an earlier abandoned one."""
        assert helpers.parse_errors("-" * 3000 + "1") == ["expression nested too deeply"]
        assert str(helpers.parse_cleanly("1 + 1")) == "(1 + 1)"

    def test_parser_object_interface(self):
        """Test the parser class exposes the program and its errors."""
        parser = DuxParser(DuxLexer("let = 1"))
        program = parser.parse_program()
        assert parser.errors[0] == "expected next token to be IDENT, got = instead"
        assert str(program) == "1"
