from tlox.lexing.token import Tk
from tlox.parsing.expr import *
from tlox.parsing.stmt import *
from tlox.utilities.error import LoxSyntaxError


def expression_of(parse_source, source):
    statements, errors = parse_source(source)
    assert errors == []
    assert len(statements) == 1
    assert isinstance(statements[0], ExpressionStmt)
    return statements[0].expression


def test_factor_binds_tighter_than_term(parse_source):
    assert str(expression_of(parse_source, "1 + 2 * 3;")) == "(+ 1 (* 2 3))"


def test_binary_operators_are_left_associative(parse_source):
    assert str(expression_of(parse_source, "1 - 2 - 3;")) == "(- (- 1 2) 3)"
    assert str(expression_of(parse_source, "8 / 4 / 2;")) == "(/ (/ 8 4) 2)"


def test_grouping(parse_source):
    expr = expression_of(parse_source, "(1 + 2) * 3;")
    assert isinstance(expr, BinaryExpr)
    assert isinstance(expr.left, GroupingExpr)
    assert str(expr) == "(* (grouping (+ 1 2)) 3)"


def test_comparison_and_equality_precedence(parse_source):
    assert str(expression_of(parse_source, "1 < 2 == 3 >= 4;")) == "(== (< 1 2) (>= 3 4))"


def test_unary_operators_nest(parse_source):
    assert str(expression_of(parse_source, "!-x;")) == "(! (- (variable x)))"
    assert str(expression_of(parse_source, "-2 * 3;")) == "(* (- 2) 3)"


def test_literals(parse_source):
    statements, _ = parse_source('true; false; nil; "s"; 1.5;')
    assert [stmt.expression.value for stmt in statements] == [True, False, None, "s", 1.5]


def test_assignment_is_right_associative(parse_source):
    expr = expression_of(parse_source, "a = b = c;")
    assert isinstance(expr, AssignmentExpr)
    assert expr.name.lexeme == "a"
    assert isinstance(expr.value, AssignmentExpr)
    assert expr.value.name.lexeme == "b"
    assert isinstance(expr.value.value, VariableExpr)


def test_assignment_binds_loosest(parse_source):
    expr = expression_of(parse_source, "a = 1 + 2 or b;")
    assert isinstance(expr, AssignmentExpr)
    assert isinstance(expr.value, LogicalExpr)
    assert expr.value.operator.token_type is Tk.OR


def test_and_binds_tighter_than_or(parse_source):
    expr = expression_of(parse_source, "a or b and c;")
    assert isinstance(expr, LogicalExpr)
    assert expr.operator.token_type is Tk.OR
    assert isinstance(expr.right, LogicalExpr)
    assert expr.right.operator.token_type is Tk.AND


def test_calls_chain_and_bind_tighter_than_unary(parse_source):
    expr = expression_of(parse_source, "-f(1)(2, 3);")
    assert isinstance(expr, UnaryExpr)
    outer = expr.right
    assert isinstance(outer, CallExpr)
    assert len(outer.arguments) == 2
    assert outer.paren.token_type is Tk.RIGHT_PAREN
    inner = outer.callee
    assert isinstance(inner, CallExpr)
    assert isinstance(inner.callee, VariableExpr)
    assert len(inner.arguments) == 1


def test_call_without_arguments(parse_source):
    expr = expression_of(parse_source, "f();")
    assert isinstance(expr, CallExpr)
    assert expr.arguments == []


def test_invalid_assignment_target(parse_source):
    _, errors = parse_source("a + b = c;")
    assert len(errors) == 1
    assert isinstance(errors[0], LoxSyntaxError)
    assert str(errors[0]) == "[line 1] LoxSyntaxError at '=': Invalid assignment target."


def test_trailing_comma_in_arguments(parse_source):
    _, errors = parse_source("f(1,);")
    assert [error.message for error in errors] == ["Expect expression."]


def test_for_loop_desugars_to_while(parse_source):
    statements, errors = parse_source("for (var i = 0; i < 3; i = i + 1) print i;")
    assert errors == []
    assert len(statements) == 1
    outer = statements[0]
    assert isinstance(outer, BlockStmt)
    initializer, loop = outer.body
    assert isinstance(initializer, VarStmt)
    assert isinstance(loop, WhileStmt)
    assert str(loop.condition) == "(< (variable i) 3)"
    assert isinstance(loop.body, BlockStmt)
    body, increment = loop.body.body
    assert isinstance(body, PrintStmt)
    assert isinstance(increment, ExpressionStmt)
    assert isinstance(increment.expression, AssignmentExpr)


def test_for_loop_without_clauses(parse_source):
    statements, errors = parse_source("for (;;) print 1;")
    assert errors == []
    loop = statements[0]
    assert isinstance(loop, WhileStmt)
    assert isinstance(loop.condition, LiteralExpr)
    assert loop.condition.value is True
    assert isinstance(loop.body, PrintStmt)


def test_dangling_else_binds_to_nearest_if(parse_source):
    statements, _ = parse_source("if (a) if (b) x; else y;")
    outer = statements[0]
    assert isinstance(outer, IfStmt)
    assert outer.else_branch is None
    inner = outer.then_branch
    assert isinstance(inner, IfStmt)
    assert inner.else_branch is not None


def test_function_declaration(parse_source):
    statements, errors = parse_source("fun add(a, b) { return a + b; }")
    assert errors == []
    function = statements[0]
    assert isinstance(function, FunctionStmt)
    assert function.name.lexeme == "add"
    assert [param.lexeme for param in function.params] == ["a", "b"]
    assert isinstance(function.body[0], ReturnStmt)


def test_return_outside_function(parse_source):
    _, errors = parse_source("return 1;")
    assert [str(error) for error in errors] == [
        "[line 1] LoxSyntaxError at 'return': Can't return from top-level code."
    ]
    _, errors = parse_source("fun f() { { return; } }")
    assert errors == []


def test_return_after_function_body_is_top_level_again(parse_source):
    _, errors = parse_source("fun f() { return 1; }\nreturn 2;")
    assert [error.line for error in errors] == [2]


def test_empty_statement(parse_source):
    statements, errors = parse_source(";")
    assert errors == []
    assert isinstance(statements[0], EmptyStmt)


def test_error_at_end(parse_source):
    _, errors = parse_source("print 1")
    assert [str(error) for error in errors] == ["[line 1] LoxSyntaxError at end: Expect ';' after value."]


def test_unclosed_block(parse_source):
    _, errors = parse_source("{ print 1;")
    assert [error.message for error in errors] == ["Expect '}' after block."]


def test_recovery_reports_every_statement_error(parse_source):
    statements, errors = parse_source("var = 1;\nprint 1 + ;\nvar ok = 2;")
    assert [(error.line, error.message) for error in errors] == [
        (1, "Expect variable name."),
        (2, "Expect expression."),
    ]
    assert len(statements) == 1
    assert isinstance(statements[0], VarStmt)


def test_recovery_resumes_at_statement_keyword(parse_source):
    statements, errors = parse_source("1 + + var a = 1;")
    assert len(errors) == 1
    assert isinstance(statements[0], VarStmt)


def test_var_without_initializer(parse_source):
    statements, _ = parse_source("var a;")
    assert statements[0].initializer is None
