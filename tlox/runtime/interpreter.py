from contextlib import contextmanager
from operator import add, ge, gt, le, lt, mul, sub, truediv
from typing import Any, Callable, Dict, Iterator, List, Sequence, Union

from tlox.language.lox_callable import LoxCallable, LoxFunction, LoxReturn
from tlox.language.lox_types import LoxObject, LoxPrimitive, lox_equality, lox_object_to_repr, lox_object_to_str, lox_truth
from tlox.language.natives import NATIVE_FUNCTIONS
from tlox.lexing.token import Tk, Token
from tlox.parsing.expr import *
from tlox.parsing.stmt import *
from tlox.runtime.environment import Environment
from tlox.utilities import are_of_expected_type, raised_recursion_limit, trace
from tlox.utilities.configuration import MAX_CALL_DEPTH, PYTHON_RECURSION_LIMIT, Debug
from tlox.utilities.error import (NOT_REACHED, CallFrame, LoxError, LoxErrorHandler, LoxRuntimeError,
                                  LoxStackOverflowError)
from tlox.utilities.visitor import Visitor

BINARY_OPERATIONS: Dict[Tk, Callable[[Any, Any], Union[bool, float, str]]] = {
    # Mathematical operations:
    Tk.PLUS: add,
    Tk.MINUS: sub,
    Tk.STAR: mul,
    Tk.SLASH: truediv,
    # Equality:
    Tk.EQUAL_EQUAL: lox_equality,
    Tk.BANG_EQUAL: lambda l, r: not lox_equality(l, r),
    # Comparison:
    Tk.GREATER: gt,
    Tk.GREATER_EQUAL: ge,
    Tk.LESS: lt,
    Tk.LESS_EQUAL: le,
}


class Interpreter(Visitor[Union[Expr, Stmt], Union[None, LoxObject]]):
    # pylint: disable=invalid-name
    globals: Environment

    def __init__(self, error_handler: LoxErrorHandler, *, debug_flags: Debug = Debug(0)) -> None:
        self._error_handler = error_handler
        self.debug_flags = debug_flags
        self.reinitialize_environment()

    def interpret(self, stmts: List[Stmt], *, echo: bool = False) -> None:
        """Execute a program, reporting the first error encountered, if any.

        :param stmts: the top-level statements
        :type stmts: List[Stmt]
        :param echo: whether to print the value of expression statements, as a prompt does
        :type echo: bool, optional
        """
        try:
            with raised_recursion_limit(PYTHON_RECURSION_LIMIT):
                for stmt in stmts:
                    if echo and isinstance(stmt, ExpressionStmt):
                        print(lox_object_to_repr(self._evaluate(stmt.expression)))
                    else:
                        self._execute(stmt)
        except LoxError as error:
            self._error_handler.err(error)
        except RecursionError:
            # The call depth limit should have fired first. If it did not, Python ran out of
            # room in some deeply nested expression, which is just as fatal.
            self._error_handler.err(LoxStackOverflowError(None))
        finally:
            self._environment = self.globals
            self._frames.clear()

    def reinitialize_environment(self) -> None:
        """Discard every global definition, leaving only the native functions."""
        self.globals = Environment()
        for native in NATIVE_FUNCTIONS:
            self.globals.define(native.name, native)
        self._environment = self.globals
        self._frames: List[CallFrame] = list()

    def execute_block(self, stmts: Sequence[Stmt], environment: Environment) -> None:
        """Execute `stmts` in `environment`, restoring the current environment afterwards."""
        with self._environment_of(environment):
            for stmt in stmts:
                self._execute(stmt)

    # ~~~ Helper functions ~~~

    def _execute(self, stmt: Stmt) -> None:
        if self.debug_flags & Debug.TRACE_EXECUTION:
            trace(str(stmt).splitlines()[0])
        self.visit(stmt)

    def _evaluate(self, expr: Expr) -> LoxObject:
        return self.visit(expr)

    @contextmanager
    def _environment_of(self, environment: Environment) -> Iterator[None]:
        outer = self._environment
        self._environment = environment
        try:
            yield
        finally:
            self._environment = outer

    def _expect_number_operand(self, operator: Token, *operand: LoxObject) -> None:
        """Enforce that the `operand`s passed are numbers. Otherwise,
        emit an error at the given `operator` token."""
        if not are_of_expected_type({float}, *operand):
            raise LoxRuntimeError.at_token(
                operator,
                "Operand must be a number." if len(operand) == 1 else "Operands must be numbers."
            )

    def _expect_number_or_string_operand(self, operator: Token, *operand: LoxObject) -> None:
        """Enforce that the `operand`s passed are all numbers or all strings.
        Otherwise, emit an error at the given `operator` token."""
        if not are_of_expected_type({float, str}, *operand):
            raise LoxRuntimeError.at_token(operator, "Operands must be two numbers or two strings.")

    # ~~~ Callable interpreter ~~~

    def _call(self, callee: LoxCallable, paren: Token, arguments: Sequence[LoxObject]) -> LoxObject:
        if len(self._frames) >= MAX_CALL_DEPTH:
            raise LoxStackOverflowError.at_token(paren, "Stack overflow.")
        if self.debug_flags & Debug.TRACE_EXECUTION:
            trace(f"call {callee.name}({', '.join(map(lox_object_to_repr, arguments))})")
        self._frames.append(CallFrame(callee.name, paren.line))
        try:
            return callee.call(self, arguments)
        except LoxError as error:
            if error.backtrace is None:  # Record the frames where the error was raised, innermost first.
                error.backtrace = tuple(reversed(self._frames))
            raise
        finally:
            self._frames.pop()

    # ~~~ Statement interpreters ~~~

    def _visit_BlockStmt__(self, stmt: BlockStmt) -> None:
        self.execute_block(stmt.body, Environment(self._environment))

    def _visit_EmptyStmt__(self, stmt: EmptyStmt) -> None:
        pass

    def _visit_ExpressionStmt__(self, stmt: ExpressionStmt) -> None:
        self._evaluate(stmt.expression)

    def _visit_FunctionStmt__(self, stmt: FunctionStmt) -> None:
        # The closure is the live environment, not a copy: later changes to it stay visible.
        self._environment.define(stmt.name.lexeme, LoxFunction(stmt, self._environment))

    def _visit_IfStmt__(self, stmt: IfStmt) -> None:
        if lox_truth(self._evaluate(stmt.condition)):
            self._execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self._execute(stmt.else_branch)

    def _visit_PrintStmt__(self, stmt: PrintStmt) -> None:
        print(lox_object_to_str(self._evaluate(stmt.expression)))

    def _visit_ReturnStmt__(self, stmt: ReturnStmt) -> None:
        if stmt.expression is not None:
            raise LoxReturn(self._evaluate(stmt.expression))
        raise LoxReturn(None)

    def _visit_VarStmt__(self, stmt: VarStmt) -> None:
        value: LoxObject = None
        if stmt.initializer is not None:
            value = self._evaluate(stmt.initializer)
        self._environment.define(stmt.name.lexeme, value)

    def _visit_WhileStmt__(self, stmt: WhileStmt) -> None:
        while lox_truth(self._evaluate(stmt.condition)):
            self._execute(stmt.body)

    # ~~~ Expression interpreters ~~~

    def _visit_AssignmentExpr__(self, expr: AssignmentExpr) -> LoxObject:
        value = self._evaluate(expr.value)
        self._environment.assign(expr.name, value)
        return value

    def _visit_BinaryExpr__(self, expr: BinaryExpr) -> Union[bool, float, str]:
        """Evaluate the two operands, ensure that their types match, and finally
        apply the correct binary operation.

        The binary operations include comparisons, the four arithmetic operations,
        and string concatenation."""
        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)

        if (op := expr.operator.token_type) in BINARY_OPERATIONS:  # pylint: disable=superfluous-parens
            # Note that we do not do implicit casts. That Pandora's box is not to be opened...
            if op is Tk.PLUS:  # Used for both arithmetic addition and string concatenation.
                self._expect_number_or_string_operand(expr.operator, left, right)
            elif op in {Tk.BANG_EQUAL, Tk.EQUAL_EQUAL}:  # Equality comparisons are valid on all objects.
                pass
            else:  # Arithmetic operations and comparisons.
                self._expect_number_operand(expr.operator, left, right)
                if op is Tk.SLASH and right == 0:
                    raise LoxRuntimeError.at_token(expr.operator, "Division by zero.")
            return BINARY_OPERATIONS[op](left, right)

        raise NOT_REACHED

    def _visit_CallExpr__(self, expr: CallExpr) -> LoxObject:
        callee = self._evaluate(expr.callee)
        arguments = [self._evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError.at_token(expr.paren, "Can only call functions.")
        if (found := len(arguments)) != (expected := callee.arity()):
            raise LoxRuntimeError.at_token(expr.paren, f"Expected {expected} arguments but got {found}.")
        return self._call(callee, expr.paren, arguments)

    def _visit_GroupingExpr__(self, expr: GroupingExpr) -> LoxObject:
        """Evaluate a group by evaluating the expression contained within."""
        return self._evaluate(expr.expression)

    def _visit_LiteralExpr__(self, expr: LiteralExpr) -> LoxPrimitive:
        """A literal is evaluated by extracting its value."""
        return expr.value

    def _visit_LogicalExpr__(self, expr: LogicalExpr) -> LoxObject:
        """Evaluate the right operand only if the left one does not decide the result.
        The result is one of the operands, not a boolean."""
        left = self._evaluate(expr.left)
        if expr.operator.token_type is Tk.OR:
            if lox_truth(left):
                return left
        else:
            if not lox_truth(left):
                return left
        return self._evaluate(expr.right)

    def _visit_UnaryExpr__(self, expr: UnaryExpr) -> Union[bool, float]:
        """Evaluate the operand and then apply the correct unary operation.

        There are two unary operations: logical negation and arithmetic negation."""
        right = self._evaluate(expr.right)

        if (op := expr.operator.token_type) is Tk.BANG:
            return not lox_truth(right)
        if op is Tk.MINUS:
            self._expect_number_operand(expr.operator, right)
            return -right  # type: ignore  # Previous line ensures that right is of type float.

        raise NOT_REACHED

    def _visit_VariableExpr__(self, expr: VariableExpr) -> LoxObject:
        return self._environment.get(expr.name)
