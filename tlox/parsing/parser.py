from __future__ import annotations

from contextlib import contextmanager
from enum import IntEnum, auto
from typing import Callable, Iterator, List, Optional, Tuple, TypeVar

from tlox.lexing.token import Tk, Token
from tlox.parsing.expr import *
from tlox.parsing.stmt import *
from tlox.utilities import dump_internal
from tlox.utilities.error import LoxError, LoxErrorHandler, LoxStackOverflowError, LoxSyntaxError
from tlox.utilities.stream_view import StreamView

RIGHT_ASSOCIATIVE_OPERATORS = {
    Tk.EQUAL,
}

# Keywords that begin a statement, where the parser may resume after an error.
STATEMENT_KEYWORDS = (Tk.CLASS, Tk.FUN, Tk.VAR, Tk.FOR, Tk.IF, Tk.WHILE, Tk.PRINT, Tk.RETURN)


class Prec(IntEnum):
    NONE = auto()
    ASSIGNMENT = auto()
    OR = auto()
    AND = auto()
    EQUALITY = auto()
    COMPARISON = auto()
    TERM = auto()
    FACTOR = auto()
    UNARY = auto()
    CALL = auto()
    PRIMARY = auto()

    def adjust_for_operator_associativity(self, op: Tk) -> Prec:
        if op in RIGHT_ASSOCIATIVE_OPERATORS:
            return self.__class__(self.value - 1)
        return self


OPERATOR_PRECEDENCE = {
    Tk.LEFT_PAREN: Prec.CALL,
    Tk.STAR: Prec.FACTOR,
    Tk.SLASH: Prec.FACTOR,
    Tk.PLUS: Prec.TERM,
    Tk.MINUS: Prec.TERM,
    Tk.GREATER: Prec.COMPARISON,
    Tk.GREATER_EQUAL: Prec.COMPARISON,
    Tk.LESS: Prec.COMPARISON,
    Tk.LESS_EQUAL: Prec.COMPARISON,
    Tk.EQUAL_EQUAL: Prec.EQUALITY,
    Tk.BANG_EQUAL: Prec.EQUALITY,
    Tk.AND: Prec.AND,
    Tk.OR: Prec.OR,
    Tk.EQUAL: Prec.ASSIGNMENT,
}

LITERAL_VALUES = {
    Tk.FALSE: False,
    Tk.TRUE: True,
    Tk.NIL: None,
}


class Parser:
    """A recursive descent parser for statements, with a Pratt parser for expressions.

    The expression logic is derived from `clox`'s implementation, though the implementation
    is motivated by Aleksey Kladov's article on the subject:
    https://matklad.github.io/2020/04/13/simple-but-powerful-pratt-parsing.html.
    """

    def __init__(
            self,
            tokens: List[Token],
            error_handler: LoxErrorHandler,
            *,
            dump: bool = False
    ) -> None:
        self._tv = StreamView(tokens)
        self._error_handler = error_handler
        self._dump = dump
        self._statements: List[Stmt] = list()
        self._function_depth = 0

    def parse(self) -> List[Stmt]:
        try:
            while self._has_next():
                if declaration := self._declaration():
                    self._statements.append(declaration)
        except RecursionError:
            # Nesting deeper than the Python stack allows. Nothing after this point is parsed.
            self._error_handler.err(LoxStackOverflowError.at_token(self._tv.peek_unwrap(), "Too much nesting."))
        if self._dump and not self._error_handler.error_state:
            dump_internal("AST", *self._statements)
        return self._statements

    # ~~~ Helper functions ~~~

    def _has_next(self) -> bool:
        if self._tv.has_next():
            if self._tv.peek_unwrap().token_type is not Tk.EOF:
                return True
        return False

    def _expect_next(self, expected: Tk, message: str) -> Token:
        if self._tv.match(expected):
            return self._tv.advance()
        raise LoxSyntaxError.at_token(self._tv.peek_unwrap(), message)

    def _expect_punct(self, symbol: Tk, message: str) -> Token:
        return self._expect_next(symbol, f"Expect '{symbol.value}' {message}.")

    def _synchronize(self) -> None:
        """Discard tokens until the start of what is likely the next statement."""
        if not self._has_next():  # Never consume EOF.
            return
        self._tv.advance()
        while self._has_next():
            if self._tv.previous().token_type is Tk.SEMICOLON:
                return
            if self._tv.match(*STATEMENT_KEYWORDS):
                return
            self._tv.advance()

    @contextmanager
    def _function_body(self) -> Iterator[None]:
        self._function_depth += 1
        try:
            yield
        finally:
            self._function_depth -= 1

    T = TypeVar("T")

    def _parse_comma_separated(self, parselet: Callable[[], T]) -> Iterator[T]:
        """Parse a possibly empty, comma-separated list of items closed by a right parenthesis.
        The parenthesis itself is left for the caller to consume."""
        if self._tv.match(Tk.RIGHT_PAREN):
            return
        yield parselet()
        while self._tv.advance_if_match(Tk.COMMA):
            yield parselet()

    # ~~~ Parsers ~~~

    def _declaration(self) -> Optional[Stmt]:
        decl: Optional[Stmt]
        try:
            if self._tv.advance_if_match(Tk.VAR):
                decl = self._variable_declaration_parselet()
            elif self._tv.advance_if_match(Tk.FUN):
                decl = self._function_declaration_parselet()
            else:
                decl = self._statement()
        except LoxSyntaxError as error:
            self._error_handler.err(error)
            self._synchronize()
            decl = None

        return decl

    def _variable_declaration_parselet(self) -> VarStmt:
        name = self._expect_next(Tk.IDENTIFIER, "Expect variable name.")
        expr = self._expression() if self._tv.advance_if_match(Tk.EQUAL) else None
        self._expect_punct(Tk.SEMICOLON, "after variable declaration")
        return VarStmt(name, expr)

    def _function_declaration_parselet(self) -> FunctionStmt:
        name = self._expect_next(Tk.IDENTIFIER, "Expect function name.")
        self._expect_punct(Tk.LEFT_PAREN, "after function name")
        params = list(self._parse_comma_separated(
            lambda: self._expect_next(Tk.IDENTIFIER, "Expect parameter name.")
        ))
        self._expect_punct(Tk.RIGHT_PAREN, "after parameters")
        self._expect_punct(Tk.LEFT_BRACE, "before function body")
        with self._function_body():
            body = self._block_body()
        return FunctionStmt(name, params, body)

    def _statement(self) -> Stmt:
        stmt: Stmt
        if self._tv.advance_if_match(Tk.FOR):
            stmt = self._for_statement_parselet()
        elif self._tv.advance_if_match(Tk.IF):
            stmt = self._if_statement_parselet()
        elif self._tv.advance_if_match(Tk.LEFT_BRACE):
            stmt = BlockStmt(self._block_body())
        elif self._tv.advance_if_match(Tk.PRINT):
            stmt = PrintStmt(self._expression())
            self._expect_punct(Tk.SEMICOLON, "after value")
        elif self._tv.advance_if_match(Tk.RETURN):
            stmt = self._return_statement_parselet()
        elif self._tv.advance_if_match(Tk.WHILE):
            stmt = self._while_statement_parselet()
        elif self._tv.advance_if_match(Tk.SEMICOLON):
            stmt = EmptyStmt()
        else:
            stmt = self._expression_statement_parselet()
        return stmt

    def _block_body(self) -> List[Stmt]:
        """Parse the declarations of a block whose opening brace has been consumed."""
        body: List[Stmt] = list()
        while not self._tv.match(Tk.RIGHT_BRACE) and self._has_next():
            if declaration := self._declaration():
                body.append(declaration)
        self._expect_punct(Tk.RIGHT_BRACE, "after block")
        return body

    def _expression_statement_parselet(self) -> ExpressionStmt:
        stmt = ExpressionStmt(self._expression())
        self._expect_punct(Tk.SEMICOLON, "after expression")
        return stmt

    def _for_statement_parselet(self) -> Stmt:
        """Desugar a for loop into a while loop, wrapped in blocks as needed."""
        self._expect_punct(Tk.LEFT_PAREN, "after 'for'")

        initializer: Optional[Stmt]
        if self._tv.advance_if_match(Tk.SEMICOLON):
            initializer = None
        elif self._tv.advance_if_match(Tk.VAR):
            initializer = self._variable_declaration_parselet()
        else:
            initializer = self._expression_statement_parselet()

        condition = self._expression() if not self._tv.match(Tk.SEMICOLON) else LiteralExpr(True)
        self._expect_punct(Tk.SEMICOLON, "after loop condition")

        increment = self._expression() if not self._tv.match(Tk.RIGHT_PAREN) else None
        self._expect_punct(Tk.RIGHT_PAREN, "after for clauses")

        body = self._statement()

        if increment is not None:
            body = BlockStmt([body, ExpressionStmt(increment)])
        body = WhileStmt(condition, body)
        if initializer is not None:
            body = BlockStmt([initializer, body])

        return body

    def _if_statement_parselet(self) -> IfStmt:
        self._expect_punct(Tk.LEFT_PAREN, "after 'if'")
        condition = self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after if condition")
        then_branch = self._statement()
        # The else is claimed by the innermost if, as it is parsed first.
        else_branch = self._statement() if self._tv.advance_if_match(Tk.ELSE) else None
        return IfStmt(condition, then_branch, else_branch)

    def _return_statement_parselet(self) -> ReturnStmt:
        keyword = self._tv.previous()
        if not self._function_depth:
            raise LoxSyntaxError.at_token(keyword, "Can't return from top-level code.")
        value = self._expression() if not self._tv.match(Tk.SEMICOLON) else None
        self._expect_punct(Tk.SEMICOLON, "after return value")
        return ReturnStmt(keyword, value)

    def _while_statement_parselet(self) -> WhileStmt:
        self._expect_punct(Tk.LEFT_PAREN, "after 'while'")
        condition = self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after condition")
        return WhileStmt(condition, body=self._statement())

    def _expression(self, min_precedence: Prec = Prec.NONE) -> Expr:
        """Pratt parser.

            Ex. parsing "a = b + c * d - -e"
            > Parsed (a).
            > Next operator is =, stronger than NONE -> grab (a), parse the RHS expr until ASSIGNMENT.
              But! = is right associative, so the actual Prec passed is one less: NONE.
              > Parsed (b).
              > Next operator is +, stronger than NONE -> grab (b), parse the RHS until TERM.
                > Parsed (c).
                > Next operator is *, stronger than TERM -> grab (c), parse the RHS until FACTOR.
                  > Parsed (d).
                  > Next operator is -, weaker than FACTOR -> unwind.
                > Received (d) as the RHS for *.
                > Parsed (* c d) as the new LHS.
                > Next operator is -, not stronger than TERM -> unwind.
              > Received (* c d) as RHS.
              > Parsed (+ b (* c d)) as LHS.
              > Next operator is -, stronger than NONE -> parse RHS until TERM.
                > Parsed (-) -> parse its operand until UNARY.
                > Parsed (- e) as LHS.
                > No more tokens -> unwind.
              > Received (- e) as RHS.
              > Parsed (- (+ b (* c d)) (- e)) as LHS.
              > No more tokens -> unwind.
            > Received (- (+ b (* c d)) (- e)) as RHS.
            > Parsed (= a (- (+ b (* c d)) (- e))).
            > Complete.
        """
        left = self._prefix_parselet()

        # Parse the operator and the RHS, if possible.
        while self._has_next():
            op = self._tv.peek_unwrap()
            op_type = op.token_type

            prec = OPERATOR_PRECEDENCE.get(op_type)
            # Check if the operator has high enough relative precedence for the parsed LHS to be
            # bound to itself. If not, then we break out of this pass and return so that the LHS
            # becomes the RHS of a previously half-parsed, higher-precedence operation.
            if prec is None or prec <= min_precedence:
                break

            # Consume the operator.
            self._tv.advance()

            if op_type is Tk.LEFT_PAREN:  # Calls are postfix and have an argument list instead of an RHS.
                left = self._call_expression_parselet(left)
                continue

            # Parse the RHS up to the current operator's precedence,
            # taking right associativity into account, if necessary.
            right = self._expression(prec.adjust_for_operator_associativity(op_type))

            # Build the new LHS.
            if op_type is Tk.EQUAL:
                left = self._assignment_expression_parselet(op, left, right)
            elif op_type in {Tk.AND, Tk.OR}:
                left = LogicalExpr(op, left, right)
            else:
                left = BinaryExpr(op, left, right)

        return left

    def _prefix_parselet(self) -> Expr:
        """Parse prefix operators and literals. The offending token is left in place on error."""
        token = self._tv.peek_unwrap()
        token_type = token.token_type
        if token_type is Tk.LEFT_PAREN:
            self._tv.advance()
            enclosed = self._expression()
            self._expect_punct(Tk.RIGHT_PAREN, "after expression")
            return GroupingExpr(enclosed)
        if token_type in {Tk.BANG, Tk.MINUS}:
            self._tv.advance()
            return UnaryExpr(token, self._expression(Prec.UNARY))
        if token_type in LITERAL_VALUES:
            self._tv.advance()
            return LiteralExpr(LITERAL_VALUES[token_type])
        if token_type in {Tk.NUMBER, Tk.STRING}:
            self._tv.advance()
            return LiteralExpr(token.literal)
        if token_type is Tk.IDENTIFIER:
            self._tv.advance()
            return VariableExpr(token)
        raise LoxSyntaxError.at_token(token, "Expect expression.")

    def _call_expression_parselet(self, callee: Expr) -> CallExpr:
        arguments = list(self._parse_comma_separated(self._expression))
        paren = self._expect_punct(Tk.RIGHT_PAREN, "after arguments")
        return CallExpr(callee, paren, arguments)

    def _assignment_expression_parselet(self, op: Token, left: Expr, right: Expr) -> AssignmentExpr:
        if isinstance(left, VariableExpr):
            return AssignmentExpr(left.name, right)
        raise LoxSyntaxError.at_token(op, "Invalid assignment target.")


def parse(tokens: List[Token]) -> Tuple[List[Stmt], List[LoxError]]:
    """Parse `tokens` without reporting anything, returning the statements and the syntax errors found."""
    error_handler = LoxErrorHandler(echo=False)
    statements = Parser(tokens, error_handler).parse()
    return statements, list(error_handler.errors)


__all__ = ("Parser", "parse")
