from typing import Iterator, List, Optional, Tuple, Union

from tlox.language.lox_types import LoxLiteral, lox_is_valid_identifier_name, lox_is_valid_identifier_start
from tlox.lexing.token import COMPOUND_TOKENS, KEYWORDS, SINGLE_CHAR_TOKENS, Tk, Token
from tlox.utilities import dump_internal, is_arabic_numeral
from tlox.utilities.configuration import Debug
from tlox.utilities.error import LoxError, LoxErrorHandler, LoxLexicalError
from tlox.utilities.stream_view import StreamView

ScanResult = Union[Tk, Tuple[Tk, LoxLiteral], None]


class Scanner:
    def __init__(
            self,
            source: str,
            error_handler: LoxErrorHandler,
            *,
            debug_flags: Debug = Debug(0)
    ) -> None:
        """Produce Tokens from a source string.

        Iterating over a Scanner scans the source lazily, from the beginning, every time.
        Lexical errors are reported to `error_handler` as they are found and scanning
        resumes right after the malformed lexeme.

        :param source: source string
        :type source: str
        :param error_handler: error reporting manager
        :type error_handler: LoxErrorHandler
        :param debug_flags: debugging options, the token dump ones are honored
        :type debug_flags: Debug, optional
        """
        self._source = source
        self._error_handler = error_handler
        self._debug_flags = debug_flags
        self._sv: StreamView[str] = StreamView(source)
        self._line = 1
        self._start_line = 1

    def __iter__(self) -> Iterator[Token]:
        self._sv = StreamView(self._source)
        self._line = 1
        while self._sv.has_next():
            # At the beginning of a lexeme.
            self._sv.set_marker()
            self._start_line = self._line
            if (token := self._scan_token()) is not None:
                yield token
        yield Token(Tk.EOF, "", None, self._line, len(self._source))

    def scan_tokens(self) -> List[Token]:
        """Scan all tokens in the source stream."""
        tokens = list(self)

        if self._debug_flags & Debug.DUMP_TOKENS:
            if self._debug_flags & Debug.JAVA_STYLE_TOKENS:  # Replicate JLox output.
                print(*(token.to_string() for token in tokens), sep="\n")
            else:
                dump_internal("Token", *tokens)

        return tokens

    def _scan_token(self) -> Optional[Token]:
        """Scan the source stream for the next token, if the next lexeme produces one."""
        char = self._sv.advance()
        next_token: ScanResult = None

        # Slashes may start a comment; then, match compound tokens before similar single-character versions.
        if char == "/":
            next_token = self._slash()
        elif (doublet := char + str(self._sv.peek())) in COMPOUND_TOKENS:  # pylint: disable=superfluous-parens
            next_token = Tk(doublet)
            self._sv.advance()
        elif char in SINGLE_CHAR_TOKENS:
            next_token = Tk(char)
        elif char == '"':
            next_token = self._string()
        elif char == "\n":
            self._line += 1
        elif char.isspace():  # Whitespaces are dropped.
            pass
        elif is_arabic_numeral(char):
            next_token = self._number()
        elif lox_is_valid_identifier_start(char):
            next_token = self._identifier()
        else:  # What remains is an error.
            self._error(LoxLexicalError(
                self._line,
                "Unexpected character.",
                where=f"at '{char}'",
                offset=self._sv.marker_index
            ))

        if next_token is None:  # Handle no-ops.
            return None
        if isinstance(next_token, tuple):  # Handle types that have literals.
            return self._make_token(*next_token)
        return self._make_token(next_token)

    def _make_token(self, token_type: Tk, literal: Optional[LoxLiteral] = None) -> Token:
        lexeme = "".join(self._sv.get_slice_from_marker())
        return Token(token_type, lexeme, literal, self._start_line, self._sv.marker_index)

    def _error(self, error: LoxError) -> None:
        self._error_handler.err(error)

    # ~~~ Helpers for specific token types ~~~

    def _slash(self) -> Optional[Tk]:
        """Decide if the matched slash is division or a comment.
        Return a SLASH token or consume the comment."""
        if self._sv.advance_if_match("/"):  # A comment must be followed by another slash.
            while self._sv.peek() != "\n" and self._sv.has_next():  # A comment takes up the entire line.
                self._sv.advance()
            return None  # No token to be produced this pass.
        return Tk.SLASH

    def _string(self) -> Optional[Tuple[Tk, str]]:
        """Consume an entire string."""
        while self._sv.peek() != '"' and self._sv.has_next():  # Test for unterminated string.
            if self._sv.advance() == "\n":  # Note that multi-line strings are allowed.
                self._line += 1
        if not self._sv.has_next():  # Error on unterminated string.
            self._error(LoxLexicalError(
                self._start_line,
                "Unterminated string.",
                offset=self._sv.marker_index,
                length=self._sv.current_index - self._sv.marker_index
            ))
            return None
        # Consume the closing double quotation mark.
        self._sv.advance()
        # Return the type and the the enclosed text, stripping the quotation marks.
        return Tk.STRING, self._sv[self._sv.marker_index + 1:self._sv.current_index - 1]

    def _number(self) -> Tuple[Tk, float]:
        """Consume an entire number."""
        while is_arabic_numeral(self._sv.peek()):
            self._sv.advance()
        # Consume a decimal point, if there is one. Note that there must be another
        # digit after the decimal: as in, "1234." is not a valid number.
        if self._sv.peek() == "." and is_arabic_numeral(self._sv.peek(1)):
            self._sv.advance()
            while is_arabic_numeral(self._sv.peek()):  # Consume any digits after the decimal point.
                self._sv.advance()
        # Parse the value of the number directly with Python.
        return Tk.NUMBER, float("".join(self._sv.get_slice_from_marker()))

    def _identifier(self) -> Tk:
        """Consume an entire identifier and decide if it is a keyword."""
        while lox_is_valid_identifier_name(self._sv.peek()):
            self._sv.advance()
        return KEYWORDS.get("".join(self._sv.get_slice_from_marker()), Tk.IDENTIFIER)


def scan(source: str) -> Tuple[List[Token], List[LoxError]]:
    """Scan `source` without reporting anything, returning the tokens and the lexical errors found."""
    error_handler = LoxErrorHandler(echo=False)
    tokens = Scanner(source, error_handler).scan_tokens()
    return tokens, list(error_handler.errors)
