from enum import Flag, IntEnum, auto


class Debug(Flag):
    DUMP_TOKENS = auto()
    DUMP_AST = auto()
    NO_PARSE = auto()
    NO_INTERPRET = auto()
    JAVA_STYLE_TOKENS = auto()
    REDUCED_ERROR_REPORTING = auto()
    BACKTRACE = auto()
    TRACE_EXECUTION = auto()


class ExitCode(IntEnum):
    """Process exit codes, following the BSD `sysexits.h` convention used by JLox."""
    SUCCESS = 0
    STATIC_ERROR = 65
    RUNTIME_ERROR = 70


# Deepest chain of active Lox calls before a stack overflow is reported.
MAX_CALL_DEPTH = 2048
# Every Lox call costs a couple dozen Python frames in the tree walker.
PYTHON_RECURSION_LIMIT = MAX_CALL_DEPTH * 40

PROMPT_CHARACTER = ">>> "
