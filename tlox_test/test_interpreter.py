import pytest

from tlox.lox import Lox, Outcome, interpret
from tlox.utilities.configuration import MAX_CALL_DEPTH, Debug, ExitCode
from tlox.utilities.error import LoxLexicalError, LoxRuntimeError, LoxStackOverflowError, LoxSyntaxError


def test_print_formats_values(run):
    result, out, err = run('print 7; print 2.5; print true; print nil; print "s"; print -0.25;')
    assert result.ok
    assert out == ["7", "2.5", "true", "nil", "s", "-0.25"]
    assert err == []


def test_numbers_never_print_in_exponent_form(run):
    result, out, _ = run("""
        print 10000000000000000;
        print 1000000 * 1000000 * 1000000;
        print 123456789012345678901234;
        print 0.0000001;
        print -0;
    """)
    assert result.ok
    assert out == ["10000000000000000", "1000000000000000000", "123456789012345690000000", "0.0000001", "-0"]


def test_program_output_is_in_order(run):
    _, out, _ = run("var i = 0; while (i < 3) { print i; i = i + 1; }")
    assert out == ["0", "1", "2"]


def test_successful_run(run):
    result, _, _ = run("print 1;")
    assert result.outcome is Outcome.SUCCESS
    assert result.errors == []
    assert result.exit_code == ExitCode.SUCCESS == 0


def test_runtime_error_stops_execution(run):
    result, out, err = run('print "before";\nprint "a" + 1;\nprint "after";')
    assert result.outcome is Outcome.RUNTIME_ERROR
    assert result.exit_code == 70
    assert out == ["before"]
    assert err == ["[line 2] LoxRuntimeError at '+': Operands must be two numbers or two strings."]
    assert isinstance(result.errors[0], LoxRuntimeError)


def test_static_errors_prevent_execution(run):
    result, out, err = run('print "never";\nvar = 1;\nprint 1 +;')
    assert result.outcome is Outcome.STATIC_ERROR
    assert result.exit_code == 65
    assert out == []
    assert err == [
        "[line 2] LoxSyntaxError at '=': Expect variable name.",
        "[line 3] LoxSyntaxError at ';': Expect expression.",
    ]


def test_lexical_errors_are_static(run):
    result, out, _ = run('print "never"; @')
    assert result.outcome is Outcome.STATIC_ERROR
    assert isinstance(result.errors[0], LoxLexicalError)
    assert isinstance(result.errors[0], LoxSyntaxError)
    assert out == []


def test_stack_overflow_is_fatal(run):
    result, out, err = run("fun f() { f(); }\nf();")
    assert result.outcome is Outcome.FATAL_ERROR
    assert result.exit_code == 70
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], LoxStackOverflowError)
    assert result.errors[0].fatal
    assert result.errors[0].message == "Stack overflow."
    assert out == []


def test_deep_recursion_below_the_limit(run):
    depth = MAX_CALL_DEPTH // 2
    result, out, _ = run(f"""
        fun count(n) {{
          if (n == 0) return 0;
          return 1 + count(n - 1);
        }}
        print count({depth});
    """)
    assert result.ok
    assert out == [str(depth)]


def test_deeply_nested_blocks(run):
    result, out, _ = run("{" * 400 + "print 1;" + "}" * 400)
    assert result.ok
    assert out == ["1"]


def test_deeply_nested_parentheses(run):
    result, out, _ = run("print " + "(" * 600 + "1" + ")" * 600 + ";")
    assert result.ok
    assert out == ["1"]


def test_nesting_beyond_the_stack_is_fatal(run):
    result, out, err = run("print \"never\";\nprint " + "(" * 100000 + "1;")
    assert result.outcome is Outcome.FATAL_ERROR
    assert result.exit_code == ExitCode.RUNTIME_ERROR
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], LoxStackOverflowError)
    assert result.errors[0].line == 2
    assert out == []
    assert err == ["[line 2] LoxStackOverflowError at '(': Too much nesting."]


def test_interpreter_recovers_after_stack_overflow(run):
    run("fun f() { f(); } f();")
    result, out, _ = run("print 1 + 1;")
    assert result.ok
    assert out == ["2"]


def test_division_by_zero(run):
    result, _, err = run("print 1 / 0;")
    assert result.outcome is Outcome.RUNTIME_ERROR
    assert err == ["[line 1] LoxRuntimeError at '/': Division by zero."]


def test_for_and_while_loops_agree(run):
    _, for_out, _ = run("""
        for (var i = 0; i < 5; i = i + 1) {
          if (i == 2) print "two"; else print i;
        }
    """)
    _, while_out, _ = run("""
        {
          var i = 0;
          while (i < 5) {
            {
              if (i == 2) print "two"; else print i;
            }
            i = i + 1;
          }
        }
    """)
    assert for_out == while_out == ["0", "1", "two", "3", "4"]


def test_closures_are_independent(run):
    _, out, _ = run("""
        fun makeCounter() {
          var count = 0;
          fun counter() { count = count + 1; return count; }
          return counter;
        }
        var a = makeCounter();
        var b = makeCounter();
        a(); a();
        print a();
        print b();
    """)
    assert out == ["3", "1"]


def test_logical_operators_short_circuit(run):
    _, out, _ = run("""
        fun loud(v) { print "evaluated"; return v; }
        print nil and loud(1);
        print "yes" or loud(2);
        print false or loud(3);
    """)
    assert out == ["nil", "yes", "evaluated", "3"]


def test_globals_persist_across_runs(run):
    run("var greeting = \"hi\"; fun greet() { return greeting; }")
    result, out, _ = run("print greet();")
    assert result.ok
    assert out == ["hi"]


def test_runtime_error_in_block_restores_global_scope(run):
    run("var g = \"global\";\n{ var g = \"local\"; nil(); }")
    _, out, _ = run("print g;")
    assert out == ["global"]


def test_reinitialize_environment_forgets_globals(lox, run):
    run("var a = 1;")
    lox.interpreter.reinitialize_environment()
    result, _, _ = run("print a;")
    assert result.outcome is Outcome.RUNTIME_ERROR
    _, out, _ = run("print clock;")
    assert out == ["<native fn>"]


def test_errors_are_reset_between_runs(run):
    run("print nil + 1;")
    result, _, _ = run("print 1;")
    assert result.ok


def test_echo_prints_expression_statement_values(run):
    result, out, _ = run('1 + 2;\n"s";\nvar a = 3;\na;\nprint "printed";', echo=True)
    assert result.ok
    assert out == ["3", '"s"', "3", "printed"]


def test_interpret_uses_a_fresh_interpreter(capsys):
    assert interpret("var leaked = 1;").ok
    result = interpret("print leaked;")
    assert result.outcome is Outcome.RUNTIME_ERROR
    assert "Undefined variable 'leaked'." in capsys.readouterr().err


def test_backtrace_lists_active_calls(capsys):
    lox = Lox(Debug.REDUCED_ERROR_REPORTING | Debug.BACKTRACE)
    lox.run("fun inner() { return nil + 1; }\nfun outer() { return inner(); }\nouter();")
    err = capsys.readouterr().err.splitlines()
    assert err == [
        "[line 1] LoxRuntimeError at '+': Operands must be two numbers or two strings.",
        "    in inner() called from line 2",
        "    in outer() called from line 3",
    ]


def test_full_error_report_shows_source_excerpt(capsys):
    lox = Lox()
    lox.run('var a = 1;\nprint a + "x";')
    err = capsys.readouterr().err
    assert "[line 2] LoxRuntimeError at '+': Operands must be two numbers or two strings." in err
    assert 'print a + "x";' in err
    assert "^" in err


def test_silent_error_handler(capsys):
    lox = Lox(echo_errors=False)
    result = lox.run("print nil();")
    assert result.outcome is Outcome.RUNTIME_ERROR
    assert capsys.readouterr().err == ""


def test_trace_execution(capsys):
    lox = Lox(Debug.REDUCED_ERROR_REPORTING | Debug.TRACE_EXECUTION)
    lox.run("fun id(x) { return x; }\nprint id(2);")
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["2"]
    assert "trace" in captured.err
    assert "call id(2)" in captured.err


def test_no_interpret_flag_only_checks(capsys):
    lox = Lox(Debug.REDUCED_ERROR_REPORTING | Debug.NO_INTERPRET)
    assert lox.run("print 1;").ok
    assert capsys.readouterr().out == ""


def test_debug_flags_propagate(lox):
    lox.debug_flags = Debug.BACKTRACE
    assert lox.error_handler.debug_flags is Debug.BACKTRACE
    assert lox.interpreter.debug_flags is Debug.BACKTRACE


@pytest.mark.parametrize("source, expected", [
    ("print 1 == 1.0;", "true"),
    ('print "a" == "a";', "true"),
    ("print nil == false;", "false"),
    ('print 1 == "1";', "false"),
    ("print clock == clock;", "true"),
])
def test_equality(run, source, expected):
    _, out, _ = run(source)
    assert out == [expected]


def test_run_file(lox, tmp_path, capsys):
    script = tmp_path / "script.lox"
    script.write_text('print "from a file";\r\nprint 2;\r\n')
    result = lox.run_file(str(script))
    assert result.ok
    assert capsys.readouterr().out.splitlines() == ["from a file", "2"]
