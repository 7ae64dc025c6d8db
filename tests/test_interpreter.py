import io
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.runtime.interpreter import is_equal, is_truthy, stringify


def run(source, sess=None):
    """Runs source in sess (a fresh session by default) and returns everything it printed."""
    if sess is None:
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))
    out = sess.out
    start = out.tell()
    sess.run(source)
    return out.getvalue()[start:]


class ValueTestCase(unittest.TestCase):

    def test_is_truthy(self):
        should_fail = [None, False]
        for case in should_fail:
            self.assertFalse(is_truthy(case), case)

        should_pass = [True, 0.0, 1.0, "", "false"]
        for case in should_pass:
            self.assertTrue(is_truthy(case), case)

    def test_is_equal(self):
        should_fail = [(1.0, "1"), (None, False), (0.0, False), (1.0, True), ("", None), (float("nan"), float("nan"))]
        for left, right in should_fail:
            self.assertFalse(is_equal(left, right), (left, right))

        should_pass = [(None, None), (1.0, 1.0), ("a", "a"), (True, True), (False, False)]
        for left, right in should_pass:
            self.assertTrue(is_equal(left, right), (left, right))

    def test_stringify(self):
        should_pass = {"nil": None, "true": True, "false": False, "2.0": 2.0, "0.5": 0.5, "-3.0": -3.0, "abc": "abc"}
        for expected, case in should_pass.items():
            self.assertEqual(expected, stringify(case), case)


class ExpressionTestCase(unittest.TestCase):

    def test_arithmetic(self):
        should_pass = {
            "print 1 + 2 * 3;": "7.0\n",
            "print (1 + 2) * 3;": "9.0\n",
            "print 10 - 4 - 3;": "3.0\n",
            "print 7 / 2;": "3.5\n",
            "print -(2 * 3);": "-6.0\n",
            "print --1;": "1.0\n",
            "print 1 / 0;": "inf\n",
            "print -1 / 0;": "-inf\n",
            "print 0 / 0;": "nan\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_plus(self):
        should_pass = {
            'print "a" + "b";': "ab\n",
            'print 1 + "x";': "1.0x\n",
            'print "x" + 1;': "x1.0\n",
            'print "n=" + 2.5;': "n=2.5\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_comparison(self):
        should_pass = {
            "print 1 < 2;": "true\n",
            "print 2 <= 2;": "true\n",
            "print 1 > 2;": "false\n",
            "print 3 >= 4;": "false\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_equality(self):
        should_pass = {
            'print 1 == "1";': "false\n",
            "print nil == nil;": "true\n",
            "print nil == false;": "false\n",
            'print "a" == "a";': "true\n",
            "print true != false;": "true\n",
            "print 1 == 1;": "true\n",
            "print 0 == false;": "false\n",
            "fun f() {} fun g() {} print f == f; print f == g;": "true\nfalse\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_type_errors(self):
        should_fail = {
            "print 1 + true;": "[line 1] Error at '+': Operands must be two numbers or two strings.\n",
            "print nil + nil;": "[line 1] Error at '+': Operands must be two numbers or two strings.\n",
            'print "a" - 1;': "[line 1] Error at '-': Operands must be numbers.\n",
            "print true * 2;": "[line 1] Error at '*': Operands must be numbers.\n",
            'print 1 / "2";': "[line 1] Error at '/': Operands must be numbers.\n",
            'print "a" < "b";': "[line 1] Error at '<': Operands must be numbers.\n",
            "print nil >= 1;": "[line 1] Error at '>=': Operands must be numbers.\n",
            'print -"a";': "[line 1] Error at '-': Operand must be a number.\n",
        }
        for case, expected in should_fail.items():
            self.assertEqual(expected, run(case), case)

    def test_truthiness(self):
        should_pass = {
            'if (0) print "yes";': "yes\n",
            'if ("") print "yes";': "yes\n",
            "if (nil) print 1; else print 2;": "2.0\n",
            "if (false) print 1;": "",
            "print !nil;": "true\n",
            "print !0;": "false\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_logical(self):
        should_pass = {
            'print nil or "x";': "x\n",
            "print 1 or undefined;": "1.0\n",
            "print 1 and 2;": "2.0\n",
            "print false and undefined;": "false\n",
            'print nil and "x";': "",
            "print false or false;": "false\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_print(self):
        should_pass = {
            "print nil;": "",
            "print true;": "true\n",
            'print "multi\nline";': "multi\nline\n",
            "print 3;": "3.0\n",
            "fun f() {} print f;": "<fn f>\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)


class VariableTestCase(unittest.TestCase):

    def test_shadowing(self):
        self.assertEqual("2.0\n1.0\n", run("var a = 1; { var a = 2; print a; } print a;"))

    def test_assignment_reaches_outer_scope(self):
        self.assertEqual("2.0\n", run("var a = 1; { a = 2; } print a;"))
        self.assertEqual("3.0\n3.0\n", run("var a; print a = 3; print a;"))

    def test_uninitialized_is_nil(self):
        self.assertEqual("true\n", run("var a; print a == nil;"))

    def test_redefinition(self):
        self.assertEqual("2.0\n", run("var a = 1; var a = 2; print a;"))

    def test_undefined_variable(self):
        self.assertEqual("[line 1] Error at 'x': Undefined variable name 'x'.\n", run("print x;"))

    def test_assignment_to_undefined_aborts_run(self):
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))
        output = run("print 1;\nb = 2;\nprint 3;", sess)

        self.assertEqual("1.0\n[line 2] Error at 'b': Undefined variable: 'b'.\n", output)
        self.assertTrue(sess.error_handler.had_runtime_error)
        self.assertNotIn("b", sess.interpreter.globals)

    def test_environment_restored_after_error(self):
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))
        run("var a = 1; { var a = 2; undefined; }", sess)

        self.assertIs(sess.interpreter.globals, sess.interpreter.environment)
        self.assertEqual("1.0\n", run("print a;", sess))


class ControlFlowTestCase(unittest.TestCase):

    def test_if(self):
        should_pass = {
            "if (1 < 2) print 1; else print 2;": "1.0\n",
            "if (1 > 2) print 1; else print 2;": "2.0\n",
            "if (true) if (false) print 1; else print 2;": "2.0\n",
            "if (true) { var a = 1; print a; }": "1.0\n",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, run(case), case)

    def test_while(self):
        self.assertEqual("0.0\n1.0\n2.0\n", run("var i = 0; while (i < 3) { print i; i = i + 1; }"))
        self.assertEqual("", run("while (false) print 1;"))

    def test_for(self):
        output = run("for (var i = 0; i < 3; i = i + 1) print i;\nprint i;")

        self.assertEqual("0.0\n1.0\n2.0\n[line 2] Error at 'i': Undefined variable name 'i'.\n", output)

    def test_for_without_initializer(self):
        self.assertEqual("0.0\n1.0\n2.0\n", run("var i = 0; for (; i < 3;) { print i; i = i + 1; }"))


class FunctionTestCase(unittest.TestCase):

    def test_call(self):
        self.assertEqual("3.0\n", run("fun add(a, b) { return a + b; } print add(1, 2);"))
        self.assertEqual("hi\n", run('fun greet() { print "hi"; } greet();'))

    def test_implicit_nil(self):
        self.assertEqual("", run("fun f() {} print f();"))
        self.assertEqual("true\ntrue\n", run("fun f() {} fun g() { return; } print f() == nil; print g() == nil;"))

    def test_recursion(self):
        source = """
        fun fact(n) {
            if (n <= 1) return 1;
            return n * fact(n - 1);
        }
        print fact(10);

        fun fib(n) {
            if (n < 2) return n;
            return fib(n - 1) + fib(n - 2);
        }
        print fib(15);
        """
        self.assertEqual("3628800.0\n610.0\n", run(source))

    def test_mutual_recursion(self):
        source = """
        fun is_even(n) { if (n == 0) return true; return is_odd(n - 1); }
        fun is_odd(n) { if (n == 0) return false; return is_even(n - 1); }
        print is_even(10);
        print is_odd(7);
        """
        self.assertEqual("true\ntrue\n", run(source))

    def test_return_unwinds_loops_and_blocks(self):
        source = """
        fun first_over(limit) {
            for (var i = 0; ; i = i + 1) {
                {
                    if (i * i > limit) return i;
                }
            }
        }
        print first_over(10);
        """
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))

        self.assertEqual("4.0\n", run(source, sess))
        self.assertIs(sess.interpreter.globals, sess.interpreter.environment)

    def test_arguments_evaluated_left_to_right(self):
        source = """
        var log = "";
        fun note(x) { log = log + x; return x; }
        fun pair(a, b) { return a + b; }
        print pair(note("a"), note("b"));
        print log;
        """
        self.assertEqual("ab\nab\n", run(source))

    def test_call_frames_are_parented_to_globals(self):
        source = """
        var x = "global";
        fun outer() {
            var x = "local";
            fun inner() { print x; }
            inner();
        }
        outer();
        """
        self.assertEqual("global\n", run(source))

    def test_functions_read_globals_at_call_time(self):
        self.assertEqual("2.0\n", run("var a = 1; fun show() { print a; } a = 2; show();"))

    def test_nested_function_is_local(self):
        output = run("fun outer() { fun inner() {} } outer(); inner();")
        self.assertEqual("[line 1] Error at 'inner': Undefined variable name 'inner'.\n", output)

    def test_parameters_shadow_globals(self):
        self.assertEqual("2.0\n1.0\n", run("var a = 1; fun f(a) { print a; } f(2); print a;"))

    def test_arity_mismatch(self):
        should_fail = {
            "fun f(a) {} f(1, 2);": "[line 1] Error at ')': Expected 1 arguments but got 2.\n",
            "fun f(a, b) {} f();": "[line 1] Error at ')': Expected 2 arguments but got 0.\n",
        }
        for case, expected in should_fail.items():
            self.assertEqual(expected, run(case), case)

    def test_not_callable(self):
        should_fail = ['"abc"();', "nil();", "var a = 1; a(2);"]
        for case in should_fail:
            self.assertEqual("[line 1] Error at ')': Can only call functions and classes.\n", run(case), case)

    def test_stack_overflow(self):
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))
        output = run("fun f() { f(); }\nf();", sess)

        self.assertEqual("[line 1] Error at ')': Stack overflow.\n", output)
        self.assertIs(sess.interpreter.globals, sess.interpreter.environment)

    def test_return_at_top_level(self):
        output = run("print 1;\nreturn 2;\nprint 3;")
        self.assertEqual("1.0\n[line 2] Error at 'return': Can't return from top-level code.\n", output)

    def test_native_function(self):
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))
        sess.interpreter.define_native("double", 1, lambda value: value * 2)

        self.assertEqual("42.0\n", run("print double(21);", sess))
        self.assertEqual("<native fn double>\n", run("print double;", sess))
        self.assertEqual("[line 1] Error at ')': Expected 1 arguments but got 0.\n", run("double();", sess))


class IsolationTestCase(unittest.TestCase):

    def test_fresh_sessions_give_identical_output(self):
        source = """
        var total = 0;
        fun add(n) { total = total + n; return total; }
        for (var i = 1; i <= 4; i = i + 1) print add(i);
        """
        first = run(source)
        self.assertEqual("1.0\n3.0\n6.0\n10.0\n", first)
        for __ in range(3):
            self.assertEqual(first, run(source))

    def test_globals_persist_within_session(self):
        sess = Session(ErrorHandler(out=io.StringIO(), color=False))
        run("var a = 1; fun inc() { a = a + 1; }", sess)
        run("inc(); inc();", sess)

        self.assertEqual("3.0\n", run("print a;", sess))


if __name__ == '__main__':
    unittest.main()
