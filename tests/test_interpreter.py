import io
import math

import pytest

from lox import parser
from lox.environment import DuplicateVariableName, UndefinedVariable
from lox.interpreter import (
    FunctionCallIsNotSupportedHere,
    Interpreter,
    OnlyInstancesCanHaveFields,
    OnlyInstancesCanHaveProperty,
    OperandMustBeANumber,
    OperandMustBeANumberOrString,
    SuperClassMustBeAClass,
    UnmatchedFunctionArguments,
)
from lox.runtime import UNINITIALIZED, Class, Function, Instance, UndefinedProperty
from lox.scanner import tokenize


def evaluate(src):
    return Interpreter().evaluate(parser.parse_expression(tokenize(src)))


def run(src):
    out = io.StringIO()
    Interpreter(out).interpret(parser.parse(tokenize(src)))
    return out.getvalue()


def test_literal():
    assert evaluate("1") == 1


@pytest.mark.parametrize(
    "src, expected",
    [
        ("8 * ( 5 + 2)", 56),
        ("1 + 1", 2),
        ("1 > 2", False),
        ("1 >= 1", True),
        ("1 < 2", True),
        ("5 <= 4", False),
        ("5 == 5", True),
        ("5 != 4", True),
        ("5 - 4", 1),
        ('"a" + "b"', "ab"),
        ('"a" + 5', "a5"),
        ('5 + "b"', "5b"),
        ('"x" + 2.5', "x2.5"),
        ("8 / 4", 2),
        ("8 * 4", 32),
        ("-3", -3),
        ("!true", False),
        ("!nil", False),
        ("!0", False),
        ('!""', False),
        ("!!false", False),
    ],
)
def test_evaluate_expression(src, expected):
    assert evaluate(src) == expected


def test_equality_does_not_coerce():
    assert evaluate("1 == true") is False
    assert evaluate('1 == "1"') is False
    assert evaluate("nil == nil") is True
    assert evaluate("nil == false") is False
    assert evaluate('"a" == "a"') is True


def test_nan_equals_itself():
    assert run("var n = 0 / 0; print n == n; print n != n;") == "True\nFalse\n"
    assert evaluate("0 / 0 == 1") is False


def test_uninitialized_variable_equals_nil():
    assert run("var a; print a; print a == nil; print nil != a;") == "nil\nTrue\nFalse\n"
    assert run("var a; var b; print a == b;") == "True\n"
    assert run("var a; print a == false;") == "False\n"


def test_division_by_zero_follows_ieee():
    assert evaluate("1 / 0") == math.inf
    assert evaluate("-1 / 0") == -math.inf
    assert math.isnan(evaluate("0 / 0"))


def test_logical_operators_return_deciding_operand():
    assert evaluate('nil or "yes"') is None
    assert evaluate('false or "yes"') == "yes"
    assert evaluate('false and "never"') is False
    assert evaluate('1 and "last"') == "last"
    assert evaluate('"first" or undefined') == "first"


def test_plus_with_invalid_operand():
    with pytest.raises(OperandMustBeANumberOrString):
        evaluate("5 + true")


@pytest.mark.parametrize("src", ["5 > true", "5 * true", '"a" - "b"', "nil < 1"])
def test_binary_number_operator_with_invalid_operand(src):
    with pytest.raises(OperandMustBeANumber):
        evaluate(src)


def test_unary_minus_with_invalid_operand():
    with pytest.raises(OperandMustBeANumber):
        evaluate('-"m"')


def test_duplicate_variable_name():
    with pytest.raises(DuplicateVariableName):
        run("{var a =5; var a = 6;}")


def test_global_redefinition_is_an_error_too():
    with pytest.raises(DuplicateVariableName):
        run("var a = 1; var a = 2;")


@pytest.mark.parametrize("src", ["a =5;", "print a;"])
def test_access_undefined_variable(src):
    with pytest.raises(UndefinedVariable):
        run(src)


def test_function_with_unmatched_arguments():
    with pytest.raises(UnmatchedFunctionArguments, match="Expected 2 arguments but got 1."):
        run('fun sayHi(first, last) { print "Hi, " + first + " " + last + "!";} sayHi("Dear");')


def test_function_call_not_supported():
    with pytest.raises(FunctionCallIsNotSupportedHere):
        run('fun sayHi(first, last) { print "Hi";} sayHi = 10; sayHi("Dear");')


def test_only_instances_have_properties():
    with pytest.raises(OnlyInstancesCanHaveProperty):
        run('fun sayHi(first, last) { print "Hi";} sayHi.sayHi("Dear");')


def test_only_instances_have_fields():
    with pytest.raises(OnlyInstancesCanHaveFields):
        run('class Cake {} var cake = Cake(); cake = 10; cake.flavor = "German chocolate";')


def test_undefined_property():
    with pytest.raises(UndefinedProperty):
        run(
            'class Cake { taste() { var adjective = "delicious"; '
            'print "The " + this.flavor + " cake is " + adjective + "!"; } } '
            "var cake = Cake(); var test = cake.random;"
        )


def test_undefined_method_on_subclass():
    with pytest.raises(UndefinedProperty):
        run("class Cake { } class SuperClass < Cake { bake(){ }} SuperClass().random();")


def test_undefined_super_method():
    with pytest.raises(UndefinedProperty):
        run("class A {} class B < A { m() { super.m(); } } B().m();")


def test_superclass_must_be_a_class():
    with pytest.raises(SuperClassMustBeAClass):
        run('var NotAClass = "I am totally not a class"; class Subclass < NotAClass {}')


@pytest.mark.parametrize(
    "src, expected",
    [
        ("print 1;", "1\n"),
        ("print 2.5;", "2.5\n"),
        ("print -0.125;", "-0.125\n"),
        ("print 1 / 3;", "0.3333333333333333\n"),
        ("print 1 / 0;", "Infinity\n"),
        ("print 1000000000000000;", "1000000000000000\n"),
        ("print -123456789012345678;", "-123456789012345680\n"),
        ('print "n=" + 10000000000000000;', "n=10000000000000000\n"),
        ("print 1000000000000000000000;", "1e+21\n"),
        ('print "text";', "text\n"),
        ("print true;", "True\n"),
        ("print false;", "False\n"),
        ("print nil;", "nil\n"),
        ("fun f() {} print f;", "<fn f>\n"),
        ("class Bagel {} print Bagel;", "Bagel\n"),
        ("class Bagel {} print Bagel();", "Bagel instance\n"),
    ],
)
def test_print_formatting(src, expected):
    assert run(src) == expected


def test_uninitialized_variable_gets_placeholder():
    intr = Interpreter(io.StringIO())
    intr.interpret(parser.parse(tokenize("var a;")))
    assert intr.globals["a"] is UNINITIALIZED


def test_block_scope_is_restored():
    src = """
    var a = "global";
    {
        var a = "local";
        print a;
    }
    print a;
    """
    assert run(src) == "local\nglobal\n"


def test_environment_is_restored_after_error():
    intr = Interpreter(io.StringIO())
    with pytest.raises(UndefinedVariable):
        intr.interpret(parser.parse(tokenize("{ var inner = 1; print missing; }")))
    assert intr.environment is intr.globals


def test_environment_is_restored_after_error_in_call():
    intr = Interpreter(io.StringIO())
    with pytest.raises(OperandMustBeANumber):
        intr.interpret(parser.parse(tokenize('fun f(x) { return -x; } f("no");')))
    assert intr.environment is intr.globals


def test_while_loop():
    assert run("var i = 0; while (i < 3) { print i; i = i + 1; }") == "0\n1\n2\n"


def test_for_loop():
    assert run("for (var i = 0; i < 3; i = i + 1) print i;") == "0\n1\n2\n"


def test_for_loop_variable_is_scoped_to_loop():
    with pytest.raises(UndefinedVariable):
        run("for (var i = 0; i < 1; i = i + 1) {} print i;")


def test_if_uses_truthiness():
    assert run('if (nil) print "nil is truthy"; else print "nil is falsy";') == "nil is truthy\n"
    assert run('if (false) print "yes"; else print "no";') == "no\n"


def test_function_returns_value():
    assert run("fun add(a, b) { return a + b; } print add(1, 2);") == "3\n"


def test_function_without_return_yields_nil():
    assert run("fun f() {} print f();") == "nil\n"


def test_return_exits_loops():
    src = """
    fun first_above(limit) {
        var i = 0;
        while (true) {
            if (i > limit) return i;
            i = i + 1;
        }
    }
    print first_above(4);
    """
    assert run(src) == "5\n"


def test_recursion():
    src = """
    fun fib(n) {
        if (n <= 1) return n;
        return fib(n - 2) + fib(n - 1);
    }
    print fib(15);
    """
    assert run(src) == "610\n"


def test_closure_captures_variable_by_reference():
    src = """
    fun makeCounter() {
        var i = 0;
        fun count() {
            i = i + 1;
            print i;
        }
        return count;
    }
    var counter = makeCounter();
    counter();
    counter();
    """
    assert run(src) == "1\n2\n"


def test_closure_sees_later_assignment():
    src = """
    var x = "before";
    fun show() { print x; }
    x = "after";
    show();
    """
    assert run(src) == "after\n"


def test_fields_can_be_added_and_overwritten():
    src = """
    class Box {}
    var b = Box();
    b.value = 1;
    b.value = b.value + 1;
    print b.value;
    """
    assert run(src) == "2\n"


def test_fields_shadow_methods():
    src = """
    class A { m() { return "method"; } }
    var a = A();
    print a.m();
    a.m = "field";
    print a.m;
    """
    assert run(src) == "method\nfield\n"


def test_initializer_sets_fields_and_defines_arity():
    src = """
    class Point {
        init(x, y) {
            this.x = x;
            this.y = y;
        }
        sum() { return this.x + this.y; }
    }
    print Point(1, 2).sum();
    """
    assert run(src) == "3\n"
    with pytest.raises(UnmatchedFunctionArguments):
        run("class P { init(x) {} } P();")


def test_initializer_always_returns_instance():
    src = """
    class Foo {
        init() {
            this.ok = true;
            return;
        }
    }
    var foo = Foo();
    print foo.init();
    """
    assert run(src) == "Foo instance\n"


def test_bound_method_remembers_instance():
    src = """
    class Person {
        init(name) { this.name = name; }
        greet() { print "hi " + this.name; }
    }
    var greet = Person("jane").greet;
    greet();
    """
    assert run(src) == "hi jane\n"


def test_inherited_methods_and_initializer():
    src = """
    class A {
        init(v) { this.v = v; }
        get() { return this.v; }
    }
    class B < A {}
    print B(7).get();
    """
    assert run(src) == "7\n"


def test_inheritance_through_several_levels():
    src = """
    class A { who() { return "A"; } }
    class B < A {}
    class C < B {}
    print C().who();
    """
    assert run(src) == "A\n"


def test_super_dispatches_to_superclass_method():
    src = """
    class Doughnut {
        cook() { print "Fry until golden brown."; }
    }
    class BostonCream < Doughnut {
        cook() {
            super.cook();
            print "Pipe full of custard and coat with chocolate.";
        }
    }
    BostonCream().cook();
    """
    assert run(src) == "Fry until golden brown.\nPipe full of custard and coat with chocolate.\n"


def test_super_binds_this_to_subclass_instance():
    src = """
    class A { name() { return this.kind; } }
    class B < A {
        init() { this.kind = "B"; }
        name() { return "via super: " + super.name(); }
    }
    print B().name();
    """
    assert run(src) == "via super: B\n"


def test_class_can_refer_to_itself():
    src = """
    class Node {
        make() { return Node(); }
    }
    print Node().make();
    """
    assert run(src) == "Node instance\n"


def test_top_level_return_stops_program():
    assert run('print "a"; return; print "b";') == "a\n"


def test_runtime_values():
    intr = Interpreter(io.StringIO())
    intr.interpret(parser.parse(tokenize("fun f(a) {} class C { init() {} } var c = C();")))
    assert isinstance(intr.globals["f"], Function)
    assert intr.globals["f"].arity() == 1
    assert isinstance(intr.globals["C"], Class)
    assert isinstance(intr.globals["c"], Instance)


@pytest.mark.parametrize(
    "numbers",
    [
        (1.0, 2.0, 3.0),
        (0.1, 0.2, 0.3),
        (12.5, 4.0, 8.25),
        (1000.0, 0.001, 7.0),
    ],
)
def test_arithmetic_matches_float_semantics(numbers):
    a, b, c = numbers
    src = f"""
    var a = {a};
    var b = {b};
    var r = a + b * {c};
    r = r - a / {c};
    print r;
    """
    expected = a + b * c
    expected = expected - a / c
    assert float(run(src)) == expected
