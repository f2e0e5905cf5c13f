"""Tests for built-in methods, operators and value rendering."""

import io
import math
from fractions import Fraction
import pytest
from rich.console import Console
from ripl.lib import builtins
from ripl.lib.context import ExecutionContext
from ripl.lib.errors import RuntimeFault
from ripl.lib.evaluator import evaluate
from ripl.lib.values import (
    ClassRef,
    Function,
    MainObject,
    Range,
    Symbol,
    hash_key,
    inspect,
    to_s,
)
from ripl.models.dataModel import InputFragment


def value_of(source: str) -> str:
    result = evaluate(
        InputFragment(lines=[source + "\n"]),
        ExecutionContext(),
        Console(file=io.StringIO()),
    )
    assert result.success, f"{result.error_class}: {result.error}"
    return inspect(result.value)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("[3, 1, 2].sort", "[1, 2, 3]"),
        ('["bb", "a", "ccc"].sort_by { |s| s.length }', '["a", "bb", "ccc"]'),
        ("[1, 2, 3, 4].select { |x| x.even? }", "[2, 4]"),
        ("[1, 2, 3, 4].reject { |x| x.even? }", "[1, 3]"),
        ("[1, 2, 3].reduce(10) { |acc, x| acc + x }", "16"),
        ("[1, 2, 3].inject(:+)", "6"),
        ("[2, 3].reduce(1, :*)", "6"),
        ("[].reduce(:+)", "nil"),
        ("[1, 2, 3].sum", "6"),
        ("[0.5, 1].sum", "1.5"),
        ("[5, 3, 9].min", "3"),
        ("[5, 3, 9].max", "9"),
        ("[].max", "nil"),
        ('["aa", "b"].max_by { |s| s.length }', '"aa"'),
        ("[1, 2, 2, 3].count(2)", "2"),
        ("[1, 2, 3].count { |x| x > 1 }", "2"),
        ("[1, 2, 3].include?(2)", "true"),
        ("[1, 2, 3].first", "1"),
        ("[1, 2, 3].first(2)", "[1, 2]"),
        ("[1, 2, 3].last", "3"),
        ("[1, 2, 3].take(2)", "[1, 2]"),
        ("[1, 2, 3].drop(2)", "[3]"),
        ("[1, 2, 3].all? { |x| x > 0 }", "true"),
        ("[nil, false].any?", "false"),
        ("[1, 2].none? { |x| x > 5 }", "true"),
        ("[1, 2, 3].find { |x| x > 1 }", "2"),
        ("[1, 2, 3, 4].partition { |x| x.odd? }", "[[1, 3], [2, 4]]"),
        ("[1, 2, 3].group_by { |x| x.odd? }", "{true => [1, 3], false => [2]}"),
        ('["a", "b", "a"].tally', '{"a" => 2, "b" => 1}'),
        ("[1, 2].zip([3, 4])", "[[1, 3], [2, 4]]"),
        ("[[1, 2], [3]].flatten", "[1, 2, 3]"),
        ("[1, nil, 2].compact", "[1, 2]"),
        ("[1, 1, 2].uniq", "[1, 2]"),
        ("[1, 2, 3].reverse", "[3, 2, 1]"),
        ('[1, [2, "x"]].join("-")', '"1-2-x"'),
        ("[1, 2] + [3]", "[1, 2, 3]"),
        ("[1, 2, 3] - [2]", "[1, 3]"),
        ("[1, 2] * 2", "[1, 2, 1, 2]"),
        ("a = [1]\na << 2\na", "[1, 2]"),
        ("a = [1, 2]\na.push(3, 4)\na.pop\na", "[1, 2, 3]"),
        ("[[1, :a], [2, :b]].to_h", "{1 => :a, 2 => :b}"),
        ("[1, 2, 3].each_with_object([]) { |x, acc| acc << x * 2 }", "[2, 4, 6]"),
    ],
)
def test_array_and_enumerable_methods(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ('h = {"a" => 1, "b" => 2}\nh.keys', '["a", "b"]'),
        ('{"a" => 1}.values', "[1]"),
        ('{"a" => 1}.key?("a")', "true"),
        ('{"a" => 1}.fetch("b", 0)', "0"),
        ('{"a" => 1}.merge({"b" => 2})', '{"a" => 1, "b" => 2}'),
        ('{"a" => 1, "b" => 2}.select { |k, v| v > 1 }', '{"b" => 2}'),
        ('{"a" => 1, "b" => 2}.map { |k, v| k * v }', '["a", "bb"]'),
        ('{"a" => 1}.to_a', '[["a", 1]]'),
        ('{"a" => 1, "b" => 2}.sum { |k, v| v }', "3"),
        ('{"a" => 1}.transform_values { |v| v * 10 }', '{"a" => 10}'),
        ("{:a => 1}.invert", "{1 => :a}"),
        ("h = {}\nh.delete(:missing)", "nil"),
        ('{"a" => 1}.length', "1"),
        (
            'out = []\n{"a" => 1, "b" => 2}.each { |k, v| out << k + v.to_s }\nout',
            '["a1", "b2"]',
        ),
    ],
)
def test_hash_methods(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(1..5).to_a", "[1, 2, 3, 4, 5]"),
        ("(1...5).to_a", "[1, 2, 3, 4]"),
        ("(1..10).select { |n| n % 3 == 0 }", "[3, 6, 9]"),
        ("(1..4).map { |n| n * n }", "[1, 4, 9, 16]"),
        ("(1..4).reduce(:*)", "24"),
        ("(1..10).include?(5)", "true"),
        ("(1..10).step(3)", "[1, 4, 7, 10]"),
        ("(1..3).size", "3"),
        ("(1..3).first", "1"),
        ("(1..3).last", "3"),
    ],
)
def test_range_methods(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ('"hello".length', "5"),
        ('"hello".upcase', '"HELLO"'),
        ('"Hello".downcase', '"hello"'),
        ('"hello world".split', '["hello", "world"]'),
        ('"a,b,,c".split(",")', '["a", "b", "", "c"]'),
        ('"abc".chars', '["a", "b", "c"]'),
        ('"hello".include?("ell")', "true"),
        ('"hello".start_with?("he")', "true"),
        ('"hello".reverse', '"olleh"'),
        ('"  hi  ".strip', '"hi"'),
        ('"hello".gsub("l", "L")', '"heLLo"'),
        ('"hello".sub("l", "L")', '"heLlo"'),
        ('"42abc".to_i', "42"),
        ('"3.5".to_f', "3.5"),
        ('"abc".to_sym', ":abc"),
        ('"ab" * 2', '"abab"'),
        ('"a" + "b"', '"ab"'),
        ('"hi".center(6, "*")', '"**hi**"'),
        (":abc.to_s", '"abc"'),
        (":abc.length", "3"),
    ],
)
def test_string_and_symbol_methods(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("out = []\n3.times { |i| out << i }\nout", "[0, 1, 2]"),
        ("out = []\n1.upto(3) { |i| out << i }\nout", "[1, 2, 3]"),
        ("out = []\n3.downto(1) { |i| out << i }\nout", "[3, 2, 1]"),
        ("4.even?", "true"),
        ("(-5).abs", "5"),
        ("3.7.floor", "3"),
        ("3.2.ceil", "4"),
        ("2.5.round", "3"),
        ("3.14159.round(2)", "3.14"),
        ("10.divmod(3)", "[3, 1]"),
        ("(-7).divmod(2)", "[-4, 1]"),
        ("5.clamp(1, 3)", "3"),
        ("1234.digits", "[4, 3, 2, 1]"),
        ("3.to_f", "3.0"),
        ("3.9.to_i", "3"),
        ("0.zero?", "true"),
        ('Integer("42")', "42"),
        ('Float("1.5")', "1.5"),
        ("nil.to_a", "[]"),
        ("nil.nil?", "true"),
        ("[1].nil?", "false"),
    ],
)
def test_numeric_methods(source: str, expected: str):
    assert value_of(source) == expected


def test_binary_op_division_semantics():
    assert builtins.binary_op("/", 7, 2) == 3
    assert builtins.binary_op("/", -7, 2) == -4
    assert builtins.binary_op("%", -7, 2) == 1
    assert math.isnan(builtins.binary_op("/", 0.0, 0))
    with pytest.raises(RuntimeFault) as exc_info:
        builtins.binary_op("%", 1, 0)
    assert exc_info.value.classification == "ZeroDivisionError"


def test_binary_op_rejects_mixed_types():
    with pytest.raises(RuntimeFault) as exc_info:
        builtins.binary_op("-", "a", "b")
    assert exc_info.value.classification == "NoMethodError"
    assert exc_info.value.message == "undefined method '-' for an instance of String"


def test_compare_op_equality_respects_booleans():
    assert builtins.compare_op("==", 1, 1.0) is True
    assert builtins.compare_op("==", 1, True) is False
    assert builtins.compare_op("==", [1, [2]], [1, [2]]) is True


def test_method_lookup_chain():
    assert builtins.method_get([1], "map") is builtins.enum_map
    assert builtins.method_get(1, "abs") is builtins.num_abs
    assert builtins.method_get("s", "inspect") is builtins.obj_inspect
    assert builtins.method_get(Symbol("s"), "map") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "nil"),
        (True, "true"),
        (1.0, "1.0"),
        (float("nan"), "NaN"),
        (float("-inf"), "-Infinity"),
        (1e-5, "1.0e-05"),
        ('say "hi"\n', '"say \\"hi\\"\\n"'),
        ("#{x}", '"\\#{x}"'),
        (Symbol("ok?"), ":ok?"),
        (Range(1, 5, exclusive=True), "1...5"),
        ({hash_key("a"): [1, None]}, '{"a" => [1, nil]}'),
        (Fraction(-3, 4), "(-3/4)"),
        (MainObject(), "main"),
        (ClassRef("Hash"), "Hash"),
        (Function("f", ["a", "b"], None), "#<Method: main.f(a, b)>"),
    ],
)
def test_inspect(value, expected: str):
    assert inspect(value) == expected


def test_inspect_recursive_array():
    items: list = [1]
    items.append(items)
    assert inspect(items) == "[1, [...]]"


def test_to_s():
    assert to_s(None) == ""
    assert to_s("plain") == "plain"
    assert to_s(Symbol("sym")) == "sym"
    assert to_s([1, "a"]) == '[1, "a"]'


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{1 => :a, true => :b}", "{1 => :a, true => :b}"),
        ("{1 => :a, 1.0 => :b}", "{1 => :a, 1.0 => :b}"),
        ("h = {1 => :x}\nh[true]", "nil"),
        ("h = {1 => :x}\nh[1.0]", "nil"),
        ("h = {1 => :x}\nh[1]", ":x"),
        ("{1 => :x}.key?(1.0)", "false"),
        ("[1, true, 1.0].tally", "{1 => 1, true => 1, 1.0 => 1}"),
        ("[1, 1.0, true, 1].uniq", "[1, 1.0, true]"),
        ("[1, 2, 3].group_by { |x| x.odd? }.keys", "[true, false]"),
        ("h = {[1, 2] => :pair}\nh[[1, 2]]", ":pair"),
        ("{[1] => 1}.fetch([1.0], :none)", ":none"),
        ("h = {}\nh[:k] = 1\nh[:k] = 2\nh", "{:k => 2}"),
        ("{:a => 1}.delete(:a)", "1"),
        ("{:a => 1} == {:a => 1.0}", "true"),
    ],
)
def test_hash_keys_compare_by_class_and_value(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(1..1000000000000).first(3)", "[1, 2, 3]"),
        ("(1..1000000000000).first", "1"),
        ("(1..1000000000000).take(2)", "[1, 2]"),
        ("(1..1000000000000).each { |i| break i if i > 2 }", "3"),
        ("(1..1000000000000).find { |i| i * i > 50 }", "8"),
        ("(1..1000000000000).size", "1000000000000"),
        ("(1...1000000000000).last(2)", "[999999999998, 999999999999]"),
        ("(1..1000000000000).step(400000000000)", "[1, 400000000001, 800000000001]"),
        ("(1..1000000000000).any? { |i| i == 4 }", "true"),
        ("(1..1000000000000).each_with_index { |i, n| break n if i == 5 }", "4"),
        ("(5..1).size", "0"),
    ],
)
def test_large_ranges_are_not_materialised(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("2 ** -1", "(1/2)"),
        ("2 ** -2 + 1", "(5/4)"),
        ("(2 ** -1) * 2", "(1/1)"),
        ("(2 ** -1) + 0.5", "1.0"),
        ("(2 ** -1) / 2", "(1/4)"),
        ("(2 ** -1).class", "Rational"),
        ('"#{2 ** -1}"', '"1/2"'),
        ("(2 ** -1).to_f", "0.5"),
        ("(3 ** -1) < 1", "true"),
        ("2 ** 3", "8"),
    ],
)
def test_negative_integer_powers_are_rational(source: str, expected: str):
    assert value_of(source) == expected


@pytest.mark.parametrize(
    "source,error_class",
    [
        ("0 ** -1", "ZeroDivisionError"),
        ("(2 ** -1) / 0", "ZeroDivisionError"),
        ("(1..10).first(-1)", "ArgumentError"),
        ("(1..10).last(-1)", "ArgumentError"),
    ],
)
def test_numeric_and_range_faults(source: str, error_class: str):
    result = evaluate(
        InputFragment(lines=[source + "\n"]),
        ExecutionContext(),
        Console(file=io.StringIO()),
    )
    assert not result.success
    assert result.error_class == error_class
