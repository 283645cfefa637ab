"""Built-in primitives (+, display, etc.) registered via schemelet.runtime."""

from __future__ import annotations

from typing import List

from .runtime import register_primitive, ScmBool, ScmClosure, ScmInt, ScmNil, ScmPair, ScmSymbol, ScmValue, SchemeTypeError
from .runtime import UNSPECIFIED, TRUE, FALSE, make_list
from .eval.common import stringify
from .evaluator import eval_node
from .lower import datum_from_value, lower

def _ints(name: str, args: List[ScmValue]) -> List[int]:
    numbers = []

    for index, arg in enumerate(args):
        if not isinstance(arg, ScmInt):
            raise SchemeTypeError(f"{name}: expected integer as argument {index + 1}, got {arg!r}")
        numbers.append(arg.value)

    return numbers

@register_primitive("+", arity=0, variadic=True)
def std_add(_frame, args: List[ScmValue]) -> ScmInt:
    return ScmInt(sum(_ints("+", args)))

@register_primitive("-", arity=1, variadic=True)
def std_sub(_frame, args: List[ScmValue]) -> ScmInt:
    first, *rest = _ints("-", args)

    if not rest:
        return ScmInt(-first)

    return ScmInt(first - sum(rest))

@register_primitive("*", arity=0, variadic=True)
def std_mul(_frame, args: List[ScmValue]) -> ScmInt:
    product = 1

    for value in _ints("*", args):
        product *= value

    return ScmInt(product)

def _chain(name: str, args: List[ScmValue], holds) -> ScmBool:
    numbers = _ints(name, args)

    for left, right in zip(numbers, numbers[1:]):
        if not holds(left, right):
            return FALSE

    return TRUE

@register_primitive("=", arity=1, variadic=True)
def std_num_eq(_frame, args: List[ScmValue]) -> ScmBool:
    return _chain("=", args, lambda a, b: a == b)

@register_primitive("<", arity=1, variadic=True)
def std_lt(_frame, args: List[ScmValue]) -> ScmBool:
    return _chain("<", args, lambda a, b: a < b)

@register_primitive(">", arity=1, variadic=True)
def std_gt(_frame, args: List[ScmValue]) -> ScmBool:
    return _chain(">", args, lambda a, b: a > b)

@register_primitive("eq?", arity=2)
def std_eq(_frame, args: List[ScmValue]) -> ScmBool:
    left, right = args

    if isinstance(left, ScmClosure) or isinstance(right, ScmClosure):
        return ScmBool(left is right)

    return ScmBool(left == right)

@register_primitive("number?", arity=1)
def std_is_number(_frame, args: List[ScmValue]) -> ScmBool:
    return ScmBool(isinstance(args[0], ScmInt))

@register_primitive("not", arity=1)
def std_not(_frame, args: List[ScmValue]) -> ScmBool:
    return ScmBool(args[0] == FALSE)

@register_primitive("display", arity=1)
def std_display(_frame, args: List[ScmValue]):
    print(stringify(args[0]), end="", flush=True)
    return UNSPECIFIED

# ---------------- lists ----------------

def _pair(name: str, value: ScmValue) -> ScmPair:
    if not isinstance(value, ScmPair):
        raise SchemeTypeError(f"{name}: expected a non-empty list, got {value!r}")
    return value

@register_primitive("cons", arity=2)
def std_cons(_frame, args: List[ScmValue]) -> ScmPair:
    car, cdr = args

    if not isinstance(cdr, (ScmNil, ScmPair)):
        raise SchemeTypeError(f"cons: expected a list as argument 2, got {cdr!r}")

    return ScmPair(car, cdr)

@register_primitive("car", arity=1)
def std_car(_frame, args: List[ScmValue]) -> ScmValue:
    return _pair("car", args[0]).car

@register_primitive("cdr", arity=1)
def std_cdr(_frame, args: List[ScmValue]) -> ScmValue:
    return _pair("cdr", args[0]).cdr

@register_primitive("list", arity=0, variadic=True)
def std_list(_frame, args: List[ScmValue]) -> ScmValue:
    return make_list(args)

@register_primitive("null?", arity=1)
def std_is_null(_frame, args: List[ScmValue]) -> ScmBool:
    return ScmBool(isinstance(args[0], ScmNil))

@register_primitive("pair?", arity=1)
def std_is_pair(_frame, args: List[ScmValue]) -> ScmBool:
    return ScmBool(isinstance(args[0], ScmPair))

@register_primitive("atom?", arity=1)
def std_is_atom(_frame, args: List[ScmValue]) -> ScmBool:
    return ScmBool(not isinstance(args[0], ScmPair))

@register_primitive("symbol?", arity=1)
def std_is_symbol(_frame, args: List[ScmValue]) -> ScmBool:
    return ScmBool(isinstance(args[0], ScmSymbol))

@register_primitive("eval", arity=1)
def std_eval(frame, args: List[ScmValue]) -> ScmValue:
    # Runs in the caller's frame, so (eval '(define x 1)) defines there.
    return eval_node(lower(datum_from_value(args[0])), frame)
