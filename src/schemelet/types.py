from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

from .tree import Sequence, SourceMeta

# ---------- Value Model ----------

@dataclass(frozen=True)
class ScmUnspecified:
    def __repr__(self) -> str:
        return "#<unspecified>"

UNSPECIFIED = ScmUnspecified()

@dataclass(frozen=True)
class ScmInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class ScmString:
    value: str
    def __repr__(self) -> str:
        escaped = (
            self.value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\t", "\\t")
        )
        return f'"{escaped}"'

@dataclass(frozen=True)
class ScmBool:
    value: bool
    def __repr__(self) -> str:
        return "#t" if self.value else "#f"

TRUE = ScmBool(True)
FALSE = ScmBool(False)

@dataclass(frozen=True)
class ScmSymbol:
    name: str
    def __repr__(self) -> str:
        return self.name

@dataclass(frozen=True)
class ScmNil:
    def __iter__(self) -> Iterator['ScmValue']:
        return iter(())
    def __repr__(self) -> str:
        return "()"

NIL = ScmNil()

@dataclass(frozen=True)
class ScmPair:
    """Proper-list cell; `cdr` is always another list."""
    car: 'ScmValue'
    cdr: 'ScmList'
    def __iter__(self) -> Iterator['ScmValue']:
        cell: ScmList = self
        while isinstance(cell, ScmPair):
            yield cell.car
            cell = cell.cdr
    def __repr__(self) -> str:
        return "(" + " ".join(repr(item) for item in self) + ")"

ScmList: TypeAlias = ScmNil | ScmPair

def make_list(items: Iterable['ScmValue']) -> ScmList:
    result: ScmList = NIL
    for item in reversed(list(items)):
        result = ScmPair(item, result)
    return result

@dataclass(eq=False)
class ScmClosure:
    params: Tuple[str, ...]
    body: Sequence                # body forms, evaluated in order
    frame: 'Frame'                # captured by reference, never copied
    name: Optional[str] = None
    def __repr__(self) -> str:
        if self.name is None:
            return "#<procedure>"
        return f"#<procedure {self.name}>"

PrimitiveFn = Callable[['Frame', List['ScmValue']], 'ScmValue']

@dataclass(frozen=True)
class ScmPrimitive:
    """Native procedure. `arity` is exact unless `variadic`, then a minimum."""
    name: str
    fn: PrimitiveFn
    arity: Optional[int] = None
    variadic: bool = False
    def __repr__(self) -> str:
        return f"#<primitive {self.name}>"

ScmValue: TypeAlias = (
    ScmUnspecified
    | ScmInt
    | ScmString
    | ScmBool
    | ScmSymbol
    | ScmNil
    | ScmPair
    | ScmClosure
    | ScmPrimitive
)

_SCM_VALUE_TYPES: Tuple[type, ...] = (
    ScmUnspecified,
    ScmInt,
    ScmString,
    ScmBool,
    ScmSymbol,
    ScmNil,
    ScmPair,
    ScmClosure,
    ScmPrimitive,
)

def is_scm_value(value: object) -> TypeGuard[ScmValue]:
    return isinstance(value, _SCM_VALUE_TYPES)

def is_procedure(value: ScmValue) -> bool:
    return isinstance(value, (ScmClosure, ScmPrimitive))

# ---------- Environment ----------

@dataclass(eq=False)
class Binding:
    """Mutable slot for one name. Identity matters, the value is replaceable."""
    name: str
    value: ScmValue

class Builtins:
    primitives: Dict[str, ScmPrimitive] = {}

class Frame:
    def __init__(self, parent: Optional['Frame']=None, source: Optional[str]=None):
        self.parent = parent
        self.vars: Dict[str, Binding] = {}
        self.source: Optional[str]

        if parent is None and Builtins.primitives:
            for name, prim in Builtins.primitives.items():
                self.vars[name] = Binding(name, prim)

        if source is not None:
            self.source = source
        elif parent is not None:
            self.source = parent.source
        else:
            self.source = None

    def define(self, name: str, val: ScmValue) -> Binding:
        binding = self.vars.get(name)

        if binding is None:
            binding = Binding(name, val)
            self.vars[name] = binding
        else:
            binding.value = val

        return binding

    def lookup(self, name: str) -> Binding:
        frame: Optional[Frame] = self

        while frame is not None:
            binding = frame.vars.get(name)
            if binding is not None:
                return binding
            frame = frame.parent

        raise UnboundVariable(name)

    def get(self, name: str) -> ScmValue:
        return self.lookup(name).value

    def assign(self, name: str, val: ScmValue) -> Binding:
        binding = self.lookup(name)
        binding.value = val
        return binding

    def extend(self, bindings: Optional[Mapping[str, ScmValue]]=None) -> 'Frame':
        child = Frame(parent=self)

        if bindings:
            for name, val in bindings.items():
                child.vars[name] = Binding(name, val)

        return child

    def is_bound(self, name: str) -> bool:
        try:
            self.lookup(name)
        except UnboundVariable:
            return False
        return True

    def depth(self) -> int:
        depth = 0
        frame = self.parent

        while frame is not None:
            depth += 1
            frame = frame.parent

        return depth

    def __repr__(self) -> str:
        names = ", ".join(self.vars)
        return f"<Frame depth={self.depth()} [{names}]>"

# ---------- Exceptions ----------

class SchemeRuntimeError(Exception):
    meta: Optional[SourceMeta]

    def __init__(self, message: str):
        super().__init__(message)
        self.meta = None

    def __str__(self) -> str:
        msg = super().__str__()

        if self.meta is None:
            return msg

        return f"{msg} (line {self.meta.line}, col {self.meta.column})"

class UnboundVariable(SchemeRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Unbound variable: {name}")
        self.name = name

class ArityError(SchemeRuntimeError):
    def __init__(self, proc_name: Optional[str], expected: int, actual: int, at_least: bool = False):
        label = proc_name or "anonymous procedure"
        wanted = f"at least {expected}" if at_least else str(expected)
        super().__init__(f"{label}: expected {wanted} argument(s), got {actual}")
        self.proc_name = proc_name
        self.expected = expected
        self.actual = actual
        self.at_least = at_least

class SchemeTypeError(SchemeRuntimeError):
    pass

class NotCallable(SchemeRuntimeError):
    def __init__(self, value: ScmValue):
        super().__init__(f"Not a procedure: {value!r}")
        self.value = value

class RecursionDepthExceeded(SchemeRuntimeError):
    def __init__(self, depth: Optional[int] = None):
        detail = f" ({depth} nested procedure calls)" if depth is not None else ""
        super().__init__(f"Recursion too deep{detail}")
        self.depth = depth

class SchemeSyntaxError(SchemeRuntimeError):
    pass

def ensure_scm_value(value: object) -> ScmValue:
    if value is None:
        return UNSPECIFIED
    if is_scm_value(value):
        return value
    raise SchemeTypeError(f"Unexpected value type {type(value).__name__}")
