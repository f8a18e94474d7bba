"""Typed lambda terms with capture-avoiding beta reduction.

Terms are immutable. ``Application`` checks types on construction and
raises TypeMismatchError when the function's domain differs from the
argument type. ``Reducer`` normalises in normal order (leftmost,
outermost redex first), unfolding defined constants (delta reduction)
when they reach head position, and gives up after ``max_steps`` with
ReductionDepthExceeded.

Example:
    x = Variable("x", E)
    run = Constant("run", fn(E, T))
    term = Application(Abstraction(x, Application(run, x)), Constant("john", E))
    Reducer().reduce(term)  # run(john)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..exceptions import ReductionDepthExceeded, TypeMismatchError
from .types import E, S, T, FunctionType, SemType, fn

DEFAULT_MAX_STEPS = 1000


class Term:
    """Base class for lambda terms."""

    @property
    def type(self) -> SemType:
        raise NotImplementedError

    def free_variables(self) -> frozenset["Variable"]:
        raise NotImplementedError


@dataclass(frozen=True)
class Variable(Term):
    name: str
    var_type: SemType

    @property
    def type(self) -> SemType:
        return self.var_type

    def free_variables(self) -> frozenset["Variable"]:
        return frozenset({self})

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Constant(Term):
    name: str
    const_type: SemType

    @property
    def type(self) -> SemType:
        return self.const_type

    def free_variables(self) -> frozenset["Variable"]:
        return frozenset()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Abstraction(Term):
    variable: Variable
    body: Term

    @property
    def type(self) -> SemType:
        return FunctionType(self.variable.type, self.body.type)

    def free_variables(self) -> frozenset["Variable"]:
        return self.body.free_variables() - {self.variable}

    def __str__(self) -> str:
        return f"λ{self.variable}.{self.body}"


@dataclass(frozen=True)
class Application(Term):
    function: Term
    argument: Term

    def __post_init__(self) -> None:
        function_type = self.function.type
        if not isinstance(function_type, FunctionType):
            raise TypeMismatchError(
                f"Cannot apply {self.function} of type {function_type} to {self.argument}",
                expected="function type",
                actual=function_type,
            )
        if function_type.domain != self.argument.type:
            raise TypeMismatchError(
                f"{self.function} expects {function_type.domain}, "
                f"got {self.argument} of type {self.argument.type}",
                expected=function_type.domain,
                actual=self.argument.type,
            )

    @property
    def type(self) -> SemType:
        return self.function.type.range

    def free_variables(self) -> frozenset["Variable"]:
        return self.function.free_variables() | self.argument.free_variables()

    def __str__(self) -> str:
        head: Term = self
        arguments = []
        while isinstance(head, Application):
            arguments.append(head.argument)
            head = head.function
        rendered = f"({head})" if isinstance(head, Abstraction) else str(head)
        return f"{rendered}({', '.join(str(a) for a in reversed(arguments))})"


@dataclass(frozen=True)
class DRSTerm(Term):
    """An embedded DRS, opaque to reduction."""

    drs: Any
    label: str = "drs"

    @property
    def type(self) -> SemType:
        return T

    def free_variables(self) -> frozenset["Variable"]:
        return frozenset()

    def __str__(self) -> str:
        return f"[{self.label}]"


# =============================================================================
# Builders
# =============================================================================


def apply(function: Term, *arguments: Term) -> Term:
    """Curried application ``f(a)(b)...``."""
    term = function
    for argument in arguments:
        term = Application(term, argument)
    return term


def abstract(variables: list[Variable] | tuple[Variable, ...], body: Term) -> Term:
    """``λv1...λvn.body``."""
    term = body
    for variable in reversed(variables):
        term = Abstraction(variable, term)
    return term


TRUE = Constant("true", T)
AND = Constant("and", fn(T, T, T))
IMPLIES = Constant("implies", fn(T, T, T))
NOT = Constant("not", fn(T, T))
EXISTS_E = Constant("exists", fn(fn(E, T), T))
FORALL_E = Constant("forall", fn(fn(E, T), T))
EXISTS_S = Constant("exists_s", fn(fn(S, T), T))
FORALL_S = Constant("forall_s", fn(fn(S, T), T))

DETERMINER_TYPE = fn(fn(E, T), fn(E, T), T)


def conjoin(terms: list[Term]) -> Term:
    if not terms:
        return TRUE
    result = terms[-1]
    for term in reversed(terms[:-1]):
        result = apply(AND, term, result)
    return result


def exists(variable: Variable, body: Term) -> Term:
    quantifier = EXISTS_S if variable.type == S else EXISTS_E
    return Application(quantifier, Abstraction(variable, body))


def forall(variable: Variable, body: Term) -> Term:
    quantifier = FORALL_S if variable.type == S else FORALL_E
    return Application(quantifier, Abstraction(variable, body))


def _determiner_definitions() -> dict[str, Term]:
    P = Variable("P", fn(E, T))
    Q = Variable("Q", fn(E, T))
    x = Variable("x", E)
    restrictor = Application(P, x)
    scope = Application(Q, x)
    existential = exists(x, apply(AND, restrictor, scope))
    return {
        "every": abstract([P, Q], forall(x, apply(IMPLIES, restrictor, scope))),
        "some": abstract([P, Q], existential),
        "the": abstract([P, Q], existential),
        "no": abstract([P, Q], Application(NOT, existential)),
    }


DETERMINER_DEFINITIONS: Mapping[str, Term] = _determiner_definitions()


def determiner(name: str) -> Constant:
    return Constant(name, DETERMINER_TYPE)


# =============================================================================
# Substitution
# =============================================================================


def fresh_variable(variable: Variable, avoid: frozenset[Variable] | set[Variable]) -> Variable:
    names = {v.name for v in avoid}
    counter = 1
    while f"{variable.name}{counter}" in names:
        counter += 1
    return Variable(f"{variable.name}{counter}", variable.type)


def substitute(term: Term, variable: Variable, value: Term) -> Term:
    """Replace free occurrences of ``variable`` with ``value``, renaming binders to avoid capture."""
    if isinstance(term, Variable):
        return value if term == variable else term
    if isinstance(term, Application):
        return Application(
            substitute(term.function, variable, value),
            substitute(term.argument, variable, value),
        )
    if isinstance(term, Abstraction):
        if term.variable == variable:
            return term
        if variable not in term.body.free_variables():
            return term
        binder, body = term.variable, term.body
        if binder in value.free_variables():
            renamed = fresh_variable(binder, body.free_variables() | value.free_variables())
            body = substitute(body, binder, renamed)
            binder = renamed
        return Abstraction(binder, substitute(body, variable, value))
    return term


def alpha_equivalent(a: Term, b: Term) -> bool:
    return _alpha(a, b, {}, {})


def _alpha(a: Term, b: Term, left: dict[Variable, int], right: dict[Variable, int]) -> bool:
    if isinstance(a, Variable) and isinstance(b, Variable):
        if a in left or b in right:
            return left.get(a) == right.get(b)
        return a == b
    if isinstance(a, Abstraction) and isinstance(b, Abstraction):
        if a.variable.type != b.variable.type:
            return False
        depth = len(left)
        return _alpha(
            a.body,
            b.body,
            {**left, a.variable: depth},
            {**right, b.variable: depth},
        )
    if isinstance(a, Application) and isinstance(b, Application):
        return _alpha(a.function, b.function, left, right) and _alpha(a.argument, b.argument, left, right)
    return a == b


# =============================================================================
# Reduction
# =============================================================================


@dataclass(frozen=True)
class Reduction:
    term: Term
    steps: int


class Reducer:
    """Normal-order beta/delta reducer with a step bound."""

    def __init__(
        self,
        definitions: Mapping[str, Term] | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        self.definitions = dict(DETERMINER_DEFINITIONS if definitions is None else definitions)
        self.max_steps = max_steps

    def reduce(self, term: Term) -> Term:
        return self.normalize(term).term

    def normalize(self, term: Term) -> Reduction:
        """Reduce to normal form.

        Raises:
            ReductionDepthExceeded: More than ``max_steps`` reductions, or a
                term nested too deeply to substitute into.
        """
        steps = 0
        while True:
            try:
                term, changed = self._step(term)
            except RecursionError as e:
                raise ReductionDepthExceeded(
                    f"Term nesting exceeded the interpreter limit after {steps} reduction steps",
                    steps=steps,
                ) from e
            if not changed:
                return Reduction(term, steps)
            steps += 1
            if steps > self.max_steps:
                raise ReductionDepthExceeded(
                    f"No normal form within {self.max_steps} reduction steps",
                    steps=steps,
                )

    def is_normal(self, term: Term) -> bool:
        return not self._step(term)[1]

    def _contract(self, term: Term) -> Term | None:
        if isinstance(term, Constant):
            definition = self.definitions.get(term.name)
            if definition is not None and definition.type == term.type:
                return definition
            return None
        if isinstance(term, Application) and isinstance(term.function, Abstraction):
            return substitute(term.function.body, term.function.variable, term.argument)
        return None

    def _step(self, term: Term) -> tuple[Term, bool]:
        """Contract the leftmost, outermost redex.

        Walks the term with an explicit stack so deeply nested terms do not
        exhaust the interpreter stack.
        """
        # (node, index of parent in visited, slot in parent)
        visited: list[tuple[Term, int, str]] = []
        stack: list[tuple[Term, int, str]] = [(term, -1, "")]
        while stack:
            node, parent, slot = stack.pop()
            contracted = self._contract(node)
            if contracted is not None:
                return self._rebuild(visited, parent, slot, contracted), True
            index = len(visited)
            visited.append((node, parent, slot))
            if isinstance(node, Application):
                stack.append((node.argument, index, "argument"))
                stack.append((node.function, index, "function"))
            elif isinstance(node, Abstraction):
                stack.append((node.body, index, "body"))
        return term, False

    @staticmethod
    def _rebuild(visited: list[tuple[Term, int, str]], parent: int, slot: str, term: Term) -> Term:
        while parent >= 0:
            node, grandparent, parent_slot = visited[parent]
            if slot == "function":
                term = Application(term, node.argument)
            elif slot == "argument":
                term = Application(node.function, term)
            else:
                term = Abstraction(node.variable, term)
            parent, slot = grandparent, parent_slot
        return term
