"""Tests for typed lambda terms and the reducer."""

import pytest

from eventsem.drt import (
    E,
    S,
    T,
    Abstraction,
    Application,
    Constant,
    DRSTerm,
    Reducer,
    Variable,
    abstract,
    alpha_equivalent,
    apply,
    determiner,
    fn,
    substitute,
)
from eventsem.drt.terms import AND, TRUE, conjoin, exists, forall
from eventsem.exceptions import ReductionDepthExceeded, TypeMismatchError

x = Variable("x", E)
y = Variable("y", E)
z = Variable("z", E)
john = Constant("john", E)
run = Constant("run", fn(E, T))
love = Constant("love", fn(E, E, T))
student = Constant("student", fn(E, T))
sleep = Constant("sleep", fn(E, T))


# =============================================================================
# Construction
# =============================================================================


class TestTermConstruction:
    """Tests for building terms."""

    def test_application_type(self):
        """Test an application has the range of its function."""
        term = Application(run, john)
        assert term.type == T
        assert str(term) == "run(john)"

    def test_domain_mismatch(self):
        """Test applying to the wrong type raises TypeMismatchError."""
        with pytest.raises(TypeMismatchError) as exc_info:
            Application(run, Constant("e1", S))
        assert exc_info.value.expected == E
        assert exc_info.value.actual == S

    def test_non_function_application(self):
        """Test applying a non-function is rejected."""
        with pytest.raises(TypeMismatchError) as exc_info:
            Application(john, john)
        assert exc_info.value.expected == "function type"

    def test_abstraction_type(self):
        """Test an abstraction's type is variable type to body type."""
        term = Abstraction(x, Application(run, x))
        assert term.type == fn(E, T)
        assert str(term) == "λx.run(x)"

    def test_curried_rendering(self):
        """Test curried applications render as one call."""
        assert str(apply(love, john, x)) == "love(john, x)"

    def test_redex_rendering(self):
        """Test an applied abstraction is parenthesised."""
        term = Application(Abstraction(x, Application(run, x)), john)
        assert str(term) == "(λx.run(x))(john)"

    def test_free_variables(self):
        """Test free variables exclude bound ones."""
        term = Abstraction(x, apply(love, x, y))
        assert term.free_variables() == frozenset({y})

    def test_abstract_builds_nested_lambdas(self):
        """Test abstract binds variables left to right."""
        term = abstract([x, y], apply(love, x, y))
        assert str(term) == "λx.λy.love(x, y)"
        assert term.type == fn(E, E, T)

    def test_conjoin(self):
        """Test conjunction of zero, one and two terms."""
        assert conjoin([]) == TRUE
        assert conjoin([Application(run, john)]) == Application(run, john)
        assert str(conjoin([Application(run, john), Application(sleep, john)])) == "and(run(john), sleep(john))"

    def test_quantifier_by_variable_type(self):
        """Test event variables use the event quantifiers."""
        v = Variable("e1", S)
        walk = Constant("walk", fn(S, T))
        assert str(exists(v, Application(walk, v))) == "exists_s(λe1.walk(e1))"
        assert str(forall(x, Application(run, x))) == "forall(λx.run(x))"

    def test_drs_term(self):
        """Test embedded DRSs are truth-valued and opaque."""
        term = DRSTerm(drs=None, label="box")
        assert term.type == T
        assert str(term) == "[box]"
        assert term.free_variables() == frozenset()


# =============================================================================
# Substitution
# =============================================================================


class TestSubstitution:
    """Tests for capture-avoiding substitution and alpha equivalence."""

    def test_substitute_free_occurrence(self):
        """Test free occurrences are replaced."""
        assert substitute(Application(run, x), x, john) == Application(run, john)

    def test_bound_occurrence_untouched(self):
        """Test a variable bound by the abstraction is not replaced."""
        term = Abstraction(x, Application(run, x))
        assert substitute(term, x, john) == term

    def test_capture_avoided(self):
        """Test a binder is renamed when it would capture the value."""
        term = Abstraction(y, apply(love, x, y))

        result = substitute(term, x, y)

        assert result.variable.name == "y1"
        assert str(result) == "λy1.love(y, y1)"
        assert y in result.free_variables()

    def test_alpha_equivalence(self):
        """Test renaming bound variables preserves equivalence."""
        assert alpha_equivalent(Abstraction(x, Application(run, x)), Abstraction(z, Application(run, z)))
        assert not alpha_equivalent(Abstraction(x, Application(run, x)), Abstraction(x, Application(run, y)))
        assert not alpha_equivalent(
            Abstraction(x, Abstraction(y, apply(love, x, y))),
            Abstraction(x, Abstraction(y, apply(love, y, x))),
        )


# =============================================================================
# Reduction
# =============================================================================


class TestReducer:
    """Tests for normal-order reduction."""

    def _every_student_sleeps(self):
        return apply(
            determiner("every"),
            Abstraction(x, Application(student, x)),
            Abstraction(x, Application(sleep, x)),
        )

    def test_beta_reduction(self):
        """Test a single beta step."""
        reduction = Reducer().normalize(Application(Abstraction(x, Application(run, x)), john))
        assert reduction.term == Application(run, john)
        assert reduction.steps == 1

    def test_determiner_unfolding(self):
        """Test determiners unfold to their quantifier definitions."""
        reduction = Reducer().normalize(self._every_student_sleeps())

        assert str(reduction.term) == "forall(λx.implies(student(x), sleep(x)))"
        assert reduction.steps == 5
        assert reduction.term.type == T

    def test_negative_determiner(self):
        """Test 'no' unfolds to a negated existential."""
        term = apply(
            determiner("no"),
            Abstraction(x, Application(student, x)),
            Abstraction(x, Application(sleep, x)),
        )
        assert str(Reducer().reduce(term)) == "not(exists(λx.and(student(x), sleep(x))))"

    def test_without_definitions(self):
        """Test an empty definitions map leaves determiners folded."""
        term = self._every_student_sleeps()
        assert Reducer(definitions={}).reduce(term) == term

    def test_normal_form_is_stable(self):
        """Test reducing a normal form does nothing."""
        reducer = Reducer()
        normal = reducer.reduce(self._every_student_sleeps())
        assert reducer.is_normal(normal)
        assert reducer.normalize(normal).steps == 0
        assert not reducer.is_normal(self._every_student_sleeps())

    def test_step_limit(self):
        """Test exceeding max_steps raises ReductionDepthExceeded."""
        with pytest.raises(ReductionDepthExceeded) as exc_info:
            Reducer(max_steps=2).normalize(self._every_student_sleeps())
        assert exc_info.value.steps == 3
        assert exc_info.value.stage == "composition"

    def test_non_terminating_definition(self):
        """Test a self-referential definition is cut off."""
        loop = Constant("loop", T)
        with pytest.raises(ReductionDepthExceeded):
            Reducer(definitions={"loop": loop}, max_steps=10).normalize(loop)

    @pytest.mark.parametrize("right_nested", [True, False])
    def test_growing_definition_hits_step_bound(self, right_nested):
        """Test a definition that grows the term stops at the default bound."""
        loop = Constant("loop", T)
        body = apply(AND, TRUE, loop) if right_nested else apply(AND, loop, TRUE)

        with pytest.raises(ReductionDepthExceeded) as exc_info:
            Reducer(definitions={"loop": body}).normalize(loop)

        assert exc_info.value.steps == 1001

    def test_deep_term_reduces(self):
        """Test a deeply nested term reduces without exhausting the stack."""
        term = Application(Abstraction(x, Application(run, x)), john)
        for _ in range(3000):
            term = apply(AND, TRUE, term)

        reduction = Reducer().normalize(term)

        assert reduction.steps == 1

    def test_definition_type_must_match(self):
        """Test a constant is only unfolded when its type matches the definition."""
        reducer = Reducer(definitions={"run": john})
        assert reducer.reduce(Application(run, john)) == Application(run, john)
