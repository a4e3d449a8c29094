import math

import numpy as np
import pytest

from scalargrad.engine import Op, Value, backward, topological_order


def numerical_grad(f, values, i, h=1e-6):
    """Central difference of f with respect to values[i]."""
    up = list(values)
    down = list(values)
    up[i] += h
    down[i] -= h
    return (f(*[Value(v) for v in up]).data - f(*[Value(v) for v in down]).data) / (2 * h)


def test_new_value_is_a_leaf():
    v = Value(1.5)
    assert v.data == 1.5
    assert v.grad == 0.0
    assert v._prev == ()
    assert v._op is Op.LEAF
    assert isinstance(v.data, np.float64)


def test_values_are_scalars_only():
    with pytest.raises(TypeError):
        Value([1.0, 2.0])


def test_add_and_mul_forward():
    a, b = Value(1.25), Value(-4.0)
    assert (a + b).data == 1.25 + -4.0
    assert (a * b).data == 1.25 * -4.0


def test_operands_in_evaluation_order():
    a, b = Value(1.0), Value(2.0)
    c = a * b
    assert c._prev == (a, b)
    d = b + a
    assert d._prev == (b, a)


def test_mul_end_to_end():
    a = Value(3.0)
    b = Value(2.0)
    c = a * b
    c.backward()
    assert c.data == 6.0
    assert a.grad == 2.0
    assert b.grad == 3.0
    assert c.grad == 1.0


def test_tanh_end_to_end():
    x = Value(2.0)
    y = x.tanh()
    y.backward()
    assert y.data == pytest.approx(math.tanh(2.0))
    assert x.grad == pytest.approx(1 - math.tanh(2.0) ** 2)
    assert x.grad == pytest.approx(0.0707, abs=1e-4)


def test_exp():
    x = Value(0.5)
    y = x.exp()
    y.backward()
    assert y.data == pytest.approx(math.exp(0.5))
    assert x.grad == pytest.approx(math.exp(0.5))


def test_pow_constant_exponent():
    x = Value(3.0)
    y = x ** 2
    y.backward()
    assert y.data == 9.0
    assert x.grad == 6.0
    assert y._exponent == 2


def test_pow_rejects_value_exponent():
    with pytest.raises(AssertionError):
        Value(2.0) ** Value(3.0)


def test_neg_is_mul_by_constant():
    a = Value(4.0)
    b = -a
    assert b.data == -4.0
    assert b._op is Op.MUL
    assert b._prev[0] is a
    assert b._prev[1].data == -1.0
    b.backward()
    assert a.grad == -1.0


def test_sub_is_add_of_neg():
    a, b = Value(5.0), Value(2.0)
    c = a - b
    assert c.data == 3.0
    assert c._op is Op.ADD
    c.backward()
    assert a.grad == 1.0
    assert b.grad == -1.0


def test_div_is_mul_by_reciprocal():
    a, b = Value(6.0), Value(3.0)
    c = a / b
    assert c.data == pytest.approx(2.0)
    assert c._op is Op.MUL
    assert c._prev[1]._op is Op.POW
    c.backward()
    assert a.grad == pytest.approx(1 / 3)
    assert b.grad == pytest.approx(-6 / 9)


def test_scalar_operands_are_wrapped():
    a = Value(2.0)
    assert (a + 1).data == 3.0
    assert (1 + a).data == 3.0
    assert (a * 3).data == 6.0
    assert (3 * a).data == 6.0
    assert (a - 1).data == 1.0
    assert (1 - a).data == -1.0
    assert (a / 4).data == pytest.approx(0.5)
    assert (4 / a).data == pytest.approx(2.0)


def test_division_by_zero_propagates_inf():
    c = Value(1.0) / Value(0.0)
    assert math.isinf(c.data)


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_zero_over_zero_is_nan():
    c = Value(0.0) / Value(0.0)
    assert math.isnan(c.data)


def test_fractional_power_of_negative_base_is_nan():
    c = Value(-8.0) ** 0.5
    assert math.isnan(c.data)


def test_division_by_zero_propagates_through_backward():
    a, b = Value(1.0), Value(0.0)
    c = a / b
    c.backward()
    assert math.isinf(a.grad)
    assert not math.isfinite(b.grad)


def test_fractional_power_of_negative_base_backward_is_nan():
    x = Value(-8.0)
    y = x ** 0.5
    y.backward()
    assert math.isnan(x.grad)


def test_pow_accepts_numpy_exponent():
    x = Value(2.0)
    y = x ** np.int64(3)
    y.backward()
    assert y.data == 8.0
    assert x.grad == 12.0


def test_data_writes_keep_float_semantics():
    p = Value(1.0)
    p.data = 0
    assert isinstance(p.data, np.float64)
    assert math.isinf((p ** -1).data)


@pytest.mark.parametrize("op, data, operands, expected", [
    (Op.ADD, 5.0, (2.0, 3.0), (4.0, 4.0)),
    (Op.MUL, 6.0, (2.0, 3.0), (12.0, 8.0)),
    (Op.TANH, math.tanh(0.5), (0.5,), (4 * (1 - math.tanh(0.5) ** 2),)),
    (Op.EXP, math.exp(1.0), (1.0,), (4 * math.exp(1.0),)),
])
def test_local_backward_rule(op, data, operands, expected):
    children = [Value(d) for d in operands]
    out = Value(data, children, op)
    out.grad = 4.0
    out._backward()
    assert [c.grad for c in children] == pytest.approx(list(expected))


def test_local_backward_rule_pow():
    a = Value(2.0)
    out = a ** 3
    out.grad = 0.5
    out._backward()
    assert a.grad == pytest.approx(0.5 * 3 * 2.0 ** 2)


def test_local_backward_accumulates():
    a, b = Value(1.0), Value(2.0)
    a.grad = 10.0
    out = a + b
    out.grad = 1.0
    out._backward()
    assert a.grad == 11.0


def test_leaf_backward_is_noop():
    v = Value(3.0)
    v.grad = 2.0
    v._backward()
    assert v.grad == 2.0


def test_fan_out_accumulates():
    x, a, b = Value(1.5), Value(2.0), Value(-0.5)
    root = x * a + x * b
    root.backward()
    assert x.grad == a.data + b.data


def test_same_operand_twice():
    a = Value(3.0)
    b = a * a
    b.backward()
    assert a.grad == 6.0
    c = Value(3.0)
    d = c + c
    d.backward()
    assert c.grad == 2.0


def test_repeated_calls_give_distinct_nodes():
    a, b = Value(2.0), Value(5.0)
    c1 = a * b
    c2 = a * b
    assert c1 is not c2
    assert c1.data == c2.data


def test_topological_order_dedupes_by_identity():
    x, y = Value(1.0), Value(1.0)
    z = x + y
    topo = topological_order(z)
    assert len(topo) == 3
    assert topo[-1] is z


def test_topological_order_puts_operands_first():
    a, b = Value(0.3), Value(-1.2)
    e = ((a * b).tanh() + a.exp() - b ** 2) / (a + 3)
    topo = topological_order(e)
    position = {id(v): i for i, v in enumerate(topo)}
    assert len(position) == len(topo)
    for v in topo:
        for child in v._prev:
            assert position[id(child)] < position[id(v)]


def test_backward_zero_then_independent_roots():
    x, y = Value(2.0), Value(3.0)
    r1 = x * y
    r2 = x + y

    r1.backward()
    r2.backward()
    # Without zeroing, shared operands accumulate both gradients
    assert x.grad == 3.0 + 1.0
    assert y.grad == 2.0 + 1.0

    x.grad = y.grad = 0.0
    backward(r2)
    assert x.grad == 1.0
    assert y.grad == 1.0


def test_long_chain_does_not_recurse():
    leaves = [Value(1.0) for _ in range(5000)]
    total = leaves[0]
    for v in leaves[1:]:
        total = total + v
    total.backward()
    assert total.data == 5000.0
    assert all(v.grad == 1.0 for v in leaves)


def composite(a, b, c):
    return ((a * b + c).tanh() * a.exp() - b / c + (a - c) ** 2) / (b ** 3 + 2)


@pytest.mark.parametrize("values", [
    (0.7, -1.3, 2.1),
    (-0.4, 0.9, 1.5),
    (1.1, 2.0, -0.6),
])
def test_gradients_match_finite_differences(values):
    leaves = [Value(v) for v in values]
    out = composite(*leaves)
    out.backward()
    for i, leaf in enumerate(leaves):
        expected = numerical_grad(composite, values, i)
        assert leaf.grad == pytest.approx(expected, rel=1e-4, abs=1e-6)


def test_repr():
    a = Value(2.0, name="a")
    assert repr(a) == "Value('a' data=2.0, grad=0.0)"
    assert "from **2" in repr(a ** 2)
    assert "from tanh" in repr(a.tanh())
