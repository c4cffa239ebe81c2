from __future__ import annotations
from typing import Callable
import functools
import math

from .types import OpKind, OpSpec, OP_REGISTRY, SAFE_MAX, EPS

###############################################################################
# 2 -- Primitive operators (and helpers)
###############################################################################

def clean_num(x: float) -> float:
    """
    Convert NaN → 0,  +inf → +SAFE_MAX,  -inf → -SAFE_MAX,
    then hard-clip to ±SAFE_MAX.
    """
    x = float(x)
    if math.isnan(x):
        return 0.0
    return max(-SAFE_MAX, min(SAFE_MAX, x))

def safe_op(fn):
    """
    Decorator: sanitise inputs **and** output of a register operation.
    The result is always finite and within ±SAFE_MAX.
    """
    @functools.wraps(fn)
    def wrapped(a, b):
        return clean_num(fn(clean_num(a), clean_num(b)))
    return wrapped

def register_op(name: str, *, kind: OpKind):
    def _wrapper(fn: Callable):
        if name in OP_REGISTRY:
            raise KeyError(f"opcode '{name}' registered twice")
        OP_REGISTRY[name] = OpSpec(fn, kind)
        return fn
    return _wrapper


# arithmetic: destination <- f(destination, operand)

@register_op("add", kind="arithmetic")
@safe_op
def _add(a, b): return a + b

@register_op("sub", kind="arithmetic")
@safe_op
def _sub(a, b): return a - b

@register_op("mul", kind="arithmetic")
@safe_op
def _mul(a, b): return a * b

@register_op("div", kind="arithmetic")
@safe_op
def _div(a, b):
    if abs(b) <= EPS:
        return 0.0
    return a / b

@register_op("mov", kind="arithmetic")
@safe_op
def _mov(a, b): return b

@register_op("max", kind="arithmetic")
@safe_op
def _max(a, b): return max(a, b)

@register_op("min", kind="arithmetic")
@safe_op
def _min(a, b): return min(a, b)


# comparison: destination <- 1.0 / 0.0

@register_op("lt", kind="comparison")
@safe_op
def _lt(a, b): return 1.0 if a < b else 0.0

@register_op("gt", kind="comparison")
@safe_op
def _gt(a, b): return 1.0 if a > b else 0.0


# branch: the next instruction runs only when the condition holds

@register_op("if_lt", kind="branch")
def _if_lt(a, b): return clean_num(a) < clean_num(b)

@register_op("if_gt", kind="branch")
def _if_gt(a, b): return clean_num(a) > clean_num(b)

@register_op("if_eq", kind="branch")
def _if_eq(a, b): return abs(clean_num(a) - clean_num(b)) <= EPS


# action: accumulate evidence for one of the task's actions

@register_op("vote", kind="action")
@safe_op
def _vote(a, b): return a + b
