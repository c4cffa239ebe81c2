import pytest

from linear_gp.config import ProgramParams
from linear_gp.programs import Instruction, Program
from linear_gp.utils.errors import InvariantViolation


def _params(**kw):
    base = dict(max_instructions=4, register_count=3, input_count=2, action_count=2)
    base.update(kw)
    return ProgramParams(**base)


def _add(dst=0, src=0, mode="internal"):
    return Instruction("add", dst, src, mode)


def test_empty_program_rejected():
    """Programs need at least one instruction."""
    with pytest.raises(InvariantViolation):
        Program((), _params())


def test_too_long_program_rejected():
    """Programs cannot exceed max_instructions."""
    with pytest.raises(InvariantViolation):
        Program(tuple(_add() for _ in range(5)), _params())


def test_register_bounds_checked():
    """Destination and source indices must be in range for their mode."""
    with pytest.raises(InvariantViolation, match="destination"):
        Program((_add(dst=3),), _params())
    with pytest.raises(InvariantViolation, match="source"):
        Program((_add(src=3),), _params())
    with pytest.raises(InvariantViolation, match="source"):
        Program((_add(src=2, mode="external"),), _params())


def test_action_destination_limited_to_action_registers():
    """Action instructions may only write registers below action_count."""
    Program((Instruction("vote", 1, 0),), _params())
    with pytest.raises(InvariantViolation):
        Program((Instruction("vote", 2, 0),), _params())


def test_unknown_or_disallowed_opcode_rejected():
    """Opcodes must be registered and allowed by the parameters."""
    with pytest.raises(InvariantViolation):
        Program((Instruction("nope", 0, 0),), _params())
    with pytest.raises(InvariantViolation):
        Program((Instruction("mul", 0, 0),), _params(opcodes=("add",)))


def test_constant_mode_requires_constant():
    """Constant operands must carry a value."""
    with pytest.raises(InvariantViolation, match="instruction 0"):
        Program((Instruction("add", 0, mode="constant"),), _params())


def test_unbound_params_rejected():
    """Programs need a resolved register layout."""
    with pytest.raises(InvariantViolation):
        Program((_add(),), ProgramParams())


def test_copy_keeps_instructions_and_fitness():
    """Clones share instructions and fitness but get a fresh id."""
    prog = Program((_add(),), _params(), fitness=0.5)
    clone = prog.copy()
    assert clone.instructions == prog.instructions
    assert clone.fitness == 0.5
    assert clone.program_id != prog.program_id
    assert clone.registers is not prog.registers


def test_fingerprint_tracks_structure():
    """Equal instruction sequences share a fingerprint."""
    a = Program((_add(), _add(1)), _params())
    b = Program((_add(), _add(1)), _params())
    c = Program((_add(1), _add()), _params())
    assert a.fingerprint == b.fingerprint
    assert a.fingerprint != c.fingerprint


def test_to_string_renders_instructions():
    """Text form lists instructions in order."""
    prog = Program(
        (
            Instruction("add", 0, 1, "external"),
            Instruction("if_lt", 1, mode="constant", constant=2.5),
        ),
        _params(),
    )
    assert prog.to_string() == "r[0] = add(r[0], x[1]); if_lt(r[1], 2.5)"
    assert prog.size == 2
