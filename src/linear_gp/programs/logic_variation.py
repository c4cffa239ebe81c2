from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple
import numpy as np

from .instruction import Instruction
from .logic_generation import (
    allowed_opcodes,
    random_destination,
    random_instruction,
    random_operand,
)

if TYPE_CHECKING:
    from .program import Program



def mutate_program_logic(
    self_prog: "Program",
    rng: Optional[np.random.Generator] = None,
    max_edits: int = 1,
) -> "Program":
    """
    Core logic for Program.mutate: apply 1..max_edits random edits.

    Length stays within [1, max_instructions]; the returned program has no
    fitness.
    """
    rng = rng or np.random.default_rng()
    params = self_prog.params
    ops_list = list(self_prog.instructions)

    n_edits = int(rng.integers(1, max(1, max_edits) + 1))
    for _ in range(n_edits):
        possible_mutations = ["replace", "change_opcode", "change_operand"]
        if len(ops_list) < params.max_instructions:
            possible_mutations.append("insert")
        if len(ops_list) > 1:
            possible_mutations.append("delete")
        mutation_type = possible_mutations[int(rng.integers(len(possible_mutations)))]

        if mutation_type == "insert":
            insert_instruction_mutation(ops_list, params, rng)
        elif mutation_type == "delete":
            delete_instruction_mutation(ops_list, rng)
        elif mutation_type == "replace":
            replace_instruction_mutation(ops_list, params, rng)
        elif mutation_type == "change_opcode":
            change_opcode_mutation(ops_list, params, rng)
        else:
            change_operand_mutation(ops_list, params, rng)

    return type(self_prog)(tuple(ops_list), params)


def insert_instruction_mutation(ops_list: List[Instruction], params, rng: np.random.Generator) -> None:
    """Insert a freshly generated instruction at a random position."""
    insertion_idx = int(rng.integers(0, len(ops_list) + 1))
    ops_list.insert(insertion_idx, random_instruction(params, rng))


def delete_instruction_mutation(ops_list: List[Instruction], rng: np.random.Generator) -> None:
    if len(ops_list) <= 1:
        return
    ops_list.pop(int(rng.integers(0, len(ops_list))))


def replace_instruction_mutation(ops_list: List[Instruction], params, rng: np.random.Generator) -> None:
    idx = int(rng.integers(0, len(ops_list)))
    ops_list[idx] = random_instruction(params, rng)


def change_opcode_mutation(ops_list: List[Instruction], params, rng: np.random.Generator) -> None:
    """Swap the operation for another of the same kind, keeping the operands."""
    idx = int(rng.integers(0, len(ops_list)))
    original = ops_list[idx]
    compatible = [n for n in allowed_opcodes(params, original.kind) if n != original.opcode]
    if not compatible:
        return
    new_opcode = compatible[int(rng.integers(len(compatible)))]
    ops_list[idx] = Instruction(new_opcode, original.dst, original.src, original.mode, original.constant)


def change_operand_mutation(ops_list: List[Instruction], params, rng: np.random.Generator) -> None:
    """Re-draw either the destination or the operand of one instruction."""
    idx = int(rng.integers(0, len(ops_list)))
    original = ops_list[idx]
    if rng.random() < 0.5:
        dst = random_destination(params, original.kind, rng)
        ops_list[idx] = Instruction(original.opcode, dst, original.src, original.mode, original.constant)
    else:
        ops_list[idx] = Instruction(original.opcode, original.dst, **random_operand(params, rng))


def one_point_children(
    a: Sequence[Instruction],
    b: Sequence[Instruction],
    point_a: int,
    point_b: int,
    max_instructions: int,
) -> Tuple[Tuple[Instruction, ...], Tuple[Instruction, ...]]:
    """Swap tails: ``a[:point_a] + b[point_b:]`` and ``b[:point_b] + a[point_a:]``.

    Cut points lie in ``[1, len]`` so both children keep at least one
    instruction; children are truncated to ``max_instructions``.
    """
    child_a = tuple(a[:point_a]) + tuple(b[point_b:])
    child_b = tuple(b[:point_b]) + tuple(a[point_a:])
    return child_a[:max_instructions], child_b[:max_instructions]


def two_point_children(
    a: Sequence[Instruction],
    b: Sequence[Instruction],
    seg_a: Tuple[int, int],
    seg_b: Tuple[int, int],
    max_instructions: int,
) -> Tuple[Tuple[Instruction, ...], Tuple[Instruction, ...]]:
    """Exchange the non-empty segments ``a[i:j]`` and ``b[k:l]``.

    An incoming segment is shortened so its child fits ``max_instructions``.
    """
    (i, j), (k, l) = seg_a, seg_b
    room_a = max_instructions - (len(a) - (j - i))
    room_b = max_instructions - (len(b) - (l - k))
    child_a = tuple(a[:i]) + tuple(b[k:min(l, k + room_a)]) + tuple(a[j:])
    child_b = tuple(b[:k]) + tuple(a[i:min(j, i + room_b)]) + tuple(b[l:])
    return child_a, child_b


def _random_segment(length: int, rng: np.random.Generator) -> Tuple[int, int]:
    start = int(rng.integers(0, length))
    end = int(rng.integers(start + 1, length + 1))
    return start, end


def crossover_program_logic(
    self_prog: "Program",
    other_prog: "Program",
    rng: Optional[np.random.Generator] = None,
    kind: str = "two_point",
) -> Tuple["Program", "Program"]:
    """
    Core logic for Program.crossover: returns two children with unset fitness.
    """
    rng = rng or np.random.default_rng()
    params = self_prog.params
    a, b = self_prog.instructions, other_prog.instructions

    if kind == "one_point":
        point_a = int(rng.integers(1, len(a) + 1))
        point_b = int(rng.integers(1, len(b) + 1))
        child_a, child_b = one_point_children(a, b, point_a, point_b, params.max_instructions)
    elif kind == "two_point":
        child_a, child_b = two_point_children(
            a, b, _random_segment(len(a), rng), _random_segment(len(b), rng), params.max_instructions
        )
    else:
        raise ValueError(f"unknown crossover kind: {kind!r}")

    cls = type(self_prog)
    return cls(child_a, params), cls(child_b, params)
