"""
The fill-state machine.

A FillState is a tuple with one label per parameter, EMPTY or ADDED.
The initial state is all EMPTY and only the terminal state, all ADDED,
may be called. Each setter flips exactly one coordinate from EMPTY to
ADDED and cares nothing for the others, so every order of setting is
valid and all 2**N states are reachable.

The synthesizers use Transitions to write type signatures; the runtime
carrier uses the same vocabulary to describe its fill mask.
"""
from typing import NamedTuple, Optional, Sequence

EMPTY = "Empty"
ADDED = "Added"
LABELS = (EMPTY, ADDED)

FillState = tuple[str, ...]
Pattern = tuple[Optional[str], ...]   # None means "either label will do".

class Transition(NamedTuple):
	""" What one setter requires and what it produces. """
	position: int
	parameter: str
	pre: Pattern
	post: Pattern

def initial_state(arity:int) -> FillState:
	return (EMPTY,) * arity

def terminal_state(arity:int) -> FillState:
	return (ADDED,) * arity

def transitions(parameters:Sequence[str]) -> list[Transition]:
	arity = len(parameters)
	result = []
	for position, name in enumerate(parameters):
		free: list[Optional[str]] = [None] * arity
		pre, post = list(free), list(free)
		pre[position], post[position] = EMPTY, ADDED
		result.append(Transition(position, name, tuple(pre), tuple(post)))
	return result

def from_mask(mask:int, arity:int) -> FillState:
	return tuple(ADDED if mask >> i & 1 else EMPTY for i in range(arity))

def missing(state:FillState, parameters:Sequence[str]) -> list[str]:
	return [name for name, label in zip(parameters, state) if label == EMPTY]
