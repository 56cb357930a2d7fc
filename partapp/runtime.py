"""
Run-time support for generated carriers.

Generated code imports everything here. The carrier base class holds the
fill mask and the body; each generated subclass adds one slot per parameter.
Setting a parameter flips its bit and hands back the very same object, so
every fill state shares one class and one slot layout. Only the static
view, in the generated annotations, tells the states apart by type.
"""
from typing import Any, Callable, Generic, Optional, TypeVar
from . import states

T = TypeVar("T")

class PartialApplicationError(Exception):
	""" Base of everything a generated carrier can raise on its own account. """

class AlreadySupplied(PartialApplicationError):
	def __init__(self, carrier:str, parameter:str):
		super().__init__("%s: parameter '%s' has already been supplied" % (carrier, parameter))
		self.parameter = parameter

class MissingArguments(PartialApplicationError):
	def __init__(self, carrier:str, missing:list[str]):
		super().__init__("%s: cannot call before supplying %s" % (carrier, ", ".join(missing)))
		self.missing = missing

class CarrierConsumed(PartialApplicationError):
	pass

class ProducerExhausted(PartialApplicationError):
	pass

class NotDuplicable(PartialApplicationError, TypeError):
	pass

class Thunk(Generic[T]):
	""" A single-use not-yet-value. Forcing it gives up the producer. """
	__slots__ = ("_producer",)
	_producer: Optional[Callable[[], T]]

	def __init__(self, producer:Callable[[], T]):
		if not callable(producer): raise TypeError("A thunk needs a zero-argument callable, not %r" % (producer,))
		self._producer = producer

	def __repr__(self):
		return "<Thunk %s>" % ("spent" if self._producer is None else self._producer)

	def force(self) -> T:
		producer = self._producer
		if producer is None: raise ProducerExhausted("This thunk has already been forced.")
		self._producer = None
		return producer()

class SharedThunk:
	"""
	A type-erased producer that may be forced any number of times and shared
	between duplicated carriers. It keeps no state of its own, so sharing is
	exactly as safe as calling the underlying producer repeatedly.
	"""
	__slots__ = ("_producer",)

	def __init__(self, producer:Callable[[], Any]):
		if not callable(producer): raise TypeError("A thunk needs a zero-argument callable, not %r" % (producer,))
		self._producer = producer

	@classmethod
	def of(cls, producer) -> "SharedThunk":
		return producer if isinstance(producer, cls) else cls(producer)

	def __repr__(self): return "<SharedThunk %s>" % self._producer

	def force(self) -> Any:
		return self._producer()

	__call__ = force

class FillLabel:
	""" Generated Empty/Added markers derive from this. They only ever serve as type arguments. """
	__slots__ = ()

class Carrier:
	"""
	Subclasses say which parameters they have and what their slots are called;
	the generated setters and `call` lean on the helpers below.
	"""
	__slots__ = ("_filled", "_body")
	_filled: int
	_body: Optional[Callable]   # None once called.
	parameters: tuple = ()
	slot_names: tuple = ()
	labels: tuple = (FillLabel, FillLabel)
	polymorphic = False
	duplicable = False

	def __init__(self, body:Callable):
		self._filled = 0
		self._body = body
		for slot in self.slot_names: setattr(self, slot, None)

	def __repr__(self):
		name = type(self).__name__
		if self.consumed: return "<%s consumed>" % name
		fields = " ".join("%s=%s" % pair for pair in zip(self.parameters, self.fill_state))
		return "<%s %s>" % (name, fields) if fields else "<%s>" % name

	@property
	def fill_state(self) -> states.FillState:
		return states.from_mask(self._filled, len(self.parameters))

	@property
	def consumed(self) -> bool:
		return self._body is None

	def _live(self) -> Callable:
		body = self._body
		if body is None:
			raise CarrierConsumed("%s has already been called" % type(self).__name__)
		return body

	def _vacant(self, index:int):
		self._live()
		if self._filled >> index & 1:
			raise AlreadySupplied(type(self).__name__, self.parameters[index])

	def _relabel(self, index:int):
		""" Same storage, one more label flipped to Added. """
		self._filled |= 1 << index
		return self

	def _consume(self) -> tuple[Callable, tuple]:
		""" Hand over the body and every thunk, leaving this carrier spent. """
		body = self._live()
		absent = states.missing(self.fill_state, self.parameters)
		if absent: raise MissingArguments(type(self).__name__, absent)
		thunks = tuple(getattr(self, slot) for slot in self.slot_names)
		self._body, self._filled = None, 0
		for slot in self.slot_names: setattr(self, slot, None)
		return body, thunks

	def _duplicate(self):
		self._live()
		twin = object.__new__(type(self))
		twin._filled, twin._body = self._filled, self._body
		for slot in self.slot_names: setattr(twin, slot, getattr(self, slot))
		return twin

	def __copy__(self):
		raise NotDuplicable("%s is not duplicable; generate it with part_app('poly', 'Clone')" % type(self).__name__)

	def __deepcopy__(self, memo):
		raise NotDuplicable("%s shares its thunks and cannot be deep-copied" % type(self).__name__)

# Members of every carrier, which no setter may replace.
RESERVED_NAMES = frozenset(name for name in dir(Carrier) if not name.startswith("__")) | {"call", "clone"}
