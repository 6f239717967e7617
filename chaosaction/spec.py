"""
Declarative description of fault-injection actions.

An ActionSpec bundles everything a dispatcher needs to present an action to a
user and to invoke it: a unique name, aliases, descriptions, an example, the
flag schema (matchers and flags) and the Executor that applies or reverts the
fault.
"""
import abc
import threading
import time

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple, FrozenSet

from chaosaction.common import Code, Response, return_fail


@dataclass(frozen=True)
class FlagSpec:
    """
    A named parameter an action accepts.

    Matchers identify the target of a fault (a port, a process name). Flags
    tune its behavior.
    """
    name: str
    desc: str = ""
    required: bool = False

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Flag name must not be empty")


@dataclass(frozen=True)
class ExampleCommand:
    annotation: str = ""
    command: str = ""


@dataclass(frozen=True)
class Example:
    introduction: str = ""
    example_commands: Tuple[ExampleCommand, ...] = ()

    def is_empty(self) -> bool:
        return not self.introduction and not self.example_commands


def resolve_with_default(value: Optional[str], default: str) -> str:
    """Return value unless it is empty, otherwise default."""
    if value:
        return value
    return default


def resolve_example(example: Optional[Example], default: Example) -> Example:
    """Return example unless every one of its fields is empty."""
    if example is None or example.is_empty():
        return default
    return example


class RunContext(object):
    """
    Carrier for one execute call.

    Holds the cancellation event, an optional deadline and, for revert
    requests, the UID of the experiment being destroyed. A context is either a
    create (apply) context or a destroy (revert) context, never both.
    """

    def __init__(self, destroy_of: Optional[str] = None,
                 timeout: Optional[float] = None,
                 cancel_event: Optional[threading.Event] = None):
        if destroy_of is not None and not destroy_of:
            raise ValueError("destroy_of must be a non-empty uid")
        self._destroy_of = destroy_of
        self._deadline = None
        if timeout is not None:
            self._deadline = time.monotonic() + float(timeout)
        self._cancel_event = cancel_event or threading.Event()

    @classmethod
    def create(cls, timeout: Optional[float] = None) -> "RunContext":
        return cls(timeout=timeout)

    @classmethod
    def destroy(cls, uid: str, timeout: Optional[float] = None) -> "RunContext":
        return cls(destroy_of=uid, timeout=timeout)

    @property
    def destroy_of(self) -> Optional[str]:
        return self._destroy_of

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def is_destroy(self) -> bool:
        return self._destroy_of is not None

    def cancel(self):
        self._cancel_event.set()

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def done(self) -> Optional[Response]:
        """A failure Response if the context is cancelled or expired."""
        if self.is_cancelled():
            return return_fail(Code.Cancelled, "context cancelled")
        if self.expired():
            return return_fail(Code.Timeout, "context deadline exceeded")
        return None

    def __repr__(self):
        return "RunContext(destroy_of={!r}, deadline={!r})".format(
            self._destroy_of, self._deadline)


@dataclass(frozen=True)
class ResolvedModel:
    """Flag values resolved by the dispatcher for one invocation."""
    action_name: str
    action_flags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'action_flags',
                           MappingProxyType(dict(self.action_flags)))

    def get(self, name: str, default: str = "") -> str:
        return self.action_flags.get(name, default)


class Executor(abc.ABC):
    """The polymorphic unit that applies or reverts one fault action."""

    @abc.abstractmethod
    def name(self) -> str:
        raise NotImplementedError('users must define name to use this base class')

    @abc.abstractmethod
    def set_channel(self, channel):
        raise NotImplementedError(
            'users must define set_channel to use this base class')

    @abc.abstractmethod
    def execute(self, uid: str, ctx: RunContext,
                model: ResolvedModel) -> Response:
        raise NotImplementedError(
            'users must define execute to use this base class')


@dataclass(frozen=True)
class ActionSpec:
    name: str
    executor: Executor
    short_desc: str = ""
    long_desc: str = ""
    example: Example = field(default_factory=Example)
    aliases: FrozenSet[str] = frozenset()
    matchers: Tuple[FlagSpec, ...] = ()
    flags: Tuple[FlagSpec, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise ValueError("Action name must not be empty")
        object.__setattr__(self, 'aliases', frozenset(self.aliases))
        object.__setattr__(self, 'matchers', tuple(self.matchers))
        object.__setattr__(self, 'flags', tuple(self.flags))
        if self.name in self.aliases:
            raise ValueError(
                "Action {} lists its own name as an alias".format(self.name))
        seen = set()
        for flag in self.matchers + self.flags:
            if flag.name in seen:
                raise ValueError("Duplicate flag {} in action {}".format(
                    flag.name, self.name))
            seen.add(flag.name)

    def flag_names(self) -> Iterator[str]:
        """Declared flag names, matchers first, in declaration order."""
        for flag in self.matchers + self.flags:
            yield flag.name

    def flag(self, name: str) -> Optional[FlagSpec]:
        for flag in self.matchers + self.flags:
            if flag.name == name:
                return flag
        return None

    def all_names(self) -> FrozenSet[str]:
        return self.aliases | {self.name}

    def to_dict(self) -> dict:
        def flags_to_list(flags):
            return [{'name': f.name, 'desc': f.desc, 'required': f.required}
                    for f in flags]

        return {
            'name': self.name,
            'aliases': sorted(self.aliases),
            'shortDesc': self.short_desc,
            'longDesc': self.long_desc,
            'example': {
                'introduction': self.example.introduction,
                'commands': [{'annotation': c.annotation,
                              'command': c.command}
                             for c in self.example.example_commands]
            },
            'matchers': flags_to_list(self.matchers),
            'flags': flags_to_list(self.flags)
        }
