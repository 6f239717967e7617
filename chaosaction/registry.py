from logzero import logger

from typing import Dict, Iterable, List

from chaosaction.spec import ActionSpec


class ActionRegistry(object):
    """
    Name (and alias) to ActionSpec lookup for one fault family.

    The registry owns the channel every registered executor is bound to. The
    channel is bound once at registration time and only read afterwards.
    """

    def __init__(self, channel=None, specs: Iterable[ActionSpec] = ()):
        self._channel = channel
        self._specs: Dict[str, ActionSpec] = {}
        self._lookup: Dict[str, ActionSpec] = {}
        for spec in specs:
            self.register(spec)

    @property
    def channel(self):
        return self._channel

    def register(self, spec: ActionSpec) -> ActionSpec:
        collisions = sorted(n for n in spec.all_names() if n in self._lookup)
        if collisions:
            raise ValueError("Action {} collides with registered names: "
                             "{}".format(spec.name, ", ".join(collisions)))
        for name in spec.all_names():
            self._lookup[name] = spec
        self._specs[spec.name] = spec
        if self._channel is not None:
            spec.executor.set_channel(self._channel)
        logger.debug("Registered action %s (aliases: %s)", spec.name,
                     sorted(spec.aliases))
        return spec

    def set_channel(self, channel):
        self._channel = channel
        for spec in self._specs.values():
            spec.executor.set_channel(channel)

    def get(self, name: str) -> ActionSpec:
        try:
            return self._lookup[name]
        except KeyError:
            raise KeyError("Unknown action: {}".format(name))

    def __contains__(self, name: str) -> bool:
        return name in self._lookup

    def __len__(self) -> int:
        return len(self._specs)

    def names(self) -> List[str]:
        return sorted(self._specs)

    def specs(self) -> List[ActionSpec]:
        return [self._specs[name] for name in self.names()]
