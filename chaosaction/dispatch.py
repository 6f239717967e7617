"""
Minimal in-memory dispatcher.

Resolves user supplied flag values against an ActionSpec, tracks which
experiments are in effect, and drives the create (apply) and destroy (revert)
lifecycle of each experiment uid:

    NONE -> create -> ACTIVE -> destroy -> NONE

Create and destroy of one uid are serialized. Different uids run in parallel.
"""
import threading
import uuid

from collections import namedtuple
from contextlib import contextmanager
from enum import Enum
from logzero import logger

from typing import Dict, List, Mapping, Optional

from chaosaction.common import (Code, Response, return_fail, return_success,
                                DEFAULT_CHAOS_EXEC_TIMEOUT)
from chaosaction.registry import ActionRegistry
from chaosaction.spec import ActionSpec, ResolvedModel, RunContext

Experiment = namedtuple('Experiment', ['uid', 'action', 'flags', 'status'])


class ExperimentStatus(Enum):
    NONE = 1
    ACTIVE = 2


class ModelError(Exception):
    def __init__(self, code: Code, message: str):
        super().__init__(message)
        self.code = code

    def to_response(self) -> Response:
        return return_fail(self.code, str(self))


def resolve_model(spec: ActionSpec, flags: Mapping[str, str]) -> ResolvedModel:
    """
    Validate user supplied flag values against an action's flag schema.

    :param spec: The action to resolve the values for.
    :type spec: ActionSpec
    :param flags: Flag name to value. Values are converted to str.
    :type flags: Mapping[str, str]
    :return: ResolvedModel
    :raises ModelError: IllegalParameters for undeclared flags, ParameterLess
        for missing required ones.
    """
    declared = set(spec.flag_names())
    unknown = sorted(name for name in flags if name not in declared)
    if unknown:
        raise ModelError(Code.IllegalParameters,
                         "illegal parameters for {}: {}".format(
                             spec.name, ", ".join(unknown)))
    missing = [f.name for f in spec.matchers + spec.flags
               if f.required and not flags.get(f.name)]
    if missing:
        raise ModelError(Code.ParameterLess,
                         "less parameter for {}: {}".format(
                             spec.name, ", ".join(missing)))
    values = {name: "" if value is None else str(value)
              for name, value in flags.items()}
    return ResolvedModel(action_name=spec.name, action_flags=values)


class Dispatcher(object):

    def __init__(self, registry: ActionRegistry,
                 timeout: Optional[float] = DEFAULT_CHAOS_EXEC_TIMEOUT):
        self._registry = registry
        self._timeout = timeout
        self._experiments: Dict[str, Experiment] = {}
        # uid -> [lock, number of callers holding or waiting for it]
        self._locks: Dict[str, list] = {}
        self._guard = threading.Lock()

    @contextmanager
    def _locked(self, uid: str):
        """Serialize callers on uid. The entry is dropped by its last user."""
        with self._guard:
            entry = self._locks.setdefault(uid, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[uid]

    def _timeout_for(self, timeout: Optional[float]) -> Optional[float]:
        return self._timeout if timeout is None else timeout

    @staticmethod
    def _execute(spec: ActionSpec, uid: str, ctx: RunContext,
                 model: ResolvedModel) -> Response:
        try:
            return spec.executor.execute(uid, ctx, model)
        except Exception as e:
            logger.error("Executor %s raised while running experiment %s",
                         spec.name, uid)
            logger.exception(e)
            return return_fail(Code.ServerError, str(e))

    def status(self, uid: str) -> ExperimentStatus:
        with self._guard:
            experiment = self._experiments.get(uid)
        if experiment is None:
            return ExperimentStatus.NONE
        return experiment.status

    def experiments(self) -> List[Experiment]:
        with self._guard:
            return list(self._experiments.values())

    def create(self, action: str, flags: Mapping[str, str] = None,
               uid: Optional[str] = None,
               timeout: Optional[float] = None) -> Response:
        """
        Apply an action. On success the Response's result is the experiment uid.
        """
        if action not in self._registry:
            return return_fail(Code.HandlerNotFound,
                               "action {} not found".format(action))
        spec = self._registry.get(action)
        try:
            model = resolve_model(spec, flags or {})
        except ModelError as e:
            logger.error("Unable to create %s: %s", action, e)
            return e.to_response()

        uid = uid or uuid.uuid4().hex[:16]
        with self._locked(uid):
            if self.status(uid) is ExperimentStatus.ACTIVE:
                return return_fail(Code.StatusError,
                                   "experiment {} is already active".format(uid))
            logger.info("Creating experiment %s: %s %s", uid, spec.name,
                        dict(model.action_flags))
            ctx = RunContext.create(self._timeout_for(timeout))
            response = self._execute(spec, uid, ctx, model)
            if not response.success:
                logger.error("Creating experiment %s failed: %s", uid,
                             response.err)
                return response
            with self._guard:
                self._experiments[uid] = Experiment(
                    uid, spec.name, dict(model.action_flags),
                    ExperimentStatus.ACTIVE)
        return return_success(uid)

    def destroy(self, uid: str, timeout: Optional[float] = None) -> Response:
        """Revert an active experiment with the flag values it was created with."""
        with self._locked(uid):
            with self._guard:
                experiment = self._experiments.get(uid)
            if experiment is None:
                return return_fail(Code.DataNotFound,
                                   "experiment {} not found".format(uid))
            spec = self._registry.get(experiment.action)
            model = ResolvedModel(action_name=spec.name,
                                  action_flags=experiment.flags)
            logger.info("Destroying experiment %s: %s %s", uid, spec.name,
                        experiment.flags)
            ctx = RunContext.destroy(uid, self._timeout_for(timeout))
            response = self._execute(spec, uid, ctx, model)
            if not response.success:
                logger.error("Destroying experiment %s failed: %s", uid,
                             response.err)
                return response
            with self._guard:
                del self._experiments[uid]
        return response
