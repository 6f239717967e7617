import json
import logging
import logzero
from enum import Enum
from logzero import logger
from os import environ

from typing import Any, Union


class Code(Enum):
    """
    All categorized error kinds a Response may carry.

    Each member's value is a (code, default message) tuple. The integer code is
    what ends up on the wire; the message is used when a failure is reported
    without a more specific one.
    """
    OK = (200, "success")
    Forbidden = (403, "forbidden")
    HandlerNotFound = (404, "request handler not found")
    ServerError = (500, "server error")
    Timeout = (510, "timeout")
    Cancelled = (511, "cancelled")
    ParameterLess = (601, "less parameter")
    IllegalParameters = (602, "illegal parameters")
    CommandNotFound = (604, "command not found")
    ExecFailed = (605, "exec command failed")
    StatusError = (606, "status error")
    DataNotFound = (607, "data not found")
    ChannelError = (608, "channel error")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]

    @classmethod
    def has_value(cls, value):
        return any(value == item.code for item in cls)

    @classmethod
    def from_code(cls, value: int) -> "Code":
        for item in cls:
            if item.code == value:
                return item
        raise ValueError("Unknown response code: {}".format(value))


class Response(object):
    """
    Uniform success/failure envelope returned by every layer.

    A Response is immutable once built. Use return_success and return_fail
    rather than building one by hand.
    """
    __slots__ = ('_success', '_code', '_err', '_result')

    def __init__(self, success: bool, code: int, err: str = "",
                 result: Any = None):
        object.__setattr__(self, '_success', success)
        object.__setattr__(self, '_code', code)
        object.__setattr__(self, '_err', err)
        object.__setattr__(self, '_result', result)

    def __setattr__(self, name, value):
        raise AttributeError("Response is immutable")

    @property
    def success(self) -> bool:
        return self._success

    @property
    def code(self) -> int:
        return self._code

    @property
    def err(self) -> str:
        return self._err

    @property
    def result(self) -> Any:
        return self._result

    @property
    def error_kind(self) -> Union[Code, None]:
        """The categorized error kind; None for a successful response."""
        if self._success:
            return None
        try:
            return Code.from_code(self._code)
        except ValueError:
            return None

    def to_dict(self) -> dict:
        return {
            'code': self._code,
            'success': self._success,
            'error': self._err,
            'result': self._result
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "Response":
        doc = json.loads(text)
        if not isinstance(doc, dict) or 'success' not in doc \
           or 'code' not in doc:
            raise ValueError("Not a response document: {}".format(text))
        success = doc['success']
        code = doc['code']
        err = doc.get('error') or ""
        # bool is an int subclass, so it is rejected explicitly as a code
        if not isinstance(success, bool) or isinstance(code, bool) \
           or not isinstance(code, int) or not isinstance(err, str):
            raise ValueError("Malformed response document: {}".format(text))
        return cls(success, code, err, doc.get('result'))

    @classmethod
    def decode(cls, text: str, default: "Response") -> "Response":
        """
        Decode the JSON response a helper binary printed to stdout.

        :param text: The helper's stdout.
        :type text: str
        :param default: What to return when text is not a response document.
        :type default: Response
        :return: Response
        """
        if not text or not text.strip():
            return default
        try:
            return cls.from_json(text.strip())
        except (ValueError, TypeError):
            logger.debug("Helper output is not a response document: %s",
                         text)
            return default

    def __eq__(self, other):
        if not isinstance(other, Response):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self._success, self._code, self._err))

    def __repr__(self):
        return "Response(success={}, code={}, err={!r}, result={!r})".format(
            self._success, self._code, self._err, self._result)


def return_success(result: Any = None) -> Response:
    return Response(True, Code.OK.code, "", result)


def return_fail(code: Code, message: str = None) -> Response:
    """
    Build a failure Response.

    :param code: The error kind. Must not be Code.OK.
    :type code: Code
    :param message: Human readable message.
        Optional. (Default: the error kind's default message)
    :type message: str
    :return: Response
    """
    if code is Code.OK:
        raise ValueError("A failure response cannot carry Code.OK")
    return Response(False, code.code, message or code.message)


# Useful for validating boolean user input
true_list = [
   'true', '1', 't', 'y', 'yes'
]
false_list = [
   'false', '0', 'f', 'n', 'no'
]


def str2bool(v: Union[str, bool]) -> bool:
    if isinstance(v, bool):
        return v
    if v.lower() in true_list:
        return True
    elif v.lower() in false_list:
        return False
    raise ValueError(
        'Boolean value (yes, no, true, false, y, n, 1, or 0) expected, got '
        '{}'.format(v))


levels = {
    'notset': logging.NOTSET,
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL
}


def configure_logging(level: str = None) -> int:
    """
    Set the logzero log level from a level name.

    :param level: One of notset, debug, info, warning, error or critical.
        Optional. (Default: chaosaction.common.DEFAULT_CHAOS_LOG_LEVEL)
    :type level: str
    :return: int The logging level that was applied.
    """
    level = level or DEFAULT_CHAOS_LOG_LEVEL
    if level.lower() not in levels:
        raise ValueError('Expected one of the following: {}.'.format(
            ', '.join(levels.keys())))
    logzero.loglevel(levels[level.lower()])
    return levels[level.lower()]


# Chaos defaults
# Please keep defaults in lexically acending order by name
DEFAULT_CHAOS_DEBUG = str2bool(environ.get('CHAOS_DEBUG', 'false'))
DEFAULT_CHAOS_EXEC_TIMEOUT = int(environ.get('CHAOS_EXEC_TIMEOUT', 60))
DEFAULT_CHAOS_LOG_LEVEL = environ.get('CHAOS_LOG_LEVEL', 'info')
DEFAULT_CHAOS_SCRIPT_PATH = environ.get('CHAOS_SCRIPT_PATH',
                                        '/opt/chaosblade/bin')
