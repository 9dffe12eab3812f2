"""Topic parsing and wildcard lookup keys.

A topic is an ``emitter:event`` string.  Both parts match ``[\\w\\-#]+``;
subscription and detach patterns may also use the ``*`` wildcard for either
part and may omit the ``emitter:`` prefix, in which case the default emitter
name is substituted.

Parsing returns ``None`` for malformed input instead of raising, so callers
decide whether to log or raise.
"""

import re
from dataclasses import dataclass

WILDCARD = "*"
WILDCARD_WILDCARD = "*:*"
DEFAULT_EMITTER = "UI"
SELF_EMITTER = "this"

_NAME = r"[\w\-#]+"

NAME_PATTERN = re.compile(_NAME, re.ASCII)

# valid: 'red:save', 'red:*', '*:save', '*:*', 'save', '*'
# invalid: '*red:save', 're*d:save', 'red:save*', ':save'
_PATTERN = re.compile(rf"(?:({_NAME}|\*):)?({_NAME}|\*)", re.ASCII)

_CONCRETE = re.compile(rf"({_NAME}):({_NAME})", re.ASCII)


@dataclass(frozen=True, slots=True)
class Topic:
    """Parsed ``emitter:event`` pair.

    Attributes:
        emitter: Emitter name, or ``*``.
        event: Event name, or ``*``.
    """

    emitter: str
    event: str

    def __str__(self) -> str:
        return f"{self.emitter}:{self.event}"

    @property
    def key(self) -> str:
        return f"{self.emitter}:{self.event}"

    @property
    def is_wildcard(self) -> bool:
        return self.emitter == WILDCARD or self.event == WILDCARD

    @property
    def any_event_key(self) -> str:
        """Key ``emitter:*``, every event of this emitter."""
        return f"{self.emitter}:*"

    @property
    def any_emitter_key(self) -> str:
        """Key ``*:event``, this event from any emitter."""
        return f"*:{self.event}"

    def lookup_keys(self) -> tuple[str, str, str, str]:
        """Return the four subscription keys an emission of this topic reaches.

        Order is the fixed dispatch priority: exact, ``*:event``,
        ``emitter:*``, ``*:*``.
        """
        return (
            self.key,
            self.any_emitter_key,
            self.any_event_key,
            WILDCARD_WILDCARD,
        )

    def matches(self, other: "Topic") -> bool:
        """Whether *other* is selected by this topic used as a pattern.

        Comparison is position-wise; a ``*`` in this topic matches any value.
        """
        return (self.emitter == WILDCARD or self.emitter == other.emitter) and (
            self.event == WILDCARD or self.event == other.event
        )

    def with_emitter(self, emitter: str) -> "Topic":
        return Topic(emitter, self.event)


def parse_topic(topic: str, default_emitter: str = DEFAULT_EMITTER) -> Topic | None:
    """Parse a subscription or detach pattern.

    Args:
        topic: Topic string, wildcards allowed.
        default_emitter: Emitter substituted when no ``emitter:`` prefix is given.

    Returns:
        Parsed topic, or None when *topic* is malformed.
    """
    if not isinstance(topic, str):
        return None
    match = _PATTERN.fullmatch(topic)
    if match is None:
        return None
    emitter, event = match.groups()
    return Topic(emitter or default_emitter, event)


def parse_concrete(topic: str) -> Topic | None:
    """Parse a fully qualified topic without wildcards (emit, define)."""
    if not isinstance(topic, str):
        return None
    match = _CONCRETE.fullmatch(topic)
    if match is None:
        return None
    return Topic(*match.groups())


def is_valid_name(name: str) -> bool:
    """Whether *name* can be used as an emitter or event name."""
    return isinstance(name, str) and NAME_PATTERN.fullmatch(name) is not None
