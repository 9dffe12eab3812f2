"""Custom-event definitions: default behaviour and control flags per topic."""

from collections.abc import Callable
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict

from signalon._types import DefaultFn
from signalon.topics import Topic

log = logger.bind(source=__name__)


class Definition(BaseModel):
    """Behaviour bound to one concrete topic.

    Attributes:
        default_fn: Runs after the before phase unless halted or prevented.
        prevented_fn: Runs instead of ``default_fn`` when the event was
            default-prevented.
        preventable: Always True for a fresh definition.
        un_haltable: ``halt()`` is a no-op for this topic.
        un_preventable: ``prevent_default()`` is a no-op for this topic.
        un_silencable: Subscribers and payloads cannot silence this topic.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    default_fn: Callable[[Any], Any] | None = None
    prevented_fn: Callable[[Any], Any] | None = None
    preventable: bool = True
    un_haltable: bool = False
    un_preventable: bool = False
    un_silencable: bool = False


class DefinitionBuilder:
    """Chainable builder returned by ``define_event``.

    When the topic had no definition yet, the builder edits the installed
    definition directly.  Otherwise it edits a pending draft that only
    replaces the existing definition once :meth:`force_assign` is called.

    Example::

        dispatcher.define_event("red:save").default_fn(save).un_preventable()
    """

    def __init__(self, registry: "DefinitionRegistry", key: str, draft: Definition):
        self._registry = registry
        self._key = key
        self._draft = draft

    @property
    def definition(self) -> Definition:
        return self._draft

    def default_fn(self, fn: DefaultFn) -> "DefinitionBuilder":
        self._draft.default_fn = fn
        return self

    def prevented_fn(self, fn: DefaultFn) -> "DefinitionBuilder":
        self._draft.prevented_fn = fn
        return self

    def un_haltable(self) -> "DefinitionBuilder":
        self._draft.un_haltable = True
        return self

    def un_preventable(self) -> "DefinitionBuilder":
        self._draft.un_preventable = True
        return self

    def un_silencable(self) -> "DefinitionBuilder":
        self._draft.un_silencable = True
        return self

    def force_assign(self) -> "DefinitionBuilder":
        """Install the draft, replacing any earlier definition of the topic."""
        self._registry.assign(self._key, self._draft)
        return self


class DefinitionRegistry:
    """Definition table keyed by concrete topic string."""

    def __init__(self) -> None:
        self._definitions: dict[str, Definition] = {}

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, key: str) -> bool:
        return key in self._definitions

    def get(self, key: str) -> Definition | None:
        return self._definitions.get(key)

    def define(self, topic: Topic) -> DefinitionBuilder:
        """Start a definition for *topic*.

        Post:
            A fresh definition is installed when *topic* had none; an
            existing one is left untouched until ``force_assign()``.
        """
        key = topic.key
        draft = Definition()
        if key not in self._definitions:
            self._definitions[key] = draft
            log.debug("Defined '{}'", key)
        else:
            log.debug("'{}' already defined; pending until force_assign()", key)
        return DefinitionBuilder(self, key, draft)

    def assign(self, key: str, definition: Definition) -> None:
        self._definitions[key] = definition

    def undefine(self, key: str) -> None:
        self._definitions.pop(key, None)

    def undefine_all(self, emitter_name: str | None = None) -> None:
        """Remove definitions of one emitter, or all definitions.

        Args:
            emitter_name: Only remove topics starting with ``emitter_name:``.
        """
        if not emitter_name:
            self._definitions.clear()
            return
        prefix = f"{emitter_name}:"
        for key in [key for key in self._definitions if key.startswith(prefix)]:
            del self._definitions[key]
