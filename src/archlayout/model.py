"""Architecture model consumed by the views.

Parsing the architecture language is somebody else's job; this module only
holds the already-parsed structure (entities nested in scopes, relations with
dot-qualified endpoints, scenarios) and reads its JSON form.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from archlayout.errors import ModelError

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "."


def last_segment(path: str) -> str:
    return path.rsplit(PATH_SEPARATOR, 1)[-1]


def parent_path(path: str) -> str | None:
    """Key of the enclosing scope; None at the model root."""
    head, sep, _ = path.rpartition(PATH_SEPARATOR)
    return head if sep else None


def join_path(scope: str | None, name: str) -> str:
    return name if scope is None else f"{scope}{PATH_SEPARATOR}{name}"


@dataclass
class Relation:
    """A directed relation between two dot-qualified endpoint paths."""

    source: str
    target: str
    label: str | None = None


@dataclass
class Entity:
    """A typed model element. Entities with children are containers (scopes)."""

    id: str
    kind: str = "element"
    label: str | None = None
    description: str | None = None
    children: list[Entity] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)

    @property
    def display_label(self) -> str:
        return self.label or self.id

    @property
    def is_container(self) -> bool:
        return bool(self.children)


@dataclass
class Scenario:
    """An ordered walk through the model, drawn as its own diagram."""

    title: str
    steps: list[Relation] = field(default_factory=list)


@dataclass
class Architecture:
    name: str = ""
    entities: list[Entity] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    scenarios: list[Scenario] = field(default_factory=list)
    style: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Architecture:
        """Build an Architecture from its JSON form.

        Raises ModelError (chained to the underlying cause) if the document
        does not have the expected shape.
        """
        if not isinstance(data, Mapping):
            raise ModelError(f"architecture must be a JSON object, got {type(data).__name__}")
        try:
            return cls(
                name=str(data.get("name", "")),
                entities=[_entity_from_dict(e) for e in data.get("entities", [])],
                relations=[_relation_from_dict(r) for r in data.get("relations", [])],
                scenarios=[_scenario_from_dict(s) for s in data.get("scenarios", [])],
                style=_string_map(data.get("style", {})),
                metadata=_string_map(data.get("metadata", {})),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ModelError(f"malformed architecture document: {exc}") from exc


def _relation_from_dict(data: Mapping[str, Any]) -> Relation:
    label = data.get("label")
    return Relation(source=str(data["from"]), target=str(data["to"]), label=None if label is None else str(label))


def _entity_from_dict(data: Mapping[str, Any]) -> Entity:
    return Entity(
        id=str(data["id"]),
        kind=str(data.get("kind", "element")),
        label=data.get("label"),
        description=data.get("description"),
        children=[_entity_from_dict(c) for c in data.get("children", [])],
        relations=[_relation_from_dict(r) for r in data.get("relations", [])],
    )


def _scenario_from_dict(data: Mapping[str, Any]) -> Scenario:
    return Scenario(title=str(data["title"]), steps=[_relation_from_dict(s) for s in data.get("steps", [])])


def _string_map(data: Any) -> dict[str, str]:
    # metadata may arrive as {"k": "v"} or as [{"key": "k", "value": "v"}, ...]
    if isinstance(data, Mapping):
        return {str(k): str(v) for k, v in data.items() if v is not None}
    return {str(item["key"]): str(item["value"]) for item in data if item.get("value") is not None}


def load_architecture(path: str | Path) -> Architecture:
    """Read an architecture model from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ModelError(f"cannot read model {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ModelError(f"model {path} is not valid JSON: {exc}") from exc
    arch = Architecture.from_dict(data)
    logger.debug("loaded model %r from %s (%d top-level entities)", arch.name, path, len(arch.entities))
    return arch


# ─── Model Index ──────────────────────────────────────────────────────────────


class ModelIndex:
    """Lookup tables over an Architecture.

    Entities are keyed by qualified path ("Shop.Api.Orders"); ids only have
    to be unique among siblings, so the same bare id may appear in several
    scopes. ``None`` stands for the model root wherever a scope key is taken.
    """

    def __init__(self, arch: Architecture) -> None:
        self.arch = arch
        self._entities: dict[str, Entity] = {}
        self._ancestry: dict[str, tuple[str, ...]] = {}
        self._by_id: dict[str, list[str]] = {}
        self._children: dict[str | None, list[Entity]] = {None: list(arch.entities)}
        self._relations: list[tuple[str | None, Relation]] = [(None, rel) for rel in arch.relations]

        for entity in arch.entities:
            self._index(entity, ())

    def _index(self, entity: Entity, parents: tuple[str, ...]) -> None:
        chain = (*parents, entity.id)
        key = PATH_SEPARATOR.join(chain)
        if key in self._entities:
            logger.debug("duplicate sibling id %r ignored", key)
            return
        self._entities[key] = entity
        self._ancestry[key] = chain
        self._by_id.setdefault(entity.id, []).append(key)
        self._children[key] = list(entity.children)
        self._relations.extend((key, rel) for rel in entity.relations)
        for child in entity.children:
            self._index(child, chain)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def key(self, ref: str) -> str:
        """Qualified path for a path or bare id. Raises ModelError if unknown."""
        key = self.locate(ref)
        if key is None:
            raise ModelError(f"no element with id {ref!r} in model {self.arch.name!r}")
        return key

    def entity(self, ref: str) -> Entity:
        return self._entities[self.key(ref)]

    def items(self) -> Iterator[tuple[str, Entity]]:
        """(qualified path, entity) pairs, parents before children."""
        return iter(self._entities.items())

    def entities(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def children(self, scope: str | None) -> list[Entity]:
        """Entities declared directly in a scope."""
        return self._children.get(scope, [])

    def ancestry(self, key: str | None) -> tuple[str, ...]:
        """Ids from the outermost ancestor down to the entity itself."""
        if key is None:
            return ()
        return self._ancestry[key]

    def depth(self, key: str) -> int:
        return len(self._ancestry[key]) - 1

    def relations(self) -> list[Relation]:
        """Every relation in the model: top-level first, then nested in declaration order."""
        return [rel for _, rel in self._relations]

    def scoped_relations(self) -> list[tuple[str | None, Relation]]:
        """Like ``relations`` but paired with the key of the scope declaring each one."""
        return self._relations

    def locate(self, path: str, context: str | None = None) -> str | None:
        """Resolve an endpoint path to a qualified entity key, or None.

        The path is tried relative to ``context`` and then to each of its
        ancestors up to the root, so nearer declarations shadow outer ones.
        Failing that, the last segment is matched as a bare id: first below
        ``context``, then anywhere in the model, in declaration order.
        """
        scope = context
        while True:
            candidate = join_path(scope, path)
            if candidate in self._entities:
                return candidate
            if scope is None:
                break
            scope = parent_path(scope)

        candidates = self._by_id.get(last_segment(path), [])
        if context is not None:
            prefix = context + PATH_SEPARATOR
            nested = [key for key in candidates if key.startswith(prefix)]
            if nested:
                return nested[0]
        return candidates[0] if candidates else None
