"""Registry of meta keys exposed to API consumers.

Meta rows are free-form key/value pairs. Only keys registered here with
``show_in_rest=True`` are rendered in API responses, which keeps internal
bookkeeping attributes out of the public payload.
"""

from dataclasses import dataclass
from typing import Literal

from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.entity_kind import EntityKind

logger = get_logger(__name__)

MetaType = Literal["string", "integer", "boolean", "number"]


@dataclass(frozen=True)
class MetaField:
    """Declaration of a meta key for one entity kind."""

    kind: EntityKind
    key: str
    type: MetaType = "string"
    description: str = ""
    single: bool = True
    show_in_rest: bool = True


class MetaFieldRegistry:
    """Declarative registration of meta keys per entity kind."""

    def __init__(self) -> None:
        self._fields: dict[tuple[EntityKind, str], MetaField] = {}

    def register_meta(
        self,
        kind: EntityKind | str,
        key: str,
        type: MetaType = "string",
        description: str = "",
        single: bool = True,
        show_in_rest: bool = True,
    ) -> MetaField:
        """Register (or re-register) a meta key.

        Registering the same key twice replaces the earlier declaration.
        """
        meta_field = MetaField(
            kind=EntityKind.parse(kind),
            key=key,
            type=type,
            description=description,
            single=single,
            show_in_rest=show_in_rest,
        )
        self._fields[(meta_field.kind, key)] = meta_field
        logger.debug(
            "Meta field registered",
            entity_kind=meta_field.kind.value,
            meta_key=key,
            show_in_rest=show_in_rest,
        )
        return meta_field

    def get(self, kind: EntityKind | str, key: str) -> MetaField | None:
        return self._fields.get((EntityKind.parse(kind), key))

    def rest_fields(self, kind: EntityKind | str) -> list[MetaField]:
        """Fields of a kind that API responses should include."""
        kind = EntityKind.parse(kind)
        return [f for (k, _), f in self._fields.items() if k is kind and f.show_in_rest]
