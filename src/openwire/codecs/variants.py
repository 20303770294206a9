from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Tuple, Type, TypeVar

from openwire.core.exceptions import UnknownVariantTag, VariantRegistryError
from openwire.core.logger import get_logger
from openwire.core.optional import require_field
from openwire.core.wire import expect_object, expect_str

logger = get_logger(__name__)

P = TypeVar("P")


@dataclass(frozen=True)
class VariantRecord(Generic[P]):
    tag: str
    payload: P


class VariantRegistry:
    """Closed set of record shapes sharing a flat ``{"<tag_key>": tag, ...}`` envelope.

    Variant classes provide ``from_wire(fields)`` (classmethod, receives the
    envelope minus the discriminator) and ``to_wire()`` (payload fields only).
    Tag <-> class is kept a bijection; lookups are exact and case-sensitive.
    """

    def __init__(self, name: str, *, tag_key: str = "type"):
        self.name = name
        self.tag_key = tag_key
        self._by_tag: Dict[str, Type[Any]] = {}
        self._by_type: Dict[Type[Any], str] = {}

    def register(
        self,
        *,
        tag: str,
        variant_class: Type[Any],
        overwrite: bool = False,
    ) -> None:
        if not isinstance(tag, str) or not tag or tag != tag.strip():
            raise VariantRegistryError(f"Invalid tag {tag!r} for registry {self.name!r}")

        existing_class = self._by_tag.get(tag)
        existing_tag = self._by_type.get(variant_class)
        if not overwrite:
            if existing_class is not None:
                raise VariantRegistryError(
                    f"Variant already registered for tag={tag!r} in {self.name!r}: {existing_class}"
                )
            if existing_tag is not None:
                raise VariantRegistryError(
                    f"{variant_class.__name__} already registered in {self.name!r} as tag={existing_tag!r}"
                )
        else:
            if existing_class is not None:
                del self._by_type[existing_class]
            if existing_tag is not None:
                del self._by_tag[existing_tag]

        self._by_tag[tag] = variant_class
        self._by_type[variant_class] = tag
        logger.debug(f"Registered {variant_class.__name__} as {self.name}[{tag!r}]")

    def variant(self, tag: str, *, overwrite: bool = False) -> Callable[[Type[Any]], Type[Any]]:
        def decorator(variant_class: Type[Any]) -> Type[Any]:
            self.register(tag=tag, variant_class=variant_class, overwrite=overwrite)
            return variant_class

        return decorator

    def resolve(self, tag: str) -> Type[Any]:
        try:
            return self._by_tag[tag]
        except KeyError:
            raise UnknownVariantTag(tag, registry=self.name) from None

    def try_resolve(self, tag: str) -> Optional[Type[Any]]:
        return self._by_tag.get(tag)

    def discriminator_of(self, variant_class: Type[Any]) -> str:
        try:
            return self._by_type[variant_class]
        except KeyError as exc:
            raise VariantRegistryError(
                f"{variant_class.__name__} is not a registered variant of {self.name!r}"
            ) from exc

    def decode(self, raw: Any, field: Optional[str] = None) -> VariantRecord[Any]:
        obj = expect_object(raw, field or self.tag_key, self.name)
        tag = require_field(obj, self.tag_key, self.name, expect_str)
        variant_class = self.resolve(tag)
        fields = {k: v for k, v in obj.items() if k != self.tag_key}
        return VariantRecord(tag=tag, payload=variant_class.from_wire(fields))

    def decode_payload(self, raw: Any, field: Optional[str] = None) -> Any:
        return self.decode(raw, field).payload

    def encode(self, value: Any) -> Dict[str, Any]:
        payload = value.payload if isinstance(value, VariantRecord) else value
        tag = self.discriminator_of(type(payload))
        if isinstance(value, VariantRecord) and value.tag != tag:
            raise VariantRegistryError(
                f"Record tag {value.tag!r} does not match {type(payload).__name__} ({tag!r})"
            )
        body = payload.to_wire()
        if self.tag_key in body:
            raise VariantRegistryError(
                f"{type(payload).__name__}.to_wire() must not emit the {self.tag_key!r} key"
            )
        return {self.tag_key: tag, **body}

    def parse(self, raw: Any, field: str, owner: Optional[str] = None) -> Any:
        """Adapter matching the ``decode_field`` parser signature; yields the payload."""
        return self.decode_payload(raw, field)

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(self._by_tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._by_tag

    def __len__(self) -> int:
        return len(self._by_tag)

    def clear(self) -> None:
        self._by_tag.clear()
        self._by_type.clear()
