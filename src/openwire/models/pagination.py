from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Generic, Iterable, Iterator, Literal, Mapping, Optional, Tuple, TypeVar

from openwire.core.exceptions import InvalidPageParameter, MalformedWireValue, WireFormatError
from openwire.core.optional import decode_field, require_field
from openwire.core.wire import expect_bool, expect_list, expect_object, expect_str, is_integer

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]
SORT_ORDERS: Tuple[str, ...] = ("asc", "desc")

LIST_OBJECT = "list"
_OWNER = "PageResponse"


@dataclass(frozen=True)
class PageBounds:
    """Declared ``limit`` range of one list endpoint."""

    min_limit: int = 1
    max_limit: int = 100
    # Sent by JsonTransport.page_request when no limit is given; None leaves it to the server.
    default_limit: Optional[int] = 20

    def __post_init__(self) -> None:
        if self.min_limit < 1 or self.max_limit < self.min_limit:
            raise ValueError(f"Invalid limit bounds [{self.min_limit}, {self.max_limit}]")
        if self.default_limit is not None and not self.min_limit <= self.default_limit <= self.max_limit:
            raise ValueError(f"default_limit {self.default_limit} outside [{self.min_limit}, {self.max_limit}]")


DEFAULT_PAGE_BOUNDS = PageBounds()


@dataclass(frozen=True)
class PageRequest:
    """Query parameters of a cursor-paginated list call.

    Unset parameters are omitted from the query string. ``after`` and
    ``before`` are mutually exclusive; supplying both is a caller error.
    """

    limit: Optional[int] = None
    order: Optional[SortOrder] = None
    after: Optional[str] = None
    before: Optional[str] = None
    bounds: PageBounds = field(default=DEFAULT_PAGE_BOUNDS, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.limit is not None:
            if not is_integer(self.limit):
                raise InvalidPageParameter("limit", self.limit, "must be an integer")
            if not self.bounds.min_limit <= self.limit <= self.bounds.max_limit:
                raise InvalidPageParameter(
                    "limit",
                    self.limit,
                    f"must be between {self.bounds.min_limit} and {self.bounds.max_limit}",
                )
        if self.order is not None and self.order not in SORT_ORDERS:
            raise InvalidPageParameter("order", self.order, f"must be one of {SORT_ORDERS}")
        for name in ("after", "before"):
            cursor = getattr(self, name)
            if cursor is not None and (not isinstance(cursor, str) or not cursor):
                raise InvalidPageParameter(name, cursor, "must be a non-empty id string")
        if self.after is not None and self.before is not None:
            raise InvalidPageParameter(
                "after/before",
                (self.after, self.before),
                "cursors are mutually exclusive",
            )

    @classmethod
    def from_query_params(
        cls,
        params: Mapping[str, Any],
        bounds: PageBounds = DEFAULT_PAGE_BOUNDS,
    ) -> "PageRequest":
        """Read ``limit``/``order``/``after``/``before`` from a query mapping; other keys are ignored."""
        limit = params.get("limit")
        if isinstance(limit, str):
            try:
                limit = int(limit)
            except ValueError:
                raise InvalidPageParameter("limit", limit, "must be an integer") from None
        return cls(
            limit=limit,
            order=params.get("order"),
            after=params.get("after"),
            before=params.get("before"),
            bounds=bounds,
        )

    def to_query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.limit is not None:
            params["limit"] = self.limit
        if self.order is not None:
            params["order"] = self.order
        if self.after is not None:
            params["after"] = self.after
        if self.before is not None:
            params["before"] = self.before
        return params

    @property
    def pages_backward(self) -> bool:
        return self.before is not None

    def next_request(self, page: "PageResponse[Any]") -> Optional["PageRequest"]:
        """Request for the page following ``page`` in the direction of travel, or None when exhausted.

        Forward paging (no ``before``) continues with ``after=page.last_id``
        whatever the sort order, since the server applies ``after`` in the
        requested order. Backward paging continues with ``before=page.first_id``.
        """
        if not page.has_more:
            return None
        if self.pages_backward:
            if page.first_id is None:
                raise MalformedWireValue("first_id", expected="string", received="null", owner=_OWNER)
            return replace(self, before=page.first_id)
        if page.last_id is None:
            raise MalformedWireValue("last_id", expected="string", received="null", owner=_OWNER)
        return replace(self, after=page.last_id)


def _item_id(item: Any) -> Optional[str]:
    if isinstance(item, Mapping):
        value = item.get("id")
    else:
        value = getattr(item, "id", None)
    return value if isinstance(value, str) else None


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class PageResponse(Generic[T]):
    """One page of a list endpoint.

    ``first_id``/``last_id`` are filled in from the items when not given and
    must match them when they are; both stay None for an empty page.
    """

    data: Tuple[T, ...]
    has_more: bool
    first_id: Optional[str] = None
    last_id: Optional[str] = None
    object: str = LIST_OBJECT

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", tuple(self.data))
        if not self.data:
            if self.first_id is not None or self.last_id is not None:
                raise WireFormatError(
                    "Empty page cannot carry first_id/last_id",
                    owner=_OWNER,
                    details={"first_id": self.first_id, "last_id": self.last_id},
                )
            return
        for name, item in (("first_id", self.data[0]), ("last_id", self.data[-1])):
            declared = getattr(self, name)
            actual = _item_id(item)
            if declared is None:
                object.__setattr__(self, name, actual)
            elif actual is not None and actual != declared:
                raise WireFormatError(
                    f"{name} does not match the page items",
                    field=name,
                    owner=_OWNER,
                    details={"declared": declared, "item_id": actual},
                )

    @classmethod
    def of(cls, items: Iterable[T], has_more: bool = False) -> "PageResponse[T]":
        return cls(data=tuple(items), has_more=has_more)

    @classmethod
    def from_wire(
        cls,
        raw: Any,
        item_decoder: Callable[[Any], T] = _identity,
    ) -> "PageResponse[T]":
        obj = expect_object(raw, "page", _OWNER)
        object_tag = require_field(obj, "object", _OWNER, expect_str)
        if object_tag != LIST_OBJECT:
            raise MalformedWireValue("object", expected=repr(LIST_OBJECT), received=repr(object_tag), owner=_OWNER)
        raw_items = require_field(obj, "data", _OWNER, expect_list)
        return cls(
            data=tuple(item_decoder(item) for item in raw_items),
            has_more=require_field(obj, "has_more", _OWNER, expect_bool),
            first_id=decode_field(obj, "first_id", expect_str, _OWNER).or_none(),
            last_id=decode_field(obj, "last_id", expect_str, _OWNER).or_none(),
            object=object_tag,
        )

    def to_wire(self, item_encoder: Callable[[T], Any] = _identity) -> Dict[str, Any]:
        return {
            "object": self.object,
            "data": [item_encoder(item) for item in self.data],
            "has_more": self.has_more,
            "first_id": self.first_id,
            "last_id": self.last_id,
        }

    def __len__(self) -> int:
        return len(self.data)


FetchPage = Callable[[PageRequest], PageResponse[T]]


def iter_pages(fetch: FetchPage[T], request: Optional[PageRequest] = None) -> Iterator[PageResponse[T]]:
    """Yield pages from ``fetch`` until ``has_more`` is false.

    Each call starts over from ``request``; ``fetch`` does the I/O.
    """
    current: Optional[PageRequest] = request or PageRequest()
    while current is not None:
        page = fetch(current)
        yield page
        following = current.next_request(page)
        if following is not None and following == current:
            raise WireFormatError(
                "Cursor did not advance between pages",
                owner=_OWNER,
                details={"after": current.after, "before": current.before},
            )
        current = following


def iter_items(fetch: FetchPage[T], request: Optional[PageRequest] = None) -> Iterator[T]:
    for page in iter_pages(fetch, request):
        yield from page.data
