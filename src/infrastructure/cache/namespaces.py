"""Cache namespace layout per record type.

Every record type owns four namespaces:

    <type>            by id           dto_<id>, entity_<id>
    <type>_by_name    by natural name dto_<name>, entity_<name>
    <type>_by_path    by natural path dto_<path>, entity_<path>
    all_<plural>      the full list   dto_all

The dto_ / entity_ prefixes keep the transfer-object and raw-record
representations of the same lookup apart; invalidation always evicts both.
"""

from __future__ import annotations

from dataclasses import dataclass

DTO_PREFIX = "dto_"
ENTITY_PREFIX = "entity_"
ALL_RECORDS_KEY = DTO_PREFIX + "all"


def dto_key(key: object) -> str:
    return f"{DTO_PREFIX}{key}"


def entity_key(key: object) -> str:
    return f"{ENTITY_PREFIX}{key}"


@dataclass(frozen=True)
class CacheNamespaces:
    record_type: str
    by_id: str
    by_name: str
    by_path: str
    all_records: str

    @classmethod
    def for_record_type(cls, record_type: str, plural: str) -> CacheNamespaces:
        return cls(
            record_type=record_type,
            by_id=record_type,
            by_name=f"{record_type}_by_name",
            by_path=f"{record_type}_by_path",
            all_records=f"all_{plural}",
        )

    @property
    def names(self) -> tuple[str, str, str, str]:
        return (self.by_id, self.by_name, self.by_path, self.all_records)


CATEGORY_CACHES = CacheNamespaces.for_record_type("category", "categories")
ARTICLE_CACHES = CacheNamespaces.for_record_type("article", "articles")

NAMESPACE_REGISTRY: dict[str, CacheNamespaces] = {
    CATEGORY_CACHES.record_type: CATEGORY_CACHES,
    ARTICLE_CACHES.record_type: ARTICLE_CACHES,
}

# namespace name -> owning record type, for per-type TTL lookup
_OWNERS = {name: ns.record_type for ns in NAMESPACE_REGISTRY.values() for name in ns.names}


def record_type_of(namespace: str) -> str | None:
    return _OWNERS.get(namespace)


def all_namespaces() -> list[str]:
    return [name for ns in NAMESPACE_REGISTRY.values() for name in ns.names]
