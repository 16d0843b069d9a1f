from collections.abc import Iterable

from sweetswirls.schemas.inventory import InventoryItemOut


def search_items(items: Iterable[InventoryItemOut], term: str) -> list[InventoryItemOut]:
    """Case-insensitive substring match over name, sku and category."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(items)
    results = []
    for item in items:
        haystack = (item.name, item.sku or "", item.category.value)
        if any(needle in field.lower() for field in haystack):
            results.append(item)
    return results
