"""Cache keys for detail responses."""


def event_cache_key(event_id: str) -> str:
    return f"events:{event_id}"


def hall_cache_key(hall_id: str) -> str:
    return f"halls:{hall_id}"
