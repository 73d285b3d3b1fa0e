"""In-memory implementation of KeyValueStore for testing."""


class FakeKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self.store: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str) -> None:
        self.store[key] = value

    async def remove(self, key: str) -> None:
        self.store.pop(key, None)
