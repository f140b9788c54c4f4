from collections import OrderedDict


class ValidationCache:
    """Outcome of the last server check per ``field:value``.

    Keys embed the value, so an edit is always a miss; the size cap only bounds
    memory and evicts the oldest entry first.
    """

    def __init__(self, max_entries: int = 256) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[str, bool] = OrderedDict()

    @staticmethod
    def key(field: str, value: str) -> str:
        return f"{field}:{value}"

    def get(self, field: str, value: str) -> bool | None:
        return self._entries.get(self.key(field, value))

    def contains(self, field: str, value: str) -> bool:
        return self.key(field, value) in self._entries

    def set(self, field: str, value: str, valid: bool) -> None:
        key = self.key(field, value)
        self._entries[key] = valid
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
