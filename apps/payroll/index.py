from __future__ import annotations

from datetime import date

from .recurrence import to_local_date


def dedup_key(group_key, due_date) -> str:
    """Chave de deduplicação: grupo (ou funcionário) + data ISO sem horário."""
    return f"{group_key}|{to_local_date(due_date).isoformat()}"


class RecordIndex:
    """
    Índice em memória das contas já materializadas.

    Responde em O(1) se um par (grupo, data) já existe e acompanha, por
    grupo, o maior `recurrence_index` e a menor data de vencimento vistos.
    """

    def __init__(self):
        self._keys: set[str] = set()
        self._max_index: dict[str, int] = {}
        self._min_date: dict[str, date] = {}
        self._count: dict[str, int] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def has(self, group_key, due_date) -> bool:
        return dedup_key(group_key, due_date) in self._keys

    def add(self, group_key, due_date, recurrence_index: int | None = None) -> str:
        group_key = str(group_key)
        due = to_local_date(due_date)
        key = dedup_key(group_key, due)
        if key not in self._keys:
            self._keys.add(key)
            self._count[group_key] = self._count.get(group_key, 0) + 1
        if recurrence_index:
            self._max_index[group_key] = max(self._max_index.get(group_key, 0), int(recurrence_index))
        current_min = self._min_date.get(group_key)
        if current_min is None or due < current_min:
            self._min_date[group_key] = due
        return key

    def discard(self, group_key, due_date) -> None:
        """Libera a data para recriação; o maior índice visto continua reservado."""
        self._keys.discard(dedup_key(group_key, due_date))

    def max_index(self, group_key) -> int:
        return self._max_index.get(str(group_key), 0)

    def min_date(self, group_key) -> date | None:
        return self._min_date.get(str(group_key))

    def count(self, group_key) -> int:
        return self._count.get(str(group_key), 0)

    def next_index(self, group_key) -> int:
        """Próximo índice livre do grupo; nunca reutiliza números já vistos."""
        group_key = str(group_key)
        return max(self.max_index(group_key), self.count(group_key)) + 1

    def reserve(self, group_key, recurrence_index: int) -> None:
        """Marca como usados todos os índices até `recurrence_index`, mesmo sem conta existente."""
        if recurrence_index:
            group_key = str(group_key)
            self._max_index[group_key] = max(self._max_index.get(group_key, 0), int(recurrence_index))


def build_index(records) -> RecordIndex:
    """Monta o índice a partir de registros com `group_key`, `due_date` e `recurrence_index`."""
    index = RecordIndex()
    for record in records:
        index.add(record.group_key, record.due_date, record.recurrence_index)
    return index
