from dataclasses import dataclass
import enum
import math
from typing import Any, Callable

from .shared import printf, printf_err


DEFAULT_CAPACITY = 8
GROWTH_FACTOR = 2
REHASH_THRESHOLD = 0.6

HASH_MULTIPLIER = 1000003
HASH_MASK = 0xFFFFFFFF


_debug_check_counts = False
_debug_trace_rehash = False


def set_debug_check_counts(b: bool):
    global _debug_check_counts
    _debug_check_counts = b


def set_debug_trace_rehash(b: bool):
    global _debug_trace_rehash
    _debug_trace_rehash = b


def as_bytes(value: Any) -> bytes:
    """Return an independent bytes copy of a str or bytes-like value."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise Exception("not a string or bytes", value)


def hash_key(key: bytes) -> int:
    """Polynomial rolling hash over the key bytes, in 32-bit unsigned arithmetic.

    The result is taken modulo the table capacity to pick the home bucket,
    see `bucket_index`.
    """
    length = len(key)
    if length == 0:
        return 0

    x = (key[0] << 7) & HASH_MASK
    for b in key:
        x = ((HASH_MULTIPLIER * x) & HASH_MASK) ^ b
    x ^= length & HASH_MASK
    return x


def bucket_index(key: Any, capacity: int) -> int:
    assert capacity > 0
    return hash_key(as_bytes(key)) % capacity


@dataclass
class Key:
    value: bytes
    hash: int

    def __init__(self, value: Any) -> None:
        self.value = as_bytes(value)
        self.hash = hash_key(self.value)


class SlotStatus(enum.Enum):
    UNUSED = 0
    IN_USE = 1
    DELETED = 2


@dataclass
class Slot:
    status: SlotStatus
    key: Key | None
    value: bytes | None

    @classmethod
    def empty(cls):
        return Slot(SlotStatus.UNUSED, None, None)


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class DictConfig:
    initial_capacity: int = DEFAULT_CAPACITY
    growth_factor: int = GROWTH_FACTOR
    rehash_threshold: float = REHASH_THRESHOLD

    def __post_init__(self) -> None:
        if not isinstance(self.initial_capacity, int) or self.initial_capacity < 1:
            raise Exception("initial capacity must be a positive int", self.initial_capacity)
        if not isinstance(self.growth_factor, int) or self.growth_factor < 2:
            raise Exception("growth factor must be an int >= 2", self.growth_factor)
        if not 0.0 < self.rehash_threshold < 1.0:
            raise Exception("rehash threshold must be in (0, 1)", self.rehash_threshold)
        # one slot must stay unused after the last insert allowed below the threshold
        if math.ceil(self.rehash_threshold * self.initial_capacity) > self.initial_capacity - 1:
            raise Exception(
                "rehash threshold leaves no free slot at initial capacity",
                self.rehash_threshold,
                self.initial_capacity,
            )


def _new_slots(capacity: int) -> tuple[Slot, ...]:
    return tuple(Slot.empty() for _ in range(capacity))


def find_slot(slots: tuple[Slot, ...], key: Key) -> Slot | None:
    """Walk the linear probe sequence for `key`.

    Returns the IN_USE slot holding `key` if there is one. Otherwise returns
    the first DELETED slot seen before the probe hit an UNUSED slot, or that
    UNUSED slot. Returns None only when a full sweep found neither.
    """
    tombstone: Slot | None = None
    capacity = len(slots)
    index = key.hash % capacity

    for _ in range(capacity):
        slot = slots[index]
        match slot.status:
            case SlotStatus.UNUSED:
                return tombstone if tombstone is not None else slot
            case SlotStatus.DELETED:
                if tombstone is None:
                    tombstone = slot
            case SlotStatus.IN_USE:
                if slot.key == key:
                    return slot

        index = (index + 1) % capacity

    return tombstone


Visitor = Callable[[bytes, bytes], Any]


@dataclass
class Dict:
    config: DictConfig
    stored: int
    deleted: int
    slots: tuple[Slot, ...] | None

    def __init__(self, config: DictConfig | None = None) -> None:
        self.config = config if config is not None else DictConfig()
        self.stored = 0
        self.deleted = 0
        self.slots = _new_slots(self.config.initial_capacity)

    def size(self) -> int:
        slots = self._live_slots()
        if _debug_check_counts:
            used = sum(1 for slot in slots if slot.status == SlotStatus.IN_USE)
            deleted = sum(1 for slot in slots if slot.status == SlotStatus.DELETED)
            assert used == self.stored, (used, self.stored)
            assert deleted == self.deleted, (deleted, self.deleted)
        return self.stored

    def capacity(self) -> int:
        return len(self._live_slots())

    def load_factor(self) -> float:
        return (self.stored + self.deleted) / self.capacity()

    def contains(self, key: Any) -> bool:
        return self._lookup(Key(key)) is not None

    def retrieve(self, key: Any) -> bytes | NotFound:
        slot = self._lookup(Key(key))
        if slot is None:
            return NotFound()

        assert slot.value is not None
        return slot.value

    def store(self, key: Any, value: Any) -> bool:
        """Insert or update `key`. Returns True if the key was not present."""
        k = Key(key)
        data = as_bytes(value)

        slot = find_slot(self._live_slots(), k)
        if slot is not None and slot.status == SlotStatus.IN_USE:
            slot.value = data
            return False

        if self.load_factor() >= self.config.rehash_threshold:
            self._rehash()
            slot = find_slot(self._live_slots(), k)

        if slot is None:
            raise KeyError(k)

        if slot.status == SlotStatus.DELETED:
            self.deleted -= 1
        slot.status = SlotStatus.IN_USE
        slot.key = k
        slot.value = data
        self.stored += 1
        return True

    def delete(self, key: Any) -> bool:
        slot = self._lookup(Key(key))
        if slot is None:
            return False

        slot.status = SlotStatus.DELETED
        slot.key = None
        slot.value = None
        self.stored -= 1
        self.deleted += 1
        return True

    def for_each(self, visitor: Visitor):
        slots = self._live_slots()
        stored = self.stored
        for slot in slots:
            if slot.status != SlotStatus.IN_USE:
                continue
            assert slot.key is not None and slot.value is not None
            visitor(slot.key.value, slot.value)
            if self.slots is not slots or self.stored != stored:
                raise Exception("dictionary changed during for_each")

    def add_all(self, from_d: "Dict"):
        from_d.for_each(self.store)

    def free(self):
        for slot in self._live_slots():
            slot.status = SlotStatus.UNUSED
            slot.key = None
            slot.value = None
        self.stored = 0
        self.deleted = 0
        self.slots = None

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Any) -> bool:
        return self.contains(key)

    def _live_slots(self) -> tuple[Slot, ...]:
        if self.slots is None:
            raise Exception("dictionary has been freed")
        return self.slots

    def _lookup(self, key: Key) -> Slot | None:
        slot = find_slot(self._live_slots(), key)
        if slot is None or slot.status != SlotStatus.IN_USE:
            return None
        return slot

    def _rehash(self):
        old_slots = self._live_slots()
        new_capacity = len(old_slots) * self.config.growth_factor
        try:
            new_slots = _new_slots(new_capacity)
        except MemoryError:
            printf_err("rehash to {0:d} slots failed: out of memory\n", new_capacity)
            raise

        for slot in old_slots:
            if slot.status != SlotStatus.IN_USE:
                continue

            assert slot.key is not None
            dest = find_slot(new_slots, slot.key)
            assert dest is not None and dest.status == SlotStatus.UNUSED
            dest.status = SlotStatus.IN_USE
            dest.key = slot.key
            dest.value = slot.value

        if _debug_trace_rehash:
            printf(
                "rehash {0:d} -> {1:d} (stored={2:d}, dropped {3:d} tombstones)\n",
                len(old_slots),
                new_capacity,
                self.stored,
                self.deleted,
            )

        self.slots = new_slots
        self.deleted = 0


def new_dict(config: DictConfig | None = None) -> Dict:
    return Dict(config)
