from .shared import printf, show_bytes
from .table import Dict, Slot, SlotStatus, bucket_index


def print_dict(d: Dict):
    printf(
        "*** capacity: {0:d} stored: {1:d} deleted: {2:d} load_factor: {3:.2f}\n",
        d.capacity(),
        d.stored,
        d.deleted,
        d.load_factor(),
    )

    slots = d.slots
    assert slots is not None
    for index, slot in enumerate(slots):
        print_slot(index, slot, len(slots))


def print_slot(index: int, slot: Slot, capacity: int):
    printf("{0:02d}: ", index)
    match slot.status:
        case SlotStatus.UNUSED:
            printf("unused\n")
        case SlotStatus.DELETED:
            printf("DELETED\n")
        case SlotStatus.IN_USE:
            assert slot.key is not None and slot.value is not None
            printf(
                "IN_USE key={0:s} hash={1:d} value={2:s}\n",
                show_bytes(slot.key.value),
                bucket_index(slot.key.value, capacity),
                show_bytes(slot.value),
            )
        case _:
            printf("Unknown slot status {0}\n", slot.status)
