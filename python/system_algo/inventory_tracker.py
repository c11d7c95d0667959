# Inventory Tracker with Category Index and Restock Notifications

# Design an in-memory inventory that stores items keyed by id, groups them by category,
# and notifies listeners whenever a write leaves an item below the restock threshold.

# Implement the following APIs:

# add_or_update_item(item_id: str, name: str, category: str, quantity: int) -> None
#   """
#   Create the item, or overwrite name, category and quantity of an existing one.
#   Changing the category moves the item into the new category bucket.
#   """

# remove_item(item_id: str) -> None
#   """
#   Remove the item. Unknown ids are ignored.
#   """

# list_by_category(category: str) -> list[Item]
#   """
#   Return items in the category, highest quantity first.
#   """

# top_k(k: int) -> list[Item]
#   """
#   Return the k items with the greatest quantity across all categories.
#   """

# merge_from(other: InventoryTracker) -> None
#   """
#   Add items missing from self, and take over items whose quantity in other is strictly greater.
#   """

# display_all() -> list[Item]
#   """
#   Return every item, in insertion order.
#   """

# check_restock(item_id: str) -> RestockNotice | None
#   """
#   Emit a notice when the item's quantity is below the restock threshold.
#   """

# Constraints
# - Equal quantities are ordered by first insertion, in buckets and in top_k alike.
# - Restock is checked after every write, never after a removal or a skipped merge.
# - Each operation is thread-safe.

import heapq
import logging
from dataclasses import dataclass, replace
from itertools import count
from threading import RLock, Thread
from typing import Callable

from heapdict import heapdict
from sortedcontainers import SortedKeyList

logger = logging.getLogger(__name__)


@dataclass
class Item:
    id: str
    name: str
    category: str
    quantity: int

@dataclass(frozen=True)
class RestockNotice:
    item_id: str
    item_name: str
    quantity: int
    threshold: int

RestockListener = Callable[[RestockNotice], None]

class InventoryTracker:
    def __init__(self, restock_threshold: int = 10) -> None:
        if restock_threshold < 0:
            raise ValueError(f"restock_threshold must be non-negative, got {restock_threshold}")
        self.restock_threshold = restock_threshold

        self.items: dict[str, Item] = {}                        # item id -> item
        self.category_buckets: dict[str, SortedKeyList] = {}    # category -> SortedKeyList[item id]
        self.insertion_seq: dict[str, int] = {}                 # item id -> creation order
        self.low_stock: heapdict = heapdict()                   # item id -> (quantity, seq), below threshold only

        self.listeners: list[RestockListener] = []
        self._next_seq = count()
        self.lock = RLock()

    def __len__(self) -> int:
        with self.lock:
            return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        with self.lock:
            return item_id in self.items

    def _rank(self, item_id: str) -> tuple[int, int]:
        return (-self.items[item_id].quantity, self.insertion_seq[item_id])

    def _get_bucket(self, category: str) -> SortedKeyList:
        bucket = self.category_buckets.get(category)
        if bucket is None:
            bucket = SortedKeyList(key=self._rank)
            self.category_buckets[category] = bucket
        return bucket

    def _detach(self, item: Item) -> None:
        """
        assumes that caller holds self.lock and has not yet changed item.quantity,
        the bucket locates the id by its current rank
        """
        bucket = self.category_buckets[item.category]
        bucket.remove(item.id)
        if not bucket:
            del self.category_buckets[item.category]

    def _track_low_stock(self, item: Item) -> None:
        if item.quantity < self.restock_threshold:
            self.low_stock[item.id] = (item.quantity, self.insertion_seq[item.id])
        else:
            self.low_stock.pop(item.id, None)

    def subscribe(self, listener: RestockListener) -> None:
        with self.lock:
            self.listeners.append(listener)

    def unsubscribe(self, listener: RestockListener) -> None:
        with self.lock:
            self.listeners.remove(listener)

    def add_or_update_item(self, item_id: str, name: str, category: str, quantity: int) -> None:
        """
        Create the item, or overwrite name, category and quantity of an existing one.
        Changing the category moves the item into the new category bucket.
        """
        with self.lock:
            self._write_item(item_id, name, category, quantity)
            self.check_restock(item_id)

    def _write_item(self, item_id: str, name: str, category: str, quantity: int) -> None:
        """
        assumes that caller holds self.lock, updates indexes without checking restock
        """
        item = self.items.get(item_id)
        if item is None:
            item = Item(item_id, name, category, quantity)
            self.items[item_id] = item
            self.insertion_seq[item_id] = next(self._next_seq)
            logger.debug("Added item %s (%s) to %s with quantity %d", item_id, name, category, quantity)
        else:
            # remove -> mutate -> re-insert, the bucket key reads the live quantity
            self._detach(item)
            if item.category != category:
                logger.debug("Moving item %s from %s to %s", item_id, item.category, category)
            item.name = name
            item.category = category
            item.quantity = quantity
            logger.debug("Updated item %s quantity to %d", item_id, quantity)

        self._get_bucket(category).add(item_id)
        self._track_low_stock(item)

    def remove_item(self, item_id: str) -> None:
        """
        Remove the item. Unknown ids are ignored.
        """
        with self.lock:
            item = self.items.get(item_id)
            if item is None:
                return

            self._detach(item)
            self.low_stock.pop(item_id, None)
            del self.items[item_id]
            del self.insertion_seq[item_id]
            logger.debug("Removed item %s from %s", item_id, item.category)

    def get_item(self, item_id: str) -> Item | None:
        with self.lock:
            item = self.items.get(item_id)
            return replace(item) if item else None

    def categories(self) -> list[str]:
        with self.lock:
            return sorted(self.category_buckets.keys())

    def list_by_category(self, category: str) -> list[Item]:
        """
        Return items in the category, highest quantity first.
        """
        with self.lock:
            bucket = self.category_buckets.get(category, [])
            return [replace(self.items[item_id]) for item_id in bucket]

    def top_k(self, k: int) -> list[Item]:
        """
        Return the k items with the greatest quantity across all categories.
        """
        if k <= 0:
            return []

        with self.lock:
            top_ids = heapq.nsmallest(k, self.items.keys(), key=self._rank)
            return [replace(self.items[item_id]) for item_id in top_ids]

    def display_all(self) -> list[Item]:
        """
        Return every item, in insertion order.
        """
        with self.lock:
            return [replace(item) for item in self.items.values()]

    def merge_from(self, other: "InventoryTracker") -> None:
        """
        Add items missing from self, and take over items whose quantity in other is strictly greater.
        other is only read, a snapshot is taken before self.lock is acquired so that
        two trackers merging into each other cannot deadlock.
        All writes are applied before any restock check, a failing listener cannot
        leave the merge half applied.
        """
        with other.lock:
            incoming = [replace(item) for item in other.items.values()]

        added = updated = skipped = 0
        with self.lock:
            written: list[str] = []
            for other_item in incoming:
                current = self.items.get(other_item.id)
                if current is None:
                    added += 1
                elif other_item.quantity > current.quantity:
                    updated += 1
                else:
                    skipped += 1
                    continue

                self._write_item(
                    other_item.id, other_item.name, other_item.category, other_item.quantity
                )
                written.append(other_item.id)

            logger.info("Merged inventory: %d added, %d updated, %d skipped", added, updated, skipped)
            for item_id in written:
                self.check_restock(item_id)

    def check_restock(self, item_id: str) -> RestockNotice | None:
        """
        Emit a notice when the item's quantity is below the restock threshold.
        Listeners are called synchronously, their exceptions propagate to the writer.
        Listeners run while self.lock is held, a listener that waits on another thread
        which touches this tracker will deadlock.
        """
        with self.lock:
            item = self.items.get(item_id)
            if item is None or item.quantity >= self.restock_threshold:
                return None

            notice = RestockNotice(item.id, item.name, item.quantity, self.restock_threshold)
            logger.warning(
                "Restock notification: item %s (id: %s) is below the restock threshold %d",
                item.name, item.id, self.restock_threshold,
            )
            for listener in list(self.listeners):
                listener(notice)
            return notice

    def get_low_stock_items(self) -> list[Item]:
        """
        Return items below the restock threshold, lowest quantity first.
        """
        with self.lock:
            ranked = sorted(self.low_stock.items(), key=lambda item_rank: item_rank[1])
            return [replace(self.items[item_id]) for item_id, _ in ranked]

    def most_urgent_restock(self) -> Item | None:
        with self.lock:
            if not self.low_stock:
                return None
            item_id, _ = self.low_stock.peekitem()
            return replace(self.items[item_id])


def _assert_consistent(tracker: InventoryTracker):
    seen: set[str] = set()
    for category, bucket in tracker.category_buckets.items():
        assert len(bucket) > 0, f"empty bucket left for {category}"
        quantities = [tracker.items[item_id].quantity for item_id in bucket]
        assert quantities == sorted(quantities, reverse=True)
        for item_id in bucket:
            assert item_id not in seen, f"{item_id} in more than one bucket"
            assert tracker.items[item_id].category == category
            seen.add(item_id)
    assert seen == set(tracker.items.keys())

def _quantities(items: list[Item]) -> list[tuple[str, int]]:
    return [(item.id, item.quantity) for item in items]

def test_restock_notification():
    tracker = InventoryTracker(restock_threshold=10)
    notices: list[RestockNotice] = []
    tracker.subscribe(notices.append)

    tracker.add_or_update_item("101", "Laptop", "Electronics", 50)
    tracker.add_or_update_item("103", "Apple", "Groceries", 5)
    assert notices == [RestockNotice("103", "Apple", 5, 10)]

    tracker.add_or_update_item("103", "Apple", "Groceries", 25)
    assert len(notices) == 1
    assert _quantities(tracker.list_by_category("Groceries")) == [("103", 25)]

    # exactly at threshold is not below it
    tracker.add_or_update_item("104", "Pear", "Groceries", 10)
    assert len(notices) == 1
    assert tracker.check_restock("104") is None
    assert tracker.check_restock("missing") is None

    # removal never notifies
    tracker.add_or_update_item("105", "Plum", "Groceries", 1)
    assert len(notices) == 2
    tracker.remove_item("105")
    assert len(notices) == 2

    tracker.unsubscribe(notices.append)
    tracker.add_or_update_item("106", "Fig", "Groceries", 0)
    assert len(notices) == 2

def test_top_k():
    tracker = InventoryTracker(restock_threshold=10)
    tracker.add_or_update_item("101", "Laptop", "Electronics", 50)
    tracker.add_or_update_item("102", "Chair", "Furniture", 20)
    tracker.add_or_update_item("103", "Apple", "Groceries", 5)
    tracker.add_or_update_item("104", "Table", "Furniture", 15)

    assert _quantities(tracker.top_k(2)) == [("101", 50), ("102", 20)]
    assert _quantities(tracker.top_k(10)) == [("101", 50), ("102", 20), ("104", 15), ("103", 5)]
    assert tracker.top_k(0) == []
    assert tracker.top_k(-3) == []
    assert InventoryTracker().top_k(5) == []

def test_merge():
    a = InventoryTracker(restock_threshold=10)
    a.add_or_update_item("102", "Chair", "Furniture", 20)
    a.add_or_update_item("107", "Desk", "Furniture", 40)

    b = InventoryTracker(restock_threshold=10)
    b.add_or_update_item("102", "Chair", "Furniture", 25)
    b.add_or_update_item("105", "Fan", "Electronics", 30)
    b.add_or_update_item("107", "Desk", "Furniture", 40)

    a.merge_from(b)
    assert a.get_item("102").quantity == 25
    assert a.get_item("105") == Item("105", "Fan", "Electronics", 30)
    assert a.get_item("107").quantity == 40
    assert len(a) == 3
    _assert_consistent(a)

    # other is left untouched
    assert _quantities(b.display_all()) == [("102", 25), ("105", 30), ("107", 40)]

def test_merge_propagates_name_and_category():
    a = InventoryTracker()
    a.add_or_update_item("1", "Lamp", "Furniture", 12)
    b = InventoryTracker()
    b.add_or_update_item("1", "Desk Lamp", "Lighting", 30)

    a.merge_from(b)
    assert a.get_item("1") == Item("1", "Desk Lamp", "Lighting", 30)
    assert a.list_by_category("Furniture") == []
    assert a.categories() == ["Lighting"]

def test_merge_skip_does_not_notify():
    a = InventoryTracker(restock_threshold=10)
    a.add_or_update_item("1", "Bolt", "Hardware", 3)
    notices: list[RestockNotice] = []
    a.subscribe(notices.append)

    b = InventoryTracker(restock_threshold=10)
    b.add_or_update_item("1", "Bolt", "Hardware", 2)
    b.add_or_update_item("2", "Nut", "Hardware", 1)

    a.merge_from(b)
    assert [notice.item_id for notice in notices] == ["2"]
    assert a.get_item("1").quantity == 3

def test_merge_update_notifies():
    a = InventoryTracker(restock_threshold=10)
    a.add_or_update_item("1", "Bolt", "Hardware", 2)
    notices: list[RestockNotice] = []
    a.subscribe(notices.append)

    b = InventoryTracker(restock_threshold=10)
    b.add_or_update_item("1", "Bolt", "Hardware", 5)

    a.merge_from(b)
    assert notices == [RestockNotice("1", "Bolt", 5, 10)]
    assert a.most_urgent_restock() == Item("1", "Bolt", "Hardware", 5)

def test_merge_listener_failure_applies_all_writes():
    a = InventoryTracker(restock_threshold=10)

    def failing(notice: RestockNotice):
        raise RuntimeError(f"pager down for {notice.item_id}")

    a.subscribe(failing)
    b = InventoryTracker(restock_threshold=10)
    b.add_or_update_item("1", "Nut", "Hardware", 1)
    b.add_or_update_item("2", "Saw", "Tools", 50)

    try:
        a.merge_from(b)
    except RuntimeError:
        pass
    else:
        raise AssertionError("listener error should reach the caller of merge_from")
    assert _quantities(a.display_all()) == [("1", 1), ("2", 50)]
    _assert_consistent(a)

def test_merge_self_is_noop():
    tracker = InventoryTracker(restock_threshold=10)
    tracker.add_or_update_item("1", "Bolt", "Hardware", 3)
    tracker.add_or_update_item("2", "Saw", "Tools", 30)
    before = tracker.display_all()

    notices: list[RestockNotice] = []
    tracker.subscribe(notices.append)
    tracker.merge_from(tracker)

    assert tracker.display_all() == before
    assert notices == []
    _assert_consistent(tracker)

def test_merge_monotonic():
    import random
    rng = random.Random(7)
    for _ in range(20):
        a, b = InventoryTracker(), InventoryTracker()
        for tracker in (a, b):
            for _ in range(15):
                item_id = str(rng.randint(0, 10))
                tracker.add_or_update_item(item_id, f"item-{item_id}", rng.choice("XYZ"), rng.randint(0, 50))

        before = {item.id: item.quantity for item in a.display_all()}
        a.merge_from(b)
        for item in b.display_all():
            assert a.get_item(item.id).quantity >= max(before.get(item.id, item.quantity), item.quantity)
        _assert_consistent(a)

def test_category_relocation():
    tracker = InventoryTracker()
    tracker.add_or_update_item("1", "Chair", "Furniture", 20)
    tracker.add_or_update_item("2", "Table", "Furniture", 15)

    tracker.add_or_update_item("1", "Office Chair", "Office", 8)
    assert tracker.get_item("1") == Item("1", "Office Chair", "Office", 8)
    assert _quantities(tracker.list_by_category("Furniture")) == [("2", 15)]
    assert _quantities(tracker.list_by_category("Office")) == [("1", 8)]

    # last item leaving a category drops its bucket
    tracker.add_or_update_item("2", "Table", "Office", 15)
    assert tracker.categories() == ["Office"]
    assert tracker.list_by_category("Furniture") == []
    _assert_consistent(tracker)

def test_reorder_within_bucket():
    tracker = InventoryTracker()
    tracker.add_or_update_item("a", "A", "C", 10)
    tracker.add_or_update_item("b", "B", "C", 20)
    tracker.add_or_update_item("c", "C", "C", 30)
    assert [item.id for item in tracker.list_by_category("C")] == ["c", "b", "a"]

    tracker.add_or_update_item("a", "A", "C", 40)
    tracker.add_or_update_item("c", "C", "C", 5)
    assert _quantities(tracker.list_by_category("C")) == [("a", 40), ("b", 20), ("c", 5)]
    _assert_consistent(tracker)

def test_ties_follow_insertion_order():
    tracker = InventoryTracker()
    tracker.add_or_update_item("x", "X", "C", 10)
    tracker.add_or_update_item("y", "Y", "C", 10)
    tracker.add_or_update_item("z", "Z", "D", 10)
    assert [item.id for item in tracker.list_by_category("C")] == ["x", "y"]
    assert [item.id for item in tracker.top_k(3)] == ["x", "y", "z"]

    # update keeps the original sequence, re-adding after removal does not
    tracker.add_or_update_item("x", "X", "C", 10)
    assert [item.id for item in tracker.top_k(3)] == ["x", "y", "z"]
    tracker.remove_item("x")
    tracker.add_or_update_item("x", "X", "C", 10)
    assert [item.id for item in tracker.top_k(3)] == ["y", "z", "x"]

def test_remove_item():
    tracker = InventoryTracker()
    tracker.add_or_update_item("1", "Chair", "Furniture", 20)
    tracker.add_or_update_item("2", "Table", "Furniture", 15)

    tracker.remove_item("1")
    assert "1" not in tracker
    assert _quantities(tracker.list_by_category("Furniture")) == [("2", 15)]
    tracker.remove_item("1")
    tracker.remove_item("never-added")
    assert len(tracker) == 1

    tracker.remove_item("2")
    assert tracker.categories() == []
    assert tracker.display_all() == []

def test_snapshots_are_independent():
    tracker = InventoryTracker()
    tracker.add_or_update_item("1", "Chair", "Furniture", 20)
    listed = tracker.list_by_category("Furniture")
    shown = tracker.display_all()

    listed[0].quantity = 999
    tracker.add_or_update_item("1", "Chair", "Furniture", 3)
    assert shown[0].quantity == 20
    assert tracker.get_item("1").quantity == 3
    assert tracker.list_by_category("Unknown") == []

def test_low_stock_queries():
    tracker = InventoryTracker(restock_threshold=10)
    assert tracker.most_urgent_restock() is None

    tracker.add_or_update_item("103", "Apple", "Groceries", 5)
    tracker.add_or_update_item("106", "Milk", "Groceries", 2)
    tracker.add_or_update_item("101", "Laptop", "Electronics", 50)
    assert tracker.most_urgent_restock().id == "106"
    assert _quantities(tracker.get_low_stock_items()) == [("106", 2), ("103", 5)]

    tracker.add_or_update_item("106", "Milk", "Groceries", 50)
    assert tracker.most_urgent_restock().id == "103"

    tracker.remove_item("103")
    assert tracker.get_low_stock_items() == []
    assert tracker.most_urgent_restock() is None

def test_listener_exception_propagates():
    tracker = InventoryTracker(restock_threshold=10)

    def failing(notice: RestockNotice):
        raise RuntimeError(f"pager down for {notice.item_id}")

    tracker.subscribe(failing)
    try:
        tracker.add_or_update_item("1", "Bolt", "Hardware", 1)
    except RuntimeError:
        pass
    else:
        raise AssertionError("listener error should reach the writer")
    # the write itself completed before notification
    assert tracker.get_item("1").quantity == 1
    _assert_consistent(tracker)

    try:
        tracker.unsubscribe(print)
    except ValueError:
        pass
    else:
        raise AssertionError("unknown listener should be rejected")

def test_invalid_threshold():
    try:
        InventoryTracker(restock_threshold=-1)
    except ValueError:
        pass
    else:
        raise AssertionError("negative threshold should be rejected")
    assert InventoryTracker(restock_threshold=0).restock_threshold == 0

def test_random_operations_keep_indexes_consistent():
    import random
    rng = random.Random(42)
    tracker = InventoryTracker(restock_threshold=10)
    for _ in range(2000):
        item_id = str(rng.randint(0, 40))
        if rng.random() < 0.25:
            tracker.remove_item(item_id)
            assert all(item.id != item_id for category in tracker.categories()
                       for item in tracker.list_by_category(category))
        else:
            tracker.add_or_update_item(item_id, f"item-{item_id}", rng.choice("ABCDE"), rng.randint(0, 100))
    _assert_consistent(tracker)

    everything = tracker.top_k(len(tracker) + 5)
    assert len(everything) == len(tracker)
    quantities = [item.quantity for item in everything]
    assert quantities == sorted(quantities, reverse=True)
    assert quantities[:3] == [item.quantity for item in tracker.top_k(3)]

def test_concurrent_writers():
    tracker = InventoryTracker(restock_threshold=10)

    def writer(thread_id: int, num_writes: int):
        for i in range(num_writes):
            item_id = str(i % 50)
            tracker.add_or_update_item(item_id, f"item-{item_id}", f"cat-{(i + thread_id) % 5}", i % 30)
            if i % 7 == 0:
                tracker.remove_item(str((i * 3) % 50))

    threads = [Thread(target=writer, args=(t, 300)) for t in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    _assert_consistent(tracker)

def test_demo_sequence():
    inventory = InventoryTracker(restock_threshold=10)
    notices: list[RestockNotice] = []
    inventory.subscribe(notices.append)

    inventory.add_or_update_item("101", "Laptop", "Electronics", 50)
    inventory.add_or_update_item("102", "Chair", "Furniture", 20)
    inventory.add_or_update_item("103", "Apple", "Groceries", 5)
    inventory.add_or_update_item("104", "Table", "Furniture", 15)
    assert [item.id for item in inventory.display_all()] == ["101", "102", "103", "104"]
    assert _quantities(inventory.list_by_category("Furniture")) == [("102", 20), ("104", 15)]
    assert _quantities(inventory.top_k(2)) == [("101", 50), ("102", 20)]

    inventory.add_or_update_item("103", "Apple", "Groceries", 25)

    another = InventoryTracker(restock_threshold=10)
    another.add_or_update_item("105", "Fan", "Electronics", 30)
    another.add_or_update_item("102", "Chair", "Furniture", 25)
    inventory.merge_from(another)

    assert _quantities(inventory.display_all()) == [
        ("101", 50), ("102", 25), ("103", 25), ("104", 15), ("105", 30),
    ]
    assert [notice.item_id for notice in notices] == ["103"]
    _assert_consistent(inventory)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    test_restock_notification()
    test_top_k()
    test_merge()
    test_merge_propagates_name_and_category()
    test_merge_skip_does_not_notify()
    test_merge_update_notifies()
    test_merge_listener_failure_applies_all_writes()
    test_merge_self_is_noop()
    test_merge_monotonic()
    test_category_relocation()
    test_reorder_within_bucket()
    test_ties_follow_insertion_order()
    test_remove_item()
    test_snapshots_are_independent()
    test_low_stock_queries()
    test_listener_exception_propagates()
    test_invalid_threshold()
    test_random_operations_keep_indexes_consistent()
    test_concurrent_writers()
    test_demo_sequence()
    print("\n✅ All tests passed!")
