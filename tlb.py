# tlb.py
import collections
import operator

MAX_ADDRESS = 2 ** 64 - 1


class TLBStats(collections.namedtuple(
        "TLBStats", ["accesses", "hits", "misses", "cold_misses", "capacity_misses"])):
    """Snapshot of the TLB counters at some point of a run."""

    __slots__ = ()

    @property
    def hit_rate(self):
        # percentage, 0 for an empty run
        if self.accesses == 0:
            return 0.0
        return self.hits / self.accesses * 100.0

    def as_dict(self):
        d = dict(self._asdict())
        d["hit_rate"] = self.hit_rate
        return d


class TLBSimulator:
    """
    Fully-associative LRU TLB model.
    Addresses are translated to page numbers (address // page_size) and the
    TLB caches page numbers only. Misses are split into cold (page never
    admitted before) and capacity (page admitted earlier, evicted since).
    """

    def __init__(self, tlb_size=64, page_size=4096):
        if not isinstance(tlb_size, int) or not isinstance(page_size, int):
            raise TypeError("tlb_size and page_size must be integers")
        if tlb_size < 1:
            raise ValueError(f"tlb_size must be >= 1, got {tlb_size}")
        if page_size < 1:
            raise ValueError(f"page_size must be > 0, got {page_size}")
        self._tlb_size = tlb_size
        self._page_size = page_size
        # page number -> True. Leftmost = least recently used.
        self._entries = collections.OrderedDict()
        self._seen_pages = set()
        self._accesses = 0
        self._hits = 0
        self._misses = 0
        self._cold_misses = 0
        self._capacity_misses = 0

    @property
    def tlb_size(self):
        return self._tlb_size

    @property
    def page_size(self):
        return self._page_size

    def access(self, address):
        """
        Access virtual address `address`. Return True if hit, False if miss.
        Updates LRU state and counters.
        """
        try:
            address = operator.index(address)
        except TypeError:
            raise TypeError(f"address must be an integer, got {type(address).__name__}") from None
        if address < 0 or address > MAX_ADDRESS:
            raise ValueError(f"address out of unsigned 64-bit range: {address}")
        self._accesses += 1
        page = address // self._page_size

        if page in self._entries:
            # hit -> move to end (most recently used)
            self._hits += 1
            self._entries.move_to_end(page)
            return True

        self._misses += 1
        if page not in self._seen_pages:
            self._cold_misses += 1
            self._seen_pages.add(page)
        else:
            self._capacity_misses += 1

        if len(self._entries) >= self._tlb_size:
            # evict least recently used (first key)
            self._entries.popitem(last=False)
        self._entries[page] = True
        return False

    def stats(self):
        return TLBStats(
            accesses=self._accesses,
            hits=self._hits,
            misses=self._misses,
            cold_misses=self._cold_misses,
            capacity_misses=self._capacity_misses,
        )

    def get_seen_pages(self):
        return frozenset(self._seen_pages)

    def resident_pages(self):
        """Resident page numbers ordered from least to most recently used."""
        return tuple(self._entries)

    def __len__(self):
        return len(self._entries)

    def __contains__(self, page):
        return page in self._entries


def format_stats(stats):
    lines = [
        f"Accesses: {stats.accesses}",
        f"Hits: {stats.hits}",
        f"Misses: {stats.misses}",
        f"  Cold Misses: {stats.cold_misses}",
        f"  Capacity Misses: {stats.capacity_misses}",
        f"Hit Rate: {stats.hit_rate:.2f}%",
    ]
    return "\n".join(lines)
