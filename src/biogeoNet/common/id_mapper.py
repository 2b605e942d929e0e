"""
ID mapping utilities for the biogeoNet library.

NetworkIt requires consecutive integer node ids, while occurrence networks are
keyed by names (or by ``(partition, name)`` pairs in bipartite graphs). The
IDMapper keeps a bidirectional mapping between the two.
"""

from numbers import Integral
from typing import Any, Dict, Iterable, Iterator, List


class IDMapper:
    """
    Bidirectional mapping between original and internal node IDs.

    Attributes
    ----------
    original_to_internal : Dict[Any, int]
        Maps original IDs to NetworkIt internal IDs (0, 1, 2, ...)
    internal_to_original : Dict[int, Any]
        Maps NetworkIt internal IDs to original IDs

    Examples
    --------
    >>> mapper = IDMapper()
    >>> mapper.add_mapping(("taxon", "Allosaurus"), 0)
    >>> mapper.add_mapping(("locality", "Morrison"), 1)
    >>> mapper.get_internal(("taxon", "Allosaurus"))
    0
    >>> mapper.get_original(1)
    ('locality', 'Morrison')

    Notes
    -----
    - Original IDs can be any hashable value
    - Internal IDs are non-negative integers, normally consecutive from 0
    - A mapper is not modified after the graph that owns it has been built
    """

    def __init__(self) -> None:
        self.original_to_internal: Dict[Any, int] = {}
        self.internal_to_original: Dict[int, Any] = {}

    @classmethod
    def from_ids(cls, original_ids: Iterable[Any]) -> "IDMapper":
        """
        Build a mapper assigning internal ids 0..n-1 in iteration order.

        Raises
        ------
        ValueError
            If original_ids contains duplicates
        """
        mapper = cls()
        for internal_id, original_id in enumerate(original_ids):
            mapper.add_mapping(original_id, internal_id)
        return mapper

    def get_internal(self, original_id: Any) -> int:
        """
        Get internal NetworkIt ID for a given original ID.

        Raises
        ------
        KeyError
            If original_id is not found in the mapping
        """
        try:
            return self.original_to_internal[original_id]
        except KeyError:
            raise KeyError(f"Original ID '{original_id}' not found in mapping")

    def get_original(self, internal_id: int) -> Any:
        """
        Get original ID for a given internal NetworkIt ID.

        Raises
        ------
        KeyError
            If internal_id is not found in the mapping
        TypeError
            If internal_id is not an integer
        """
        if not isinstance(internal_id, Integral):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        try:
            return self.internal_to_original[int(internal_id)]
        except KeyError:
            raise KeyError(f"Internal ID {internal_id} not found in mapping")

    def get_original_batch(self, internal_ids: Iterable[int]) -> List[Any]:
        """
        Get original IDs for a batch of internal IDs.
        """
        return [self.get_original(internal_id) for internal_id in internal_ids]

    def add_mapping(self, original_id: Any, internal_id: int) -> None:
        """
        Add a new ID mapping pair.

        Parameters
        ----------
        original_id : Any
            Original node identifier (must be hashable)
        internal_id : int
            NetworkIt internal ID (must be non-negative integer)

        Raises
        ------
        ValueError
            If original_id or internal_id is already mapped, or
            internal_id is negative
        TypeError
            If internal_id is not an integer or original_id is not hashable
        """
        if not isinstance(internal_id, Integral):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")
        internal_id = int(internal_id)
        if internal_id < 0:
            raise ValueError(f"Internal ID must be non-negative, got {internal_id}")

        try:
            hash(original_id)
        except TypeError:
            raise TypeError(f"Original ID must be hashable, got {type(original_id)}")

        if original_id in self.original_to_internal:
            raise ValueError(
                f"Original ID '{original_id}' already mapped to internal ID "
                f"{self.original_to_internal[original_id]}"
            )
        if internal_id in self.internal_to_original:
            raise ValueError(
                f"Internal ID {internal_id} already mapped to original ID "
                f"'{self.internal_to_original[internal_id]}'"
            )

        self.original_to_internal[original_id] = internal_id
        self.internal_to_original[internal_id] = original_id

    def original_ids(self) -> List[Any]:
        """Original ids ordered by internal id."""
        return [self.internal_to_original[i] for i in sorted(self.internal_to_original)]

    def size(self) -> int:
        """Number of mapped node IDs."""
        return len(self.original_to_internal)

    def is_empty(self) -> bool:
        return len(self.original_to_internal) == 0

    def has_original(self, original_id: Any) -> bool:
        return original_id in self.original_to_internal

    def has_internal(self, internal_id: int) -> bool:
        return isinstance(internal_id, Integral) and int(internal_id) in self.internal_to_original

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, item: Any) -> bool:
        return self.has_original(item)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.original_ids())

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
