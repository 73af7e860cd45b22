import re
from enum import IntEnum
from typing import Any


class TaxonomicRanks(IntEnum):
    """Enumeration of taxonomic ranks that carry a prefix in biom exports."""

    SUPERKINGDOM = 0
    DOMAIN = 1
    KINGDOM = 2
    PHYLUM = 3
    CLASS = 4
    ORDER = 5
    FAMILY = 6
    GENUS = 7
    SPECIES = 8

    @property
    def name(self) -> str:
        return super().name.lower()

    @property
    def prefix(self) -> str:
        # superkingdom is the only two-letter code
        if self is TaxonomicRanks.SUPERKINGDOM:
            return "sk__"
        return f"{self.name[0]}__"

    @classmethod
    def prefix_regex(cls) -> str:
        """
        Get regex pattern matching any rank prefix at the start of a string.

        Only a prefix in the very first position matches; surrounding text,
        including leading whitespace, is kept as is.

        Examples:
            >>> TaxonomicRanks.prefix_regex()
            '^(?:sk|d|k|p|c|o|f|g|s)__'
        """
        # Longest codes first so "sk" wins over "s"
        codes = sorted(
            (rank.prefix[:-2] for rank in cls), key=len, reverse=True
        )
        return "^(?:" + "|".join(codes) + ")__"


RANK_PREFIX_RE = re.compile(TaxonomicRanks.prefix_regex())


def strip_rank_prefix(value: Any) -> Any:
    """Remove a leading rank prefix such as ``k__`` or ``sk__``.

    Non-string values (including None) are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    return RANK_PREFIX_RE.sub("", value, count=1)
