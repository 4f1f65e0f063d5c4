from enum import Enum
from typing import Any, Dict, List, Optional
from loguru import logger
from cluster_client import ClusterClient


class Step(Enum):
    LOOKUP = "lookup"
    REMOVE = "remove"
    PUT = "put"
    LIST = "list"
    DELETE = "delete"
    REINDEX = "reindex"


class AliasBinding:
    def __init__(self, index_name: str, alias_name: str) -> None:
        self.index_name = index_name
        self.alias_name = alias_name

    @classmethod
    def from_cat_row(cls, row: Dict[str, Any]) -> "AliasBinding":
        return cls(row["index"], row["alias"])

    def __repr__(self) -> str:
        return f"AliasBinding({self.alias_name} -> {self.index_name})"


class IndexDescriptor:
    def __init__(self, index_name: str) -> None:
        self.index_name = index_name

    @classmethod
    def from_cat_row(cls, row: Dict[str, Any]) -> "IndexDescriptor":
        return cls(row["index"])

    def __repr__(self) -> str:
        return f"IndexDescriptor({self.index_name})"


class RolloverOutcome:
    """Terminal result of a run, handed to the exit reporter"""

    def __init__(self, success: bool, status_code: int, detail: Any = None, step: Optional[Step] = None) -> None:
        self.success = success
        self.status_code = status_code
        self.detail = detail
        self.step = step

    @classmethod
    def ok(cls, detail: Any = None) -> "RolloverOutcome":
        return cls(True, 0, detail)

    @classmethod
    def failed(cls, step: Step, status_code: int, detail: Any = None) -> "RolloverOutcome":
        return cls(False, status_code, detail, step)


def select_indices_to_prune(index_names: List[str], target_index: str, keep_count: int) -> List[str]:
    """
        Pick the stale indices to delete after a rollover.

        The target index is never a candidate. The remaining names are sorted
        ascending and everything except the newest keep_count is returned,
        oldest first. Callers must use zero-padded or date-suffixed index names
        so that lexicographic order matches creation order.
    """
    if keep_count < 0:
        raise ValueError(f"Keep count must be >= 0, got {keep_count}")

    candidates = sorted(name for name in index_names if name != target_index)
    if len(candidates) <= keep_count:
        return []
    return candidates[:len(candidates) - keep_count]


class AliasRollover:
    """Repoints an alias to a freshly built index and prunes old versions"""

    def __init__(self, client: ClusterClient) -> None:
        self.client = client

    def rollover(self, alias_name: str, target_index: str, keep_count: int = 1) -> RolloverOutcome:
        """Run lookup, remove, put, list and delete in order, stopping at the first failure"""
        logger.info(f"Rolling alias {alias_name} over to {target_index} (keep={keep_count})")

        # Step 1: current binding
        lookup = self.client.cat_aliases(alias_name)
        if not lookup.ok:
            return RolloverOutcome.failed(Step.LOOKUP, lookup.status_code, lookup.payload)
        bindings = [AliasBinding.from_cat_row(row) for row in lookup.payload or []]

        # Step 2: remove old binding, if there is one
        if bindings:
            current = bindings[0]
            logger.info(f"Removing alias {current.alias_name} from {current.index_name}")
            removed = self.client.delete_alias(current.index_name, current.alias_name)
            if not removed.ok:
                return RolloverOutcome.failed(Step.REMOVE, removed.status_code, removed.payload)
        else:
            logger.info(f"Alias {alias_name} is not bound to any index - nothing to remove")

        # Step 3: bind alias to target
        logger.info(f"Putting alias {alias_name} on {target_index}")
        put = self.client.put_alias(target_index, alias_name)
        if not put.ok:
            return RolloverOutcome.failed(Step.PUT, put.status_code, put.payload)

        # Step 4: versioned indices sharing the alias prefix
        listed = self.client.cat_indices(f"{alias_name}*")
        if not listed.ok:
            return RolloverOutcome.failed(Step.LIST, listed.status_code, listed.payload)
        indices = [IndexDescriptor.from_cat_row(row) for row in listed.payload or []]
        logger.debug(f"Found {len(indices)} indices matching {alias_name}*: {indices}")

        # Step 5: prune beyond retention, oldest first, one at a time
        to_delete = select_indices_to_prune([i.index_name for i in indices], target_index, keep_count)
        if not to_delete:
            logger.info(f"No stale indices beyond retention of {keep_count}")
        deleted = []
        for index_name in to_delete:
            logger.warning(f"Deleting stale index {index_name}")
            result = self.client.delete_index(index_name)
            if not result.ok:
                return RolloverOutcome.failed(Step.DELETE, result.status_code, result.payload)
            deleted.append(index_name)

        logger.info(f"Alias {alias_name} now points to {target_index}; deleted {len(deleted)} stale indices")
        return RolloverOutcome.ok({"alias": alias_name, "index": target_index, "deleted": deleted})
