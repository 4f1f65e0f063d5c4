from loguru import logger
from alias_rollover import RolloverOutcome, Step
from cluster_client import ClusterClient


class Reindex:

    """
        Server-side copy of one index into another.
        The task is submitted with wait_for_completion=false, so this returns as soon as
        the cluster accepts it. Completion is not polled; once the task is done, run the
        tool again in alias mode to point the alias at the destination.
    """

    def __init__(self, client: ClusterClient) -> None:
        self.client = client

    def reindex(self, source: str, dest: str) -> RolloverOutcome:
        logger.info(f"Submitting reindex {source} -> {dest}")
        result = self.client.reindex(source, dest)
        if not result.ok:
            return RolloverOutcome.failed(Step.REINDEX, result.status_code, result.payload)

        logger.info(f"Reindex task accepted: {result.payload}")
        return RolloverOutcome.ok(result.payload)
