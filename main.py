from settings import Settings, ClusterConfigurationError
from cluster_client import connect
from alias_rollover import AliasRollover, RolloverOutcome
from reindex import Reindex
from enum import Enum
import argparse
import json
import urllib3
import os
import sys
from typing import List, Optional
from loguru import logger

# Configure loguru log level based on environment variable
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logger.remove()
logger.add(sys.stdout, level=log_level, format="{time:YYYY-MM-DD HH:mm:ss.SSS} | <level>{level: <8}</level> | {name}:{function}:{line} - {message}", colorize=True)

DEFAULT_URI = "http://localhost:9200/"
VALIDATION_EXIT_CODE = 500
ERROR_EXIT_CODE = 1


class Operation(Enum):
    ALIAS = "alias"
    REINDEX = "reindex"


class ValidationError(Exception):
    """Command line input that cannot be turned into an OperationRequest"""


class OperationRequest:
    def __init__(self, alias_name: str, target_index: str, keep_count: int = 1, operation: Operation = Operation.ALIAS) -> None:
        self.alias_name: str = alias_name
        self.target_index: str = target_index
        self.keep_count: int = keep_count
        self.operation: Operation = operation


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Point an OpenSearch alias at a new index and prune old ones")
    parser.add_argument('-u', '--uri', default=os.getenv("URL") or DEFAULT_URI, help="OpenSearch node URI")
    parser.add_argument('-i', '--index', help="alias to manage (reindex source in reindex mode)")
    parser.add_argument('-t', '--target', help="index to point the alias at (reindex destination in reindex mode)")
    parser.add_argument('-k', '--keep', type=int, default=1, help="number of unaliased stale indices to retain")
    parser.add_argument('-o', '--operation', default=Operation.ALIAS.value, help="alias or reindex")
    return parser.parse_args(argv)


def resolve_request(args: argparse.Namespace) -> OperationRequest:
    if not args.index or not args.target:
        raise ValidationError("Must specify both index and target parameters.")
    if args.keep < 0:
        raise ValidationError(f"Keep must be >= 0, got {args.keep}")
    try:
        operation = Operation(args.operation)
    except ValueError:
        raise ValidationError(f"Unknown operation {args.operation!r}, expected one of: {', '.join(o.value for o in Operation)}")
    return OperationRequest(args.index, args.target, args.keep, operation)


def build_settings(uri: str) -> Settings:
    return Settings(
        url=uri,
        cert_file_path=os.getenv("CERT_FILE_PATH"),
        key_file_path=os.getenv("KEY_FILE_PATH")
    )


#Exit reporting
def report(outcome: RolloverOutcome) -> int:
    if outcome.success:
        logger.info("Operation completed successfully")
        if outcome.detail is not None:
            print(json.dumps(outcome.detail, indent=4))
        print("SUCCESS!")
        return 0

    step = outcome.step.value.upper() if outcome.step else "UNKNOWN"
    logger.error(f"{step} step failed with HTTP {outcome.status_code}")
    print(f"{step} ERROR: Exit with status code {outcome.status_code}", file=sys.stderr)
    if outcome.detail is not None:
        print(json.dumps(outcome.detail, indent=4, default=str), file=sys.stderr)
    return outcome.status_code


def report_exception(error: Exception) -> int:
    logger.exception(f"Unhandled client error: {error}")
    serialized = {
        "error": type(error).__name__,
        "message": str(error),
        "args": [str(arg) for arg in error.args]
    }
    print(json.dumps(serialized, indent=4), file=sys.stderr)
    return ERROR_EXIT_CODE


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    try:
        request = resolve_request(args)
    except ValidationError as e:
        logger.error(f"Invalid arguments: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return VALIDATION_EXIT_CODE

    #Pesky self signed certs
    urllib3.disable_warnings()

    settings = build_settings(args.uri)
    try:
        client = connect(settings)
    except ClusterConfigurationError as e:
        logger.error(f"Could not create cluster client: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return ERROR_EXIT_CODE

    try:
        if request.operation == Operation.REINDEX:
            logger.info("Executing reindex operation")
            outcome = Reindex(client).reindex(request.alias_name, request.target_index)
        else:
            logger.info("Executing alias operation")
            outcome = AliasRollover(client).rollover(request.alias_name, request.target_index, request.keep_count)
    except Exception as e:
        return report_exception(e)

    return report(outcome)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
