"""
Starfall - Command Line Entry Point
===================================

Dispatch a single handler invocation against the configured record service
and print the JSON response. Used for operations and local testing:

    python -m starfall.main playerLogin --player-id 1A2B3C
    python -m starfall.main killedEnemyGroup --player-id 1A2B3C \\
        --payload '{"planet": "Kepler", "area": "Crater", "enemyGroup": "Rats", "playerHP": 80}'

Lifecycle:
    1. Validate configuration
    2. Initialize the application context
    3. Dispatch the request
    4. Shut down gracefully
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from starfall.core.exceptions import StarfallInfrastructureException
from starfall.core.infra.application_context import ApplicationContext
from starfall.core.logging.logger import get_logger, shutdown_logging
from starfall.modules.shared.constants import HandlerName

logger = get_logger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Starfall progression engine")
    parser.add_argument(
        "handler",
        choices=[name.value for name in HandlerName],
        help="Handler to invoke",
    )
    parser.add_argument("--player-id", required=True, help="Record service player id")
    parser.add_argument("--payload", default="{}", help="Request payload as a JSON object")
    return parser.parse_args(argv)


async def run(handler: str, player_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    context = ApplicationContext()
    await context.initialize()
    try:
        return await context.dispatch(handler, player_id, payload)
    finally:
        await context.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        payload = json.loads(args.payload)
    except ValueError as exc:
        print(f"--payload is not valid JSON: {exc}", file=sys.stderr)
        return 2

    try:
        response = asyncio.run(run(args.handler, args.player_id, payload))
    except StarfallInfrastructureException as exc:
        logger.critical(f"Handler aborted: {exc}", extra={"error_code": exc.error_code})
        print(json.dumps({"isError": True, "errorCode": exc.error_code}), file=sys.stderr)
        return 1
    finally:
        shutdown_logging()

    print(json.dumps(response, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
