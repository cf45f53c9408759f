"""
Run a single lifecycle task from the command line.

Usage:
  ett-task ping
  ett-task demolish-entity --param entity_id=abc --param dry_run=true
  ett-task invite-user --json '{"email": "a@b.org", "role": "RE_AUTH_IND", "inviter_role": "SYS_ADMIN"}'
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from .factory import create_task_dispatcher


def parse_parameters(pairs: List[str], raw_json: Optional[str] = None) -> Dict[str, Any]:
    """Merge a JSON object with key=value pairs, the pairs taking precedence."""
    parameters: Dict[str, Any] = json.loads(raw_json) if raw_json else {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Parameter must be key=value: {pair}")
        parameters[key.strip()] = value
    return parameters


async def run_task(task: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
    dispatcher = create_task_dispatcher()
    services = dispatcher.services
    await services.start()
    try:
        response = await dispatcher.dispatch(task, parameters)
    finally:
        await services.stop()
    return response.model_dump()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run an ETT lifecycle task")
    parser.add_argument("task", type=str, help="Task name, for example demolish-entity")
    parser.add_argument("--param", action="append", default=[], help="Task parameter as key=value")
    parser.add_argument("--json", dest="raw_json", type=str, help="Task parameters as a JSON object")
    args = parser.parse_args()

    try:
        parameters = parse_parameters(args.param, args.raw_json)
    except ValueError as e:
        parser.error(str(e))

    response = asyncio.run(run_task(args.task, parameters))
    print(json.dumps(response, indent=2, default=str))
    sys.exit(0 if response["statusCode"] == 200 else 1)


if __name__ == "__main__":
    main()
