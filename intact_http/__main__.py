"""
Fetch a URL through the configured client and stage pipeline, and print the parsed body.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from intact_http.client import PipelineClient
from intact_http.client_config import ClientConfig
from intact_http.core.logging import setup_logging
from intact_http.exceptions import IntactHttpError
from intact_http.settings import Settings
from intact_http.stages.loader import load_pipeline_from_file
from intact_http.transport import BodyLogLevel


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="intact_http", description=__doc__)
    parser.add_argument("url", help="URL to fetch")
    parser.add_argument("--method", default="GET", help="HTTP method (default: GET)")
    parser.add_argument("--data", default=None, help="Request body to send")
    parser.add_argument(
        "--pipeline",
        default=None,
        help="JSON file describing the stage pipeline (default: PIPELINE_FILEPATH or a JSON deserializer)",
    )
    parser.add_argument(
        "--body-log-level",
        default=None,
        help="Transport log level: NONE, BASIC, HEADERS or BODY (default: HTTP_BODY_LOG_LEVEL or BODY)",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = Settings()
    config = ClientConfig.from_settings(settings)
    if args.body_log_level:
        config = config.model_copy(update={"body_log_level": BodyLogLevel.parse(args.body_log_level)})

    pipeline_path = args.pipeline or settings.get_pipeline_filepath()
    pipeline = load_pipeline_from_file(pipeline_path) if pipeline_path else None

    async with PipelineClient(pipeline=pipeline, config=config, settings=settings) as client:
        content = args.data.encode("utf-8") if args.data is not None else None
        transaction = await client.request(args.method.upper(), args.url, content=content)

    if transaction.parsed_body is not None:
        print(json.dumps(transaction.parsed_body, indent=2))
    else:
        sys.stdout.write((await transaction.response.body.read()).decode("utf-8", errors="replace"))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except IntactHttpError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
