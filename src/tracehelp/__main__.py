import argparse
import logging
import sys
import time
import uuid
from typing import List, Optional

from .attributes import int64_attr, str_attr
from .bootstrap import init
from .config import Config, SUPPORTED_EXPORTERS
from .errors import ConfigurationError
from .tracer import new_tracer

logger = logging.getLogger("tracehelp")


class SyntheticFailure(Exception):
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m tracehelp",
        description="Emit one synthetic span through the configured exporter",
    )
    parser.add_argument("--service-name", default=None, help="service.name (default: OTEL_SERVICE_NAME)")
    parser.add_argument("--exporter", choices=SUPPORTED_EXPORTERS, default=None)
    parser.add_argument("--endpoint", default=None, help="OTLP collector endpoint")
    parser.add_argument("--insecure", action="store_true", help="Disable TLS for OTLP")
    parser.add_argument("--span-name", default="test-span")
    parser.add_argument("--fail", action="store_true", help="Finish the span with an error")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    overrides = {}
    if args.service_name is not None:
        overrides["service_name"] = args.service_name
    if args.exporter is not None:
        overrides["exporter"] = args.exporter
    if args.endpoint is not None:
        overrides["endpoint"] = args.endpoint
    if args.insecure:
        overrides["insecure"] = True
    config = Config.from_env(**overrides)

    try:
        shutdown = init(config)
    except ConfigurationError as e:
        logger.error("init_failed error=%s", e)
        return 2

    token = f"SYNTH-TRACE-{uuid.uuid4().hex}"
    tracer = new_tracer("tracehelp.cli")
    try:
        tracer.with_span(
            args.span_name,
            lambda: _emit(args.fail),
            str_attr("test.token", token),
            int64_attr("test.timestamp", int(time.time())),
            str_attr("test.type", "synthetic"),
        )
    except SyntheticFailure as e:
        logger.info("span_emitted status=error token=%s error=%s", token, e)
    else:
        logger.info("span_emitted status=ok token=%s", token)
    finally:
        shutdown()
    return 0


def _emit(fail: bool) -> None:
    if fail:
        raise SyntheticFailure("synthetic failure")


if __name__ == "__main__":
    sys.exit(main())
