import argparse
import logging
import sys
import time

from core.errors import RayTracerError
from core.logging_config import setup_logging
from operations.base_operation import OperationFactory, OperationOptions

# operation modules register themselves on import
import operations.matrix_addition  # noqa: F401
import operations.ray_tracer_operation  # noqa: F401

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_USAGE_ERROR = 2


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Multithreaded Whitted ray tracer')
    parser.add_argument('--operation', required=True,
                        help=f"operation to run: {', '.join(OperationFactory.list_available())}")
    parser.add_argument('--threads', type=positive_int, default=1,
                        help='worker threads (default: 1)')
    parser.add_argument('--input', '-i',
                        help='input file (scene JSON, or matrices; stdin when omitted)')
    parser.add_argument('--output', '-o',
                        help='output file (PNG, or matrix sum; stdout when omitted)')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    options = OperationOptions(threads=args.threads, input=args.input, output=args.output)

    start_time = time.time()
    try:
        operation = OperationFactory.create(args.operation)
        operation.execute(options)
    except OSError as e:
        logger.error("I/O error: %s", e)
        return EXIT_IO_ERROR
    except (RayTracerError, ValueError) as e:
        logger.error("%s failed: %s", args.operation, e)
        return EXIT_USAGE_ERROR
    end_time = time.time()

    elapsed = end_time - start_time
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    print(f"Total time: {minutes}m {seconds:.2f}s", file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
