import argparse
import logging
import sys

from tileplane.utiles.config import GeneratorConfig, load_config
from tileplane.WFC.planeGenerator import GenerationExhausted, generate_from_config


def build_parser():
    parser = argparse.ArgumentParser(prog='tileplane', description='generate a land / coast / sea plane from an example pattern')
    parser.add_argument('-c', '--config', help='JSON config file (pattern, size, retry settings)')
    parser.add_argument('-W', '--width', type=int, help='plane width in tiles')
    parser.add_argument('-H', '--height', type=int, help='plane height in tiles')
    parser.add_argument('-s', '--seed', type=int, default=None, help='random seed (default: fresh entropy)')
    parser.add_argument('-n', '--max-attempts', type=int, help='solver runs before giving up')
    parser.add_argument('--no-mirror', action='store_true', help='never flip the example pattern')
    parser.add_argument('-p', '--progress', action='store_true', help='show a progress bar per attempt')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='-v for info, -vv for debug logging')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    config = load_config(args.config) if args.config else GeneratorConfig()
    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    if args.max_attempts is not None:
        config.max_attempts = args.max_attempts
    if args.no_mirror:
        config.mirror = False

    try:
        result = generate_from_config(config, rng=args.seed, progress=args.progress)
    except GenerationExhausted as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    plane, spawn = result
    for row in plane:
        print("".join(row))
    print(f"spawn: {spawn[0]} {spawn[1]}")
    print(f"attempts: {result.attempts}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
