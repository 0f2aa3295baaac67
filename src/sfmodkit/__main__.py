import sys

from sfmodkit.console import sfmodkit_console
from sfmodkit.helpers.parse_ops import init_input_parser


def main() -> int:
    options = init_input_parser().parse_args()
    return sfmodkit_console.main(options)


if __name__ == "__main__":
    sys.exit(main())
