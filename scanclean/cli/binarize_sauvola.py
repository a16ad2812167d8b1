"""
binarize-sauvola: Sauvola's local thresholding of one image.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .common import run, setup_logging
from ..errors import ConfigurationError
from ..models.sauvola_params import (
    OUTPUT_TYPES,
    BinaryOutput,
    MultiWindowOutput,
    SauvolaParams,
)
from ..pipeline.binarizer import binarize_sauvola
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)


def parse_window_sizes(text: str) -> Tuple[int, ...]:
    try:
        return tuple(int(token) for token in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid window size list: {text!r}") from None


class _MultiWindowAction(argparse.Action):
    """-X W1,W2,W3 also selects the multi-window output."""
    def __call__(self, parser, namespace, values, option_string=None):
        namespace.window_sizes = values
        namespace.output_type = "multiw"


def build_parser(defaults: SauvolaParams) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="binarize-sauvola",
        description="Binarize an image with Sauvola's algorithm (integral image implementation).")
    ap.add_argument("-S", "--prescale", type=float, default=1.0,
                    help="scale image by Lanczos4 prior to binarization [1.0]")
    ap.add_argument("-w", "--window-size", type=int, default=defaults.window_size,
                    help="set window size [%(default)s]")
    ap.add_argument("-k", "--k-param", type=float, default=defaults.k,
                    help="set K parameter for Sauvola's algorithm [%(default)s]")
    ap.add_argument("-r", "--r-scale", type=float, default=defaults.r_scale,
                    help="set scale of R parameter (1.0 for maximum standard deviation possible) [%(default)s]")
    ap.add_argument("-t", "--threshold-scale", type=float, default=defaults.t_scale,
                    help="set threshold scale [%(default)s]")
    ap.add_argument("-b", "--threshold-bias", type=float, default=defaults.t_bias,
                    help="set threshold bias [%(default)s]")
    ap.add_argument("-T", dest="output_type", action="store_const", const="threshold",
                    help="write threshold image instead of binary image")
    ap.add_argument("-V", dest="output_type", action="store_const", const="variable",
                    help="write variable threshold image instead of standard image")
    ap.add_argument("-P", dest="output_type", action="store_const", const="pixelinfo",
                    help="write pixelwise input image (R=~intensity, G=variance, B=mean)")
    ap.add_argument("-X", "--multi-window-size", dest="window_sizes", type=parse_window_sizes,
                    action=_MultiWindowAction, metavar="W1,W2,W3",
                    help="write multi window size, variable threshold image (R=W1, G=W2, B=W3)")
    ap.add_argument("-O", "--output-type", dest="output_type", choices=sorted(OUTPUT_TYPES),
                    help="select output type by name")
    ap.add_argument("--version", action="version", version="%(prog)s 0.3.2")
    ap.add_argument("input")
    ap.add_argument("output")
    ap.set_defaults(output_type="binary", window_sizes=None)
    return ap


def make_policy(output_type: str, window_sizes: Optional[Tuple[int, ...]]):
    policy_cls = OUTPUT_TYPES[output_type]
    if policy_cls is MultiWindowOutput:
        if not window_sizes:
            raise ConfigurationError("value of variable-multiw requires a `-X' option.")
        return MultiWindowOutput(window_sizes)
    return policy_cls()


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    image_service = ImageService()

    def body():
        args = build_parser(SauvolaParams.from_env()).parse_args(argv)
        params = SauvolaParams(
            window_size=args.window_size,
            k=args.k_param,
            r_scale=args.r_scale,
            t_scale=args.threshold_scale,
            t_bias=args.threshold_bias,
            prescale=args.prescale,
        )
        policy = make_policy(args.output_type, args.window_sizes)
        params.validate(policy)

        img = image_service.load(args.input, grayscale=True)
        result = binarize_sauvola(img, params, policy, image_service=image_service)
        result.path = Path(args.output)
        image_service.save(result, bilevel=isinstance(policy, BinaryOutput))

    return run(body)


if __name__ == "__main__":
    sys.exit(main())
