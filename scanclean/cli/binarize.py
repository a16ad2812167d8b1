"""
binarize: constant, Otsu and adaptive thresholding of one image.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .common import run, setup_logging
from ..models.threshold_params import (
    THRESHOLD_MODES,
    ThresholdMode,
    ThresholdParams,
)
from ..pipeline.threshold_binarizer import binarize_threshold
from ..services.image_service import ImageService


def parse_mode(name: str) -> ThresholdMode:
    try:
        return THRESHOLD_MODES[name]
    except KeyError:
        raise argparse.ArgumentTypeError(f"unknown value: {name!r}") from None


def build_parser(defaults: ThresholdParams) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="binarize",
        description="Binarize an image with OpenCV's thresholding algorithms.")
    ap.add_argument("-S", "--prescale", type=float, default=1.0,
                    help="scale image by Lanczos4 prior to binarization [1.0]")
    ap.add_argument("-t", "--threshold", type=float, default=defaults.threshold,
                    help="set constant thresholding value [%(default)s]")
    ap.add_argument("-O", dest="mode", action="store_const", const=ThresholdMode.OTSU,
                    help="perform Otsu's algorithm and write threshold value to stdout")
    ap.add_argument("-M", dest="mode", action="store_const", const=ThresholdMode.ADAPTIVE_MEAN,
                    help="perform adaptive mean thresholding")
    ap.add_argument("-G", dest="mode", action="store_const", const=ThresholdMode.ADAPTIVE_GAUSSIAN,
                    help="perform adaptive Gaussian thresholding")
    ap.add_argument("-m", "--mode", dest="mode", type=parse_mode,
                    metavar="MODE",
                    help="select mode by name (%s)" % ", ".join(sorted(THRESHOLD_MODES)))
    ap.add_argument("-w", "--window-size", type=int, default=defaults.window_size,
                    help="set window size on adaptive thresholding [%(default)s]")
    ap.add_argument("-c", "--c-param", "--threshold-negbias", dest="c", type=float,
                    default=defaults.c,
                    help="set negative bias on adaptive thresholding [%(default)s]")
    ap.add_argument("--version", action="version", version="%(prog)s 0.2.0")
    ap.add_argument("input")
    ap.add_argument("output", nargs="?",
                    help="output image (omit to only print Otsu's threshold)")
    ap.set_defaults(mode=defaults.mode)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    image_service = ImageService()

    def body():
        defaults = ThresholdParams.from_env()
        args = build_parser(defaults).parse_args(argv)
        params = ThresholdParams(
            mode=args.mode,
            threshold=args.threshold,
            window_size=args.window_size,
            c=args.c,
            prescale=args.prescale,
        )
        params.validate()

        img = image_service.load(args.input, grayscale=True)
        result, picked = binarize_threshold(img, params, image_service=image_service)
        if picked is not None:
            print(f"{picked:f}")
        if args.output is None:
            return
        result.path = Path(args.output)
        image_service.save(result, bilevel=True)

    return run(body)


if __name__ == "__main__":
    sys.exit(main())
