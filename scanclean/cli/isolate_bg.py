"""
isolate-bg: background isolation based on Sauvola's algorithm.
"""
import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from .common import run, setup_logging
from ..models.isolation_params import INIT_MODES, IsolationParams, OutputMode
from ..pipeline.background_isolator import isolate_background
from ..services.image_service import ImageService


class _PresetAction(argparse.Action):
    """-1: no background blur, alpha 1.0. Later -A / -a still override it."""
    def __call__(self, parser, namespace, values, option_string=None):
        namespace.background_blur = 1
        namespace.background_alpha = 1.0


def build_parser(defaults: IsolationParams) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="isolate-bg",
        description="Estimate the page background by inpainting away the ink, "
                    "then normalize the image by it.")
    ap.add_argument("-g", "--input-as-grayscale", action="store_true",
                    help="input as grayscale image")
    ap.add_argument("-w", "--window-size", type=int, default=defaults.window_size,
                    help="set window size [%(default)s]")
    ap.add_argument("-k", "--k-param", type=float, default=defaults.k,
                    help="set K parameter for Sauvola's algorithm [%(default)s]")
    ap.add_argument("-r", "--r-scale", type=float, default=defaults.r_scale,
                    help="set scale of R parameter (1.0 for maximum standard deviation possible) [%(default)s]")
    ap.add_argument("-I", "--inpaint-initmode", choices=sorted(INIT_MODES),
                    default=None,
                    help="set background inpaint initialization mode "
                         "(mean: mean for whole unmasked image, neighbor: neighbor by L1)")
    ap.add_argument("-i", "--iteration", type=int, default=defaults.inpaint_iterations,
                    help="set inpaint iterations [%(default)s]")
    ap.add_argument("-j", "--mask-denoise-dist1", type=float, default=defaults.mask_denoise_distance1,
                    help="set mask denoise distance (mask shrinking) [%(default)s]")
    ap.add_argument("-J", "--mask-denoise-dist2", type=float, default=defaults.mask_denoise_distance2,
                    help="set mask denoise distance (mask growing) [%(default)s]")
    ap.add_argument("-A", "--background-blur", type=int, default=defaults.background_blur,
                    help="set blur size of resulting background [%(default)s]")
    ap.add_argument("-a", "--background-alpha", type=float, default=defaults.background_alpha,
                    help="set normal intensity of background [%(default)s]")
    ap.add_argument("-B", "--background", action="store_true",
                    help="write background image instead of normalized image")
    ap.add_argument("-G", "--adjust-brightness", action="store_true",
                    help="adjust brightness of output image")
    ap.add_argument("-1", dest="preset", action=_PresetAction, nargs=0,
                    help="preset: no background blur and background alpha 1.0")
    ap.add_argument("--version", action="version", version="%(prog)s 0.0.14")
    ap.add_argument("input")
    ap.add_argument("output")
    return ap


def params_from_args(args: argparse.Namespace, defaults: IsolationParams) -> IsolationParams:
    init_mode = defaults.inpaint_init_mode
    if args.inpaint_initmode is not None:
        init_mode = INIT_MODES[args.inpaint_initmode]
    return dataclasses.replace(
        defaults,
        window_size=args.window_size,
        k=args.k_param,
        r_scale=args.r_scale,
        inpaint_init_mode=init_mode,
        inpaint_iterations=args.iteration,
        mask_denoise_distance1=args.mask_denoise_dist1,
        mask_denoise_distance2=args.mask_denoise_dist2,
        background_blur=args.background_blur,
        background_alpha=args.background_alpha,
        output_mode=OutputMode.BACKGROUND if args.background else defaults.output_mode,
        input_as_grayscale=args.input_as_grayscale or defaults.input_as_grayscale,
        adjust_brightness=args.adjust_brightness or defaults.adjust_brightness,
    )


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    image_service = ImageService()

    def body():
        defaults = IsolationParams.from_env()
        args = build_parser(defaults).parse_args(argv)
        params = params_from_args(args, defaults)
        params.validate()

        img = image_service.load(args.input)
        result = isolate_background(img, params, image_service=image_service)
        result.path = Path(args.output)
        image_service.save(result)

    return run(body)


if __name__ == "__main__":
    sys.exit(main())
