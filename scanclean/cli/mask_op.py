"""
mask-op: apply an ordered list of mask operations (white inside, black outside).
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .common import run, setup_logging
from ..models.mask_command import ClearBorder, DistanceNorm, Inset, Negate, Outset, normalize_command
from ..pipeline.mask_processor import process_mask
from ..services.image_service import ImageService


class _CommandAction(argparse.Action):
    """Append one command to namespace.commands, keeping command-line order."""
    def __init__(self, option_strings, dest, factory, **kwargs):
        self.factory = factory
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        commands = list(getattr(namespace, self.dest) or [])
        cmd = self.factory() if self.nargs == 0 else self.factory(values)
        commands.append(normalize_command(cmd))
        setattr(namespace, self.dest, commands)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="mask-op",
        description="Handle masks (white inside and black outside).")
    ap.add_argument("-n", "--neg", dest="commands", action=_CommandAction, nargs=0,
                    factory=Negate, help="negate mask")
    ap.add_argument("-B", "--border-fill", dest="commands", action=_CommandAction, nargs=0,
                    factory=ClearBorder, help="fill border with black")
    ap.add_argument("-i", "--inset", dest="commands", action=_CommandAction, type=float,
                    factory=lambda d: Inset(d, DistanceNorm.L2), metavar="WIDTH",
                    help="shrink mask by WIDTH")
    ap.add_argument("-I", "--inset-L1", dest="commands", action=_CommandAction, type=float,
                    factory=lambda d: Inset(d, DistanceNorm.L1), metavar="WIDTH",
                    help="(do the same but with L1 norm)")
    ap.add_argument("-o", "--outset", dest="commands", action=_CommandAction, type=float,
                    factory=lambda d: Outset(d, DistanceNorm.L2), metavar="WIDTH",
                    help="grow mask by WIDTH")
    ap.add_argument("-O", "--outset-L1", dest="commands", action=_CommandAction, type=float,
                    factory=lambda d: Outset(d, DistanceNorm.L1), metavar="WIDTH",
                    help="(do the same but with L1 norm)")
    ap.add_argument("--version", action="version", version="%(prog)s 0.3.0")
    ap.add_argument("input")
    ap.add_argument("output")
    ap.set_defaults(commands=[])
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    image_service = ImageService()

    def body():
        img = image_service.load(args.input, grayscale=True)
        result = process_mask(img, args.commands, image_service=image_service)
        result.path = Path(args.output)
        image_service.save(result, bilevel=True)

    return run(body)


if __name__ == "__main__":
    sys.exit(main())
