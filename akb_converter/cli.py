"""
Command line entry point.

Usage:
    akb-converter -e image.akb              extract image.metadata.json
    akb-converter -c image.png image.akb    create an AKB image
    akb-converter -x image.akb image.png    decode an AKB image
"""
import argparse
import logging
import sys
from io import BytesIO
from typing import List, Optional

from PIL import Image

from akb_converter import reader, writer
from akb_converter.metadata import load_metadata, metadata_path, save_metadata
from akb_converter.utils import AkbError

logger = logging.getLogger("akb_converter")


def create(source_path: str, destination_path: str):
    with Image.open(source_path) as image:
        image.load()
        metadata = load_metadata(metadata_path(source_path), image.size)
        output = BytesIO()
        writer.write(image, metadata, output)
    with open(destination_path, "wb") as file:
        file.write(output.getvalue())
    logger.info("%s written", destination_path)


def extract(file_path: str):
    with open(file_path, "rb") as file:
        metadata = reader.extract_metadata(file.read())
    save_metadata(metadata_path(file_path), metadata)


def decode(file_path: str, destination_path: str):
    with open(file_path, "rb") as file:
        image = reader.read(file.read())
    image.save(destination_path)
    logger.info("%s written", destination_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="akb-converter",
        description="Create AKB images and extract their metadata.",
    )
    commands = parser.add_mutually_exclusive_group(required=True)
    commands.add_argument("-e", dest="extract", metavar="IMAGE_AKB",
                          help="extract the metadata file of an AKB image")
    commands.add_argument("-c", dest="create", nargs=2, metavar=("SOURCE", "IMAGE_AKB"),
                          help="create an AKB image from a standard image file")
    commands.add_argument("-x", dest="decode", nargs=2, metavar=("IMAGE_AKB", "DESTINATION"),
                          help="decode an AKB image back to a standard image file")
    parser.add_argument("-v", "--verbose", action="store_true", help="print debug output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    try:
        if args.extract:
            extract(args.extract)
        elif args.create:
            create(*args.create)
        else:
            decode(*args.decode)
    except (AkbError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
