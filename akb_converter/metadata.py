import json
import logging
import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

METADATA_EXTENSION = ".metadata.json"

INT_FIELDS = {
    "Width": "width",
    "Height": "height",
    "OffsetX": "offset_x",
    "OffsetY": "offset_y",
    "BackgroundColor": "background_color",
}


@dataclass
class CanvasMetadata:
    width: int = 0
    height: int = 0
    offset_x: int = 0
    offset_y: int = 0
    background_color: int = 0
    background_image: Optional[str] = None

    @classmethod
    def default(cls, source_size: Tuple[int, int]) -> "CanvasMetadata":
        return cls(width=source_size[0], height=source_size[1])

    @classmethod
    def from_json(cls, document) -> "CanvasMetadata":
        if not isinstance(document, dict):
            raise ValueError("metadata document is not an object")
        values = {}
        for key, field in INT_FIELDS.items():
            value = document.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{key} must be an integer, got {value!r}")
            values[field] = value
        background_image = document.get("BackgroundImage")
        if background_image is not None and not isinstance(background_image, str):
            raise ValueError(f"BackgroundImage must be a string, got {background_image!r}")
        return cls(background_image=background_image, **values)

    def to_json(self) -> dict:
        document = {key: getattr(self, field) for key, field in INT_FIELDS.items()}
        document["BackgroundImage"] = self.background_image
        return document

    def expand_to_fit(self, source_size: Tuple[int, int]) -> "CanvasMetadata":
        """ returns a copy whose canvas holds the source image at its offset """
        width, height = self.width, self.height
        if self.offset_x + source_size[0] > width:
            logger.warning("Image width is expanded.")
            width = self.offset_x + source_size[0]
        if self.offset_y + source_size[1] > height:
            logger.warning("Image height is expanded.")
            height = self.offset_y + source_size[1]
        return replace(self, width=width, height=height)


def metadata_path(path: str) -> str:
    return os.path.splitext(path)[0] + METADATA_EXTENSION


def load_metadata(path: str, source_size: Tuple[int, int]) -> CanvasMetadata:
    """
    Reads the metadata sidecar at path. A missing or malformed sidecar is not an
    error, the canvas then defaults to the source image size.
    """
    try:
        with open(path, "r", encoding="utf-8") as file:
            return CanvasMetadata.from_json(json.load(file))
    except (OSError, ValueError) as e:
        logger.warning("%s", e)
        logger.warning("Failed to load metadata json, using default settings.")
        return CanvasMetadata.default(source_size)


def save_metadata(path: str, metadata: CanvasMetadata):
    with open(path, "w", encoding="utf-8") as file:
        json.dump(metadata.to_json(), file, indent=2, ensure_ascii=False)
    logger.info("metadata written to %s", path)
