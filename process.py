import logging
import re

from PIL import Image, UnidentifiedImageError
from unidecode import unidecode

import modes

logger = logging.getLogger(__name__)

invalid = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

saveable = {
    "JPEG": ("1", "L", "RGB", "CMYK"),
    "PNG": ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"),
    "WEBP": ("RGB", "RGBA"),
}


class DecodeError(Exception):
    pass


class ResizeError(Exception):
    pass


class EncodeError(Exception):
    pass


def should_resize(size, width=None, height=None):
    return bool(width and size[0] > width) or bool(height and size[1] > height)


def output_suffix(path, format=None):
    return f".{format.lower()}" if format else path.suffix.lower()


def clean_name(stem):
    name = invalid.sub("", unidecode(stem)).strip().rstrip(". ")
    return name or "image"


def output_path(found, output_dir, format=None, taken=None):
    taken = set() if taken is None else taken
    stem = clean_name(found.path.stem)
    suffix = output_suffix(found.path, format)
    output = output_dir / f"{stem}{suffix}"
    index = 1

    while output in taken:
        output = output_dir / f"{stem} ({index}){suffix}"
        index += 1

    taken.add(output)
    return output


def encoder_for(suffix, quality, original=None, override=False):
    """Return the format and save arguments, ``None`` lets Pillow use the suffix."""
    if suffix in (".jpg", ".jpeg"):
        return "JPEG", {"quality": quality, "optimize": True}
    if suffix == ".png":
        return "PNG", {"optimize": True}
    if suffix == ".webp":
        return "WEBP", {"quality": quality}

    return (None if override else original), {}


def convert(image, format):
    if format not in saveable or image.mode in saveable[format]:
        return image

    alpha = "RGBA" in saveable[format] and image.has_transparency_data
    return image.convert("RGBA" if alpha else "RGB")


def load(path):
    try:
        with Image.open(path) as image:
            image.load()
            return image.format, image.copy()
    except (
        Image.DecompressionBombError,
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        raise DecodeError(f'Could not read "{path}": {e}') from e


def process_file(path, output, job):
    original, image = load(path)

    try:
        format, params = encoder_for(
            output.suffix.lower(), job.quality, original, bool(job.format)
        )

        try:
            if should_resize(image.size, job.width, job.height):
                resized = modes.resize(image, job.mode, job.box)
                logger.debug(f'Resized "{path.name}" {image.size} -> {resized.size}')
                image.close()
                image = resized

            image = convert(image, format)
        except (OSError, ValueError, MemoryError) as e:
            raise ResizeError(f'Could not resize "{path}": {e}') from e

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            image.save(output, format=format, **params)
        except (OSError, ValueError, KeyError) as e:
            output.unlink(missing_ok=True)
            raise EncodeError(f'Could not write "{output}": {e}') from e

        return image.size
    finally:
        image.close()
