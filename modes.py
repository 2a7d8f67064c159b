from PIL import Image, ImageOps

from job import ResizeMode

method = Image.Resampling.LANCZOS
centering = (0.5, 0.5)


def target(size, box):
    """Fill in an unconstrained (zero) side of the box from the aspect ratio."""
    width, height = size
    box_width, box_height = box

    if box_width and not box_height:
        box_height = max(round(height * box_width / width), 1)
    elif box_height and not box_width:
        box_width = max(round(width * box_height / height), 1)

    return box_width, box_height


def canvas(image, size):
    output = Image.new(image.mode, size, 0)

    if image.palette:
        output.putpalette(image.getpalette())

    return output


def fit(size, box):
    width, height = size
    ratio = min(box[0] / width, box[1] / height)
    return max(round(width * ratio), 1), max(round(height * ratio), 1)


def pad(image, box):
    resized = image.resize(fit(image.size, box), method)

    if resized.size == tuple(box):
        return resized

    output = canvas(resized, box)
    width, height = resized.size
    output.paste(resized, ((box[0] - width) // 2, (box[1] - height) // 2))
    return output


def box_pad(image, box):
    width, height = image.size

    if width > box[0] or height > box[1]:
        return pad(image, box)

    output = canvas(image, box)
    output.paste(image, ((box[0] - width) // 2, (box[1] - height) // 2))
    return output


def crop(image, box):
    return ImageOps.fit(image, box, method=method, centering=centering)


def max_(image, box):
    return image.resize(fit(image.size, box), method)


def min_(image, box):
    width, height = image.size
    ratio = max(box[0] / width, box[1] / height)

    if ratio >= 1:
        return image.copy()

    size = max(round(width * ratio), 1), max(round(height * ratio), 1)
    return image.resize(size, method)


def stretch(image, box):
    return image.resize(box, method)


policies = {
    ResizeMode.PAD: pad,
    ResizeMode.BOX_PAD: box_pad,
    ResizeMode.CROP: crop,
    ResizeMode.MAX: max_,
    ResizeMode.MIN: min_,
    ResizeMode.STRETCH: stretch,
    # No target rectangle can be given, so manual mode resizes to the box.
    ResizeMode.MANUAL: stretch,
}


def resize(image, mode, box):
    box = target(image.size, box)

    if not all(box):
        return image.copy()

    return policies[mode](image, box)
