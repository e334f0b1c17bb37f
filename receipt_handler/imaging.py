import logging
from io import BytesIO

from PIL import Image

from .errors import DecodeError

# Largest width or height the OCR service accepts.
MAX_DIMENSION = 3200

# Clockwise degrees needed to bring each reported orientation back upright.
ROTATION_DEGREES = {
    "Left": 90,
    "Down": 180,
    "Right": 270,
}


def decode_image(data):
    """
    Decodes image bytes into a Pillow image that no longer depends on the
    source buffer.
    """
    try:
        with Image.open(BytesIO(data)) as source:
            source.load()
            return source.copy()
    except OSError as e:
        # UnidentifiedImageError and truncated-file errors are both OSErrors.
        raise DecodeError(f"Could not decode uploaded image: {e}") from e


def encode_jpeg(image, quality=95):
    """
    Encodes an image as JPEG bytes. Modes JPEG cannot hold (palette, alpha)
    are converted to RGB first.
    """
    converted = None
    if image.mode not in ("RGB", "L", "CMYK"):
        converted = image = image.convert("RGB")
    buffer = BytesIO()
    try:
        image.save(buffer, format="JPEG", quality=quality)
    finally:
        if converted is not None:
            converted.close()
    return buffer.getvalue()


def scaled_size(width, height, limit=MAX_DIMENSION):
    """
    Returns the size that brings the larger side down to `limit`, or None
    when the image already fits.
    """
    if width <= limit and height <= limit:
        return None
    if height > width:
        return (width * limit // height, limit)
    return (limit, height * limit // width)


def normalize_image(data, limit=MAX_DIMENSION):
    """
    Decodes an uploaded receipt and shrinks it to fit the OCR size limit.

    Returns a (bytes, image) tuple. When no resize is needed the original
    bytes object is returned untouched; otherwise the bytes are the JPEG
    encoding of the resized image. The caller owns the returned image and
    should close it.
    """
    image = decode_image(data)
    new_size = scaled_size(image.width, image.height, limit)
    if new_size is None:
        return data, image

    logging.info(f"Resizing receipt image from {image.width}x{image.height} to {new_size[0]}x{new_size[1]}.")
    try:
        resized = image.resize(new_size, Image.Resampling.LANCZOS)
    finally:
        image.close()
    try:
        return encode_jpeg(resized), resized
    except Exception:
        resized.close()
        raise


def correct_orientation(image, orientation):
    """
    Rotates `image` clockwise so text reported as `orientation` reads
    upright. "Up", None and unknown labels return the image unchanged.
    """
    degrees = ROTATION_DEGREES.get(orientation)
    if degrees is None:
        if orientation not in (None, "Up"):
            logging.warning(f"Unknown orientation '{orientation}', leaving image as is.")
        return image

    # Pillow rotates counter-clockwise for positive angles.
    return image.rotate(-degrees, resample=Image.Resampling.BICUBIC, expand=True)
