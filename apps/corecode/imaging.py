"""
Profile photo processing.

Two paths share the same output conventions (RGB JPEG on a white
background):

* ``compress_image_file`` shrinks an upload so its long edge fits within
  ``IMAGE_MAX_DIMENSION`` and searches downward through JPEG qualities
  until the encoded size is under ``IMAGE_TARGET_BYTES``.
* ``get_cropped_image`` applies flip and rotation, cuts out a pixel
  rectangle chosen in the photo editor and scales the result down to a
  500px long edge.
"""
import io
import logging
import math
import mimetypes
import os

from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 1000
DEFAULT_TARGET_BYTES = 150 * 1024

INITIAL_QUALITY = 70
MIN_QUALITY = 10
CROP_QUALITY = 80
CROP_MAX_EDGE = 500

# Passport photo frame, width : height
PASSPORT_ASPECT = 1.2 / 1.4


class ImageProcessingError(Exception):
    """Raised when an image cannot be decoded or cropped"""
    pass


def get_radian_angle(degree_value):
    return degree_value * math.pi / 180


def rotate_size(width, height, rotation):
    """Bounding box of a width x height rectangle rotated by rotation degrees"""
    rot_rad = get_radian_angle(rotation)
    return (
        abs(math.cos(rot_rad) * width) + abs(math.sin(rot_rad) * height),
        abs(math.sin(rot_rad) * width) + abs(math.cos(rot_rad) * height),
    )


def fit_within(width, height, max_dimension):
    """
    Scale (width, height) so the longer side is at most max_dimension.

    Aspect ratio is preserved and images are never upscaled.
    """
    if width > height:
        if width > max_dimension:
            height = max(1, round(height * max_dimension / width))
            width = max_dimension
    else:
        if height > max_dimension:
            width = max(1, round(width * max_dimension / height))
            height = max_dimension
    return width, height


def flatten_on_white(image):
    """Composite any transparency onto white and return an RGB image"""
    if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
        rgba = image.convert('RGBA')
        background = Image.new('RGB', rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel('A'))
        return background
    return image.convert('RGB')


def encode_jpeg(image, quality):
    buffer = io.BytesIO()
    image.save(buffer, format='JPEG', quality=quality)
    return buffer.getvalue()


def _content_type(file):
    content_type = getattr(file, 'content_type', None)
    if not content_type:
        content_type, _encoding = mimetypes.guess_type(getattr(file, 'name', '') or '')
    return content_type or ''


def _open_image(source):
    """Decode a PIL image from a path, bytes, file object or image"""
    if isinstance(source, Image.Image):
        return source
    try:
        if isinstance(source, (bytes, bytearray)):
            image = Image.open(io.BytesIO(source))
        else:
            if hasattr(source, 'seek'):
                source.seek(0)
            image = Image.open(source)
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Could not decode image: {e}")
    return image


def compress_image_file(file, max_dimension=None, target_bytes=None):
    """
    Resize and re-encode an uploaded image as JPEG.

    Files that are not images are returned unchanged. The quality search
    starts at 70 and steps down by 20 while the output is more than twice
    the target, otherwise by 10, stopping once under target or at the
    quality floor of 10. The target is not guaranteed at the floor.
    """
    if not _content_type(file).startswith('image/'):
        return file

    max_dimension = max_dimension or getattr(settings, 'IMAGE_MAX_DIMENSION', DEFAULT_MAX_DIMENSION)
    target_bytes = target_bytes or getattr(settings, 'IMAGE_TARGET_BYTES', DEFAULT_TARGET_BYTES)

    image = ImageOps.exif_transpose(_open_image(file))
    size = fit_within(image.width, image.height, max_dimension)
    if size != image.size:
        image = image.resize(size, Image.Resampling.LANCZOS)
    image = flatten_on_white(image)

    quality = INITIAL_QUALITY
    data = encode_jpeg(image, quality)
    while len(data) > target_bytes and quality > MIN_QUALITY:
        quality -= 20 if len(data) > target_bytes * 2 else 10
        quality = max(quality, MIN_QUALITY)
        data = encode_jpeg(image, quality)

    stem, _ext = os.path.splitext(os.path.basename(file.name or 'image'))
    logger.info(
        "Compressed %s to %sx%s at quality %s (%s bytes)",
        file.name, image.width, image.height, quality, len(data),
    )
    return SimpleUploadedFile(f"{stem}.jpg", data, content_type='image/jpeg')


def _crop_value(pixel_crop, key):
    if isinstance(pixel_crop, dict):
        return pixel_crop[key]
    return getattr(pixel_crop, key)


def get_cropped_image(image_src, pixel_crop, rotation=0, flip=None):
    """
    Rotate, flip and crop an image for use as a profile photo.

    ``pixel_crop`` holds x, y, width and height in the coordinate space of
    the rotated bounding box. ``flip`` is a mapping with optional
    ``horizontal`` and ``vertical`` booleans. Returns a JPEG upload no
    larger than 500px on its long edge.
    """
    flip = flip or {}
    image = _open_image(image_src).convert('RGBA')

    if flip.get('horizontal'):
        image = ImageOps.mirror(image)
    if flip.get('vertical'):
        image = ImageOps.flip(image)

    box_width, box_height = rotate_size(image.width, image.height, rotation)
    canvas = Image.new('RGBA', (max(1, round(box_width)), max(1, round(box_height))), (0, 0, 0, 0))
    # PIL rotates counter-clockwise, the editor's angle is clockwise
    rotated = image.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True) if rotation % 360 else image
    canvas.paste(
        rotated,
        ((canvas.width - rotated.width) // 2, (canvas.height - rotated.height) // 2),
        rotated,
    )

    x = round(_crop_value(pixel_crop, 'x'))
    y = round(_crop_value(pixel_crop, 'y'))
    width = round(_crop_value(pixel_crop, 'width'))
    height = round(_crop_value(pixel_crop, 'height'))
    if width <= 0 or height <= 0:
        raise ImageProcessingError("Crop area must have a positive width and height")

    cropped = canvas.crop((x, y, x + width, y + height))

    scale = min(CROP_MAX_EDGE / width, CROP_MAX_EDGE / height, 1)
    output_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    if output_size != cropped.size:
        cropped = cropped.resize(output_size, Image.Resampling.LANCZOS)

    data = encode_jpeg(flatten_on_white(cropped), CROP_QUALITY)
    return SimpleUploadedFile('cropped.jpg', data, content_type='image/jpeg')
