import io

from PIL import Image, ImageOps, ImageSequence, UnidentifiedImageError

from legalocr.core.exceptions import UnsupportedFileTypeError


def _prepare_frame(frame: Image.Image) -> Image.Image:
    frame = ImageOps.exif_transpose(frame)
    if frame.mode not in ("RGB", "L"):
        frame = frame.convert("RGB")
    return frame


def load_frames(data: bytes, filename: str | None = None) -> list[Image.Image]:
    """
    Decode an image into OCR-ready frames.

    Multi-frame TIFFs yield one frame per page; every other format yields a
    single frame. EXIF orientation is applied and palette/alpha modes are
    flattened to RGB.

    Raises:
        UnsupportedFileTypeError: Pillow cannot decode the bytes.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            return [
                _prepare_frame(frame.copy())
                for frame in ImageSequence.Iterator(image)
            ]
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedFileTypeError(filename=filename, magic_bytes=data[:12].hex()) from e
