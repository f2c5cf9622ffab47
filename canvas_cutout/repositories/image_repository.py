from __future__ import annotations

import errno
import io
import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, Iterator, List, Union

import cv2
import numpy as np
from PIL import Image as PILImage

from ..config import DEFAULT_EXTENSIONS, SUPPORTED_FORMATS
from ..errors import DecodeFailure, EncodeFailure, WriteFailure
from ..models.image import Image

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O, decoding and encoding for Image entities.
    Decoding goes through OpenCV, encoding through Pillow.
    """
    def __init__(self, exts: Iterable[str] | None = None):
        self.VALID_EXTS = {e.lower() for e in (exts or DEFAULT_EXTENSIONS)}

    @staticmethod
    def decode(data: bytes, path: Union[str, Path] = None, rgb: bool = True) -> Image:
        """
        Decode raw bytes into an Image. The returned pixels are read-only so
        they can be shared between concurrent targets.
        """
        if not data:
            raise DecodeFailure(path, "empty file")

        arr_bgr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if arr_bgr is None:
            raise DecodeFailure(path)

        h, w = arr_bgr.shape[:2]
        if h == 0 or w == 0:
            raise DecodeFailure(path, f"zero-sized image {w}x{h}")

        arr = cv2.cvtColor(arr_bgr, cv2.COLOR_BGR2RGB) if rgb else arr_bgr
        arr.flags.writeable = False
        return Image(pixels=arr, path=Path(path) if path is not None else None)

    def load(self, path: Union[str, Path], rgb: bool = True) -> Image:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as err:
            raise DecodeFailure(path, err.strerror or str(err)) from err
        return self.decode(data, path, rgb=rgb)

    @staticmethod
    def encode(pixels: np.ndarray, fmt: str, *, path: Union[str, Path] = "<memory>",
               webp_quality: int = 95) -> bytes:
        """
        Encode RGB / RGBA pixels into PNG or WebP bytes.
        """
        pil_format = SUPPORTED_FORMATS.get(fmt.lower())
        if pil_format is None:
            raise EncodeFailure(path, fmt, ValueError("unsupported output format"))

        if not pixels.flags["C_CONTIGUOUS"]:
            pixels = np.ascontiguousarray(pixels)

        options = {"quality": webp_quality} if pil_format == "WEBP" else {}
        buffer = io.BytesIO()
        try:
            PILImage.fromarray(pixels).save(buffer, format=pil_format, **options)
        except (OSError, ValueError, KeyError, TypeError) as err:
            raise EncodeFailure(path, fmt, err) from err
        return buffer.getvalue()

    @staticmethod
    def write_bytes(path: Union[str, Path], data: bytes, mode: int | None = None) -> Path:
        """
        Write to a hidden sibling first and rename into place, so an
        interrupted write never leaves a truncated file under the final name.
        """
        path = Path(path)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            with open(tmp, "xb") as fh:
                fh.write(data)
            os.replace(tmp, path)
            if mode is not None:
                os.chmod(path, mode)
        except OSError as err:
            tmp.unlink(missing_ok=True)
            raise WriteFailure(path, err) from err
        return path

    def save(self, pixels: np.ndarray, path: Union[str, Path], *, fmt: str | None = None,
             mode: int | None = None, webp_quality: int = 95) -> Path:
        path = Path(path)
        fmt = fmt or path.suffix.lstrip(".")
        data = self.encode(pixels, fmt, path=path, webp_quality=webp_quality)
        return self.write_bytes(path, data, mode)

    @staticmethod
    def ensure_dir(folder: Union[str, Path], mode: int | None = None) -> bool:
        """
        Create *folder* if missing. The permission step only touches
        directories created here. Returns True when the folder was created.
        """
        folder = Path(folder)
        try:
            folder.mkdir()
        except FileExistsError:
            if not folder.is_dir():
                raise WriteFailure(folder, NotADirectoryError(errno.ENOTDIR, "Not a directory")) from None
            return False
        except OSError as err:
            raise WriteFailure(folder, err) from err

        if mode is not None:
            try:
                os.chmod(folder, mode)
            except OSError as err:
                raise WriteFailure(folder, err) from err
        return True

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Path]:
        """
        Yield candidate source paths, sorted by name. Entries that are not
        regular files or carry another extension are skipped silently.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}

        for p in sorted(folder.iterdir()):
            if p.suffix.lower() not in allowed:
                logger.debug("Skipping due to extension: %s", p)
                continue
            if not p.is_file():
                logger.debug("Skipping because not file: %s", p)
                continue
            yield p

    def list_dir(self, folder: Union[str, Path], *, exts=None) -> List[Path]:
        return list(self.iter_dir(folder, exts=exts))
