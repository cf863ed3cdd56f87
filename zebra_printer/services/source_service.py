import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Tuple, Union

import urllib3
from PIL import Image, UnidentifiedImageError

from zebra_printer.errors import ImageDecodeError, ImageNotFoundError
from zebra_printer.services.log_service import log_service

ImageSource = Union[str, os.PathLike, bytes]

DOWNLOAD_TIMEOUT = urllib3.Timeout(connect=5.0, read=30.0)

# sem novas tentativas, mas segue redirects (CDN, S3)
_http = urllib3.PoolManager(retries=urllib3.Retry(connect=0, read=0, status=0, other=0, redirect=5))


def is_remote(image: ImageSource) -> bool:
    return isinstance(image, str) and image.lower().startswith(("http://", "https://"))


@contextmanager
def _temp_file(data: bytes, suffix: str = ".png") -> Iterator[Path]:
    fd, name = tempfile.mkstemp(prefix="zpl_download_", suffix=suffix)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        path.unlink(missing_ok=True)


def download(url: str) -> bytes:
    try:
        resp = _http.request("GET", url, timeout=DOWNLOAD_TIMEOUT, preload_content=True)
    except urllib3.exceptions.HTTPError as e:
        raise ImageNotFoundError(f"Failed to download image from URL: {url} ({e})") from e
    if not 200 <= resp.status < 300:
        raise ImageNotFoundError(f"Failed to download image from URL: {url} (HTTP {resp.status})")
    log_service("imagem_baixada", url=url, bytes=len(resp.data))
    return resp.data


@contextmanager
def open_image_source(image: ImageSource) -> Iterator[Path]:
    """
    Entrega um caminho local para a imagem:
      - bytes      → arquivo temporário
      - http(s)    → baixado para arquivo temporário
      - caminho    → usado direto (precisa existir)
    Temporários são apagados na saída do bloco, com ou sem erro.
    """
    if isinstance(image, (bytes, bytearray)):
        with _temp_file(bytes(image)) as path:
            yield path
        return

    if is_remote(image):
        suffix = Path(image.split("?", 1)[0]).suffix or ".png"
        with _temp_file(download(image), suffix=suffix) as path:
            yield path
        return

    path = Path(image)
    if not path.is_file():
        raise ImageNotFoundError(f"Image file not found: {image}")
    yield path


def read_image_size(path: Path) -> Tuple[int, int]:
    try:
        with Image.open(path) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ImageDecodeError(f"Failed to read image: {path} ({e})") from e
