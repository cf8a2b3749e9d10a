import numpy as np

from ..schema import CHANNELS


def rgba_size(width: int, height: int) -> int:
    return width * height * CHANNELS


def as_host_array(data: bytes | bytearray | memoryview | np.ndarray) -> np.ndarray:
    """
    View a host byte sequence as a flat uint8 array without copying.

    Parameters
    ----------
    data : bytes | bytearray | memoryview | np.ndarray
        The raw RGBA bytes. Arrays must be uint8.

    Returns
    -------
    np.ndarray
        1-D uint8 view of ``data``.
    """
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8:
            raise ValueError(f"Unsupported dtype {data.dtype}")
        return np.ascontiguousarray(data).reshape(-1)

    try:
        return np.frombuffer(data, dtype=np.uint8)
    except TypeError as e:
        raise ValueError(f"Unsupported: {type(data)}") from e


def as_output_view(buffer: bytearray | memoryview | np.ndarray) -> np.ndarray:
    """View a caller-provided output buffer as a writable flat uint8 array."""
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise ValueError(f"Unsupported dtype {buffer.dtype}")
        if not buffer.flags.c_contiguous:
            raise ValueError("Output buffer must be C-contiguous")
        view = buffer.reshape(-1)
    else:
        try:
            view = np.frombuffer(buffer, dtype=np.uint8)
        except TypeError as e:
            raise ValueError(f"Unsupported: {type(buffer)}") from e

    if not view.flags.writeable:
        raise ValueError("Output buffer is read-only")
    return view


def to_rgba_bytes(image: np.ndarray) -> bytes:
    """Flatten an (height, width, 4) uint8 image into raw RGBA bytes."""
    if image.ndim != 3 or image.shape[2] != CHANNELS:
        raise ValueError(f"Expected shape (height, width, {CHANNELS}), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Unsupported dtype {image.dtype}")
    return np.ascontiguousarray(image).tobytes()


def from_rgba_bytes(data: bytes | bytearray | memoryview | np.ndarray, width: int, height: int) -> np.ndarray:
    """Reshape raw RGBA bytes into an (height, width, 4) uint8 image."""
    array = as_host_array(data)
    if array.size != rgba_size(width, height):
        raise ValueError(f"Expected {rgba_size(width, height)} bytes for {width}x{height}, got {array.size}")
    return array.reshape(height, width, CHANNELS)


def random_rgba(width: int, height: int, seed: int | None = None) -> np.ndarray:
    """Random (height, width, 4) uint8 test image."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, CHANNELS), dtype=np.uint8)
