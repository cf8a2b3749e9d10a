import logging

import cupy as cp
import numpy as np

from ..utils.rgba import as_host_array

logger = logging.getLogger(__name__)

ORIGIN_UPLOAD = "upload"
ORIGIN_ZEROED = "zeroed"


class DeviceBuffer:
    """
    Owned region of device memory.

    Created by ``upload`` or ``zeroed`` and released by ``release`` or on leaving a
    ``with`` block. The memory is never shared across calls.
    """

    def __init__(self, array: cp.ndarray, origin: str):
        self._array: cp.ndarray | None = array
        self.origin: str = origin
        self.byte_count: int = int(array.nbytes)

    @classmethod
    def upload(cls, data: bytes | bytearray | memoryview | np.ndarray) -> "DeviceBuffer":
        host = as_host_array(data)
        array = cp.asarray(host)
        return cls(array, ORIGIN_UPLOAD)

    @classmethod
    def zeroed(cls, byte_count: int) -> "DeviceBuffer":
        if byte_count < 0:
            raise ValueError(f"byte_count must be non-negative, got {byte_count}")
        array = cp.zeros(byte_count, dtype=cp.uint8)
        return cls(array, ORIGIN_ZEROED)

    @property
    def data(self) -> cp.ndarray:
        if self._array is None:
            raise RuntimeError(f"{self!r} has been released")
        return self._array

    @property
    def released(self) -> bool:
        return self._array is None

    def download_into(self, host: np.ndarray) -> None:
        """Blocking copy of the whole buffer into ``host``, which must be exactly ``byte_count`` uint8 values."""
        if host.dtype != np.uint8 or host.ndim != 1 or host.size != self.byte_count:
            raise ValueError(f"Host buffer must be {self.byte_count} uint8 values, got {host.size} {host.dtype}")
        self.data.get(out=host)

    def release(self) -> None:
        if self._array is not None:
            logger.debug(f"Releasing {self.byte_count} byte {self.origin} buffer")
            self._array = None

    def __enter__(self) -> "DeviceBuffer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"DeviceBuffer(origin={self.origin!r}, byte_count={self.byte_count})"
