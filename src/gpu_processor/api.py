import logging
import threading

import numpy as np

from .config import Settings
from .core.device import DeviceHandle
from .core.module import ModuleCache
from .schema import STATUS_NO_GPU, STATUS_READY
from .transform.resize import ResizePipeline, ResizeRequest
from .utils.rgba import to_rgba_bytes

logger = logging.getLogger(__name__)


class GpuProcessor:
    """
    Device context, kernel cache and resize pipeline bundled together.

    Construct one per process and pass it where resizing is needed. The
    module-level functions use a shared default instance.

    Parameters
    ----------
    settings : Settings | None (optional)
        Runtime settings. by default read from the environment.
    device_handle : DeviceHandle | None (optional)
        Pre-built device handle. by default one is created from ``settings``.
    module_cache : ModuleCache | None (optional)
        Shared compiled-module cache. by default a new cache.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        device_handle: DeviceHandle | None = None,
        module_cache: ModuleCache | None = None,
    ):
        self.device_handle: DeviceHandle = device_handle or DeviceHandle(settings)
        self.module_cache: ModuleCache = module_cache if module_cache is not None else ModuleCache()
        self.pipeline = ResizePipeline(self.device_handle, self.module_cache)

    def init(self) -> str:
        return STATUS_READY if self.device_handle.is_available() else STATUS_NO_GPU

    def get_device_count(self) -> int:
        return 1 if self.device_handle.is_available() else 0

    def get_device_info(self) -> dict:
        return self.device_handle.info()

    def resize_image(
        self,
        input_bytes: bytes | bytearray | memoryview | np.ndarray,
        input_width: int,
        input_height: int,
        output_width: int,
        output_height: int,
        output_buffer: bytearray | memoryview | np.ndarray,
    ) -> int:
        """
        Resize raw RGBA bytes into ``output_buffer``.

        Returns
        -------
        int
            0 on success, otherwise a negative ``ResizeStatus`` code. The contents of
            ``output_buffer`` are unspecified unless the result is 0.
        """
        request = ResizeRequest(input_bytes, input_width, input_height, output_width, output_height)
        return int(self.pipeline.resize(request, output_buffer))

    def resize(self, image: np.ndarray, dsize: tuple[int, int]) -> np.ndarray:
        """
        Resize an RGBA image with bilinear interpolation on the GPU.

        Parameters
        ----------
        image : np.ndarray
            The input image. The shape is (height, width, 4). dtype is uint8.
        dsize : tuple[int, int]
            The output image size. The format is (width, height).

        Returns
        -------
        np.ndarray
            The resized image. The shape is (height, width, 4). dtype is uint8.

        Raises
        ------
        ResizeError
            The variant of the step that failed.
        """
        input_height, input_width = image.shape[:2]
        output_width, output_height = dsize
        output = np.empty((output_height, output_width, 4), dtype=np.uint8)

        request = ResizeRequest(to_rgba_bytes(image), input_width, input_height, output_width, output_height)
        self.pipeline.run(request, output)
        return output


_processor: GpuProcessor | None = None
_processor_lock = threading.Lock()


def get_processor() -> GpuProcessor:
    global _processor
    if _processor is None:
        with _processor_lock:
            if _processor is None:
                _processor = GpuProcessor()
    return _processor


def set_processor(processor: GpuProcessor | None) -> None:
    """Replace the default processor. ``None`` makes the next call build a fresh one."""
    global _processor
    with _processor_lock:
        _processor = processor


def init() -> str:
    status = get_processor().init()
    logger.info(status)
    return status


def get_device_count() -> int:
    return get_processor().get_device_count()


def get_device_info() -> dict:
    return get_processor().get_device_info()


def resize_image(
    input_bytes: bytes | bytearray | memoryview | np.ndarray,
    input_width: int,
    input_height: int,
    output_width: int,
    output_height: int,
    output_buffer: bytearray | memoryview | np.ndarray,
) -> int:
    return get_processor().resize_image(
        input_bytes, input_width, input_height, output_width, output_height, output_buffer
    )

