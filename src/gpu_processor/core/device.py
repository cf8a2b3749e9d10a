import logging
import threading
from dataclasses import dataclass

import cupy as cp

from ..config import Settings

logger = logging.getLogger(__name__)

# Errors raised by the CUDA driver, runtime, allocator and NVRTC.
CUDA_ERRORS: tuple[type[BaseException], ...] = (
    cp.cuda.driver.CUDADriverError,
    cp.cuda.runtime.CUDARuntimeError,
    cp.cuda.memory.OutOfMemoryError,
    cp.cuda.compiler.CompileException,
)

# Compiling can also fail while loading NVRTC or reading the kernel cache.
MODULE_LOAD_ERRORS: tuple[type[BaseException], ...] = (
    *CUDA_ERRORS,
    cp.cuda.nvrtc.NVRTCError,
    RuntimeError,
    OSError,
)


@dataclass(frozen=True)
class Device:
    """The single CUDA device used by the processor."""

    id: int
    name: str
    total_memory: int = 0
    compute_capability: str = ""

    def context(self) -> cp.cuda.Device:
        return cp.cuda.Device(self.id)

    def synchronize(self) -> None:
        cp.cuda.Device(self.id).synchronize()


class DeviceHandle:
    """
    Lazily acquires the device and caches the outcome.

    The first ``get`` attempts initialization. Whether it found a device or not,
    the result is kept for the lifetime of the handle and never retried.

    Parameters
    ----------
    settings : Settings | None (optional)
        Settings to use. by default read from the environment; invalid environment values disable the GPU.
    """

    def __init__(self, settings: Settings | None = None):
        if settings is None:
            try:
                settings = Settings.from_env()
            except ValueError as e:
                logger.warning(f"Invalid GPU settings in environment, GPU disabled: {e}")
                settings = Settings(disabled=True)
        self.settings: Settings = settings
        self._lock = threading.Lock()
        self._initialized: bool = False
        self._device: Device | None = None

    @classmethod
    def from_device(cls, device: Device | None, settings: Settings | None = None) -> "DeviceHandle":
        handle = cls(settings or Settings())
        handle._device = device
        handle._initialized = True
        return handle

    def get(self) -> Device | None:
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._device = self._acquire()
                    self._initialized = True
        return self._device

    def is_available(self) -> bool:
        return self.get() is not None

    def info(self) -> dict:
        device = self.get()
        if device is None:
            return {"available": False, "device_id": None, "name": None, "total_memory": 0, "compute_capability": None}

        return {
            "available": True,
            "device_id": device.id,
            "name": device.name,
            "total_memory": device.total_memory,
            "compute_capability": device.compute_capability,
        }

    def _acquire(self) -> Device | None:
        device_id = self.settings.device_id

        if self.settings.disabled:
            logger.info("GPU disabled by configuration")
            return None

        try:
            if not cp.cuda.is_available():
                logger.warning("No CUDA device available")
                return None

            count = cp.cuda.runtime.getDeviceCount()
            if device_id >= count:
                logger.warning(f"CUDA device {device_id} requested but only {count} present")
                return None

            props = cp.cuda.runtime.getDeviceProperties(device_id)
            with cp.cuda.Device(device_id) as cuda_device:
                compute_capability = cuda_device.compute_capability
        except CUDA_ERRORS as e:
            logger.warning(f"CUDA device initialization failed: {e}")
            return None

        name = props["name"]
        if isinstance(name, bytes):
            name = name.decode(errors="replace")

        device = Device(
            id=device_id,
            name=name,
            total_memory=int(props["totalGlobalMem"]),
            compute_capability=compute_capability,
        )
        logger.info(f"Using CUDA device {device.id}: {device.name}")
        return device
