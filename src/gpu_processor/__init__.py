from .api import (
    GpuProcessor,
    get_device_count,
    get_device_info,
    get_processor,
    init,
    resize_image,
    set_processor,
)
from .config import Settings
from .core.buffer import DeviceBuffer
from .core.device import Device, DeviceHandle
from .core.launch import LaunchConfig, plan
from .core.module import KernelModule, ModuleCache
from .errors import (
    CopyBackError,
    FunctionResolveError,
    InputAllocationError,
    InvalidInputError,
    LaunchError,
    ModuleLoadError,
    NoDeviceError,
    OutputAllocationError,
    ResizeError,
)
from .schema import CHANNELS, ResizeStatus
from .transform.interpolation.bilinear import bilinear_resize_reference
from .transform.resize import ResizePipeline, ResizeRequest
from .utils.rgba import from_rgba_bytes, random_rgba, to_rgba_bytes

__all__ = [
    "GpuProcessor",
    "get_processor",
    "set_processor",
    "init",
    "get_device_count",
    "get_device_info",
    "resize_image",
    "Settings",
    "Device",
    "DeviceHandle",
    "DeviceBuffer",
    "KernelModule",
    "ModuleCache",
    "LaunchConfig",
    "plan",
    "ResizePipeline",
    "ResizeRequest",
    "ResizeStatus",
    "ResizeError",
    "NoDeviceError",
    "InvalidInputError",
    "InputAllocationError",
    "OutputAllocationError",
    "ModuleLoadError",
    "FunctionResolveError",
    "LaunchError",
    "CopyBackError",
    "CHANNELS",
    "bilinear_resize_reference",
    "from_rgba_bytes",
    "to_rgba_bytes",
    "random_rgba",
]
