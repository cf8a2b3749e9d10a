import logging
import operator
from contextlib import ExitStack
from dataclasses import dataclass

import numpy as np

from ..core.buffer import DeviceBuffer
from ..core.device import CUDA_ERRORS, MODULE_LOAD_ERRORS, DeviceHandle
from ..core.launch import plan
from ..core.module import ModuleCache
from ..errors import (
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
from ..schema import ResizeStatus
from ..utils.rgba import as_host_array, as_output_view, rgba_size
from .interpolation.bilinear import (
    bilinear_resize_kernel_code,
    bilinear_resize_kernel_name,
    bilinear_resize_module_name,
)

logger = logging.getLogger(__name__)


def _as_dimension(name: str, value) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        dimension = operator.index(value)
    except TypeError as e:
        raise InvalidInputError(f"{name} must be an integer, got {value!r}") from e
    if dimension <= 0:
        raise InvalidInputError(f"{name} must be positive, got {dimension}")
    return dimension


@dataclass(frozen=True)
class ResizeRequest:
    """An RGBA resize of ``input`` from (input_width, input_height) to (output_width, output_height)."""

    input: bytes | bytearray | memoryview | np.ndarray
    input_width: int
    input_height: int
    output_width: int
    output_height: int

    @property
    def input_size(self) -> int:
        return rgba_size(self.input_width, self.input_height)

    @property
    def output_size(self) -> int:
        return rgba_size(self.output_width, self.output_height)

    def validate(self) -> "tuple[ResizeRequest, np.ndarray]":
        """
        Check dimensions and input length.

        Returns
        -------
        tuple[ResizeRequest, np.ndarray]
            The request with normalized integer dimensions and a flat uint8 view of the input.
        """
        request = ResizeRequest(
            input=self.input,
            input_width=_as_dimension("input_width", self.input_width),
            input_height=_as_dimension("input_height", self.input_height),
            output_width=_as_dimension("output_width", self.output_width),
            output_height=_as_dimension("output_height", self.output_height),
        )

        try:
            host_input = as_host_array(self.input)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        if host_input.size != request.input_size:
            raise InvalidInputError(
                f"Input is {host_input.size} bytes, expected {request.input_size} for "
                f"{request.input_width}x{request.input_height} RGBA"
            )
        return request, host_input


class ResizePipeline:
    """
    Bilinear RGBA resize on the GPU.

    Each call validates, acquires the device, uploads, launches, downloads and
    writes the result into the caller's buffer. The first failing step ends the
    call; nothing is retried. Device buffers are released on every exit path.

    Parameters
    ----------
    device_handle : DeviceHandle
        Source of the device.
    module_cache : ModuleCache | None (optional)
        Cache of compiled kernel modules. by default a new, private cache.
    """

    def __init__(self, device_handle: DeviceHandle, module_cache: ModuleCache | None = None):
        self.device_handle: DeviceHandle = device_handle
        self.module_cache: ModuleCache = module_cache if module_cache is not None else ModuleCache()

    def resize(
        self, request: ResizeRequest, output: bytearray | memoryview | np.ndarray
    ) -> ResizeStatus:
        try:
            self.run(request, output)
        except ResizeError as e:
            logger.warning(f"Resize failed with {e.status.name} ({e.code}): {e}")
            return e.status
        return ResizeStatus.SUCCESS

    def run(self, request: ResizeRequest, output: bytearray | memoryview | np.ndarray) -> None:
        """Same as ``resize`` but raises the ``ResizeError`` variant of the failing step."""
        logger.debug(
            f"resize called with input: {request.input_width}x{request.input_height}, "
            f"output: {request.output_width}x{request.output_height}"
        )

        request, host_input = request.validate()
        try:
            output_view = as_output_view(output)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e
        if output_view.size != request.output_size:
            raise InvalidInputError(f"Output buffer is {output_view.size} bytes, expected {request.output_size}")

        device = self.device_handle.get()
        if device is None:
            raise NoDeviceError()

        host_output = np.empty(request.output_size, dtype=np.uint8)

        with ExitStack() as stack:
            try:
                stack.enter_context(device.context())
            except CUDA_ERRORS as e:
                raise NoDeviceError(f"Device {device.id} could not be made current: {e}") from e

            try:
                input_buffer = stack.enter_context(DeviceBuffer.upload(host_input))
            except CUDA_ERRORS as e:
                raise InputAllocationError(str(e)) from e

            try:
                output_buffer = stack.enter_context(DeviceBuffer.zeroed(request.output_size))
            except CUDA_ERRORS as e:
                raise OutputAllocationError(str(e)) from e

            try:
                module = self.module_cache.load(
                    device.id,
                    bilinear_resize_kernel_code,
                    bilinear_resize_module_name,
                    (bilinear_resize_kernel_name,),
                )
            except MODULE_LOAD_ERRORS as e:
                raise ModuleLoadError(str(e)) from e

            try:
                kernel = module.function(bilinear_resize_kernel_name)
            except (*CUDA_ERRORS, KeyError) as e:
                raise FunctionResolveError(str(e)) from e

            config = plan(request.output_width, request.output_height)

            try:
                kernel(
                    config.grid,
                    config.block,
                    (
                        input_buffer.data,
                        np.int32(request.input_width),
                        np.int32(request.input_height),
                        output_buffer.data,
                        np.int32(request.output_width),
                        np.int32(request.output_height),
                    ),
                    shared_mem=config.shared_mem,
                )
                device.synchronize()
            except CUDA_ERRORS as e:
                raise LaunchError(str(e)) from e

            try:
                output_buffer.download_into(host_output)
            except CUDA_ERRORS as e:
                raise CopyBackError(str(e)) from e

        np.copyto(output_view, host_output)
