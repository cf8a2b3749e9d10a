import contextlib

import cupy as cp
import numpy as np
import pytest

import gpu_processor as gp
from gpu_processor.utils.rgba import as_host_array


def gpu_available() -> bool:
    return gp.DeviceHandle(gp.Settings()).is_available()


requires_gpu = pytest.mark.skipif(not gpu_available(), reason="No CUDA device available")


class FakeDevice(gp.Device):
    """Device stand-in that never touches CUDA."""

    def context(self):
        return contextlib.nullcontext()

    def synchronize(self) -> None:
        pass


class FakeDriverError(cp.cuda.driver.CUDADriverError):
    def __init__(self, message: str = "fake driver error"):
        RuntimeError.__init__(self, message)


class FakeOutOfMemoryError(cp.cuda.memory.OutOfMemoryError):
    def __init__(self, message: str = "fake out of memory"):
        MemoryError.__init__(self, message)


class FakeCompileError(cp.cuda.compiler.CompileException):
    def __init__(self, message: str = "fake compile error"):
        Exception.__init__(self, message)
        self._msg = message


class HostBuffer(gp.DeviceBuffer):
    """DeviceBuffer backed by host memory."""

    created: list["HostBuffer"] = []

    def __init__(self, array: np.ndarray, origin: str):
        super().__init__(array, origin)
        HostBuffer.created.append(self)

    @classmethod
    def upload(cls, data) -> "HostBuffer":
        return cls(np.array(as_host_array(data), copy=True), "upload")

    @classmethod
    def zeroed(cls, byte_count: int) -> "HostBuffer":
        return cls(np.zeros(byte_count, dtype=np.uint8), "zeroed")

    def download_into(self, host: np.ndarray) -> None:
        np.copyto(host, self.data)


class HostKernel:
    """Runs the host reference in place of the device kernel."""

    def __init__(self):
        self.calls = []

    def __call__(self, grid, block, args, shared_mem=0):
        self.calls.append((grid, block, args, shared_mem))
        input_data, input_width, input_height, output_data, output_width, output_height = args
        result = gp.bilinear_resize_reference(
            input_data, int(input_width), int(input_height), int(output_width), int(output_height)
        )
        output_data[:] = result.reshape(-1)


class HostModule:
    def __init__(self, kernel=None):
        self.kernel = kernel or HostKernel()

    def function(self, entry_name: str):
        return self.kernel


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice(id=0, name="Fake GPU", total_memory=1 << 30, compute_capability="86")


@pytest.fixture
def fake_handle(fake_device) -> gp.DeviceHandle:
    return gp.DeviceHandle.from_device(fake_device)


@pytest.fixture
def no_device_handle() -> gp.DeviceHandle:
    return gp.DeviceHandle.from_device(None)


@pytest.fixture
def host_buffers(monkeypatch) -> list[HostBuffer]:
    """Route device allocations to host memory and collect the created buffers."""
    HostBuffer.created = []
    monkeypatch.setattr(gp.DeviceBuffer, "upload", HostBuffer.upload)
    monkeypatch.setattr(gp.DeviceBuffer, "zeroed", HostBuffer.zeroed)
    return HostBuffer.created


@pytest.fixture
def host_module(monkeypatch) -> HostModule:
    module = HostModule()
    monkeypatch.setattr(gp.KernelModule, "load", classmethod(lambda cls, *args, **kwargs: module))
    return module
