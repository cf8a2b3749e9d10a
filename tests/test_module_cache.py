import threading
import time

import pytest
from conftest import FakeCompileError, HostModule, requires_gpu

import gpu_processor as gp
from gpu_processor.transform.interpolation.bilinear import (
    bilinear_resize_kernel_code,
    bilinear_resize_kernel_name,
    bilinear_resize_module_name,
)


class TestModuleCache:
    def test_key_tracks_source(self):
        key = gp.ModuleCache.key(0, "source a", "m")
        assert key == gp.ModuleCache.key(0, "source a", "m")
        assert key != gp.ModuleCache.key(0, "source b", "m")
        assert key != gp.ModuleCache.key(1, "source a", "m")
        assert key != gp.ModuleCache.key(0, "source a", "n")

    def test_populated_on_first_use(self, monkeypatch):
        loads = []

        def load(cls, source, module_name, entry_names):
            loads.append(source)
            return HostModule()

        monkeypatch.setattr(gp.KernelModule, "load", classmethod(load))
        cache = gp.ModuleCache()

        first = cache.load(0, "src", "m", ("k",))
        second = cache.load(0, "src", "m", ("k",))
        third = cache.load(0, "other", "m", ("k",))

        assert first is second
        assert third is not first
        assert loads == ["src", "other"]
        assert len(cache) == 2
        assert gp.ModuleCache.key(0, "src", "m") in cache

    def test_failed_load_not_cached(self, monkeypatch):
        attempts = []

        def load(cls, source, module_name, entry_names):
            attempts.append(1)
            if len(attempts) == 1:
                raise FakeCompileError()
            return HostModule()

        monkeypatch.setattr(gp.KernelModule, "load", classmethod(load))
        cache = gp.ModuleCache()

        with pytest.raises(FakeCompileError):
            cache.load(0, "src", "m", ("k",))
        assert len(cache) == 0

        cache.load(0, "src", "m", ("k",))
        assert len(cache) == 1
        assert len(attempts) == 2

    def test_concurrent_first_use(self, monkeypatch):
        loads = []
        barrier = threading.Barrier(6)

        def load(cls, source, module_name, entry_names):
            loads.append(1)
            time.sleep(0.05)
            return HostModule()

        monkeypatch.setattr(gp.KernelModule, "load", classmethod(load))
        cache = gp.ModuleCache()
        modules = []

        def worker():
            barrier.wait()
            modules.append(cache.load(0, "src", "m", ("k",)))

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert loads == [1]
        assert all(module is modules[0] for module in modules)

    def test_clear(self, monkeypatch):
        monkeypatch.setattr(gp.KernelModule, "load", classmethod(lambda cls, *args: HostModule()))
        cache = gp.ModuleCache()
        cache.load(0, "src", "m", ("k",))
        cache.clear()
        assert len(cache) == 0


class TestKernelModule:
    def test_undeclared_entry_point(self):
        module = gp.KernelModule(raw_module=None, module_name="m", entry_names=("a",))
        with pytest.raises(KeyError):
            module.function("b")

    @requires_gpu
    def test_compile_and_resolve(self):
        with gp.Device(id=0, name="").context():
            module = gp.KernelModule.load(
                bilinear_resize_kernel_code, bilinear_resize_module_name, (bilinear_resize_kernel_name,)
            )
            kernel = module.function(bilinear_resize_kernel_name)
            assert module.function(bilinear_resize_kernel_name) is kernel

    @requires_gpu
    def test_compile_error(self):
        import cupy as cp

        with gp.Device(id=0, name="").context():
            with pytest.raises(cp.cuda.compiler.CompileException):
                gp.KernelModule.load("this is not cuda", "broken", ("nothing",))

    @requires_gpu
    def test_missing_symbol(self):
        import cupy as cp

        source = 'extern "C" __global__ void present() {}'
        with gp.Device(id=0, name="").context():
            module = gp.KernelModule.load(source, "m", ("absent",))
            with pytest.raises(cp.cuda.driver.CUDADriverError):
                module.function("absent")
