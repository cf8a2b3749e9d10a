import hashlib
import logging
import threading
from collections.abc import Iterable

import cupy as cp

logger = logging.getLogger(__name__)


class KernelModule:
    """
    A compiled kernel source with its resolvable entry points.

    Parameters
    ----------
    raw_module : cp.RawModule
        The compiled module.
    module_name : str
        Name used for logging and cache keys.
    entry_names : Iterable[str]
        Entry points that may be resolved with ``function``.
    """

    def __init__(self, raw_module: cp.RawModule, module_name: str, entry_names: Iterable[str]):
        self.raw_module = raw_module
        self.module_name: str = module_name
        self.entry_names: tuple[str, ...] = tuple(entry_names)
        self._functions: dict[str, cp.RawKernel] = {}

    @classmethod
    def load(cls, source: str, module_name: str, entry_names: Iterable[str]) -> "KernelModule":
        """
        Compile ``source`` on the current device.

        Compilation is forced here so that compile errors surface from ``load``
        and not from the first ``function`` call.
        """
        raw_module = cp.RawModule(code=source)
        raw_module.compile()
        logger.debug(f"Compiled kernel module {module_name}")
        return cls(raw_module, module_name, entry_names)

    def function(self, entry_name: str) -> cp.RawKernel:
        if entry_name not in self.entry_names:
            raise KeyError(f"{entry_name} is not an entry point of {self.module_name}")

        kernel = self._functions.get(entry_name)
        if kernel is None:
            kernel = self.raw_module.get_function(entry_name)
            self._functions[entry_name] = kernel
        return kernel


class ModuleCache:
    """
    Compiled modules keyed by device, source identity and module name.

    Populated on first successful load. Concurrent first use compiles once.
    Failed loads are not cached.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._modules: dict[tuple[int, str, str], KernelModule] = {}

    @staticmethod
    def key(device_id: int, source: str, module_name: str) -> tuple[int, str, str]:
        digest = hashlib.sha1(source.encode("utf-8")).hexdigest()
        return device_id, digest, module_name

    def load(self, device_id: int, source: str, module_name: str, entry_names: Iterable[str]) -> KernelModule:
        key = self.key(device_id, source, module_name)

        module = self._modules.get(key)
        if module is not None:
            return module

        with self._lock:
            module = self._modules.get(key)
            if module is None:
                module = KernelModule.load(source, module_name, entry_names)
                self._modules[key] = module
        return module

    def clear(self) -> None:
        with self._lock:
            self._modules.clear()

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, key: tuple[int, str, str]) -> bool:
        return key in self._modules
