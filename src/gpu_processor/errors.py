"""
Failure variants of the resize pipeline.

Every step of the pipeline that can fail raises exactly one of these. Each
variant carries the ``ResizeStatus`` it maps to, and the numeric code is only
produced at the host boundary (``resize_image``).
"""

from .schema import ResizeStatus


class ResizeError(Exception):
    """Base class for resize pipeline failures."""

    status: ResizeStatus

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__)

    @property
    def code(self) -> int:
        return int(self.status)


class NoDeviceError(ResizeError):
    """No GPU device available."""

    status = ResizeStatus.NO_DEVICE


class InvalidInputError(ResizeError):
    """Input does not match the declared dimensions."""

    status = ResizeStatus.INVALID_INPUT


class InputAllocationError(ResizeError):
    """Input device allocation or upload failed."""

    status = ResizeStatus.INPUT_ALLOCATION_FAILED


class OutputAllocationError(ResizeError):
    """Output device allocation failed."""

    status = ResizeStatus.OUTPUT_ALLOCATION_FAILED


class ModuleLoadError(ResizeError):
    """Kernel module compile or load failed."""

    status = ResizeStatus.MODULE_LOAD_FAILED


class FunctionResolveError(ResizeError):
    """Kernel entry function could not be resolved."""

    status = ResizeStatus.FUNCTION_RESOLVE_FAILED


class LaunchError(ResizeError):
    """Kernel launch failed."""

    status = ResizeStatus.LAUNCH_FAILED


class CopyBackError(ResizeError):
    """Device to host copy failed."""

    status = ResizeStatus.COPY_BACK_FAILED
