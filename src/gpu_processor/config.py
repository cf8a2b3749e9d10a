import logging
import os
from dataclasses import dataclass

ENV_DEVICE = "GPU_PROCESSOR_DEVICE"
ENV_DISABLE = "GPU_PROCESSOR_DISABLE"
ENV_LOG_LEVEL = "GPU_PROCESSOR_LOG_LEVEL"


def str_to_bool(val: str | None) -> bool:
    if val is None:
        return False
    return val.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings of the GPU processor.

    Parameters
    ----------
    device_id : int
        CUDA ordinal of the device to acquire. by default 0.
    disabled : bool
        Skip device acquisition entirely and behave as if no GPU is present. by default False.
    log_level : str
        Logging level used by the benchmark entry point. by default "INFO".
    """

    device_id: int = 0
    disabled: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.device_id < 0:
            raise ValueError(f"device_id must be non-negative, got {self.device_id}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unsupported log level {self.log_level}")

    @classmethod
    def from_env(cls) -> "Settings":
        device = os.getenv(ENV_DEVICE, "0")
        try:
            device_id = int(device)
        except ValueError as e:
            raise ValueError(f"{ENV_DEVICE} must be an integer, got {device!r}") from e

        return cls(
            device_id=device_id,
            disabled=str_to_bool(os.getenv(ENV_DISABLE)),
            log_level=os.getenv(ENV_LOG_LEVEL, "INFO"),
        )
