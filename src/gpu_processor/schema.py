from enum import IntEnum

CHANNELS = 4  # RGBA
BLOCK_SIZE = 16

STATUS_READY = "GPU processor initialized successfully"
STATUS_NO_GPU = "GPU processor initialized (no GPU available)"


class ResizeStatus(IntEnum):
    """Status codes returned by ``resize_image``. -7 is reserved and never produced."""

    SUCCESS = 0
    NO_DEVICE = -1
    INVALID_INPUT = -2
    INPUT_ALLOCATION_FAILED = -3
    OUTPUT_ALLOCATION_FAILED = -4
    MODULE_LOAD_FAILED = -5
    FUNCTION_RESOLVE_FAILED = -6
    LAUNCH_FAILED = -8
    COPY_BACK_FAILED = -9
