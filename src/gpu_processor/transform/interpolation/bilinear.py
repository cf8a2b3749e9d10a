import numpy as np

from ...schema import CHANNELS

bilinear_resize_module_name = "resize_module"
bilinear_resize_kernel_name = "bilinear_resize"

bilinear_resize_kernel_code = r"""
__device__ __forceinline__ float clamp(const float val, const float min_val, const float max_val) {
    return fmaxf(min_val, fminf(max_val, val));
}

extern "C" __global__ void bilinear_resize(
    const unsigned char* __restrict__ input,
    const int input_width,
    const int input_height,
    unsigned char* __restrict__ output,
    const int output_width,
    const int output_height
) {
    // Get the output pixel coordinates
    const int x = blockIdx.x * blockDim.x + threadIdx.x;
    const int y = blockIdx.y * blockDim.y + threadIdx.y;

    // Tail threads of the last block row/column
    if (x >= output_width || y >= output_height) {
        return;
    }

    // Corresponding position in the input image
    const float src_x = (float)x * (float)input_width / (float)output_width;
    const float src_y = (float)y * (float)input_height / (float)output_height;

    // Get the four neighboring pixels
    const int x1 = min(__float2int_rd(src_x), input_width - 1);  // floor
    const int y1 = min(__float2int_rd(src_y), input_height - 1);  // floor
    const int x2 = min(x1 + 1, input_width - 1);
    const int y2 = min(y1 + 1, input_height - 1);

    // Interpolation weights
    const float dx = src_x - (float)x1;
    const float dy = src_y - (float)y1;

    // 64-bit byte offsets
    const size_t row1 = (size_t)y1 * (size_t)input_width;
    const size_t row2 = (size_t)y2 * (size_t)input_width;
    const size_t idx11 = (row1 + (size_t)x1) * 4;
    const size_t idx12 = (row1 + (size_t)x2) * 4;
    const size_t idx21 = (row2 + (size_t)x1) * 4;
    const size_t idx22 = (row2 + (size_t)x2) * 4;
    const size_t out_idx = ((size_t)y * (size_t)output_width + (size_t)x) * 4;

    for (int c = 0; c < 4; c++) {
        const float val11 = (float)input[idx11 + c];
        const float val12 = (float)input[idx12 + c];
        const float val21 = (float)input[idx21 + c];
        const float val22 = (float)input[idx22 + c];

        // First interpolate in x direction, then in y direction
        const float val1 = val11 * (1.0f - dx) + val12 * dx;
        const float val2 = val21 * (1.0f - dx) + val22 * dx;
        const float result = val1 * (1.0f - dy) + val2 * dy;

        output[out_idx + c] = (unsigned char)clamp(result, 0.0f, 255.0f);
    }
}
"""


def _source_coords(output_size: int, input_size: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    dst = np.arange(output_size, dtype=np.float32)
    src = dst * np.float32(input_size) / np.float32(output_size)
    first = np.minimum(np.floor(src).astype(np.int64), input_size - 1)
    second = np.minimum(first + 1, input_size - 1)
    weight = src - first.astype(np.float32)
    return first, second, weight


def bilinear_resize_reference(
    src: np.ndarray,
    input_width: int,
    input_height: int,
    output_width: int,
    output_height: int,
) -> np.ndarray:
    """
    Host implementation of the ``bilinear_resize`` kernel.

    Uses the same float32 arithmetic as the device code. The device compiler may
    contract multiply-adds, so results can differ by one unit in the last place
    of a channel value.

    Parameters
    ----------
    src : np.ndarray
        Raw RGBA bytes as a flat or (height, width, 4) uint8 array.
    input_width : int
        The input image width.
    input_height : int
        The input image height.
    output_width : int
        The output image width.
    output_height : int
        The output image height.

    Returns
    -------
    np.ndarray
        The resized image. The shape is (output_height, output_width, 4). dtype is uint8.
    """
    image = np.asarray(src, dtype=np.uint8).reshape(input_height, input_width, CHANNELS).astype(np.float32)

    x1, x2, dx = _source_coords(output_width, input_width)
    y1, y2, dy = _source_coords(output_height, input_height)

    dx = dx[np.newaxis, :, np.newaxis]
    dy = dy[:, np.newaxis, np.newaxis]

    top = image[y1]
    bottom = image[y2]

    val1 = top[:, x1] * (np.float32(1.0) - dx) + top[:, x2] * dx
    val2 = bottom[:, x1] * (np.float32(1.0) - dx) + bottom[:, x2] * dx
    result = val1 * (np.float32(1.0) - dy) + val2 * dy

    return result.clip(0, 255.0).astype(np.uint8)
