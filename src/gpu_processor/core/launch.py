from dataclasses import dataclass

from ..schema import BLOCK_SIZE


@dataclass(frozen=True)
class LaunchConfig:
    grid: tuple[int, int, int]
    block: tuple[int, int, int]
    shared_mem: int = 0

    @property
    def threads(self) -> tuple[int, int]:
        return self.grid[0] * self.block[0], self.grid[1] * self.block[1]

    def covers(self, width: int, height: int) -> bool:
        threads_x, threads_y = self.threads
        return threads_x >= width and threads_y >= height


def plan(output_width: int, output_height: int) -> LaunchConfig:
    """
    One thread per output pixel in 16x16 blocks.

    At most ``BLOCK_SIZE - 1`` threads per axis fall outside the image and exit
    without work.
    """
    block: tuple[int, int, int] = (BLOCK_SIZE, BLOCK_SIZE, 1)
    grid: tuple[int, int, int] = (
        (output_width + block[0] - 1) // block[0],
        (output_height + block[1] - 1) // block[1],
        1,
    )
    return LaunchConfig(grid=grid, block=block, shared_mem=0)
