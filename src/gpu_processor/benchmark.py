import argparse
import logging
import timeit

from .api import GpuProcessor
from .config import Settings
from .schema import ResizeStatus
from .transform.interpolation.bilinear import bilinear_resize_reference
from .utils.rgba import random_rgba, rgba_size

logger = logging.getLogger(__name__)

IMAGE_SIZES: list[tuple[int, int, str]] = [
    (800, 600, "Small (800x600)"),
    (1920, 1080, "HD (1920x1080)"),
    (3840, 2160, "4K (3840x2160)"),
    (7680, 4320, "8K (7680x4320)"),
]


def print_result(method_name: str, start: float, end: float, itr: int) -> dict:
    total_time = end - start
    per_time = total_time / itr
    fps = 1 / per_time if per_time > 0 else float("inf")

    print(f"{method_name:<28}: itr:{itr}, per:{per_time*1000:.2f} ms, {fps:.2f}fps, total:{total_time*1000:.2f} ms")
    return {"method": method_name, "itr": itr, "per_ms": per_time * 1000, "fps": fps}


def benchmark_size(
    processor: GpuProcessor, width: int, height: int, itr: int, with_reference: bool = True
) -> list[dict]:
    """Time GPU and host resize of a random ``width`` x ``height`` image down to half size."""
    image = random_rgba(width, height, seed=0)
    input_bytes = image.tobytes()
    new_width = max(width // 2, 1)
    new_height = max(height // 2, 1)
    output = bytearray(rgba_size(new_width, new_height))

    results = []

    status = processor.resize_image(input_bytes, width, height, new_width, new_height, output)
    if status != ResizeStatus.SUCCESS:
        logger.warning(f"GPU resize unavailable: {ResizeStatus(status).name}")
    else:
        start = timeit.default_timer()
        for _ in range(itr):
            processor.resize_image(input_bytes, width, height, new_width, new_height, output)
        end = timeit.default_timer()
        results.append(print_result(f"gpu {width}x{height}", start, end, itr))

    if with_reference:
        start = timeit.default_timer()
        for _ in range(itr):
            bilinear_resize_reference(image, width, height, new_width, new_height)
        end = timeit.default_timer()
        results.append(print_result(f"numpy {width}x{height}", start, end, itr))

    return results


def run(itr: int = 5, with_reference: bool = True, processor: GpuProcessor | None = None) -> list[dict]:
    processor = processor or GpuProcessor()
    print(processor.init())

    results = []
    for width, height, name in IMAGE_SIZES:
        print(name)
        results.extend(benchmark_size(processor, width, height, itr, with_reference))
    return results


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Benchmark GPU bilinear RGBA resize")
    parser.add_argument("--itr", type=int, default=5, help="iterations per image size")
    parser.add_argument("--no-reference", action="store_true", help="skip the NumPy reference timings")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level.upper())

    run(args.itr, not args.no_reference, GpuProcessor(settings))


if __name__ == "__main__":
    main()
