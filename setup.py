from setuptools import find_packages, setup

package_name = "gpu_processor"

setup(
    name="gpu-processor",
    version="0.1.0",
    description="GPU accelerated bilinear resize of raw RGBA images with CuPy",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        package_name: [
            "py.typed",
        ],
    },
    install_requires=[
        "cupy-cuda12x",
        "numpy",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "gpu-processor-benchmark=gpu_processor.benchmark:main",
        ],
    },
    python_requires=">=3.10",
    include_package_data=True,
    zip_safe=False,
)
