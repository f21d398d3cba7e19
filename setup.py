"""
Setup file.
"""

from setuptools import find_packages, setup

KEYWORDS = "rust rustc cargo inline ffi static library build toolchain"


if __name__ == "__main__":
    setup(
        name="inline-rust",
        version="0.1.0",
        description="Compile Rust fragments collected during a compilation pass into a linkable static archive",
        keywords=KEYWORDS,
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        python_requires=">=3.10",
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["inline-rust = inline_rust.cli:main"]},
        include_package_data=True)
