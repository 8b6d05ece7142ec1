"""Setup configuration for the LogKV store and shell.

This module defines the package metadata and dependencies for the LogKV
store and its interactive shell. It uses setuptools to package both for
distribution.
"""

from setuptools import find_packages, setup

setup(
    name="logkv",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "click>=8.1.0",
        "prompt_toolkit>=3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "logkv=logkv_shell.__main__:cli",
        ],
    },
)
