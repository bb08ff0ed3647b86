#! /usr/bin/env python3

from setuptools import setup, find_packages

import wir

setup(
    name = "wiki-image-report",
    version = wir.__version__,
    packages = find_packages(include=["wir", "wir.*"]),
    scripts = ["report-missing-images.py"],
    python_requires = ">=3.11",
    install_requires = [
        "httpx",
        "truststore",
        "colorlog",
    ],
    extras_require = {
        "test": [
            "pytest",
            "pytest-httpx>=0.35",
        ],
    },
)
