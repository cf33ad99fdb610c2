# setup.py
"""Setup script for the media deduplicator."""

import os

from setuptools import setup, find_packages

setup(
    name="mediadup",
    version="1.0.0",
    description="Find media files whose content is identical once metadata is ignored",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Media Tool Team",
    packages=find_packages(exclude=["mediadup.tests"]),
    python_requires=">=3.8",
    install_requires=[
        "Pillow>=8.0.0",
        "imagehash>=4.0.0",
        "tqdm>=4.50.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mediadup=mediadup.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Multimedia :: Graphics",
        "Topic :: System :: Archiving",
    ],
)
