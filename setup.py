#!/usr/bin/env python3
"""
Setup configuration for Lyric-Lens
Song search with multi-source lyrics/metadata reconciliation and AI analysis
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "requests>=2.31.0",
    "lyricsgenius>=3.0.1",
    "openai>=1.30.0",
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
]

setup(
    name="lyric-lens",
    version="0.3.0",
    author="Lyric-Lens contributors",
    description="Search songs, reconcile lyrics and metadata, and get AI analyses of their meaning",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["lyric_lens", "lyric_lens.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Text Processing :: Linguistic",
    ],
    python_requires=">=3.8",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lyric-lens=lyric_lens.main:cli",
        ],
    },
    keywords="lyrics music song meaning genius lastfm musicbrainz openai cli",
)
