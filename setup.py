import os
from setuptools import setup


src_version = os.path.join(os.path.dirname(__file__), "aocauto", "version.py")
with open(src_version) as f:
    version = f.read().strip().split()[-1][1:-1]


setup(
    name="aoc-automaton",
    version=version,
    description="Test your Advent of Code solver on the examples, then submit its answers",
    long_description=open("README.rst").read(),
    long_description_content_type="text/x-rst",
    packages=["aocauto"],
    entry_points={
        "console_scripts": [
            "aocauto=aocauto.runner:main",
        ],
    },
    license="MIT",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Topic :: Software Development :: Libraries",
        "Topic :: Games/Entertainment :: Puzzle Games",
    ],
    python_requires=">=3.9",
    install_requires=[
        "beautifulsoup4",
        "pebble",
        "urllib3",
        'typing_extensions; python_version < "3.11"',
        'tzdata; platform_system == "Windows"',
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
            "pytest-raisin",
            "pook",
            "freezegun",
            "pytest-freezer",
            "numpy",
        ],
    },
)
