from setuptools import setup, find_packages

setup(
    name="ghost_patch",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        # Interactive group review
        "textual",
        # Benchmark progress
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "ghostpatch=ghost_patch.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Locate, apply, diff and group LLM edit suggestions for editor hosts.",
)
