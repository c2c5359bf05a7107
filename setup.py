from setuptools import setup, find_packages

setup(
    name="viewer-core",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "pydicom>=3.0.0",
        "numpy>=1.24.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "viewer-tags=viewer_core.cli:main",
        ],
    },
)
