"""gradpass setup - One admission per invitee, whatever the Wi-Fi does."""
from setuptools import setup, find_packages

setup(
    name="gradpass",
    version="1.0.0",
    description="gradpass: offline-tolerant check-in core for graduation ceremonies",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "blake3>=0.3",
        "click>=8.0",
        "requests>=2.28",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gradpass=gradpass.cli.main:cli",
        ],
    },
)
