"""Setup configuration for mailqueue."""

from setuptools import setup, find_packages

setup(
    name="mailqueue",
    version="1.0.0",
    description="In-process outbound email queue with bounded retries",
    author="Loyalty Program Team",
    packages=find_packages(include=["mailqueue", "mailqueue.*"]),
    install_requires=[
        "click>=8.1.7",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": [
            "mailqueue=mailqueue.cli:cli",
        ],
    },
    python_requires=">=3.8",
)
