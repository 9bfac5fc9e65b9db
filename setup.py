# setup.py
from setuptools import setup, find_packages

setup(
    name="nautobot_http_sd",
    version="0.1.0",
    description="Prometheus HTTP service discovery backed by the Nautobot GraphQL API",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.1",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "nautobot-http-sd=nautobot_http_sd.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
