"""Setup file for development installation."""

from setuptools import setup, find_packages

setup(
    name="presence-chat",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.100",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "structlog>=23.1",
        "prometheus-client>=0.17",
        "opentelemetry-instrumentation-fastapi>=0.41b0",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": ["presence-chat=presence_chat.__main__:main"],
    },
)
