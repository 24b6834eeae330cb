"""Setup file for alertbridge package."""
from __future__ import annotations

from setuptools import find_packages, setup

setup(
    name="alertbridge",
    version="0.4.0",
    description="Forward Alertmanager notifications to Telegram chats",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"alertbridge": ["templates/*.j2"]},
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.6",
        "pydantic-settings>=2.7",
        "sqlalchemy[asyncio]>=2.0.25",
        "asyncpg>=0.29",
        "aiosqlite>=0.19",
        "httpx>=0.26",
        "structlog>=24.1",
        "tenacity>=8.3",
        "prometheus-client>=0.19",
        "jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "alertbridge=alertbridge.runner:cli",
        ],
    },
)
