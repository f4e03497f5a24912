#!/usr/bin/env python3

from setuptools import find_namespace_packages, setup


def get_version():
    with open("debian/changelog", "r", encoding="utf-8") as f:
        return f.readline().split()[1][1:-1]


setup(
    name="wb-connector-web",
    version=get_version(),
    description="Bridge between mbed Device Connector callbacks and web clients",
    license="MIT",
    maintainer="Wiren Board Team",
    maintainer_email="info@wirenboard.com",
    packages=find_namespace_packages(include=["wb.connector_web", "wb.connector_web.*"]),
    package_data={"wb.connector_web.server": ["templates/*.html"]},
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "python-socketio",
        "httpx",
        "pydantic",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "wb-connector-web = wb.connector_web.cli.main:main",
        ],
    },
)
