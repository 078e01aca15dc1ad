# setup.py
from setuptools import setup, find_packages

setup(
    name="sitemap_builder",
    version="0.1.0",
    description="Сборка записей карты сайта из дерева страниц и таблиц БД",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "Jinja2>=3.1",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "sitemap-builder=sitemap_builder.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
