# setup.py
from setuptools import setup, find_packages

setup(
    name="site_press",
    version="0.1.0",
    description="SitePress: HTTP service rendering websites into merged PDF or Markdown",
    packages=find_packages(include=["site_press", "site_press.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "markdownify>=0.11",
        "playwright>=1.40",
        "pydantic>=2.5",
        "pypdf>=3.17",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["site_press=site_press.cli:cli"],
    },
    python_requires=">=3.11",
)
