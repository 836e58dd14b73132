"""Setup script for the rokcalendar Rise of Kingdoms event calendar."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

requirements = [
    "aiohttp>=3.12",
    "colorlog>=6.7",
    "httpx>=0.25",
    "pydantic>=2.0",
    "python-dateutil>=2.8",
    "PyYAML>=6.0",
]

test_requirements = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
    "pytest-timeout>=2.1",
]

setup(
    name="rokcalendar",
    version="0.1.0",
    description="Recurring event calendar for Rise of Kingdoms with a small JSON API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # Package configuration
    packages=find_packages(exclude=["tests*", "docs*"]),
    include_package_data=True,
    # Dependencies
    install_requires=requirements,
    extras_require={
        "test": test_requirements,
        "dev": test_requirements
        + [
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Games/Entertainment",
        "Topic :: Office/Business :: Scheduling",
        "Framework :: AsyncIO",
        "Framework :: aiohttp",
    ],
    keywords="rise-of-kingdoms calendar events recurring aiohttp async",
    entry_points={
        "console_scripts": [
            "rokcalendar=rokcalendar.__main__:main",
        ],
    },
    zip_safe=False,
)
