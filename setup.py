from __future__ import annotations

from setuptools import find_packages, setup

# The numba kernel is optional; pip install pyenrich[numba] to enable it.
setup(
    name="pyenrich",
    version="0.1.0",
    description="Stellar mass loss and chemical enrichment of star particles (SNIa, SNII, AGB)",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=["numpy>=1.22"],
    extras_require={
        "numba": ["numba>=0.57"],
        "test": ["pytest>=7"],
    },
    entry_points={"console_scripts": ["pyenrich=pyenrich.driver:main"]},
)
