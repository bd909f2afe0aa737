"""
Setup script for the Implicit Fairing mesh processing engine
"""

from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="implicit-fairing",
    version="1.0.0",
    description="Discrete curvature, explicit smoothing and implicit fairing of triangle meshes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # src/ and scripts/ have no __init__.py; the driver imports `src.fairing`
    packages=find_namespace_packages(include=["src", "src.*", "scripts"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Scientific/Engineering :: Visualization",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.24.0",
        "scipy>=1.11.0",
        "pyvista>=0.46.4",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=23.0",
            "flake8>=6.0",
            "mypy>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fair-mesh=scripts.fair_mesh:main",
        ],
    },
)
