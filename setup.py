from setuptools import setup, find_packages

# Read the contents of README.md
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

requirements = [
    "numpy>=1.24.0",
    "scipy>=1.10.0",
    "pyyaml>=6.0",
    "networkx>=3.0",
]

setup(
    name="rfcascade",
    version="0.1.0",
    author="rfcascade Team",
    author_email="your.email@example.com",
    description="RF chain cascade budget engine: gain, noise figure, compression, EIRP and G/T",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/rfcascade",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "License :: Other/Proprietary License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    include_package_data=True,
    package_data={
        "rfcascade": ["config/*.yaml", "config/*.json"],
    },
    entry_points={
        "console_scripts": [
            "rfcascade-calc=rfcascade.cli.calculator:main",
        ],
    },
)
