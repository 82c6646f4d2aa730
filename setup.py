from setuptools import setup, find_packages

# Use find_packages to automatically discover all packages
packages = find_packages(include=["ssmkit", "ssmkit.*"])

setup(
    name="ssmkit",
    version="0.1.0",
    description="Simulators and likelihoods for sequential sampling models (DDM, LBA, RDM)",
    packages=packages,
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "tqdm",
        "pyyaml",
        "pathos",
        "psutil",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
