"""
cubesolve: N×N×N layer-turn cubes on JAX
"""

import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="cubesolve",
    version="0.1.0",
    description="Lattice model and bounded heuristic solver for N×N×N cubes, based on Jax!",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["cubesolve", "cubesolve.*"]),
    include_package_data=True,
    install_requires=[
        "jax>=0.4.0",
        "chex>=0.1.0",
        "tabulate>=0.9.0",
        "termcolor>=1.1.0",
        "tqdm>=4.67.1",
        "numpy>=2.2.0",
        "click>=8.0.0",
        "xtructure @ git+https://github.com/tinker495/xtructure.git",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    python_requires=">=3.10",
)
