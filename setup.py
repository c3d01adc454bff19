"""
Standard setup.py to upload the code on pypi.

    python setup.py sdist bdist_wheel
    twine upload dist/*
"""
import setuptools

with open("README.md", "rb") as fh:
    long_description = fh.read().decode("UTF-8")

import sys
sys.path.append("cfyield")

from _version import __version__

setuptools.setup(
    name="cfyield",
    version=__version__,
    author="cfyield developers",
    author_email="",
    description="Continued fraction extrapolation of sequencing library yield curves, in JAX",
    keywords='sequencing library complexity yield curve continued fraction pade extrapolation jax',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["test", "test.*"]),
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'jax>=0.4.28',
        'jaxlib>=0.4.28',
    ],
    extras_require={
        'cuda12': ['jax[cuda12]'],
        'test': ['pytest', 'scipy'],
    },
    classifiers=[
        "Intended Audience :: Science/Research",
        "Natural Language :: English",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Scientific/Engineering :: Mathematics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
    ],
)
