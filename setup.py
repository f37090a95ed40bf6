"""
A setuptools based setup module.

See:
https://packaging.python.org/guides/distributing-packages-using-setuptools/
"""

import setuptools

PACKAGE_DATA = {
    "hadrodecay": [
        "data/*.txt",
        "data/*.yml",
        "schemas/*.json",
    ],
}

INSTALL_REQUIRES = [
    "attrs",
    "jsonschema",
    "numpy",
    "PyYAML",
    "scipy",
    "sympy",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest",
    ],
}


def long_description():
    """Parse long description from readme."""
    with open("README.md", "r") as readme_file:
        return readme_file.read()


setuptools.setup(
    name="hadrodecay",
    version="0.1.0",
    author="The hadrodecay developers",
    description="Decay tables, spectral functions and resonance mass sampling"
    " for hadronic transport",
    long_description=long_description(),
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    license="GPLv3 or later",
    python_requires=">=3.6",
    tests_require=["pytest"],
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    package_data=PACKAGE_DATA,
    include_package_data=True,
)
